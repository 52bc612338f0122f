"""Unit tests for the audio_transcoder module."""

from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from mkv2m2ts.audio_transcoder import transcode_dts_to_ac3
from mkv2m2ts.command import CommandResult
from mkv2m2ts.errors import AudioTranscodeFailedError

DCADEC = Path("/usr/bin/dcadec")
AFTEN = Path("/usr/bin/aften")
DTS = Path("/tmp/work/audio.dts")
AC3 = Path("/tmp/work/audio.ac3")


@pytest.mark.unit
def test_transcode_pipes_dcadec_into_aften(mocker: MockerFixture) -> None:
    """Test that dcadec output is piped into aften at 640 kbps."""
    mock_pipe = mocker.patch(
        "mkv2m2ts.audio_transcoder.execute_piped_commands",
        return_value=(CommandResult([], "", "", 0), CommandResult([], "", "", 0)),
    )

    transcode_dts_to_ac3(DCADEC, AFTEN, DTS, AC3)

    mock_pipe.assert_called_once_with(
        ["/usr/bin/dcadec", "-o", "wavall", "/tmp/work/audio.dts"],
        ["/usr/bin/aften", "-b", "640", "-v", "0", "-", "/tmp/work/audio.ac3"],
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("decoder_code", "encoder_code"), [(1, 0), (0, 1), (141, 1)]
)
def test_transcode_failure(
    mocker: MockerFixture, decoder_code: int, encoder_code: int
) -> None:
    """Test that a failure of either process raises AudioTranscodeFailedError."""
    mocker.patch(
        "mkv2m2ts.audio_transcoder.execute_piped_commands",
        return_value=(
            CommandResult([], "", "decoder said", decoder_code),
            CommandResult([], "", "encoder said", encoder_code),
        ),
    )

    with pytest.raises(AudioTranscodeFailedError) as e:
        transcode_dts_to_ac3(DCADEC, AFTEN, DTS, AC3)

    assert e.value.output == "decoder said\nencoder said"
