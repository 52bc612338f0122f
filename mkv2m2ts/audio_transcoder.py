"""Converts DTS audio to AC3."""

from pathlib import Path

from logzero import logger

from .command import execute_piped_commands
from .errors import AudioTranscodeFailedError

AC3_BITRATE_KBPS = 640


def transcode_dts_to_ac3(
    dcadec: Path, aften: Path, dts_file: Path, ac3_file: Path
) -> None:
    """Decode a DTS stream with dcadec and re-encode it with aften.

    Args:
    ----
        dcadec: The path to the dcadec executable.
        aften: The path to the aften executable.
        dts_file: The extracted DTS elementary stream.
        ac3_file: Where the AC3 stream is written.

    Raises
    ------
        AudioTranscodeFailedError: If either process exits with a non-zero status.

    """
    logger.info("Converting DTS audio stream to AC3")
    decoder, encoder = execute_piped_commands(
        [str(dcadec), "-o", "wavall", str(dts_file)],
        [str(aften), "-b", str(AC3_BITRATE_KBPS), "-v", "0", "-", str(ac3_file)],
    )
    if decoder.returncode != 0 or encoder.returncode != 0:
        output = "\n".join(part for part in (decoder.output, encoder.output) if part)
        raise AudioTranscodeFailedError(
            "failure while executing dcadec and aften", output=output
        )
