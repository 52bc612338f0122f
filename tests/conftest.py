"""Pytest configuration file."""

from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional
from xml.sax.saxutils import escape

import pytest

from mkv2m2ts.parameters import ConversionParameters
from mkv2m2ts.session import (
    AudioCodec,
    AudioSelection,
    InspectedMedia,
    Session,
    VideoSelection,
)
from mkv2m2ts.toolchain import Toolchain

ALLOWED_MARKERS = {"unit", "integration", "e2e"}

DEFAULT_VIDEO = {
    "ID": "1",
    "Format": "AVC",
    "Format_profile": "High@L4.1",
    "Codec_ID": "V_MPEG4/ISO/AVC",
    "Frame_rate": "23.976 fps",
}

DTS_ENGLISH = {
    "ID": "2",
    "Format": "DTS",
    "Codec_ID": "A_DTS",
    "Bit_rate": "1 509 Kbps",
    "Channel_s_": "6 channels",
    "Language": "English",
}


def pytest_collection_modifyitems(
    session: pytest.Session, items: list[pytest.Item]
) -> None:
    """Validate that every test is marked with exactly one of the allowed markers."""
    sorted_markers = sorted(list(ALLOWED_MARKERS))

    for item in items:
        markers = {marker.name for marker in item.iter_markers()}
        intersecting_markers = markers.intersection(ALLOWED_MARKERS)

        if len(intersecting_markers) == 0:
            pytest.fail(
                f"Test item '{item.nodeid}' is missing a required mark. "
                "Please add one of: "
                f"@pytest.mark.{', @pytest.mark.'.join(sorted_markers)}"
            )
        elif len(intersecting_markers) > 1:
            pytest.fail(
                f"Test item '{item.nodeid}' has multiple "
                f"classification marks: {intersecting_markers}. "
                "Please specify exactly one of: "
                f"@pytest.mark.{', @pytest.mark.'.join(sorted_markers)}"
            )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory path."""
    return Path(__file__).parent.parent


def _track_xml(track_type: str, fields: dict[str, str]) -> str:
    children = "".join(
        f"<{name}>{escape(value)}</{name}>" for name, value in fields.items()
    )
    return f'<track type="{track_type}">{children}</track>'


@pytest.fixture
def make_report_xml() -> Callable[..., str]:
    """Return a factory for legacy-schema mediainfo XML reports."""

    def _factory(
        container_format: Optional[str] = "Matroska",
        video: Optional[dict[str, str]] = None,
        audio: Optional[list[dict[str, str]]] = None,
    ) -> str:
        general = {"Complete_name": "/media/movie.mkv"}
        if container_format is not None:
            general["Format"] = container_format
        tracks = [_track_xml("General", general)]
        tracks.append(_track_xml("Video", DEFAULT_VIDEO if video is None else video))
        for fields in [DTS_ENGLISH] if audio is None else audio:
            tracks.append(_track_xml("Audio", fields))
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<Mediainfo version="0.7.58"><File>'
            + "".join(tracks)
            + "</File></Mediainfo>"
        )

    return _factory


@pytest.fixture
def parameters(tmp_path: Path) -> ConversionParameters:
    """Return parameters for a dummy input with its own temp directory."""
    input_path = tmp_path / "movie.mkv"
    input_path.write_bytes(b"not really matroska")
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    return ConversionParameters(
        input_path=input_path,
        output_path=tmp_path / "movie.m2ts",
        temp_dir=temp_dir,
    )


@pytest.fixture
def toolchain() -> Toolchain:
    """Return a toolchain with every tool, including mkvmerge."""
    return Toolchain(
        mediainfo=Path("/usr/bin/mediainfo"),
        ffmpeg=Path("/usr/bin/ffmpeg"),
        mkvextract=Path("/usr/bin/mkvextract"),
        dcadec=Path("/usr/bin/dcadec"),
        aften=Path("/usr/bin/aften"),
        tsmuxer=Path("/usr/bin/tsMuxeR"),
        mkvmerge=Path("/usr/bin/mkvmerge"),
    )


@pytest.fixture
def make_media() -> Callable[..., InspectedMedia]:
    """Return a factory for InspectedMedia objects."""

    def _factory(
        codec: AudioCodec = AudioCodec.AC3,
        format_level: str = "4.1",
        fps: str = "23.976",
    ) -> InspectedMedia:
        audio = (
            AudioSelection(track_index=1, codec=codec, bitrate_kbps=1509, channels=6)
            if codec is AudioCodec.DTS
            else AudioSelection(track_index=1, codec=codec)
        )
        return InspectedMedia(
            video=VideoSelection(
                track_index=0, format_level=Decimal(format_level), fps=fps
            ),
            audio=audio,
        )

    return _factory


@pytest.fixture
def make_session(
    parameters: ConversionParameters,
    toolchain: Toolchain,
    make_media: Callable[..., InspectedMedia],
) -> Callable[..., Session]:
    """Return a factory for inspected sessions."""

    def _factory(
        codec: AudioCodec = AudioCodec.AC3,
        rebuilt_container_path: Optional[Path] = None,
        mkvmerge_available: bool = True,
    ) -> Session:
        tools = (
            toolchain
            if mkvmerge_available
            else toolchain.model_copy(update={"mkvmerge": None})
        )
        return Session(
            parameters=parameters,
            toolchain=tools,
            media=make_media(codec=codec),
            rebuilt_container_path=rebuilt_container_path,
        )

    return _factory
