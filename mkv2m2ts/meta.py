"""Generates the tsMuxeR meta file."""

from decimal import Decimal

from logzero import logger

from .errors import MetaFileError
from .session import AudioCodec, InspectedMedia, WorkFiles

MUX_OPTIONS = "MUXOPT --no-pcr-on-video-pid --new-audio-pes --vbr  --vbv-len=500"
VIDEO_CODEC = "V_MPEG4/ISO/AVC"
FORCED_LEVEL = Decimal("4.1")
LEVEL_OVERRIDE_THRESHOLD = Decimal("5")


def needs_level_override(format_level: Decimal) -> bool:
    """Return True if the video line should carry ``level=4.1``.

    Level 4.1 itself is written out explicitly as well as every level above 5.
    """
    return format_level == FORCED_LEVEL or format_level > LEVEL_OVERRIDE_THRESHOLD


def render_meta(media: InspectedMedia, work_files: WorkFiles) -> str:
    """Return the text of the meta file for the given streams."""
    video_options = [VIDEO_CODEC, f'"{work_files.video}"']
    if needs_level_override(media.video.format_level):
        video_options.append(f"level={FORCED_LEVEL}")
    video_options += ["insertSEI", "contSPS", "lang=eng", f"fps={media.video.fps}"]

    if media.audio.codec is AudioCodec.AAC:
        audio_line = f'{AudioCodec.AAC.value}, "{work_files.aac}"'
    else:
        audio_line = f'{AudioCodec.AC3.value}, "{work_files.ac3}"'

    return "\n".join([MUX_OPTIONS, ", ".join(video_options), audio_line]) + "\n"


def write_meta_file(media: InspectedMedia, work_files: WorkFiles) -> None:
    """Write the meta file tsMuxeR is driven by.

    Raises
    ------
        MetaFileError: If the file cannot be written.

    """
    try:
        work_files.meta.write_text(render_meta(media, work_files), encoding="utf-8")
    except OSError as e:
        raise MetaFileError(
            f"could not open meta file {work_files.meta} for writing: {e}"
        ) from e
    logger.info(f"Wrote tsMuxeR meta file {work_files.meta}")
