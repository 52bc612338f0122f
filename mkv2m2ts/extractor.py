"""Extracts elementary streams with mkvextract."""

from pathlib import Path
from typing import NamedTuple

from logzero import logger

from .command import execute_command
from .errors import ExtractionFailedError
from .session import AudioCodec, Session

# Track layout of a container written by the rebuilder.
REBUILT_VIDEO_TRACK = 0
REBUILT_AUDIO_TRACK = 1


class ExtractionPlan(NamedTuple):
    """Where each stream is read from and written to."""

    source: Path
    video_track: int
    video_target: Path
    audio_track: int
    audio_target: Path
    needs_transcode: bool


def plan_extraction(session: Session) -> ExtractionPlan:
    """Work out the mkvextract targets for the session's current source.

    A rebuilt container holds only the video and the already muxable audio,
    so its DTS material is extracted straight to AC3.
    """
    media = session.inspected_media
    work_files = session.work_files

    if session.rebuilt_container_path is not None:
        return ExtractionPlan(
            source=session.extraction_source,
            video_track=REBUILT_VIDEO_TRACK,
            video_target=work_files.video,
            audio_track=REBUILT_AUDIO_TRACK,
            audio_target=work_files.muxed_audio(media.audio.codec),
            needs_transcode=False,
        )

    needs_transcode = media.audio.codec is AudioCodec.DTS
    audio_target = (
        work_files.dts if needs_transcode else work_files.muxed_audio(media.audio.codec)
    )
    return ExtractionPlan(
        source=session.extraction_source,
        video_track=media.video.track_index,
        video_target=work_files.video,
        audio_track=media.audio.track_index,
        audio_target=audio_target,
        needs_transcode=needs_transcode,
    )


def _extract_track(mkvextract: Path, source: Path, track: int, target: Path) -> None:
    result = execute_command(
        [str(mkvextract), "tracks", str(source), f"{track}:{target}"]
    )
    if result.returncode != 0:
        raise ExtractionFailedError(
            "failure while executing mkvextract", output=result.output
        )


def extract_streams(session: Session) -> ExtractionPlan:
    """Extract the selected video and audio streams into the temp directory.

    Returns
    -------
        The ExtractionPlan that was carried out.

    Raises
    ------
        ExtractionFailedError: If mkvextract exits with a non-zero status.

    """
    plan = plan_extraction(session)
    mkvextract = session.toolchain.mkvextract

    logger.info(f"Extracting video stream from {plan.source.name}")
    _extract_track(mkvextract, plan.source, plan.video_track, plan.video_target)

    logger.info(f"Extracting audio stream from {plan.source.name}")
    _extract_track(mkvextract, plan.source, plan.audio_track, plan.audio_target)

    return plan
