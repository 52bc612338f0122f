"""Rebuilds a Matroska container from the extracted streams with mkvmerge.

tsMuxeR cannot mux an H.264 stream whose headers carry no frame rate.
Remuxing the raw streams with an explicit default duration gives the
stream the timing tsMuxeR looks for.
"""

from pathlib import Path

from logzero import logger

from .cleanup import remove_files
from .command import execute_command
from .errors import MissingDependencyError, RebuildFailedError
from .session import AudioCodec, Session


def _build_mkvmerge_args(session: Session, output: Path) -> list[str]:
    media = session.inspected_media
    work_files = session.work_files
    mkvmerge = session.toolchain.mkvmerge

    args = [
        str(mkvmerge),
        "-o",
        str(output),
        "--default-duration",
        f"0:{media.video.fps}fps",
        str(work_files.video),
    ]
    if media.audio.codec is AudioCodec.AAC:
        args += ["--aac-is-sbr", "0:0"]
    args.append(str(work_files.muxed_audio(media.audio.codec)))
    return args


def rebuild_container(session: Session) -> Path:
    """Assemble a temporary MKV from the extracted video and audio streams.

    On success the extracted streams are removed, since the pipeline will
    extract them again from the rebuilt container.

    Returns
    -------
        The path of the rebuilt container.

    Raises
    ------
        MissingDependencyError: If mkvmerge is not installed.
        RebuildFailedError: If mkvmerge exits with a non-zero status.

    """
    if session.toolchain.mkvmerge is None:
        raise MissingDependencyError("mkvmerge")

    work_files = session.work_files
    output = work_files.rebuilt_container

    logger.info("Building a new temporary MKV file")
    result = execute_command(_build_mkvmerge_args(session, output))
    if result.returncode != 0:
        if output.exists():
            remove_files([output])
        raise RebuildFailedError(
            "failure while executing mkvmerge", output=result.output
        )

    remove_files(
        [work_files.video, *work_files.audio_files(session.inspected_media.audio.codec)]
    )
    return output
