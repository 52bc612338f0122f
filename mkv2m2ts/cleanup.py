"""Removes the intermediate files of a run."""

from pathlib import Path
from typing import Iterable, Optional

from logzero import logger

from .session import AudioCodec, WorkFiles


def remove_files(paths: Iterable[Path]) -> None:
    """Delete files, logging a warning for each one that cannot be removed."""
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Temporary file {path} was already gone.")
        except OSError as e:
            logger.warning(f"Could not remove temporary file {path}: {e}")


def cleanup_temp_files(
    work_files: WorkFiles,
    audio_codec: Optional[AudioCodec],
    rebuilt_container: Optional[Path] = None,
) -> None:
    """Remove the extracted streams, the meta file and any rebuilt container.

    Once the container was rebuilt, only the muxed audio file remains;
    the rebuild already removed any DTS stream. Never raises; problems are
    logged as warnings.
    """
    logger.info("Cleaning up temporary files")
    if rebuilt_container is not None and audio_codec is not None:
        audio_files: tuple[Path, ...] = (work_files.muxed_audio(audio_codec),)
    else:
        audio_files = work_files.audio_files(audio_codec)
    paths = [work_files.video, *audio_files, work_files.meta]
    if rebuilt_container is not None:
        paths.append(rebuilt_container)
    remove_files(paths)
