"""Packages the elementary streams into an M2TS file with tsMuxeR."""

from pathlib import Path

from logzero import logger

from .command import execute_command
from .errors import FrameRateUndetectedError, MuxFailedError

FRAME_RATE_NOT_FOUND = "Frame rate: not found"
NO_FPS_FIELD = "H.264 stream does not contain fps field"


def is_frame_rate_detection_failure(output: str) -> bool:
    """Return True if tsMuxeR output shows it could not find the video fps."""
    return FRAME_RATE_NOT_FOUND in output and NO_FPS_FIELD in output


def mux_streams(tsmuxer: Path, meta_file: Path, output_path: Path) -> None:
    """Run tsMuxeR on a meta file.

    Raises
    ------
        FrameRateUndetectedError: If tsMuxeR failed to detect the frame rate.
        MuxFailedError: For any other failure.

    """
    logger.info(f"Packaging M2TS file {output_path.name}")
    result = execute_command([str(tsmuxer), str(meta_file), str(output_path)])
    if result.returncode == 0:
        return

    if is_frame_rate_detection_failure(result.output):
        raise FrameRateUndetectedError(
            "tsMuxeR could not detect the video frame rate", output=result.output
        )
    raise MuxFailedError("failure while executing tsMuxeR", output=result.output)
