"""Locating the external executables the pipeline depends on."""

import shutil
from pathlib import Path
from typing import Optional

from logzero import logger
from pydantic import BaseModel, ConfigDict

from .errors import MissingDependencyError

REQUIRED_TOOLS = ("mediainfo", "ffmpeg", "mkvextract", "dcadec", "aften", "tsMuxeR")
OPTIONAL_TOOLS = ("mkvmerge",)


class Toolchain(BaseModel):
    """Absolute paths of the external tools."""

    model_config = ConfigDict(frozen=True)

    mediainfo: Path
    ffmpeg: Path
    mkvextract: Path
    dcadec: Path
    aften: Path
    tsmuxer: Path
    mkvmerge: Optional[Path] = None


def _which(name: str) -> Optional[Path]:
    found = shutil.which(name)
    return Path(found) if found else None


def locate_toolchain() -> Toolchain:
    """Resolve every tool on PATH.

    Raises
    ------
        MissingDependencyError: For the first required tool that is absent.
    """
    paths: dict[str, Optional[Path]] = {}
    for name in REQUIRED_TOOLS:
        path = _which(name)
        if path is None:
            raise MissingDependencyError(name)
        logger.info(f"Found {name}: {path}")
        paths[name.lower()] = path

    for name in OPTIONAL_TOOLS:
        path = _which(name)
        if path is None:
            logger.warning(
                f"Optional executable {name} not found; "
                "container rebuilding will be unavailable."
            )
        else:
            logger.info(f"Found {name}: {path}")
        paths[name.lower()] = path

    return Toolchain.model_validate(paths)
