"""A tool for converting MKV video files to M2TS format."""

import importlib.metadata


def _get_mkv2m2ts_version() -> str:
    try:
        return importlib.metadata.version("mkv2m2ts")
    except importlib.metadata.PackageNotFoundError:
        return "Unknown"
