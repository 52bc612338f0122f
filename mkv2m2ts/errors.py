"""Exceptions raised by the conversion pipeline."""

from typing import Optional


class Mkv2M2tsError(Exception):
    """Base error for the mkv2m2ts pipeline."""


class InvalidInputError(Mkv2M2tsError):
    """Raised when the input file does not exist."""


class InvalidOutputError(Mkv2M2tsError):
    """Raised when the output location cannot be used."""


class InvalidTempDirError(Mkv2M2tsError):
    """Raised when the temporary directory does not exist."""


class MissingDependencyError(Mkv2M2tsError):
    """Raised when an external executable cannot be found."""

    def __init__(self, name: str):
        super().__init__(f'could not find path for executable "{name}"')
        self.name = name


class UnsupportedContainerError(Mkv2M2tsError):
    """Raised when the input container is not Matroska."""


class UnsupportedVideoCodecError(Mkv2M2tsError):
    """Raised when the video track is not H.264."""


class ParseError(Mkv2M2tsError):
    """Raised when a field of the media report is missing or malformed."""

    def __init__(self, field: str, reason: str = "not found"):
        super().__init__(f"could not parse {field} from media report: {reason}")
        self.field = field
        self.reason = reason


class NoSupportedAudioTrackError(Mkv2M2tsError):
    """Raised when no English DTS, AC3 or AAC track is present."""


class MetaFileError(Mkv2M2tsError):
    """Raised when the tsMuxeR descriptor file cannot be written."""


class InvalidTransitionError(Mkv2M2tsError):
    """Raised when the pipeline attempts a transition its table forbids."""


class ToolFailedError(Mkv2M2tsError):
    """Base error for an external tool exiting with a non-zero status."""

    def __init__(self, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.output = output


class InspectionFailedError(ToolFailedError):
    """Raised when mediainfo fails."""


class ExtractionFailedError(ToolFailedError):
    """Raised when mkvextract fails."""


class AudioTranscodeFailedError(ToolFailedError):
    """Raised when dcadec or aften fails."""


class MuxFailedError(ToolFailedError):
    """Raised when tsMuxeR fails."""


class FrameRateUndetectedError(MuxFailedError):
    """Raised when tsMuxeR fails because the H.264 stream carries no fps field."""


class RebuildFailedError(ToolFailedError):
    """Raised when mkvmerge fails to rebuild the temporary container."""
