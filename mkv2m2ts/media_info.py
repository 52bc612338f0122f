"""A module for reading mediainfo XML reports."""

import re
import xml.etree.ElementTree as ET
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Generic, NamedTuple, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .command import execute_command
from .errors import InspectionFailedError, ParseError

T = TypeVar("T")

_LEVEL_PATTERN = re.compile(r"@L([1-9]\.[0-9])")
_FRAME_RATE_PATTERN = re.compile(r"([1-9][0-9]*\.[0-9]+)(?: \([0-9/]+\))? fps")
_BIT_RATE_PATTERN = re.compile(r"([0-9][0-9 ]*) KBPS")
_CHANNELS_PATTERN = re.compile(r"([0-9]) CHANNELS")
_TRACK_ID_PATTERN = re.compile(r"^\s*([1-9][0-9]*)")

# ISO 639 codes the current report schema uses for English.
_ENGLISH_CODES = {"en", "eng"}


class FieldStatus(str, Enum):
    """Outcome of a field query."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


class FieldQuery(NamedTuple, Generic[T]):
    """The result of looking up one field of a track."""

    field: str
    status: FieldStatus
    value: Optional[T] = None
    raw: Optional[str] = None

    def require(self) -> T:
        """Return the value, or raise ParseError if it was not found."""
        if self.status is FieldStatus.FOUND and self.value is not None:
            return self.value
        reason = (
            "not found"
            if self.status is FieldStatus.NOT_FOUND
            else f"malformed value {self.raw!r}"
        )
        raise ParseError(self.field, reason)


class Track(BaseModel):
    """A single ``<track>`` element of the report."""

    model_config = ConfigDict(frozen=True)

    type: str
    fields: dict[str, str] = Field(default_factory=dict)

    def text(self, name: str) -> FieldQuery[str]:
        """Query a field as stripped text; empty text counts as not found."""
        value = self.fields.get(name, "").strip()
        if not value:
            return FieldQuery(name, FieldStatus.NOT_FOUND)
        return FieldQuery(name, FieldStatus.FOUND, value, value)

    def _match(
        self, name: str, pattern: re.Pattern[str], upper: bool
    ) -> FieldQuery[str]:
        query = self.text(name)
        if query.value is None:
            return query
        match = pattern.search(query.value.upper() if upper else query.value)
        if not match:
            return FieldQuery(name, FieldStatus.MALFORMED, raw=query.value)
        return FieldQuery(name, FieldStatus.FOUND, match.group(1), query.value)

    def track_id(self) -> FieldQuery[int]:
        """Query the 1-based track ``ID``."""
        query = self._match("ID", _TRACK_ID_PATTERN, upper=False)
        if query.value is None:
            return FieldQuery(query.field, query.status, raw=query.raw)
        return FieldQuery(query.field, query.status, int(query.value), query.raw)

    def format_level(self) -> FieldQuery[Decimal]:
        """Query the H.264 level from ``Format_profile``, e.g. ``High@L4.1``."""
        query = self._match("Format_profile", _LEVEL_PATTERN, upper=False)
        if query.value is None:
            return FieldQuery(query.field, query.status, raw=query.raw)
        return FieldQuery(query.field, query.status, Decimal(query.value), query.raw)

    def frame_rate(self) -> FieldQuery[str]:
        """Query the frame rate from ``Frame_rate``, kept as written."""
        return self._match("Frame_rate", _FRAME_RATE_PATTERN, upper=False)

    def bit_rate_kbps(self) -> FieldQuery[int]:
        """Query the bitrate in kbps from ``Bit_rate``, e.g. ``1 509 Kbps``."""
        query = self._match("Bit_rate", _BIT_RATE_PATTERN, upper=True)
        if query.value is None:
            return FieldQuery(query.field, query.status, raw=query.raw)
        return FieldQuery(
            query.field, query.status, int(query.value.replace(" ", "")), query.raw
        )

    def channels(self) -> FieldQuery[int]:
        """Query the channel count from ``Channel_s_``."""
        query = self._match("Channel_s_", _CHANNELS_PATTERN, upper=True)
        if query.value is None:
            return FieldQuery(query.field, query.status, raw=query.raw)
        return FieldQuery(query.field, query.status, int(query.value), query.raw)


class MediaInfoReport(BaseModel):
    """The tracks of a mediainfo report, in report order."""

    model_config = ConfigDict(frozen=True)

    tracks: tuple[Track, ...] = Field(default_factory=tuple)

    def tracks_of_type(self, track_type: str) -> tuple[Track, ...]:
        """Return all tracks of the given type (``General``, ``Video``, ``Audio``)."""
        return tuple(track for track in self.tracks if track.type == track_type)


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        if "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]


def _normalize_current_schema(fields: dict[str, str]) -> dict[str, str]:
    """Map current-schema field names and formats to the legacy ones."""
    normalized = dict(fields)
    if "CodecID" in fields:
        normalized.setdefault("Codec_ID", fields["CodecID"])
    if "Format_Profile" in fields and "Format_Level" in fields:
        normalized.setdefault(
            "Format_profile", f"{fields['Format_Profile']}@L{fields['Format_Level']}"
        )
    if "FrameRate" in fields:
        normalized.setdefault("Frame_rate", f"{fields['FrameRate']} fps")
    if fields.get("BitRate", "").isdigit():
        kbps = round(int(fields["BitRate"]) / 1000)
        normalized.setdefault("Bit_rate", f"{kbps} Kbps")
    if "Channels" in fields:
        normalized.setdefault("Channel_s_", f"{fields['Channels']} channels")
    if fields.get("Language", "").lower() in _ENGLISH_CODES:
        normalized["Language"] = "English"
    return normalized


def parse_media_info_xml(xml_text: str) -> MediaInfoReport:
    """Parse a mediainfo XML report into a MediaInfoReport.

    Both the legacy ``<Mediainfo><File><track>`` layout and the current
    ``<MediaInfo><media><track>`` layout are accepted.

    Raises
    ------
        ParseError: If the text is not well-formed XML.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ParseError("mediainfo report", str(e)) from e

    _strip_namespaces(root)
    current_schema = root.find("media") is not None

    tracks = []
    for element in root.iter("track"):
        fields: dict[str, str] = {}
        for child in element:
            # The legacy layout repeats some fields with alternative renderings;
            # the first one is the primary value.
            fields.setdefault(child.tag, child.text or "")
        if current_schema:
            fields = _normalize_current_schema(fields)
        tracks.append(Track(type=element.get("type", ""), fields=fields))

    return MediaInfoReport(tracks=tuple(tracks))


def get_media_info(mediainfo: Path, file_path: Path) -> MediaInfoReport:
    """Run mediainfo on a file and return its parsed report.

    Args:
    ----
        mediainfo: The path to the mediainfo executable.
        file_path: The path to the input file.

    Raises
    ------
        InspectionFailedError: If mediainfo exits with a non-zero status.
        ParseError: If its output is not a valid report.

    """
    result = execute_command([str(mediainfo), "--Output=XML", str(file_path)])
    if result.returncode != 0:
        raise InspectionFailedError(
            f'executing command: "{mediainfo} --Output=XML {file_path}"',
            output=result.output,
        )
    return parse_media_info_xml(result.stdout)
