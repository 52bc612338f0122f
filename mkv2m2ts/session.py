"""The state shared by the stages of one conversion."""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from .parameters import ConversionParameters
from .toolchain import Toolchain


class AudioCodec(str, Enum):
    """Matroska codec IDs of the supported audio formats."""

    DTS = "A_DTS"
    AC3 = "A_AC3"
    AAC = "A_AAC"


class VideoSelection(BaseModel):
    """The H.264 track chosen for extraction."""

    model_config = ConfigDict(frozen=True)

    track_index: int = Field(ge=0)
    format_level: Decimal
    fps: str


class AudioSelection(BaseModel):
    """The audio track chosen for extraction."""

    model_config = ConfigDict(frozen=True)

    track_index: int = Field(ge=0)
    codec: AudioCodec
    bitrate_kbps: Optional[int] = None
    channels: Optional[int] = None

    @model_validator(mode="after")
    def validate_dts_details(self) -> Self:
        """DTS tracks need their bitrate and channel count."""
        if self.codec is AudioCodec.DTS and (
            self.bitrate_kbps is None or self.channels is None
        ):
            raise ValueError("DTS audio requires a bitrate and a channel count.")
        return self


class InspectedMedia(BaseModel):
    """The streams selected from the input file."""

    model_config = ConfigDict(frozen=True)

    video: VideoSelection
    audio: AudioSelection


class WorkFiles(BaseModel):
    """The fixed names of the intermediate files inside the temp directory."""

    model_config = ConfigDict(frozen=True)

    temp_dir: Path

    @property
    def video(self) -> Path:
        return self.temp_dir / "video.h264"

    @property
    def dts(self) -> Path:
        return self.temp_dir / "audio.dts"

    @property
    def ac3(self) -> Path:
        return self.temp_dir / "audio.ac3"

    @property
    def aac(self) -> Path:
        return self.temp_dir / "audio.aac"

    @property
    def meta(self) -> Path:
        return self.temp_dir / "tsmuxer.meta"

    @property
    def rebuilt_container(self) -> Path:
        return self.temp_dir / "rebuilt.mkv"

    def muxed_audio(self, codec: AudioCodec) -> Path:
        """Return the audio file tsMuxeR reads; DTS is muxed as AC3."""
        return self.aac if codec is AudioCodec.AAC else self.ac3

    def audio_files(self, codec: Optional[AudioCodec]) -> tuple[Path, ...]:
        """Return every audio file the given codec path may create."""
        if codec is None:
            return ()
        if codec is AudioCodec.DTS:
            return (self.dts, self.ac3)
        return (self.muxed_audio(codec),)


class Session(BaseModel):
    """Everything known about the current run.

    Fields are filled stage by stage; stages return updated copies.
    """

    model_config = ConfigDict(frozen=True)

    parameters: ConversionParameters
    toolchain: Toolchain
    media: Optional[InspectedMedia] = None
    rebuilt_container_path: Optional[Path] = None

    @property
    def work_files(self) -> WorkFiles:
        """Return the intermediate file layout for this run."""
        return WorkFiles(temp_dir=self.parameters.temp_dir)

    @property
    def extraction_source(self) -> Path:
        """Return the container streams are extracted from."""
        return self.rebuilt_container_path or self.parameters.input_path

    @property
    def inspected_media(self) -> InspectedMedia:
        """Return the selected streams, which must already be known."""
        if self.media is None:
            raise RuntimeError("The input file has not been inspected yet.")
        return self.media
