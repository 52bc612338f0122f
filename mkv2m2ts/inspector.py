"""Validates the input file and selects the streams to convert."""

from pathlib import Path
from typing import Optional

from logzero import logger

from .errors import (
    NoSupportedAudioTrackError,
    ParseError,
    UnsupportedContainerError,
    UnsupportedVideoCodecError,
)
from .media_info import MediaInfoReport, Track, get_media_info
from .session import AudioCodec, AudioSelection, InspectedMedia, VideoSelection

CONTAINER_FORMAT = "MATROSKA"
VIDEO_CODEC_ID = "V_MPEG4/ISO/AVC"
AUDIO_LANGUAGE = "ENGLISH"


def _check_container(report: MediaInfoReport) -> None:
    general_tracks = report.tracks_of_type("General")
    if not general_tracks:
        raise ParseError("General track")
    container_format = general_tracks[0].text("Format").require()
    if container_format.upper() != CONTAINER_FORMAT:
        raise UnsupportedContainerError(
            f"invalid input container format: {container_format}"
        )


def _select_video(report: MediaInfoReport) -> VideoSelection:
    video_tracks = report.tracks_of_type("Video")
    if not video_tracks:
        raise ParseError("Video track")
    if len(video_tracks) > 1:
        logger.warning(
            f"Found {len(video_tracks)} video tracks; using the first one."
        )
    video = video_tracks[0]

    track_index = video.track_id().require() - 1

    codec_id = video.text("Codec_ID").require()
    if codec_id != VIDEO_CODEC_ID:
        raise UnsupportedVideoCodecError(f"invalid input video codec: {codec_id}")

    return VideoSelection(
        track_index=track_index,
        format_level=video.format_level().require(),
        fps=video.frame_rate().require(),
    )


def _audio_codec(track: Track) -> Optional[AudioCodec]:
    codec_id = track.text("Codec_ID").value
    try:
        return AudioCodec(codec_id)
    except ValueError:
        return None


def _is_english_or_unspecified(track: Track) -> bool:
    language = track.text("Language").value
    return language is None or language.upper() == AUDIO_LANGUAGE


def _select_audio(report: MediaInfoReport) -> AudioSelection:
    """Pick the first English or unlabelled DTS, AC3 or AAC track.

    Tracks are taken in report order; a DTS track listed after a matching
    AC3 track is not preferred over it.
    """
    for track in report.tracks_of_type("Audio"):
        codec = _audio_codec(track)
        if codec is None or not _is_english_or_unspecified(track):
            continue

        track_index = track.track_id().require() - 1
        if codec is not AudioCodec.DTS:
            return AudioSelection(track_index=track_index, codec=codec)

        return AudioSelection(
            track_index=track_index,
            codec=codec,
            bitrate_kbps=track.bit_rate_kbps().require(),
            channels=track.channels().require(),
        )

    raise NoSupportedAudioTrackError("no valid audio video codecs found")


def select_streams(report: MediaInfoReport) -> InspectedMedia:
    """Validate a parsed report and choose the video and audio tracks.

    Raises
    ------
        UnsupportedContainerError: If the container is not Matroska.
        UnsupportedVideoCodecError: If the video track is not H.264.
        ParseError: If a required field is missing or malformed.
        NoSupportedAudioTrackError: If no audio track qualifies.

    """
    _check_container(report)
    media = InspectedMedia(video=_select_video(report), audio=_select_audio(report))
    logger.info(
        f"Selected video track {media.video.track_index} "
        f"(level {media.video.format_level}, {media.video.fps} fps) and "
        f"{media.audio.codec.value} audio track {media.audio.track_index}"
    )
    return media


def inspect_media(mediainfo: Path, input_path: Path) -> InspectedMedia:
    """Run mediainfo on the input and select its streams."""
    logger.info(f"Inspecting {input_path.name}")
    return select_streams(get_media_info(mediainfo, input_path))
