"""Static format tables: supported extensions and codec preferences per container."""
from typing import Dict, List

SUPPORTED_AUDIO_FORMATS: List[str] = ["mp3", "wav", "flac", "aac", "m4a", "ogg", "wma", "opus", "aiff"]

SUPPORTED_VIDEO_FORMATS: List[str] = [
    "mp4", "avi", "mov", "mkv", "webm", "wmv", "flv", "m4v", "3gp", "ogv", "ts", "mts", "mxf",
]

# Ordered by preference; the first entry is the default for the container.
VIDEO_CODECS: Dict[str, List[str]] = {
    "mp4": ["libx264", "libx265", "h264_videotoolbox", "hevc_videotoolbox"],
    "mov": ["libx264", "libx265", "prores", "h264_videotoolbox", "hevc_videotoolbox"],
    "avi": ["libx264", "libxvid", "mjpeg"],
    "mkv": ["libx264", "libx265", "libvpx", "libvpx-vp9"],
    "webm": ["libvpx", "libvpx-vp9"],
    "wmv": ["wmv2", "msmpeg4v3"],
    "flv": ["libx264", "flv1"],
}

AUDIO_CODECS: Dict[str, List[str]] = {
    "mp4": ["aac", "mp3"],
    "mov": ["aac", "pcm_s16le", "alac"],
    "avi": ["mp3", "ac3", "pcm_s16le"],
    "mkv": ["aac", "mp3", "vorbis", "opus", "flac"],
    "webm": ["vorbis", "opus"],
    "wmv": ["wmav2", "mp3"],
    "flv": ["aac", "mp3"],
}

# Encoder used for audio-only outputs.
AUDIO_FORMAT_CODECS: Dict[str, str] = {
    "mp3": "libmp3lame",
    "wav": "pcm_s16le",
    "flac": "flac",
    "aac": "aac",
    "m4a": "aac",
    "ogg": "libvorbis",
    "wma": "wmav2",
    "opus": "libopus",
    "aiff": "pcm_s16be",
}

DEFAULT_VIDEO_CODEC = "libx264"
DEFAULT_AUDIO_CODEC = "aac"
