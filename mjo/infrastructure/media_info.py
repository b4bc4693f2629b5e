import logging
import re
import subprocess
from pathlib import Path
from typing import Union
from mjo.domain.errors import JobTimeoutError, ProcessError, RequestValidationError, SpawnError
from mjo.domain.models import AudioStreamInfo, MediaInfo, VideoStreamInfo
from mjo.pipeline.progress import DURATION_RE, parse_timestamp

BITRATE_RE = re.compile(r"bitrate: (\d+) kb/s")
# Pixel format may carry a parenthesized, comma separated color description
VIDEO_RE = re.compile(r"Video: ([^,]+), (\w+)(?:\([^)]*\))?[^,]*, (\d+x\d+)")
AUDIO_RE = re.compile(r"Audio: ([^,]+), (\d+) Hz, ([^,\n]+)")

def parse_media_info(text: str) -> MediaInfo:
    """Parses the stream summary ffmpeg prints for its inputs."""
    info = MediaInfo()

    match = DURATION_RE.search(text)
    if match:
        info.duration = parse_timestamp(match)

    match = BITRATE_RE.search(text)
    if match:
        info.bitrate = int(match.group(1))

    match = VIDEO_RE.search(text)
    if match:
        info.video = VideoStreamInfo(
            codec=match.group(1).strip(),
            pixel_format=match.group(2),
            resolution=match.group(3),
        )

    match = AUDIO_RE.search(text)
    if match:
        info.audio = AudioStreamInfo(
            codec=match.group(1).strip(),
            sample_rate=int(match.group(2)),
            channels=match.group(3).strip(),
        )

    return info

class FFmpegMediaProbe:
    """Reads the input summary ffmpeg prints before it complains about a missing output."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: float = 60.0):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def get_media_info(self, input_path: Union[str, Path]) -> MediaInfo:
        if input_path is None or str(input_path).strip() in ("", "."):
            raise RequestValidationError("input path is required")

        # No output given: ffmpeg prints the input summary and exits 1 without decoding
        cmd = [self.ffmpeg_path, "-hide_banner", "-i", str(input_path)]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start {self.ffmpeg_path}: {e}") from e
        except subprocess.TimeoutExpired as e:
            info = parse_media_info(_decode(e.stderr))
            if not _has_content(info):
                raise JobTimeoutError(f"Media analysis of {input_path} exceeded {self.timeout:g}s") from e
            self.logger.warning(f"Media analysis of {input_path} timed out, using the partial summary")
            return info

        info = parse_media_info(result.stderr)
        if result.returncode != 0 and not _has_content(info):
            raise ProcessError(result.returncode, result.stderr)

        self.logger.debug(f"Media info for {input_path}: {info}")
        return info

def _decode(output: Union[str, bytes, None]) -> str:
    # TimeoutExpired carries raw bytes on POSIX even in text mode
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output

def _has_content(info: MediaInfo) -> bool:
    return info.duration is not None or info.video is not None or info.audio is not None
