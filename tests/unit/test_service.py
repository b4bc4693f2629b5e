from pathlib import Path
from unittest.mock import MagicMock, patch
import pytest
from mjo.config.models import AppConfig
from mjo.domain.errors import SpawnError
from mjo.domain.events import JobFailed
from mjo.domain.models import (
    AudioStreamInfo, ConversionOptions, ErrorKind, JobKind, MediaInfo, VideoStreamInfo
)
from mjo.pipeline.service import TranscodingService

@pytest.fixture
def service(bus):
    return TranscodingService(config=AppConfig(), event_bus=bus, platform="linux")

@pytest.mark.parametrize("input_path, output_path", [
    ("", "out.mp3"),
    ("in.wav", "   "),
    (None, "out.mp3"),
    (Path(""), "out.mp3"),
    ("in.wav", Path("")),
])
def test_missing_paths_rejected_before_spawn(service, recorder, input_path, output_path):
    with patch("subprocess.Popen") as mock_popen:
        result = service.convert_audio(input_path, output_path).result(timeout=1)

    mock_popen.assert_not_called()
    assert not result.success
    assert result.error.kind == ErrorKind.VALIDATION
    assert recorder.types() == ["JobError", "JobFailed"]
    assert service.get_statistics().failed_processed == 1

def test_unknown_option_rejected(service):
    with patch("subprocess.Popen") as mock_popen:
        result = service.convert_video("in.mov", "out.mp4", {"turbo": True}).result(timeout=1)

    mock_popen.assert_not_called()
    assert result.error.kind == ErrorKind.VALIDATION
    assert "turbo" in result.error.message

def test_out_of_range_option_rejected(service):
    result = service.convert_video("in.mov", "out.mp4", {"crf": 99}).result(timeout=1)

    assert result.error.kind == ErrorKind.VALIDATION

def test_caller_options_override_defaults(service):
    service.supervisor.execute = MagicMock()

    service.convert_video("in.mov", "out.mkv", {"video_codec": "libx265", "crf": 18, "timeout": 5})

    args, path_in, path_out, kind, options = service.supervisor.execute.call_args[0]
    assert kind == JobKind.VIDEO
    assert options.crf == 18
    assert options.timeout == 5
    assert options.audio_bitrate == "128k"
    assert args[args.index("-c:v") + 1] == "libx265"
    assert args[args.index("-crf") + 1] == "18"

def test_service_defaults_come_from_config(bus):
    config = AppConfig(defaults=ConversionOptions(audio_bitrate="256k", report_progress=False))
    service = TranscodingService(config=config, event_bus=bus)
    service.supervisor.execute = MagicMock()

    service.extract_audio("movie.mp4", "track.mp3")

    args = service.supervisor.execute.call_args[0][0]
    assert args[args.index("-ab") + 1] == "256k"
    assert "-progress" not in args

def test_unsupported_container_selects_fallback_codecs(service):
    service.supervisor.execute = MagicMock()

    service.convert_video("in.mov", "out.unknown")

    args = service.supervisor.execute.call_args[0][0]
    assert args[args.index("-c:v") + 1] == "libx264"
    assert args[args.index("-c:a") + 1] == "aac"

@pytest.mark.parametrize("extension, kind, supported, detected", [
    ("mp3", "auto", True, JobKind.AUDIO),
    (".MP4", "auto", True, JobKind.VIDEO),
    ("mp4", "audio", False, None),
    ("flac", "video", False, None),
    ("xyz", "auto", False, None),
])
def test_is_format_supported(service, extension, kind, supported, detected):
    support = service.is_format_supported(extension, kind)

    assert support.supported is supported
    assert support.kind == detected

def test_get_supported_codecs(service):
    assert service.get_supported_codecs("webm") == ["libvpx", "libvpx-vp9"]
    assert service.get_supported_codecs("mov", "audio") == ["aac", "pcm_s16le", "alac"]
    assert service.get_supported_codecs("xyz") == []
    assert service.get_supported_codecs("mp4", "subtitle") == []

def test_supported_formats_are_copies(service):
    formats = service.get_supported_formats()
    formats["audio"].append("nope")

    assert "nope" not in service.get_supported_formats()["audio"]
    assert "mkv" in formats["video"]

def test_detect_video_format(service):
    service.media_probe.get_media_info = MagicMock(return_value=MediaInfo(
        duration=12.5,
        video=VideoStreamInfo(codec="h264", pixel_format="yuv420p", resolution="1280x720"),
        audio=AudioStreamInfo(codec="aac", sample_rate=48000, channels="stereo"),
    ))

    description = service.detect_video_format(Path("clip.MOV"))

    assert description.format == "mov"
    assert description.video_codec == "h264"
    assert description.audio_codec == "aac"
    assert description.duration == 12.5
    assert description.resolution == "1280x720"

def test_detect_video_format_falls_back_to_extension(service):
    service.media_probe.get_media_info = MagicMock(side_effect=SpawnError("ffmpeg missing"))

    description = service.detect_video_format("clip.mkv")

    assert description.format == "mkv"
    assert description.video_codec is None

def test_subscribe_and_unsubscribe(service):
    received = []
    service.subscribe(JobFailed, received.append)
    service.convert_audio("", "out.mp3").result(timeout=1)
    assert len(received) == 1

    assert service.unsubscribe(JobFailed, received.append) is True
    service.convert_audio("", "out.mp3").result(timeout=1)
    assert len(received) == 1

def test_statistics_and_active_processes_start_empty(service):
    stats = service.get_statistics()

    assert stats.total_processed == 0
    assert service.get_active_processes() == []
    assert service.cancel_processing("nope") is False
    assert service.cancel_all_processing() == 0
