import logging
import sys
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, Union
from pydantic import ValidationError
from mjo.config.models import AppConfig
from mjo.domain.errors import RequestValidationError, TranscodeError
from mjo.domain.events import Event, JobError, JobFailed
from mjo.domain.models import (
    ConversionOptions, FormatSupport, JobKind, JobResult, MediaInfo, Statistics, VideoFormatDescription
)
from mjo.infrastructure.event_bus import EventBus
from mjo.infrastructure.filesystem import LocalFileSystem
from mjo.infrastructure.media_info import FFmpegMediaProbe
from mjo.pipeline.commands import FFmpegCommandBuilder, format_from_path
from mjo.pipeline.supervisor import FFmpegSupervisor

PathLike = Union[str, Path]

def is_blank_path(path: Optional[PathLike]) -> bool:
    """True for None, whitespace and empty paths (``Path("")`` renders as ``"."``)."""
    return path is None or str(path).strip() in ("", ".")

class TranscodingService:
    """Entry point for conversions, media queries, cancellation and statistics.

    Constructed explicitly and handed to whoever needs it; there is no global
    instance. Conversions return a ``Future`` resolved with a ``JobResult``;
    failures never raise, they come back as ``JobResult(success=False)``.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        event_bus: Optional[EventBus] = None,
        filesystem: Optional[LocalFileSystem] = None,
        platform: str = sys.platform,
    ):
        self.config = config or AppConfig()
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger(__name__)

        self.builder = FFmpegCommandBuilder(self.config.formats, platform=platform)
        self.supervisor = FFmpegSupervisor(
            event_bus=self.event_bus,
            ffmpeg_path=self.config.general.ffmpeg_path,
            filesystem=filesystem,
            debug=self.config.general.debug,
        )
        self.media_probe = FFmpegMediaProbe(ffmpeg_path=self.config.general.ffmpeg_path)

    # Conversions

    def convert_audio(self, input_path: PathLike, output_path: PathLike, options: Optional[Dict[str, Any]] = None) -> "Future[JobResult]":
        return self._submit(JobKind.AUDIO, input_path, output_path, options)

    def convert_video(self, input_path: PathLike, output_path: PathLike, options: Optional[Dict[str, Any]] = None) -> "Future[JobResult]":
        return self._submit(JobKind.VIDEO, input_path, output_path, options)

    def extract_audio(self, input_path: PathLike, output_path: PathLike, options: Optional[Dict[str, Any]] = None) -> "Future[JobResult]":
        return self._submit(JobKind.AUDIO_EXTRACTION, input_path, output_path, options)

    def _submit(self, kind: JobKind, input_path: PathLike, output_path: PathLike, options: Optional[Dict[str, Any]]) -> "Future[JobResult]":
        try:
            merged = self._validate(input_path, output_path, options)
        except RequestValidationError as e:
            return self._reject(e)

        args = self.builder.build(kind, input_path, output_path, merged)
        return self.supervisor.execute(args, input_path, output_path, kind, merged)

    def _validate(self, input_path: PathLike, output_path: PathLike, options: Optional[Dict[str, Any]]) -> ConversionOptions:
        if is_blank_path(input_path):
            raise RequestValidationError("input path is required")
        if is_blank_path(output_path):
            raise RequestValidationError("output path is required")
        try:
            return self.config.defaults.merged(options)
        except ValidationError as e:
            raise RequestValidationError(f"invalid conversion options: {e}") from e

    def _reject(self, error: TranscodeError) -> "Future[JobResult]":
        """Resolves a request that never reached the encoder as a failed job."""
        self.logger.warning(f"Rejected conversion request: {error.message}")
        result = JobResult.failure(error)
        self.supervisor.statistics.record(False, 0)
        self.event_bus.publish(JobError(error_message=error.message))
        self.event_bus.publish(JobFailed(error_message=error.message, result=result))

        future: "Future[JobResult]" = Future()
        future.set_result(result)
        return future

    # Media queries

    def get_media_info(self, input_path: PathLike) -> MediaInfo:
        return self.media_probe.get_media_info(input_path)

    def detect_video_format(self, file_path: PathLike) -> VideoFormatDescription:
        """Describes a file's container and streams, falling back to its extension."""
        description = VideoFormatDescription(format=format_from_path(file_path))
        try:
            info = self.get_media_info(file_path)
        except TranscodeError as e:
            self.logger.warning(f"Failed to detect video format of {file_path}: {e.message}")
            return description

        return description.model_copy(update={
            "video_codec": info.video.codec if info.video else None,
            "audio_codec": info.audio.codec if info.audio else None,
            "duration": info.duration,
            "resolution": info.video.resolution if info.video else None,
        })

    # Job control

    def cancel_processing(self, job_id: str) -> bool:
        return self.supervisor.cancel(job_id)

    def cancel_all_processing(self) -> int:
        return self.supervisor.cancel_all()

    def get_active_processes(self) -> List[str]:
        return self.supervisor.registry.ids()

    def get_statistics(self) -> Statistics:
        return self.supervisor.statistics.snapshot()

    # Events

    def subscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        self.event_bus.subscribe(event_type, callback)

    def unsubscribe(self, event_type: Type[Event], callback: Callable[[Any], None]) -> bool:
        return self.event_bus.unsubscribe(event_type, callback)

    # Formats

    def get_supported_formats(self) -> Dict[str, List[str]]:
        return {
            "audio": list(self.config.formats.audio_formats),
            "video": list(self.config.formats.video_formats),
        }

    def is_format_supported(self, extension: str, kind: str = "auto") -> FormatSupport:
        ext = extension.lower().lstrip('.')

        if kind in ("audio", "auto") and ext in self.config.formats.audio_formats:
            return FormatSupport(supported=True, kind=JobKind.AUDIO)
        if kind in ("video", "auto") and ext in self.config.formats.video_formats:
            return FormatSupport(supported=True, kind=JobKind.VIDEO)
        return FormatSupport(supported=False, kind=None)

    def get_supported_codecs(self, format: str, kind: str = "video") -> List[str]:
        format = format.lower().lstrip('.')
        if kind == "video":
            return list(self.config.formats.video_codecs.get(format, []))
        if kind == "audio":
            return list(self.config.formats.audio_codecs.get(format, []))
        return []
