from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

class JobKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    AUDIO_EXTRACTION = "audio_extraction"

class JobStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"

class ErrorKind(str, Enum):
    VALIDATION = "validation"
    SPAWN = "spawn"
    PROCESS = "process"
    OUTPUT_MISSING = "output_missing"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"

class ConversionOptions(BaseModel):
    """Per-request encoder options. Unset codecs are chosen from the output format."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    audio_codec: Optional[str] = None
    audio_bitrate: Optional[str] = "128k"
    audio_sample_rate: Optional[int] = Field(default=44100, gt=0)
    audio_channels: Optional[int] = Field(default=2, gt=0)
    video_codec: Optional[str] = None
    video_bitrate: Optional[str] = "1000k"
    video_resolution: Optional[str] = Field(default=None, pattern=r"^\d+x\d+$")
    video_frame_rate: Optional[float] = Field(default=None, gt=0)
    preset: Optional[str] = "medium"
    crf: Optional[int] = Field(default=23, ge=0, le=51)
    overwrite: bool = True
    report_progress: bool = True
    timeout: Optional[float] = Field(default=300.0, ge=0)
    video_filters: Optional[str] = None

    def merged(self, overrides: Optional[Dict[str, Any]] = None) -> "ConversionOptions":
        """Returns a new validated options object with ``overrides`` taking precedence."""
        if not overrides:
            return self
        if isinstance(overrides, ConversionOptions):
            overrides = overrides.model_dump(exclude_unset=True)
        return ConversionOptions.model_validate({**self.model_dump(), **overrides})

class Job(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    input_path: Path
    output_path: Path
    kind: JobKind
    started_at: datetime = Field(default_factory=datetime.now)
    process: Any = Field(default=None, exclude=True, repr=False)
    duration_hint: Optional[float] = None
    status: JobStatus = JobStatus.PROCESSING
    processing_time_ms: Optional[int] = None

class ProgressSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_id: str
    elapsed_seconds: float
    total_duration_seconds: float
    percent_complete: float = Field(ge=0.0, le=100.0)

class JobOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_path: Path
    output_path: Path
    output_byte_size: int
    processing_time_ms: int
    kind: JobKind

class JobFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    exit_code: Optional[int] = None
    diagnostics: Optional[str] = None

class JobResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    job_id: Optional[str] = None
    data: Optional[JobOutput] = None
    error: Optional[JobFailure] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def completed(cls, job_id: str, output: JobOutput) -> "JobResult":
        return cls(success=True, job_id=job_id, data=output)

    @classmethod
    def failure(cls, error: Exception, job_id: Optional[str] = None) -> "JobResult":
        """Builds a failed result from a ``TranscodeError`` (or any exception)."""
        to_failure = getattr(error, "to_failure", None)
        if to_failure is not None:
            failure = to_failure()
        else:
            failure = JobFailure(kind=ErrorKind.PROCESS, message=str(error))
        return cls(success=False, job_id=job_id, error=failure)

class Statistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_processed: int = 0
    successful_processed: int = 0
    failed_processed: int = 0
    total_processing_time_ms: int = 0
    average_processing_time_ms: float = 0.0

class VideoStreamInfo(BaseModel):
    codec: str
    pixel_format: str
    resolution: str

class AudioStreamInfo(BaseModel):
    codec: str
    sample_rate: int
    channels: str

class MediaInfo(BaseModel):
    duration: Optional[float] = None
    bitrate: Optional[int] = None
    video: Optional[VideoStreamInfo] = None
    audio: Optional[AudioStreamInfo] = None

class FormatSupport(BaseModel):
    supported: bool
    kind: Optional[JobKind] = None

class VideoFormatDescription(BaseModel):
    format: str
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    duration: Optional[float] = None
    resolution: Optional[str] = None
