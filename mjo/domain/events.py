from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from .models import JobKind, JobResult

class Event(BaseModel):
    """Base class for all domain events."""
    pass

class JobEvent(Event):
    job_id: Optional[str] = None

class JobStarted(JobEvent):
    input_path: Path
    output_path: Path
    kind: JobKind
    args: List[str] = Field(default_factory=list)

class JobProgressUpdated(JobEvent):
    progress_percent: float
    current_time: float
    duration: float
    input_path: Path
    output_path: Path

class JobCompleted(JobEvent):
    result: JobResult

class JobFailed(JobEvent):
    error_message: str
    result: JobResult

class JobWarning(JobEvent):
    message: str

class JobError(JobEvent):
    error_message: str
