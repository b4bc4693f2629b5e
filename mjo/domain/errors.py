from typing import Optional
from mjo.domain.models import ErrorKind, JobFailure

class TranscodeError(Exception):
    """Base class for every failure a conversion job can end with."""
    kind: ErrorKind = ErrorKind.PROCESS

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_failure(self) -> JobFailure:
        return JobFailure(kind=self.kind, message=self.message)

class RequestValidationError(TranscodeError):
    """Missing path or invalid option, rejected before anything is spawned."""
    kind = ErrorKind.VALIDATION

class SpawnError(TranscodeError):
    """The encoder binary could not be started (missing, not executable)."""
    kind = ErrorKind.SPAWN

class ProcessError(TranscodeError):
    """The encoder exited with a nonzero code."""
    kind = ErrorKind.PROCESS

    def __init__(self, exit_code: Optional[int], diagnostics: str):
        super().__init__(f"ffmpeg exited with code {exit_code}")
        self.exit_code = exit_code
        self.diagnostics = diagnostics

    def to_failure(self) -> JobFailure:
        return JobFailure(
            kind=self.kind,
            message=self.message,
            exit_code=self.exit_code,
            diagnostics=self.diagnostics,
        )

class OutputMissingError(TranscodeError):
    """Encoder reported success but the output file cannot be stat'ed."""
    kind = ErrorKind.OUTPUT_MISSING

class JobTimeoutError(TranscodeError):
    kind = ErrorKind.TIMEOUT

class JobCancelledError(TranscodeError):
    kind = ErrorKind.CANCELLED
