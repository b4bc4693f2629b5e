"""Incremental parsing of ffmpeg's diagnostic output into progress samples.

ffmpeg announces the input length once (``Duration: 00:01:30.00``) and then
reports the encoded position repeatedly (``time=00:00:45.00``). Lines that
match neither pattern are ignored.
"""
import re
from enum import Enum
from typing import Optional
from mjo.domain.models import ProgressSample

DURATION_RE = re.compile(r"Duration: (\d{2,}):(\d{2}):(\d{2})\.(\d{2})")
TIME_RE = re.compile(r"time=(\d{2,}):(\d{2}):(\d{2})\.(\d{2})")

def parse_timestamp(match: re.Match) -> float:
    """Converts a ``hh:mm:ss.cc`` match into seconds."""
    hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds + centiseconds / 100

class ExtractorState(str, Enum):
    AWAITING_DURATION = "awaiting_duration"
    STREAMING = "streaming"

class ProgressExtractor:
    """Per-job state machine fed with chunks of encoder output."""

    def __init__(self, job_id: str, report_progress: bool = True):
        self.job_id = job_id
        self.report_progress = report_progress
        self.state = ExtractorState.AWAITING_DURATION
        self.duration: Optional[float] = None

    def feed(self, chunk: str) -> Optional[ProgressSample]:
        """Consumes one chunk; returns a sample when it carries a time marker."""
        if self.state == ExtractorState.AWAITING_DURATION:
            match = DURATION_RE.search(chunk)
            if match:
                duration = parse_timestamp(match)
                # A zero duration cannot produce a percentage
                if duration > 0:
                    self.duration = duration
                    self.state = ExtractorState.STREAMING

        if self.state != ExtractorState.STREAMING or not self.report_progress:
            return None

        match = TIME_RE.search(chunk)
        if not match:
            return None

        elapsed = parse_timestamp(match)
        percent = min(100.0, elapsed / self.duration * 100)
        return ProgressSample(
            job_id=self.job_id,
            elapsed_seconds=elapsed,
            total_duration_seconds=self.duration,
            percent_complete=percent,
        )
