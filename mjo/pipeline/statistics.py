import threading
from typing import Optional
from mjo.domain.models import Statistics

class StatisticsAggregator:
    """Thread-safe running counters over terminal job outcomes."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self.total_processed = 0
        self.successful_processed = 0
        self.failed_processed = 0
        self.total_processing_time_ms = 0

    def record(self, success: bool, processing_time_ms: int):
        with self.lock:
            self.total_processed += 1
            if success:
                self.successful_processed += 1
            else:
                self.failed_processed += 1
            self.total_processing_time_ms += processing_time_ms

    @property
    def average_processing_time_ms(self) -> float:
        with self.lock:
            if self.total_processed == 0:
                return 0.0
            return self.total_processing_time_ms / self.total_processed

    def snapshot(self) -> Statistics:
        with self.lock:
            return Statistics(
                total_processed=self.total_processed,
                successful_processed=self.successful_processed,
                failed_processed=self.failed_processed,
                total_processing_time_ms=self.total_processing_time_ms,
                average_processing_time_ms=self.average_processing_time_ms,
            )
