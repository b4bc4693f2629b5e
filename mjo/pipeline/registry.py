import logging
import threading
from typing import Callable, Dict, List, Optional
from mjo.domain.models import Job, JobStatus

class JobRegistry:
    """Thread-safe table of in-flight jobs keyed by job id.

    Removing a job is the single point that decides who finalizes it: exactly one
    of ``remove`` or ``cancel`` succeeds for a given id.
    """

    def __init__(self, lock: Optional[threading.RLock] = None, on_cancel: Optional[Callable[[Job], None]] = None):
        self.lock = lock or threading.RLock()
        self.on_cancel = on_cancel
        self._jobs: Dict[str, Job] = {}
        self.logger = logging.getLogger(__name__)

    def register(self, job: Job):
        with self.lock:
            if job.id in self._jobs:
                raise ValueError(f"Job {job.id} is already registered")
            self._jobs[job.id] = job

    def get(self, job_id: str) -> Optional[Job]:
        with self.lock:
            return self._jobs.get(job_id)

    def remove(self, job_id: str) -> bool:
        with self.lock:
            return self._jobs.pop(job_id, None) is not None

    def cancel(self, job_id: str, reason: JobStatus = JobStatus.CANCELLED) -> bool:
        """Signals the job's process and removes it. False if the job is not registered."""
        with self.lock:
            job = self._jobs.pop(job_id, None)
            if job is None:
                return False

            job.status = reason
            self._terminate(job)
            if self.on_cancel:
                self.on_cancel(job)

        self.logger.info(f"JOB_CANCEL: {job_id} reason={reason.value}")
        return True

    def cancel_all(self) -> int:
        """Cancels every job registered at call time; returns how many were cancelled."""
        with self.lock:
            job_ids = list(self._jobs)
        return sum(1 for job_id in job_ids if self.cancel(job_id))

    def ids(self) -> List[str]:
        with self.lock:
            return list(self._jobs)

    def __len__(self) -> int:
        with self.lock:
            return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        with self.lock:
            return job_id in self._jobs

    def _terminate(self, job: Job):
        if job.process is None:
            return
        try:
            job.process.terminate()
        except ProcessLookupError:
            # Already exited; the watcher reaps it
            pass
