import logging
import subprocess
import threading
import time
import uuid
from concurrent.futures import Future
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union
from mjo.domain.errors import (
    JobCancelledError, JobTimeoutError, OutputMissingError, ProcessError, SpawnError, TranscodeError
)
from mjo.domain.events import JobCompleted, JobError, JobFailed, JobProgressUpdated, JobStarted, JobWarning
from mjo.domain.models import ConversionOptions, Job, JobKind, JobOutput, JobResult, JobStatus
from mjo.infrastructure.event_bus import EventBus
from mjo.infrastructure.filesystem import LocalFileSystem
from mjo.pipeline.progress import ProgressExtractor
from mjo.pipeline.registry import JobRegistry
from mjo.pipeline.statistics import StatisticsAggregator

class FFmpegSupervisor:
    """Runs ffmpeg jobs in the background and resolves each one to a ``JobResult``.

    Every job gets a watcher thread that streams the encoder output into a
    ``ProgressExtractor`` and finalizes the job after exit, plus an optional
    timeout timer. The registry and the statistics share one lock so that
    removing a job and counting its outcome happen atomically.
    """

    def __init__(
        self,
        event_bus: EventBus,
        ffmpeg_path: str = "ffmpeg",
        filesystem: Optional[LocalFileSystem] = None,
        debug: bool = False,
    ):
        self.event_bus = event_bus
        self.ffmpeg_path = ffmpeg_path
        self.filesystem = filesystem or LocalFileSystem()
        self.debug = debug
        self.logger = logging.getLogger(__name__)

        self._lock = threading.RLock()
        self.statistics = StatisticsAggregator(lock=self._lock)
        self.registry = JobRegistry(lock=self._lock, on_cancel=self._record_termination)

    def execute(
        self,
        args: Sequence[str],
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        kind: JobKind,
        options: Optional[ConversionOptions] = None,
    ) -> "Future[JobResult]":
        """Starts ffmpeg with ``args`` and returns a future resolved when the job ends."""
        options = options or ConversionOptions()
        future: "Future[JobResult]" = Future()
        job = Job(
            id=self._new_job_id(kind),
            input_path=Path(input_path),
            output_path=Path(output_path),
            kind=kind,
        )

        self.logger.info(f"JOB_START: {job.id} {job.input_path.name} -> {job.output_path.name}")
        if self.debug:
            self.logger.debug(f"FFMPEG_CMD: {self.ffmpeg_path} {' '.join(args)}")

        try:
            job.process = self._spawn(args)
        except SpawnError as e:
            self._publish_started(job, args)
            self._fail_spawn(job, future, e)
            return future

        # Registered first: JobStarted subscribers may already cancel the job
        self.registry.register(job)
        try:
            self._publish_started(job, args)
        finally:
            self._watch(job, future, options)
        return future

    def cancel(self, job_id: str) -> bool:
        return self.registry.cancel(job_id, reason=JobStatus.CANCELLED)

    def cancel_all(self) -> int:
        return self.registry.cancel_all()

    def _watch(self, job: Job, future: "Future[JobResult]", options: ConversionOptions):
        timer = None
        if options.timeout:
            timer = threading.Timer(options.timeout, self._on_timeout, args=(job,))
            timer.daemon = True
            timer.start()

        watcher = threading.Thread(
            target=self._supervise,
            args=(job, future, options, timer),
            name=f"mjo-{job.id}",
            daemon=True,
        )
        watcher.start()

    def _new_job_id(self, kind: JobKind) -> str:
        return f"{kind.value}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    def _spawn(self, args: Sequence[str]) -> subprocess.Popen:
        try:
            return subprocess.Popen(
                [self.ffmpeg_path, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                universal_newlines=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start {self.ffmpeg_path}: {e}") from e

    def _elapsed_ms(self, job: Job) -> int:
        return int((datetime.now() - job.started_at).total_seconds() * 1000)

    def _record_termination(self, job: Job):
        """Registry hook: counts a cancelled or timed-out job while its removal is locked."""
        job.processing_time_ms = self._elapsed_ms(job)
        self.statistics.record(False, job.processing_time_ms)

    def _on_timeout(self, job: Job):
        if job.process.poll() is not None:
            # Exited before the timer fired; the watcher owns the outcome
            return
        if self.registry.cancel(job.id, reason=JobStatus.TIMED_OUT):
            self.logger.warning(f"JOB_TIMEOUT: {job.id} terminated after {job.processing_time_ms}ms")

    def _publish_started(self, job: Job, args: Sequence[str]):
        self.event_bus.publish(JobStarted(
            job_id=job.id,
            input_path=job.input_path,
            output_path=job.output_path,
            kind=job.kind,
            args=list(args),
        ))

    def _fail_spawn(
self, job: Job, future: "Future[JobResult]", error: SpawnError):
        job.status = JobStatus.FAILED
        job.processing_time_ms = self._elapsed_ms(job)
        self.statistics.record(False, job.processing_time_ms)
        result = JobResult.failure(error, job_id=job.id)

        self.logger.error(f"JOB_END: {job.id} status=spawn_error error={error.message}")
        try:
            self.event_bus.publish(JobError(job_id=job.id, error_message=error.message))
            self.event_bus.publish(JobFailed(job_id=job.id, error_message=error.message, result=result))
        finally:
            future.set_result(result)

    def _supervise(self, job: Job, future: "Future[JobResult]", options: ConversionOptions, timer: Optional[threading.Timer]):
        extractor = ProgressExtractor(job.id, report_progress=options.report_progress)
        output: List[str] = []
        try:
            for chunk in job.process.stdout:
                output.append(chunk)
                sample = extractor.feed(chunk)
                if job.duration_hint is None and extractor.duration is not None:
                    job.duration_hint = extractor.duration
                if sample is not None and job.id in self.registry:
                    self.event_bus.publish(JobProgressUpdated(
                        job_id=job.id,
                        progress_percent=sample.percent_complete,
                        current_time=sample.elapsed_seconds,
                        duration=sample.total_duration_seconds,
                        input_path=job.input_path,
                        output_path=job.output_path,
                    ))
            returncode = job.process.wait()
            result = self._build_result(job, returncode, "".join(output))
        except Exception as e:
            self.logger.exception(f"Supervisor error for {job.id}")
            job.process.kill()
            job.process.wait()
            result = JobResult.failure(TranscodeError(f"Supervisor error: {e}"), job_id=job.id)
        finally:
            if timer is not None:
                timer.cancel()

        self._finalize(job, future, result)

    def _build_result(self, job: Job, returncode: int, diagnostics: str) -> JobResult:
        processing_time_ms = self._elapsed_ms(job)
        if returncode != 0:
            return JobResult.failure(ProcessError(returncode, diagnostics), job_id=job.id)

        try:
            stats = self.filesystem.stat(job.output_path)
        except OSError as e:
            error = OutputMissingError(f"ffmpeg succeeded but output file is not readable: {e}")
            return JobResult.failure(error, job_id=job.id)

        return JobResult.completed(job.id, JobOutput(
            input_path=job.input_path,
            output_path=job.output_path,
            output_byte_size=stats.st_size,
            processing_time_ms=processing_time_ms,
            kind=job.kind,
        ))

    def _finalize(self, job: Job, future: "Future[JobResult]", result: JobResult):
        """Resolves the job once; a job already removed by cancel/timeout keeps that outcome."""
        with self._lock:
            owned = self.registry.remove(job.id)
            if owned:
                job.status = JobStatus.COMPLETED if result.success else JobStatus.FAILED
                job.processing_time_ms = (
                    result.data.processing_time_ms if result.success else self._elapsed_ms(job)
                )
                self.statistics.record(result.success, job.processing_time_ms)

        if not owned:
            result = self._termination_result(job)

        try:
            self._publish_terminal(job, result)
        finally:
            future.set_result(result)

    def _termination_result(self, job: Job) -> JobResult:
        if job.status == JobStatus.TIMED_OUT:
            error: TranscodeError = JobTimeoutError("Processing timeout")
        else:
            error = JobCancelledError("Processing cancelled")
        return JobResult.failure(error, job_id=job.id)

    def _publish_terminal(self, job: Job, result: JobResult):
        elapsed = (job.processing_time_ms or 0) / 1000
        if result.success:
            self.logger.info(f"JOB_END: {job.id} status=completed elapsed={elapsed:.2f}s size={result.data.output_byte_size}")
            self.event_bus.publish(JobCompleted(job_id=job.id, result=result))
            return

        self.logger.error(f"JOB_END: {job.id} status={result.error.kind.value} elapsed={elapsed:.2f}s error={result.error.message}")
        if job.status == JobStatus.TIMED_OUT:
            self.event_bus.publish(JobWarning(job_id=job.id, message=f"Job exceeded its timeout after {elapsed:.2f}s and was terminated"))
        self.event_bus.publish(JobFailed(job_id=job.id, error_message=result.error.message, result=result))
