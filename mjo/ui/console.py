import threading
from typing import Dict, Optional
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn, TimeElapsedColumn
from mjo.infrastructure.event_bus import EventBus
from mjo.domain.events import JobCompleted, JobFailed, JobProgressUpdated, JobStarted, JobWarning

class ConsoleReporter:
    """Subscribes to EventBus and renders one progress bar per job."""

    def __init__(self, bus: EventBus, console: Optional[Console] = None):
        self.bus = bus
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>5.1f}%"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self._tasks: Dict[str, TaskID] = {}
        self._lock = threading.Lock()
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobProgressUpdated, self.on_job_progress)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)
        self.bus.subscribe(JobWarning, self.on_job_warning)

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.progress.stop()

    def on_job_started(self, event: JobStarted):
        with self._lock:
            self._tasks[event.job_id] = self.progress.add_task(event.input_path.name, total=100)

    def on_job_progress(self, event: JobProgressUpdated):
        with self._lock:
            task_id = self._tasks.get(event.job_id)
        if task_id is not None:
            self.progress.update(task_id, completed=event.progress_percent)

    def on_job_completed(self, event: JobCompleted):
        with self._lock:
            task_id = self._tasks.pop(event.job_id, None)
        if task_id is not None:
            self.progress.update(task_id, completed=100)
        data = event.result.data
        self.console.print(
            f"[green]Done[/green] {data.output_path} "
            f"({data.output_byte_size} bytes, {data.processing_time_ms / 1000:.1f}s)"
        )

    def on_job_failed(self, event: JobFailed):
        with self._lock:
            task_id = self._tasks.pop(event.job_id, None) if event.job_id else None
        if task_id is not None:
            self.progress.remove_task(task_id)
        self.console.print(f"[red]Failed[/red] {event.error_message}")

    def on_job_warning(self, event: JobWarning):
        self.console.print(f"[yellow]Warning[/yellow] {event.message}")
