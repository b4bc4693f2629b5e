import sys
import textwrap
import pytest
from mjo.infrastructure.event_bus import EventBus
from mjo.domain.events import JobEvent

class EventRecorder:
    """Collects every job event published on a bus, in order."""

    def __init__(self, bus: EventBus):
        self.events = []
        bus.subscribe(JobEvent, self.events.append)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def types(self, job_id=None):
        return [type(e).__name__ for e in self.events if job_id is None or e.job_id == job_id]

@pytest.fixture
def bus():
    return EventBus()

@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)

@pytest.fixture
def fake_ffmpeg(tmp_path):
    """Writes an executable stand-in for ffmpeg; ``body`` runs with ``out`` bound to the last argument."""
    def make(body: str, name: str = "ffmpeg") -> str:
        script = tmp_path / name
        script.write_text(
            f"#!{sys.executable}\n"
            "import sys, time\n"
            "out = sys.argv[-1]\n"
            + textwrap.dedent(body)
        )
        script.chmod(0o755)
        return str(script)
    return make
