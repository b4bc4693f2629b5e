from pathlib import Path
from mjo.infrastructure.event_bus import EventBus
from mjo.domain.events import JobEvent, JobStarted, JobWarning
from mjo.domain.models import JobKind

def started(job_id="job-1"):
    return JobStarted(job_id=job_id, input_path=Path("in.mp4"), output_path=Path("out.mp4"), kind=JobKind.VIDEO)

def test_publish_delivers_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(JobStarted, lambda e: calls.append(("first", e.job_id)))
    bus.subscribe(JobStarted, lambda e: calls.append(("second", e.job_id)))

    bus.publish(started())

    assert calls == [("first", "job-1"), ("second", "job-1")]

def test_base_class_subscription_receives_subclasses():
    bus = EventBus()
    received = []
    bus.subscribe(JobEvent, received.append)

    bus.publish(started())
    bus.publish(JobWarning(job_id="job-1", message="slow"))

    assert [type(e) for e in received] == [JobStarted, JobWarning]

def test_other_event_types_not_delivered():
    bus = EventBus()
    received = []
    bus.subscribe(JobWarning, received.append)

    bus.publish(started())

    assert received == []

def test_no_replay_for_late_subscribers():
    bus = EventBus()
    bus.publish(started())

    received = []
    bus.subscribe(JobStarted, received.append)

    assert received == []

def test_unsubscribe():
    bus = EventBus()
    received = []
    bus.subscribe(JobStarted, received.append)

    assert bus.unsubscribe(JobStarted, received.append) is True
    assert bus.unsubscribe(JobStarted, received.append) is False

    bus.publish(started())
    assert received == []
