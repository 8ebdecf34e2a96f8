from __future__ import annotations

from datetime import time

from apscheduler.triggers.cron import CronTrigger

from daily_feeds.scheduler import DAILY_JOB_ID, APSchedulerAdapter


class StubScheduler:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def add_job(self, callback, trigger, **kwargs):  # noqa: ANN001
        self.calls.append({"callback": callback, "trigger": trigger, **kwargs})

    def start(self):
        self.calls.append({"event": "started"})

    def shutdown(self, wait=False):  # noqa: ARG002
        self.calls.append({"event": "shutdown"})

    def get_jobs(self):
        return []


def test_build_trigger_fires_daily_at_time() -> None:
    trigger = APSchedulerAdapter._build_trigger(time(6, 30))
    assert isinstance(trigger, CronTrigger)
    text = str(trigger)
    assert "hour='6'" in text
    assert "minute='30'" in text


def test_schedule_daily_registers_single_job() -> None:
    stub = StubScheduler()
    adapter = APSchedulerAdapter(scheduler=stub)  # type: ignore[arg-type]

    def job() -> None:
        return None

    adapter.schedule_daily(time(7, 0), job)
    adapter.schedule_daily(time(8, 0), job)

    assert [call["id"] for call in stub.calls] == [DAILY_JOB_ID, DAILY_JOB_ID]
    assert all(call["replace_existing"] for call in stub.calls)
    assert stub.calls[0]["callback"] is job
    assert stub.calls[0]["max_instances"] == 1


def test_start_and_shutdown_are_idempotent() -> None:
    stub = StubScheduler()
    adapter = APSchedulerAdapter(scheduler=stub)  # type: ignore[arg-type]
    adapter.start()
    adapter.start()
    adapter.shutdown()
    adapter.shutdown()
    assert stub.calls == [{"event": "started"}, {"event": "shutdown"}]
