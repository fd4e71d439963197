"""Pytest fixtures for fingerprint collection tests."""

from collections.abc import Callable

import pytest

from fpcollect.collector import AggregationStore, CollectorHandler, FlushScheduler
from fpcollect.collector.record import Record
from fpcollect.export import ExportResult


class ManualTimers:
    """Timer factory that queues callbacks until the test fires them."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, Callable[[], None]]] = []

    def __call__(self, delay_seconds: float, fn: Callable[[], None]) -> None:
        self.pending.append((delay_seconds, fn))

    def fire_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, fn in pending:
            fn()


class RecordingExporter:
    def __init__(self, result: ExportResult | None = None) -> None:
        self.result = result or ExportResult(ok=True)
        self.exported: list[tuple[str, Record]] = []

    def export(self, key: str, record: Record) -> ExportResult:
        self.exported.append((key, record))
        return self.result


class FakeClock:
    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> AggregationStore:
    return AggregationStore(clock=clock)


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture
def scheduler(store: AggregationStore, exporter: RecordingExporter, timers: ManualTimers) -> FlushScheduler:
    return FlushScheduler(store, exporter, 10.0, timer_factory=timers)


@pytest.fixture
def handler(store: AggregationStore, scheduler: FlushScheduler) -> CollectorHandler:
    return CollectorHandler(store, scheduler)
