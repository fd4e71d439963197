"""Deferred one-shot export of an episode."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from fpcollect.collector.store import AggregationStore

if TYPE_CHECKING:
    from fpcollect.export import Exporter

logger = structlog.get_logger()

TimerFactory = Callable[[float, Callable[[], None]], None]


class DeferredRunner:
    """Run callables once after a delay on a shared APScheduler.

    One scheduler thread and a bounded worker pool serve every pending job,
    however many are queued.
    """

    def __init__(self, max_workers: int = 10) -> None:
        self._scheduler = BackgroundScheduler(
            executors={"default": {"type": "threadpool", "max_workers": max_workers}},
            job_defaults={"misfire_grace_time": None, "coalesce": False},
            daemon=True,
        )
        self._lock = threading.Lock()

    def __call__(self, delay_seconds: float, fn: Callable[[], None]) -> None:
        with self._lock:
            if not self._scheduler.running:
                self._scheduler.start()
        run_date = datetime.now(UTC) + timedelta(seconds=delay_seconds)
        self._scheduler.add_job(fn, DateTrigger(run_date=run_date))

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=wait)


class FlushScheduler:
    """Export an episode a fixed delay after it was created.

    The deadline is counted from the first signal and is not pushed back by
    later ones. Jobs are fire-and-forget; nothing holds the store lock while
    they wait.
    """

    def __init__(
        self,
        store: AggregationStore,
        exporter: Exporter,
        delay_seconds: float = 10.0,
        *,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.store = store
        self.exporter = exporter
        self.delay_seconds = delay_seconds
        self._timer_factory = timer_factory if timer_factory is not None else DeferredRunner()

    def schedule(self, key: str) -> None:
        self._timer_factory(self.delay_seconds, lambda: self.flush(key))

    def flush(self, key: str) -> bool:
        """Take the record for ``key`` and export it.

        Returns True only when a record was exported successfully. Export
        failures are logged and the record is dropped.
        """
        record = self.store.take(key)
        if record is None:
            logger.info("No open episode to flush", ip=key)
            return False

        try:
            result = self.exporter.export(key, record)
        except Exception as exc:
            logger.error("Fingerprint export raised", ip=key, error=str(exc))
            return False

        if not result.ok:
            logger.warning("Fingerprint export failed", ip=key, error=result.error)
            return False
        return True
