"""Entry point for a single inbound signal."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from fpcollect.collector.record import SignalPair
from fpcollect.collector.scheduler import FlushScheduler
from fpcollect.collector.store import AggregationStore

logger = structlog.get_logger()


class CollectorHandler:
    def __init__(self, store: AggregationStore, scheduler: FlushScheduler) -> None:
        self.store = store
        self.scheduler = scheduler

    def collect(self, key: str, name: str, value: str, headers: Iterable[SignalPair] = ()) -> bool:
        """Record one signal for ``key``.

        The first signal of an episode arms its flush; later ones only add to
        the record. Returns True when this signal opened the episode.
        """
        created = self.store.upsert(key, (name, value), headers)
        if created:
            logger.info("Episode opened", ip=key, flush_in_seconds=self.scheduler.delay_seconds)
            self.scheduler.schedule(key)
        return created
