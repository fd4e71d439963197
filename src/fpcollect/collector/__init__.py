"""Per-address signal aggregation with a deferred export."""

from fpcollect.collector.handler import CollectorHandler
from fpcollect.collector.record import Record
from fpcollect.collector.scheduler import FlushScheduler
from fpcollect.collector.store import AggregationStore

__all__ = ["AggregationStore", "CollectorHandler", "FlushScheduler", "Record"]
