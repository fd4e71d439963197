"""Lock-guarded keyed collection of in-flight records."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable

from fpcollect.collector.record import DEFAULT_FONT_TOKEN, Record, SignalPair


def _epoch_seconds() -> int:
    return int(time.time())


class AggregationStore:
    """Map of source key to the record of its current episode.

    Every read and write of the map or of a record happens under one lock, and
    records never leave the store except through ``take``.
    """

    def __init__(
        self,
        *,
        font_token: str = DEFAULT_FONT_TOKEN,
        clock: Callable[[], int] = _epoch_seconds,
    ) -> None:
        self._records: dict[str, Record] = {}
        self._lock = threading.Lock()
        self._font_token = font_token
        self._clock = clock

    def upsert(self, key: str, pair: SignalPair, headers: Iterable[SignalPair] = ()) -> bool:
        """Apply ``pair`` to the record for ``key``, creating it if needed.

        ``headers`` is only read when a new record is created. Returns True when
        this call started a new episode.
        """
        with self._lock:
            record = self._records.get(key)
            created = record is None
            if record is None:
                record = Record(created_at=self._clock(), headers=tuple(headers))
                self._records[key] = record
            record.apply(pair, self._font_token)
            return created

    def take(self, key: str) -> Record | None:
        """Remove and return the record for ``key``, or None when there is none."""
        with self._lock:
            return self._records.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records
