"""Exporters that persist a finished record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError

from fpcollect.collector.record import Record

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExportResult:
    ok: bool
    error: str | None = None


class Exporter(Protocol):
    def export(self, key: str, record: Record) -> ExportResult: ...


class DatabaseExporter:
    """Insert each record as a JSONB row in ``fingerprints``."""

    def export(self, key: str, record: Record) -> ExportResult:
        from fpcollect.db import get_db
        from fpcollect.models import Fingerprint

        try:
            with get_db() as session:
                session.add(Fingerprint(ip=key, fingerprint=record.to_payload()))
        except SQLAlchemyError as exc:
            return ExportResult(ok=False, error=str(exc))
        logger.info(
            "Fingerprint stored",
            ip=key,
            properties=len(record.fields),
            fonts=len(record.fonts),
        )
        return ExportResult(ok=True)


class LogExporter:
    """Log the record and keep nothing."""

    def export(self, key: str, record: Record) -> ExportResult:
        logger.info("Fingerprint collected", ip=key, fingerprint=record.to_payload())
        return ExportResult(ok=True)


def build_exporter(name: str) -> Exporter:
    if name == "database":
        return DatabaseExporter()
    if name == "log":
        return LogExporter()
    raise ValueError(f"Unknown exporter: {name}")
