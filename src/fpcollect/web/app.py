"""FastAPI surface that feeds signals into the collector."""

from __future__ import annotations

import secrets
from collections.abc import Iterator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from fpcollect.collector import AggregationStore, CollectorHandler, FlushScheduler
from fpcollect.collector.keys import source_key
from fpcollect.collector.record import SignalPair
from fpcollect.config import Settings, settings
from fpcollect.export import build_exporter

logger = structlog.get_logger()

# Name of the signal carried by the redirect target.
REDIRECT_SIGNAL = "308"


def redirect_token() -> str:
    return secrets.token_hex(8).upper()


def build_handler(config: Settings = settings) -> CollectorHandler:
    store = AggregationStore(font_token=config.font_token)
    scheduler = FlushScheduler(store, build_exporter(config.exporter), config.flush_delay_seconds)
    return CollectorHandler(store, scheduler)


def _header_pairs(request: Request) -> Iterator[SignalPair]:
    # Consumed only when the store opens an episode.
    for raw_name, raw_value in request.headers.raw:
        try:
            value = raw_value.decode("utf-8")
        except UnicodeDecodeError:
            value = "opaque"
        yield raw_name.decode("latin-1"), value


def create_app(handler: CollectorHandler | None = None, config: Settings = settings) -> FastAPI:
    if handler is None:
        handler = build_handler(config)

    app = FastAPI(title="fpcollect")
    app.state.handler = handler
    prefix = config.path_prefix.rstrip("/")

    def _key_for(request: Request) -> str:
        peer = request.client.host if request.client else None
        return source_key(
            peer,
            request.headers.get("x-forwarded-for"),
            trust_forwarded=config.trust_forwarded,
        )

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "episodes": len(handler.store)})

    @app.get(f"{prefix}/{REDIRECT_SIGNAL}")
    def new_visitor() -> RedirectResponse:
        # The token only defeats caching; it is not tied to the visitor.
        return RedirectResponse(f"{prefix}/{REDIRECT_SIGNAL}={redirect_token()}", status_code=308)

    @app.get(prefix + "/{signal}")
    def new_signal(signal: str, request: Request) -> Response:
        name, sep, value = signal.partition("=")
        if not sep or not name or not value:
            return Response(status_code=404)

        key = _key_for(request)
        handler.collect(key, name, value, _header_pairs(request))

        if name == REDIRECT_SIGNAL:
            return Response(status_code=400)
        # 410 stops the browser from asking again on reload.
        return Response(status_code=410)

    logger.info("App configured", prefix=prefix, flush_delay_seconds=handler.scheduler.delay_seconds)
    return app
