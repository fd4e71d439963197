"""Tests for the HTTP surface (FastAPI TestClient, no database)."""

import re

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from fpcollect.config import Settings
from fpcollect.web.app import _header_pairs, build_handler, create_app


@pytest.fixture
def client(handler) -> TestClient:
    config = Settings(path_prefix="/some/url", trust_forwarded=True)
    return TestClient(create_app(handler, config))


def _get(client, path, ip="198.51.100.7"):
    return client.get(path, headers={"x-forwarded-for": ip}, follow_redirects=False)


class TestSignalRoutes:
    def test_signal_returns_gone(self, client, store):
        response = _get(client, "/some/url/screen-width=1920")

        assert response.status_code == 410
        assert "198.51.100.7" in store

    def test_signals_aggregate_per_address(self, client, store, timers, exporter):
        _get(client, "/some/url/screen-width=1920")
        _get(client, "/some/url/font-name=Arial")
        _get(client, "/some/url/screen-width=1280", ip="203.0.113.1")

        assert len(timers.pending) == 2
        timers.fire_all()

        by_ip = {key: record for key, record in exporter.exported}
        assert by_ip["198.51.100.7"].fields == [("screen-width", "1920")]
        assert by_ip["198.51.100.7"].fonts == ["Arial"]
        assert by_ip["203.0.113.1"].fields == [("screen-width", "1280")]

    def test_headers_captured_on_first_request_only(self, client, store):
        client.get("/some/url/a=1", headers={"x-forwarded-for": "198.51.100.7", "x-probe": "first"})
        client.get("/some/url/b=2", headers={"x-forwarded-for": "198.51.100.7", "x-probe": "second"})

        record = store.take("198.51.100.7")
        assert ("x-probe", "first") in record.headers
        assert ("x-probe", "second") not in record.headers

    def test_redirect_target_is_bad_request(self, client, store):
        response = _get(client, "/some/url/308=ABCDEF0123456789")

        assert response.status_code == 400
        assert store.take("198.51.100.7").fields == [("308", "ABCDEF0123456789")]

    def test_signal_without_value_separator(self, client, store):
        response = _get(client, "/some/url/nonsense")

        assert response.status_code == 404
        assert len(store) == 0

    def test_empty_value_is_rejected(self, client, store):
        assert _get(client, "/some/url/plugins=").status_code == 404
        assert _get(client, "/some/url/=1").status_code == 404
        assert len(store) == 0


class TestHeaderPairs:
    def test_undecodable_value_is_opaque(self):
        request = Request({"type": "http", "headers": [(b"x-bad", b"\xff\xfe"), (b"host", b"a")]})

        assert list(_header_pairs(request)) == [("x-bad", "opaque"), ("host", "a")]

    def test_headers_not_decoded_for_open_episode(self, handler, store):
        handler.collect("k", "a", "1", [("host", "a")])
        consumed = []

        def headers():
            consumed.append(True)
            yield ("host", "b")

        handler.collect("k", "b", "2", headers())

        assert consumed == []
        assert store.take("k").headers == (("host", "a"),)


class TestRedirect:
    def test_permanent_redirect_with_token(self, client, store):
        response = _get(client, "/some/url/308")

        assert response.status_code == 308
        assert re.fullmatch(r"/some/url/308=[0-9A-F]{16}", response.headers["location"])
        assert len(store) == 0

    def test_tokens_differ(self, client):
        first = _get(client, "/some/url/308").headers["location"]
        second = _get(client, "/some/url/308").headers["location"]
        assert first != second


class TestHealth:
    def test_reports_open_episodes(self, client):
        _get(client, "/some/url/a=1")
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "episodes": 1}


class TestBuildHandler:
    def test_uses_settings(self):
        handler = build_handler(Settings(flush_delay_seconds=2.5, font_token="f", exporter="log"))

        assert handler.scheduler.delay_seconds == 2.5
        handler.store.upsert("k", ("f", "Arial"))
        assert handler.store.take("k").fonts == ["Arial"]
