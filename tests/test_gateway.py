from __future__ import annotations

import pytest
import requests

from udf_proxy.gateway import UpstreamFailure, UpstreamGateway, UpstreamOk

from fakes import UPSTREAM, FakeResponse, FakeSession


@pytest.fixture
def gateway(upstream: FakeSession) -> UpstreamGateway:
    return UpstreamGateway(UPSTREAM + "/", timeout=3.0, session=upstream)


def test_fetch_builds_url_and_sends_no_store(gateway, upstream) -> None:
    upstream.reply("history", FakeResponse(200, {"s": "ok", "t": [1], "c": [1.0]}))

    result = gateway.fetch("history", [("symbol", "FPT"), ("resolution", "D")])

    assert result == UpstreamOk(status=200, body={"s": "ok", "t": [1], "c": [1.0]})
    call = upstream.calls[-1]
    assert call["url"] == "http://upstream.test/api/tv/history"
    assert call["params"] == [("symbol", "FPT"), ("resolution", "D")]
    assert call["headers"]["Cache-Control"] == "no-store"
    assert call["timeout"] == 3.0


def test_fetch_text_returns_raw_body(gateway, upstream) -> None:
    upstream.reply("time", FakeResponse(200, "1712345678", content_type="text/plain"))

    result = gateway.fetch("time", expect="text")

    assert isinstance(result, UpstreamOk)
    assert result.body == "1712345678"


@pytest.mark.parametrize(
    "reply, reason",
    [
        (requests.ConnectionError("refused"), "network"),
        (requests.Timeout("slow"), "timeout"),
    ],
)
def test_transport_errors_become_failures(gateway, upstream, reply, reason) -> None:
    upstream.reply("config", reply)

    result = gateway.fetch("config")

    assert isinstance(result, UpstreamFailure)
    assert result.ok is False
    assert result.reason == reason
    assert result.status is None


def test_non_2xx_keeps_status_and_raw_body(gateway, upstream) -> None:
    upstream.reply("search", FakeResponse(503, b'{"s":"error"}'))

    result = gateway.fetch("search", [("query", "FPT")])

    assert isinstance(result, UpstreamFailure)
    assert result.reason == "status"
    assert result.status == 503
    assert result.raw == b'{"s":"error"}'
    assert result.content_type == "application/json"


def test_malformed_json_is_a_failure(gateway, upstream) -> None:
    upstream.reply("symbols", FakeResponse(200, "<html>oops</html>", content_type="text/html"))

    result = gateway.fetch("symbols", [("symbol", "FPT")])

    assert isinstance(result, UpstreamFailure)
    assert result.reason == "decode"
    assert result.status == 200


def test_unknown_operation_is_rejected(gateway) -> None:
    with pytest.raises(ValueError):
        gateway.fetch("quotes")


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_json_constants_are_a_failure(gateway, upstream, token) -> None:
    upstream.reply("history", FakeResponse(200, '{"s":"ok","t":[1],"c":[%s]}' % token))

    result = gateway.fetch("history", [("symbol", "FPT")])

    assert isinstance(result, UpstreamFailure)
    assert result.reason == "decode"


def test_default_gateway_uses_a_fresh_request_per_call(monkeypatch) -> None:
    seen = []

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.append(dict(headers or {}))
        reply = FakeResponse(200, {"s": "no_data"})
        reply.headers["set-cookie"] = "sid=client-a; Path=/"
        return reply

    monkeypatch.setattr(requests, "get", fake_get)
    gateway = UpstreamGateway(UPSTREAM, timeout=3.0)

    first = gateway.fetch("history", [("symbol", "FPT")])
    second = gateway.fetch("history", [("symbol", "VNM")])

    assert isinstance(first, UpstreamOk)
    assert isinstance(second, UpstreamOk)
    assert gateway.session is None
    assert len(seen) == 2
    assert all("Cookie" not in headers for headers in seen)
