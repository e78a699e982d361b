"""Outbound calls to the market-data backend's ``/api/tv/*`` endpoints."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Optional, Sequence, Tuple, Union

import requests

logger = logging.getLogger(__name__)

OPERATIONS = ("config", "symbols", "search", "history", "time", "timescale_marks")

_UPSTREAM_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-store",
}


@dataclass(frozen=True)
class UpstreamOk:
    status: int
    body: Any
    ok: bool = True


@dataclass(frozen=True)
class UpstreamFailure:
    """The upstream could not be used.

    ``status`` is ``None`` when no HTTP response was received at all.
    """

    reason: str
    status: Optional[int] = None
    raw: bytes = b""
    content_type: Optional[str] = None
    ok: bool = False


UpstreamResult = Union[UpstreamOk, UpstreamFailure]


def _reject_constant(token: str):
    raise ValueError(f"Non-standard JSON constant: {token}")


class UpstreamGateway:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def url_for(self, operation: str) -> str:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown UDF operation: {operation!r}")
        return f"{self.base_url}/api/tv/{operation}"

    def fetch(
        self,
        operation: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        *,
        expect: str = "json",
    ) -> UpstreamResult:
        url = self.url_for(operation)
        try:
            http = self.session or requests
            resp = http.get(
                url,
                params=list(params or []),
                headers=_UPSTREAM_HEADERS,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.error(
                "Upstream /api/tv/%s timed out: %s",
                operation,
                exc,
                extra={"operation": operation, "reason": "timeout"},
            )
            return UpstreamFailure(reason="timeout")
        except requests.RequestException as exc:
            logger.error(
                "Upstream /api/tv/%s unreachable: %s",
                operation,
                exc,
                extra={"operation": operation, "reason": "network"},
            )
            return UpstreamFailure(reason="network")

        content_type = resp.headers.get("content-type")
        if not 200 <= resp.status_code < 300:
            logger.warning(
                "Upstream /api/tv/%s not OK: %s",
                operation,
                resp.status_code,
                extra={"operation": operation, "reason": "status", "upstream_status": resp.status_code},
            )
            return UpstreamFailure(
                reason="status",
                status=resp.status_code,
                raw=resp.content or b"",
                content_type=content_type,
            )

        if expect == "text":
            return UpstreamOk(status=resp.status_code, body=resp.text)

        try:
            body = json.loads(resp.content, parse_constant=_reject_constant)
        except ValueError:
            logger.warning(
                "Upstream /api/tv/%s returned non-JSON body",
                operation,
                extra={"operation": operation, "reason": "decode", "upstream_status": resp.status_code},
            )
            return UpstreamFailure(
                reason="decode",
                status=resp.status_code,
                raw=resp.content or b"",
                content_type=content_type,
            )
        return UpstreamOk(status=resp.status_code, body=body)
