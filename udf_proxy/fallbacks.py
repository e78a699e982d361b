"""Substitute responses for each UDF operation when the upstream is unavailable.

The chart widget polls these endpoints and stops on anything it cannot parse,
so every operation except ``search`` degrades to a valid 200 payload. ``search``
forwards the upstream's own status and body.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, List

from fastapi.responses import JSONResponse, PlainTextResponse, Response

from udf_proxy.gateway import UpstreamFailure

NO_DATA = {"s": "no_data"}
SUPPORTED_RESOLUTIONS: List[str] = ["D", "W", "M"]

FALLBACK_CONFIG = {
    "supports_search": True,
    "supports_group_request": False,
    "supports_marks": False,
    "supports_timescale_marks": False,
    "supports_time": True,
    "exchanges": [{"value": "", "name": "All", "desc": ""}],
    "symbols_types": [{"name": "All", "value": ""}],
    "supported_resolutions": SUPPORTED_RESOLUTIONS,
}

VN_SESSION = "0900-1130,1300-1500"
VN_TIMEZONE = "Asia/Ho_Chi_Minh"
VN_EXCHANGE = "VN"

FallbackHandler = Callable[[UpstreamFailure, str], Response]


def fallback_symbol_info(symbol: str) -> Dict[str, object]:
    return {
        "name": symbol,
        "ticker": symbol,
        "description": symbol,
        "type": "index",
        "session": VN_SESSION,
        "timezone": VN_TIMEZONE,
        "exchange": VN_EXCHANGE,
        "minmov": 1,
        "pricescale": 100,
        "has_intraday": False,
        "supported_resolutions": list(SUPPORTED_RESOLUTIONS),
        "has_no_volume": False,
    }


def server_time_text() -> str:
    return str(int(time.time()))


def _config(failure: UpstreamFailure, symbol: str) -> Response:
    return JSONResponse(FALLBACK_CONFIG, status_code=200)


def _symbols(failure: UpstreamFailure, symbol: str) -> Response:
    return JSONResponse(fallback_symbol_info(symbol), status_code=200)


def _history(failure: UpstreamFailure, symbol: str) -> Response:
    return JSONResponse(NO_DATA, status_code=200)


def _time(failure: UpstreamFailure, symbol: str) -> Response:
    return PlainTextResponse(server_time_text(), status_code=200)


def _search(failure: UpstreamFailure, symbol: str) -> Response:
    if failure.status is None:
        return JSONResponse({"error": "Proxy error"}, status_code=500)
    return Response(
        content=failure.raw,
        status_code=failure.status,
        media_type=failure.content_type or "application/json",
    )


def _timescale_marks(failure: UpstreamFailure, symbol: str) -> Response:
    return JSONResponse([], status_code=200)


FALLBACK_POLICIES: Dict[str, FallbackHandler] = {
    "config": _config,
    "symbols": _symbols,
    "history": _history,
    "time": _time,
    "search": _search,
    "timescale_marks": _timescale_marks,
}


def apply_fallback(operation: str, failure: UpstreamFailure, symbol: str = "") -> Response:
    return FALLBACK_POLICIES[operation](failure, symbol)
