from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional

import requests
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from udf_proxy.config import Settings
from udf_proxy.fallbacks import apply_fallback
from udf_proxy.gateway import UpstreamFailure, UpstreamGateway, UpstreamOk
from udf_proxy.log import setup_logging
from udf_proxy.params import normalize_history_params, normalize_symbol

logger = logging.getLogger(__name__)

_NO_STORE = {"Cache-Control": "no-store"}


def _no_store(resp: Response) -> Response:
    resp.headers.update(_NO_STORE)
    return resp


def _is_epoch_text(text: str) -> bool:
    value = text.strip()
    return value.isascii() and value.isdigit()


def build_udf_router(gateway: UpstreamGateway) -> APIRouter:
    """Routes implementing the UDF datafeed contract on top of ``gateway``."""
    router = APIRouter(prefix="/tv", tags=["udf"])

    @router.get("/config")
    def udf_config(request: Request):
        result = gateway.fetch("config", request.query_params.multi_items())
        if isinstance(result, UpstreamOk):
            return _no_store(JSONResponse(result.body))
        logger.warning("Using fallback config (%s)", result.reason)
        return _no_store(apply_fallback("config", result))

    @router.get("/symbols")
    def udf_symbols(symbol: Optional[str] = Query(None)):
        sym = normalize_symbol(symbol)
        result = gateway.fetch("symbols", [("symbol", sym)])
        if isinstance(result, UpstreamOk):
            return _no_store(JSONResponse(result.body))
        logger.warning("Using fallback symbol info for %s (%s)", sym, result.reason)
        return _no_store(apply_fallback("symbols", result, sym))

    @router.get("/search")
    def udf_search(request: Request):
        result = gateway.fetch("search", request.query_params.multi_items())
        if isinstance(result, UpstreamOk):
            return _no_store(JSONResponse(result.body, status_code=result.status))
        return _no_store(apply_fallback("search", result))

    @router.get("/history")
    def udf_history(request: Request):
        params = normalize_history_params(request.query_params.multi_items())
        result = gateway.fetch("history", params)
        if isinstance(result, UpstreamOk):
            return _no_store(JSONResponse(result.body, status_code=200))
        logger.warning("Returning no_data for history (%s)", result.reason)
        return _no_store(apply_fallback("history", result))

    @router.get("/time")
    def udf_time():
        result = gateway.fetch("time", expect="text")
        if isinstance(result, UpstreamOk) and _is_epoch_text(result.body):
            return _no_store(PlainTextResponse(result.body, status_code=200))
        if isinstance(result, UpstreamOk):
            logger.warning("Upstream time is not an epoch value: %r", result.body[:64])
            result = UpstreamFailure(reason="decode", status=result.status, raw=result.body.encode("utf-8"))
        return _no_store(apply_fallback("time", result))

    @router.get("/timescale_marks")
    def udf_timescale_marks(request: Request):
        result = gateway.fetch("timescale_marks", request.query_params.multi_items())
        if isinstance(result, UpstreamOk):
            return _no_store(JSONResponse(result.body))
        return _no_store(apply_fallback("timescale_marks", result))

    return router


def create_app(
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings)

    gateway = UpstreamGateway(
        settings.api_base_url,
        timeout=settings.upstream_timeout,
        session=session,
    )

    app = FastAPI(title="UDF Datafeed Proxy")
    app.state.settings = settings
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health():
        return {
            "status": "ok",
            "ts": datetime.now(timezone.utc).isoformat(),
            "upstream": settings.api_base_url,
        }

    app.include_router(build_udf_router(gateway))
    logger.info("UDF proxy forwarding to %s", settings.api_base_url)
    return app
