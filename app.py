"""HTTP surface: JSON relay of MIKA pages plus CSV export endpoints."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import Settings
from csv_sink import SerializationError
from exports import EXPORTS_URL_PREFIX, save_auto_csv, save_page_csv
from mika_client import DEFAULT_ORDER_BY, UpstreamError, fetch_page
from pagination import DEFAULT_DELAY_MS, build_next_url

LOGGER = logging.getLogger(__name__)

ORDER_BY_PARAM = "order_by[]"


def create_app(settings: Settings) -> FastAPI:
    """Build the FastAPI application bound to one Settings instance."""
    settings.export_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="mika-ta-export",
        description="Relay and CSV export of MIKA thesis-submission records",
        version="0.1.0",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            LOGGER.info(
                '%s "%s %s" %s %.1fms',
                request.client.host if request.client else "-",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
            )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(_request: Request, exc: UpstreamError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(SerializationError)
    async def serialization_error_handler(_request: Request, exc: SerializationError) -> JSONResponse:
        LOGGER.error("CSV export failed: %s", exc)
        return _error_response(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(422, _validation_message(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error on %s: %s", request.url.path, exc)
        return _error_response(500, str(exc) or "Unexpected error while processing the request.")

    @app.get("/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/scrape")
    def scrape(
        page: int = 1,
        limit: int = 5,
        offset: int = 0,
        order_by: list[str] | None = Query(None, alias=ORDER_BY_PARAM),
    ) -> dict[str, Any]:
        sort_keys = order_by or list(DEFAULT_ORDER_BY)
        result = fetch_page(settings, page=page, limit=limit, offset=offset, order_by=sort_keys)
        next_url = build_next_url(
            settings.api_url,
            page=page,
            limit=limit,
            offset=offset,
            order_by=sort_keys,
        )
        return {
            "data": [record.as_dict() for record in result.records],
            "_total": result.total,
            "_pagination": {"_next": next_url},
        }

    @app.get("/scrape/save-csv")
    def save_csv(
        page: int = 1,
        limit: int = 100,
        offset: int = 0,
        order_by: list[str] | None = Query(None, alias=ORDER_BY_PARAM),
    ) -> dict[str, Any]:
        return save_page_csv(
            settings,
            page=page,
            limit=limit,
            offset=offset,
            order_by=order_by or list(DEFAULT_ORDER_BY),
        )

    @app.get("/scrape/save-csv-auto")
    def save_csv_auto(
        target: int = 100,
        per_page: int = 25,
        start_offset: int = 0,
        delay: float = DEFAULT_DELAY_MS,
        order_by: list[str] | None = Query(None, alias=ORDER_BY_PARAM),
    ) -> dict[str, Any]:
        return save_auto_csv(
            settings,
            target=max(1, target),
            per_page=max(1, per_page),
            start_offset=max(0, start_offset),
            order_by=order_by or list(DEFAULT_ORDER_BY),
            delay_ms=max(0.0, delay),
        )

    app.mount(EXPORTS_URL_PREFIX, StaticFiles(directory=settings.export_dir), name="exports")
    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": True, "message": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "query")
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request parameters."
