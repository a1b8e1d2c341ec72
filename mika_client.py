"""MIKA thesis-submission API client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import requests

from config import Settings
from models import ThesisRecord
from normalizer import normalize_record

LOGGER = logging.getLogger(__name__)

DEFAULT_ORDER_BY: tuple[str, ...] = ("id_TA_proses_tugas_akhir|desc", "mahasiswa.nim|desc")

_ROW_KEYS = ("data", "results", "items")
_TOTAL_KEYS = ("_total", "total", "count")


class UpstreamError(RuntimeError):
    """Raised when the MIKA API cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class PageResult:
    """One fetched page: normalized rows plus the total reported upstream."""

    records: list[ThesisRecord]
    # Upstream value as sent (possibly a string); the row count only when absent.
    total: Any
    raw: Any = field(default=None, repr=False)


def fetch_page(
    settings: Settings,
    *,
    page: int = 1,
    limit: int = 5,
    offset: int = 0,
    order_by: Sequence[str] = DEFAULT_ORDER_BY,
) -> PageResult:
    """Fetch one page from the MIKA API and normalize its rows.

    Args:
        settings: Service configuration (API URL, token, timeout).
        page: Upstream page number, forwarded as-is.
        limit: Page size.
        offset: Number of rows to skip.
        order_by: Sort expressions, sent as order_by[0], order_by[1], ...

    Raises:
        UpstreamError: On transport failures or non-2xx responses.
    """
    params: dict[str, Any] = {"page": page, "limit": limit, "offset": offset}
    for index, value in enumerate(order_by):
        params[f"order_by[{index}]"] = value

    headers = {"Accept": "application/json"}
    if settings.token:
        headers["Authorization"] = f"Bearer {settings.token}"

    try:
        response = requests.get(
            settings.api_url,
            params=params,
            headers=headers,
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else 500
        message = _error_message(exc)
        LOGGER.warning("MIKA fetch failed: status=%s offset=%s limit=%s: %s", status, offset, limit, message)
        raise UpstreamError(message, status_code=status) from exc
    except requests.RequestException as exc:
        LOGGER.warning("MIKA fetch failed: offset=%s limit=%s: %s", offset, limit, exc)
        raise UpstreamError(str(exc) or "Failed to fetch data from MIKA.") from exc

    try:
        payload = response.json()
    except ValueError:
        LOGGER.warning("MIKA fetch: response body is not JSON, treating as empty page")
        payload = None

    rows = _extract_rows(payload)
    records = [normalize_record(row) for row in rows]
    total = _extract_total(payload, default=len(rows))

    LOGGER.info(
        "MIKA fetch: offset=%s limit=%s rows=%s total=%s",
        offset,
        limit,
        len(records),
        total,
    )
    return PageResult(records=records, total=total, raw=payload)


def _extract_rows(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        return []
    for key in _ROW_KEYS:
        value = payload.get(key)
        if value is not None:
            return value if isinstance(value, list) else []
    return []


def _extract_total(payload: Any, default: int) -> Any:
    # Passed through untouched; upstream totals are not reconciled with row counts.
    if isinstance(payload, dict):
        for key in _TOTAL_KEYS:
            value = payload.get(key)
            if value is not None:
                return value
    return default


def _error_message(exc: requests.HTTPError) -> str:
    if exc.response is not None:
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return str(exc) or "Failed to fetch data from MIKA."
