"""Export workflows shared by the HTTP routes and the CLI."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from config import Settings
from csv_sink import export_csv
from mika_client import DEFAULT_ORDER_BY, fetch_page
from models import ThesisRecord
from pagination import DEFAULT_DELAY_MS, collect_records

LOGGER = logging.getLogger(__name__)

EXPORTS_URL_PREFIX = "/exports"


def export_stamp(now: datetime | None = None) -> str:
    """UTC timestamp safe for filenames, e.g. 2026-10-18_09-15-02-417."""
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.strftime("%Y-%m-%d_%H-%M-%S-") + f"{moment.microsecond // 1000:03d}"


def export_filename(prefix: str, now: datetime | None = None) -> str:
    return f"{prefix}_{export_stamp(now)}.csv"


def save_page_csv(
    settings: Settings,
    *,
    page: int = 1,
    limit: int = 100,
    offset: int = 0,
    order_by: Sequence[str] = DEFAULT_ORDER_BY,
) -> dict[str, Any]:
    """Fetch a single page and write it to ta_<stamp>.csv."""
    result = fetch_page(settings, page=page, limit=limit, offset=offset, order_by=order_by)

    filename = export_filename("ta")
    export_csv(result.records, settings.export_dir / filename)

    return {
        "saved": True,
        "count": len(result.records),
        "file": filename,
        "download_url": f"{EXPORTS_URL_PREFIX}/{filename}",
        "tip": "Open the URL above in a browser to download the CSV.",
    }


def save_auto_csv(
    settings: Settings,
    *,
    target: int = 100,
    per_page: int = 25,
    start_offset: int = 0,
    order_by: Sequence[str] = DEFAULT_ORDER_BY,
    delay_ms: float = DEFAULT_DELAY_MS,
) -> dict[str, Any]:
    """Collect up to `target` rows across pages, then write ta_auto_<count>_<stamp>.csv.

    The file is written only after collection finishes, so an upstream failure
    mid-loop leaves nothing behind.
    """

    def fetch(offset: int, limit: int) -> list[ThesisRecord]:
        # Offset drives paging; the page number stays at 1.
        return fetch_page(settings, page=1, limit=limit, offset=offset, order_by=order_by).records

    result = collect_records(
        fetch,
        target=target,
        per_page=per_page,
        start_offset=start_offset,
        delay_ms=delay_ms,
    )

    filename = export_filename(f"ta_auto_{len(result.records)}")
    export_csv(result.records, settings.export_dir / filename)
    LOGGER.info(
        "Auto export: file=%s count=%s target=%s attempts=%s",
        filename,
        len(result.records),
        target,
        result.attempts,
    )

    return {
        "saved": True,
        "requested_target": target,
        "per_page": per_page,
        "count": len(result.records),
        "file": filename,
        "download_url": f"{EXPORTS_URL_PREFIX}/{filename}",
        "attempts": result.attempts,
        "tip": "Open download_url to download the CSV.",
    }
