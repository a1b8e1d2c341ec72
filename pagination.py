"""Offset pagination helpers: the advisory next link and the batch collector."""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import urlencode

from models import ThesisRecord

LOGGER = logging.getLogger(__name__)

MAX_REQUESTS = 50
DEFAULT_DELAY_MS = 100

# Empty-valued parameter the upstream itself puts in its own next links.
NEXT_LINK_MARKER = "/api/v1/TA-pengajuan-tugas-akhir-detail"

FetchBatch = Callable[[int, int], Sequence[ThesisRecord]]


def build_next_url(
    base_url: str,
    *,
    page: int = 1,
    limit: int = 5,
    offset: int = 0,
    order_by: Sequence[str] = (),
) -> str:
    """Return the follow-up query URL reported to API callers as _pagination._next.

    Mirrors the upstream's own link format: the API path appears as an empty
    marker parameter, and sort keys without a direction get "|desc".
    """
    next_offset = int(offset) + int(limit)
    sort_keys = [_with_direction(str(value)) for value in order_by]

    params: list[tuple[str, str]] = [
        ("offset", str(next_offset)),
        ("limit", str(limit)),
        (NEXT_LINK_MARKER, ""),
        ("page", str(page)),
    ]
    params.extend(("order_by[]", value) for value in sort_keys)
    return f"{base_url}?{urlencode(params)}"


def _with_direction(value: str) -> str:
    if "|" in value or "%7c" in value.lower():
        return value
    return f"{value}|desc"


class StopReason(enum.Enum):
    TARGET_REACHED = "target_reached"
    EMPTY_BATCH = "empty_batch"
    SHORT_BATCH = "short_batch"
    ATTEMPT_CAP = "attempt_cap"


@dataclass(frozen=True, slots=True)
class CollectionResult:
    records: list[ThesisRecord]
    attempts: int
    stop_reason: StopReason


class PageCollector:
    """Accumulate batches until the target, the end of data, or the request cap.

    Each call to step() performs exactly one fetch and returns the StopReason
    once the loop is finished, or None while more batches are wanted.
    """

    def __init__(
        self,
        fetch: FetchBatch,
        *,
        target: int,
        per_page: int,
        start_offset: int = 0,
        delay_ms: float = DEFAULT_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
        max_requests: int = MAX_REQUESTS,
    ) -> None:
        self._fetch = fetch
        self._sleep = sleep
        self.target = target
        self.per_page = per_page
        self.delay_ms = delay_ms
        self.max_requests = max_requests
        self.offset = start_offset
        self.attempts = 0
        self.records: list[ThesisRecord] = []
        self.stop_reason: StopReason | None = None

    def check_limits(self) -> StopReason | None:
        """Guard evaluated before every fetch."""
        if len(self.records) >= self.target:
            return StopReason.TARGET_REACHED
        if self.attempts >= self.max_requests:
            return StopReason.ATTEMPT_CAP
        return None

    def step(self) -> StopReason | None:
        self.attempts += 1
        batch = list(self._fetch(self.offset, self.per_page))
        LOGGER.debug(
            "Collector: attempt=%s offset=%s batch=%s collected=%s",
            self.attempts,
            self.offset,
            len(batch),
            len(self.records),
        )

        if not batch:
            return StopReason.EMPTY_BATCH

        for record in batch:
            if len(self.records) >= self.target:
                break
            self.records.append(record)

        self.offset += self.per_page
        self._sleep(self.delay_ms / 1000)

        if len(batch) < self.per_page:
            return StopReason.SHORT_BATCH
        return None

    def run(self) -> CollectionResult:
        while self.stop_reason is None:
            self.stop_reason = self.check_limits() or self.step()

        LOGGER.info(
            "Collector finished: collected=%s target=%s attempts=%s reason=%s",
            len(self.records),
            self.target,
            self.attempts,
            self.stop_reason.value,
        )
        return CollectionResult(
            records=self.records,
            attempts=self.attempts,
            stop_reason=self.stop_reason,
        )


def collect_records(
    fetch: FetchBatch,
    *,
    target: int,
    per_page: int,
    start_offset: int = 0,
    delay_ms: float = DEFAULT_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
    max_requests: int = MAX_REQUESTS,
) -> CollectionResult:
    """Fetch consecutive offset windows until `target` records are collected.

    Args:
        fetch: Called as fetch(offset, limit); returns one batch of records.
        target: Maximum number of records to return.
        per_page: Window size per request.
        start_offset: Offset of the first window.
        delay_ms: Fixed pause after every non-empty batch.
        sleep: Sleep function, replaceable in tests.
        max_requests: Hard cap on the number of fetches.
    """
    collector = PageCollector(
        fetch,
        target=target,
        per_page=per_page,
        start_offset=start_offset,
        delay_ms=delay_ms,
        sleep=sleep,
        max_requests=max_requests,
    )
    return collector.run()
