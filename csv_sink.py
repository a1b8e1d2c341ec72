"""CSV file sink for thesis-submission exports."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

from models import CSV_FIELDS, ThesisRecord

LOGGER = logging.getLogger(__name__)

# utf-8-sig writes the byte-order mark so spreadsheet tools detect UTF-8.
CSV_ENCODING = "utf-8-sig"


class SerializationError(RuntimeError):
    """Raised when records cannot be encoded as CSV."""


def export_csv(records: Iterable[ThesisRecord], path: str | Path) -> Path:
    """Write records to `path` as CSV, replacing any existing file.

    The header always lists CSV_FIELDS in order; None values become empty cells.
    Rows go to a sibling .part file that only replaces `path` once complete.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(f"{path.name}.part")

    count = 0
    try:
        with partial.open("w", newline="", encoding=CSV_ENCODING) as fh:
            writer = csv.DictWriter(fh, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for record in records:
                writer.writerow(record.as_dict())
                count += 1
    except (csv.Error, TypeError, ValueError) as exc:
        partial.unlink(missing_ok=True)
        raise SerializationError(f"Could not write CSV row {count + 1} to {path}: {exc}") from exc
    except OSError:
        partial.unlink(missing_ok=True)
        raise

    partial.replace(path)
    LOGGER.info("Wrote %s CSV rows to %s", count, path)
    return path
