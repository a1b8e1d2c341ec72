"""Map raw MIKA submission objects onto the canonical ThesisRecord shape."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from models import ThesisRecord

_LINE_BREAKS = re.compile(r"[\r\n]+")

Accessor = Callable[[dict[str, Any]], Any]


def _top(key: str) -> Accessor:
    return lambda raw: raw.get(key)


def _student(key: str) -> Accessor:
    def accessor(raw: dict[str, Any]) -> Any:
        student = raw.get("mahasiswa")
        return student.get(key) if isinstance(student, dict) else None

    return accessor


# Candidate accessors per output field, highest priority first.
FIELD_SOURCES: dict[str, tuple[Accessor, ...]] = {
    "nim": (_student("nim"), _top("nim")),
    "nama": (_student("nama"), _top("nama")),
    "judul_indonesia": (
        _top("judul_indonesia"),
        _top("judul_id"),
        _top("judul_bahasa_indonesia"),
    ),
    "judul_inggris": (
        _top("judul_inggris"),
        _top("judul_en"),
        _top("judul_bahasa_inggris"),
    ),
    "status": (
        _top("status"),
        _top("keterangan_status"),
        _top("status_proses"),
        _top("ket_status"),
    ),
    "judul_tugas_akhir_program_studi": (
        _top("judul_tugas_akhir_program_studi"),
        _top("judul_tugas_akhir"),
        _top("judul_usulan"),
        _top("judul"),
    ),
    "jenis_jalur": (
        _top("jenis_jalur"),
        _top("jalur"),
        _top("jenis_tugas_akhir"),
        _top("program"),
    ),
}

# nim is an identifier: stringified but never reflowed.
_UNCLEANED_FIELDS: frozenset[str] = frozenset({"nim"})


def clean_text(value: Any) -> str | None:
    """Collapse CR/LF runs into one space and trim; empty input becomes None."""
    if value is None or value == "":
        return None
    text = _LINE_BREAKS.sub(" ", str(value)).strip()
    return text or None


def normalize_record(raw: Any) -> ThesisRecord:
    """Build a ThesisRecord from one raw upstream object.

    Never raises: anything that is not a dict is treated as an empty object,
    and every field without a usable source value is None.
    """
    source = raw if isinstance(raw, dict) else {}

    values: dict[str, str | None] = {}
    for field, accessors in FIELD_SOURCES.items():
        picked = _first_present(source, accessors)
        if field in _UNCLEANED_FIELDS:
            values[field] = str(picked) if picked else None
        else:
            values[field] = clean_text(picked)

    return ThesisRecord(**values)


def _first_present(raw: dict[str, Any], accessors: tuple[Accessor, ...]) -> Any:
    for accessor in accessors:
        value = accessor(raw)
        if value:
            return value
    return None
