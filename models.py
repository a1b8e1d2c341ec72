"""Shared typed models for the export service."""

from __future__ import annotations

from dataclasses import dataclass

# Column order for every CSV export.
CSV_FIELDS: tuple[str, ...] = (
    "nim",
    "nama",
    "judul_indonesia",
    "judul_inggris",
    "status",
    "judul_tugas_akhir_program_studi",
    "jenis_jalur",
)


@dataclass(frozen=True, slots=True)
class ThesisRecord:
    """Normalized thesis-submission record returned by the upstream API."""

    nim: str | None = None
    nama: str | None = None
    judul_indonesia: str | None = None
    judul_inggris: str | None = None
    status: str | None = None
    judul_tugas_akhir_program_studi: str | None = None
    jenis_jalur: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {field: getattr(self, field) for field in CSV_FIELDS}
