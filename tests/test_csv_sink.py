from __future__ import annotations

import codecs
import csv
from pathlib import Path
from unittest.mock import patch

import pytest

import csv_sink
from models import CSV_FIELDS, ThesisRecord

SAMPLE_RECORDS = [
    ThesisRecord(
        nim="211110001",
        nama="Budi Santoso",
        judul_indonesia="Analisis Sentimen, Ulasan \"Produk\"",
        judul_inggris="Sentiment Analysis of Product Reviews",
        status="Disetujui",
        judul_tugas_akhir_program_studi="Analisis Sentimen",
        jenis_jalur="Skripsi",
    ),
    ThesisRecord(nim="211110002", nama="Ani", status=None),
    ThesisRecord(),
]


def _read_rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8-sig") as fh:
        return list(csv.DictReader(fh))


def test_export_csv_writes_bom_and_header(tmp_path: Path) -> None:
    path = csv_sink.export_csv([], tmp_path / "empty.csv")

    raw = path.read_bytes()
    assert raw.startswith(codecs.BOM_UTF8)
    header = raw[len(codecs.BOM_UTF8):].decode("utf-8").splitlines()[0]
    assert header == ",".join(CSV_FIELDS)


def test_export_csv_round_trip_preserves_values_and_order(tmp_path: Path) -> None:
    path = csv_sink.export_csv(SAMPLE_RECORDS, tmp_path / "out.csv")
    rows = _read_rows(path)

    assert len(rows) == len(SAMPLE_RECORDS)
    for row, record in zip(rows, SAMPLE_RECORDS):
        expected = {k: ("" if v is None else v) for k, v in record.as_dict().items()}
        assert row == expected


def test_export_csv_quotes_commas_and_quotes(tmp_path: Path) -> None:
    path = csv_sink.export_csv(SAMPLE_RECORDS[:1], tmp_path / "quoted.csv")
    text = path.read_text(encoding="utf-8-sig")
    assert '"Analisis Sentimen, Ulasan ""Produk"""' in text


def test_export_csv_overwrites_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "out.csv"
    csv_sink.export_csv(SAMPLE_RECORDS, path)
    csv_sink.export_csv(SAMPLE_RECORDS[:1], path)

    assert len(_read_rows(path)) == 1


def test_export_csv_creates_parent_directory(tmp_path: Path) -> None:
    path = csv_sink.export_csv(SAMPLE_RECORDS, tmp_path / "nested" / "dir" / "out.csv")
    assert path.exists()


def test_export_csv_wraps_encoding_failures(tmp_path: Path) -> None:
    with patch.object(csv.DictWriter, "writerow", side_effect=csv.Error("bad row")):
        with pytest.raises(csv_sink.SerializationError, match="bad row"):
            csv_sink.export_csv(SAMPLE_RECORDS, tmp_path / "broken.csv")


def test_export_csv_failure_leaves_no_file_behind(tmp_path: Path) -> None:
    path = tmp_path / "broken.csv"
    with patch.object(csv.DictWriter, "writerow", side_effect=csv.Error("bad row")):
        with pytest.raises(csv_sink.SerializationError):
            csv_sink.export_csv([ThesisRecord()], path)

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_export_csv_failure_keeps_previous_file_intact(tmp_path: Path) -> None:
    path = csv_sink.export_csv(SAMPLE_RECORDS, tmp_path / "out.csv")
    with patch.object(csv.DictWriter, "writerow", side_effect=csv.Error("bad row")):
        with pytest.raises(csv_sink.SerializationError):
            csv_sink.export_csv(SAMPLE_RECORDS[:1], path)

    assert len(_read_rows(path)) == len(SAMPLE_RECORDS)
