"""
Export writers for selected files: plain-text report, CSV and Excel.
"""
import csv
import io
from datetime import datetime
from typing import Any, Dict, List, Optional

import openpyxl

from ..api.exceptions import InvalidInputError
from ..domain.value_objects import ArchiveStatus
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# format -> (content type, download filename template)
EXPORT_FORMATS = {
    "txt": ("text/plain; charset=utf-8", "DocuDigitize-Export-{stamp}.txt"),
    "csv": ("text/csv; charset=utf-8", "DocuDigitize-Export-{stamp}.csv"),
    "xlsx": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "DocuDigitize-Excel-Export-{stamp}.xlsx",
    ),
}

CSV_FIXED_HEADERS = [
    "originalFilename",
    "uploadedBy",
    "createdAt",
    "Σύνοψη",
    "Πρωτότυπο Κείμενο",
    "Πρωτότυπη Γλώσσα",
    "Μετάφραση (Αγγλικά)",
    "Μετάφραση (Ελληνικά)",
]

# Excel lists only the archive columns
XLSX_HEADERS = ["Όνομα Αρχείου", "Χρήστης", "Ημερομηνία Εισαγωγής"]
SEPARATOR = "=" * 50


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        # Stored timestamps end in "Z"
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: Optional[str]) -> str:
    parsed = _parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d %H:%M:%S") if parsed else (value or "")


def format_date(value: Optional[str]) -> str:
    parsed = _parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d") if parsed else (value or "")


def export_filename(export_format: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return EXPORT_FORMATS[export_format][1].format(stamp=stamp)


def _require_files(files: List[Dict[str, Any]]):
    if not files:
        raise InvalidInputError("Select at least one file to export")


def export_txt(files: List[Dict[str, Any]], exported_at: Optional[datetime] = None) -> str:
    """Human-readable report with metadata, summary, translations and full OCR text per file."""
    _require_files(files)
    moment = exported_at or datetime.now()
    parts = [
        "DocuDigitize AI - Export\n",
        f"Exported on: {moment.strftime('%Y-%m-%d %H:%M:%S')}\n",
        f"Total Files: {len(files)}\n\n",
    ]
    for f in files:
        metadata_lines = "\n".join(f"- {key}: {value}" for key, value in (f.get("metadata") or {}).items())
        parts.append(f"{SEPARATOR}\nFILE: {f.get('originalFilename', '')}\n{SEPARATOR}\n\n")
        parts.append("--- METADATA ---\n")
        parts.append(f"Original Filename: {f.get('originalFilename', '')}\n")
        parts.append(f"Uploaded By: {f.get('uploadedBy', '')}\n")
        parts.append(f"Created At: {format_timestamp(f.get('createdAt'))}\n\n")
        parts.append(f"Metadata:\n{metadata_lines}\n\n")
        parts.append(f"--- SUMMARY (Greek) ---\n{f.get('summary', '')}\n\n")
        if f.get("translationEn"):
            parts.append(f"--- TRANSLATION (English) ---\n{f['translationEn']}\n\n")
        if f.get("translationGr"):
            parts.append(f"--- TRANSLATION (Greek) ---\n{f['translationGr']}\n\n")
        parts.append(f"--- FULL OCR TEXT ---\n{f.get('ocrText', '')}\n\n\n")
    return "".join(parts)


def export_csv(files: List[Dict[str, Any]], metadata_titles: List[Dict[str, Any]]) -> str:
    """CSV with fixed columns followed by one column per current metadata field. Every cell is quoted."""
    _require_files(files)
    title_names = [t.get("name", "") for t in metadata_titles]
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_FIXED_HEADERS + title_names)
    for f in files:
        # Metadata columns follow the current titles; missing values stay empty
        metadata = f.get("metadata") or {}
        writer.writerow([
            f.get("originalFilename") or "",
            f.get("uploadedBy") or "",
            format_timestamp(f.get("createdAt")),
            f.get("summary") or "",
            f.get("ocrText") or "",
            f.get("originalLanguage") or "",
            f.get("translationEn") or "",
            f.get("translationGr") or "",
        ] + [metadata.get(name) or "" for name in title_names])
    return buffer.getvalue()


def export_xlsx(files: List[Dict[str, Any]]) -> bytes:
    """Excel workbook listing filename, uploader and import date of the selected 'keep' files."""
    _require_files(files)
    kept = [f for f in files if f.get("archiveStatus", ArchiveStatus.KEEP.value) == ArchiveStatus.KEEP.value]
    if not kept:
        raise InvalidInputError("None of the selected files is kept in the archive")

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Export"
    sheet.append(XLSX_HEADERS)
    for f in kept:
        sheet.append([f.get("originalFilename") or "", f.get("uploadedBy") or "", format_date(f.get("createdAt"))])

    # Serialize in memory for the download response
    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.info(f"Exported {len(kept)} file(s) to xlsx")
    return buffer.getvalue()
