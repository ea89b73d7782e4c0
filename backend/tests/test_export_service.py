import csv
import io
from datetime import datetime

import openpyxl
import pytest

from docudigitize.api.exceptions import InvalidInputError
from docudigitize.services.export_service import (
    CSV_FIXED_HEADERS,
    export_csv,
    export_filename,
    export_txt,
    export_xlsx,
)

FILES = [
    {
        "id": "f1",
        "originalFilename": "epistoli.png",
        "uploadedBy": "Maria",
        "createdAt": "2024-05-01T10:02:03.000Z",
        "summary": "Επιστολή προς τον δήμαρχο.",
        "ocrText": "Αξιότιμε κύριε Δήμαρχε,",
        "originalLanguage": "Ελληνικά",
        "translationEn": "Dear Mr Mayor,",
        "metadata": {"Date": "1932", "Author": "Ν. Παππάς"},
        "archiveStatus": "keep",
    },
    {
        "id": "f2",
        "originalFilename": "receipt.pdf",
        "uploadedBy": "Giorgos",
        "createdAt": "2024-05-02T08:00:00.000Z",
        "summary": "Απόδειξη.",
        "ocrText": "Receipt, \"paid\"",
        "originalLanguage": "Αγγλικά",
        "metadata": {"Date": "1950"},
        "archiveStatus": "exclude",
    },
]

TITLES = [{"id": "t1", "name": "Date"}, {"id": "t2", "name": "Author"}, {"id": "t3", "name": "Location"}]


def test_txt_report_sections():
    report = export_txt(FILES, exported_at=datetime(2024, 6, 1, 12, 0, 0))

    assert report.startswith("DocuDigitize AI - Export\nExported on: 2024-06-01 12:00:00\nTotal Files: 2\n")
    assert "FILE: epistoli.png" in report
    assert "Created At: 2024-05-01 10:02:03" in report
    assert "- Author: Ν. Παππάς" in report
    assert "--- TRANSLATION (English) ---\nDear Mr Mayor," in report
    assert report.count("--- TRANSLATION (English) ---") == 1
    assert "--- TRANSLATION (Greek) ---" not in report
    assert "--- FULL OCR TEXT ---\nReceipt, \"paid\"" in report


def test_csv_has_fixed_and_field_columns():
    body = export_csv(FILES, TITLES)
    rows = list(csv.reader(io.StringIO(body)))

    assert rows[0] == CSV_FIXED_HEADERS + ["Date", "Author", "Location"]
    assert rows[1][:3] == ["epistoli.png", "Maria", "2024-05-01 10:02:03"]
    assert rows[1][-3:] == ["1932", "Ν. Παππάς", ""]
    assert rows[2][4] == "Receipt, \"paid\""
    assert rows[2][6] == ""
    assert body.splitlines()[0].startswith('"originalFilename","uploadedBy"')


def test_xlsx_lists_kept_files_only():
    workbook = openpyxl.load_workbook(io.BytesIO(export_xlsx(FILES)))
    sheet = workbook["Export"]
    rows = [list(row) for row in sheet.iter_rows(values_only=True)]

    assert rows == [
        ["Όνομα Αρχείου", "Χρήστης", "Ημερομηνία Εισαγωγής"],
        ["epistoli.png", "Maria", "2024-05-01"],
    ]


def test_xlsx_with_only_excluded_files_is_rejected():
    with pytest.raises(InvalidInputError):
        export_xlsx([FILES[1]])


@pytest.mark.parametrize("writer", [export_txt, export_xlsx, lambda files: export_csv(files, TITLES)])
def test_empty_selection_is_rejected(writer):
    with pytest.raises(InvalidInputError):
        writer([])


def test_export_filenames():
    moment = datetime(2024, 6, 1, 12, 30, 5)
    assert export_filename("txt", moment) == "DocuDigitize-Export-2024-06-01T12-30-05.txt"
    assert export_filename("xlsx", moment) == "DocuDigitize-Excel-Export-2024-06-01T12-30-05.xlsx"
