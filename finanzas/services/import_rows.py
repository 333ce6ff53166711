from __future__ import annotations

from typing import Iterator

from openpyxl import load_workbook

from finanzas.services.import_layouts import ImportLayout, RawRow

# Row 1 holds the column labels and row 2 the filling instructions.
DATA_START_ROW = 3


class ParseError(Exception):
    """Raised when the uploaded file cannot be read as a spreadsheet."""


class WorkbookRowSource:
    """Lazily yields the data rows of the first worksheet of an import file.

    Every iteration starts again from ``DATA_START_ROW`` so the same source can
    be scanned more than once without re-reading the upload.
    """

    def __init__(self, file_obj, layout: ImportLayout) -> None:
        self.layout = layout
        self._sheet = _open_first_sheet(file_obj)

    def __iter__(self) -> Iterator[RawRow]:
        rows = self._sheet.iter_rows(min_row=DATA_START_ROW, values_only=True)
        for row_number, values in enumerate(rows, start=DATA_START_ROW):
            row = RawRow.from_values(row_number, values, self.layout)
            if row.is_blank():
                continue
            yield row

    def has_rows(self) -> bool:
        return next(iter(self), None) is not None


def _open_first_sheet(file_obj):
    if hasattr(file_obj, "seek"):
        file_obj.seek(0)
    try:
        workbook = load_workbook(file_obj, data_only=True)
    except Exception as exc:  # openpyxl raises a wide range of errors for corrupt files
        raise ParseError("No fue posible leer el archivo. Verifica que sea un .xlsx válido.") from exc
    if not workbook.worksheets:
        raise ParseError("El archivo no contiene hojas de cálculo.")
    return workbook.worksheets[0]
