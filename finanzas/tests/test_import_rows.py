from __future__ import annotations

from io import BytesIO

from django.test import SimpleTestCase

from finanzas.services.import_layouts import GASTOS_LAYOUT, INGRESOS_LAYOUT, RawRow
from finanzas.services.import_rows import ParseError, WorkbookRowSource

from .support import build_workbook, gasto_row, ingreso_row


class WorkbookRowSourceTests(SimpleTestCase):
    def test_maps_cells_by_position_and_keeps_sheet_row_numbers(self) -> None:
        buffer = build_workbook(
            [
                gasto_row(nombre="Primera"),
                [None] * 11,
                gasto_row(nombre="Tercera", valor="35000"),
            ]
        )

        rows = list(WorkbookRowSource(buffer, GASTOS_LAYOUT))

        self.assertEqual([row.row_number for row in rows], [3, 5])
        self.assertEqual(rows[0].negocio, "Finca Norte")
        self.assertEqual(rows[0].concepto, "Poda de árboles")
        self.assertEqual(rows[1].nombre, "Tercera")
        self.assertEqual(rows[1].valor, "35000")

    def test_skips_rows_without_anchor_values(self) -> None:
        orphan = [None] * 11
        orphan[8] = 5000
        buffer = build_workbook([orphan, gasto_row()])

        rows = list(WorkbookRowSource(buffer, GASTOS_LAYOUT))

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].row_number, 4)

    def test_row_with_a_single_anchor_is_kept(self) -> None:
        partial = [None] * 11
        partial[7] = "Solo nombre"
        buffer = build_workbook([partial])

        rows = list(WorkbookRowSource(buffer, GASTOS_LAYOUT))

        self.assertEqual(len(rows), 1)
        self.assertIsNone(rows[0].fecha)

    def test_extra_cells_are_kept_apart(self) -> None:
        buffer = build_workbook([gasto_row() + ["sobrante"]])

        row = next(iter(WorkbookRowSource(buffer, GASTOS_LAYOUT)))

        self.assertEqual(row.extra, ("sobrante",))
        self.assertEqual(row.estado, "Confirmado")

    def test_income_layout_uses_its_own_columns(self) -> None:
        buffer = build_workbook([ingreso_row(comprador="Cooperativa")], layout=INGRESOS_LAYOUT)

        row = next(iter(WorkbookRowSource(buffer, INGRESOS_LAYOUT)))

        self.assertEqual(row.comprador, "Cooperativa")
        self.assertEqual(row.medio_pago, "Efectivo")
        self.assertIsNone(row.concepto)
        self.assertIsNone(row.estado)

    def test_source_can_be_iterated_more_than_once(self) -> None:
        source = WorkbookRowSource(build_workbook([gasto_row(), gasto_row()]), GASTOS_LAYOUT)

        self.assertTrue(source.has_rows())
        self.assertEqual(len(list(source)), 2)
        self.assertEqual(len(list(source)), 2)

    def test_header_only_file_has_no_rows(self) -> None:
        source = WorkbookRowSource(build_workbook([]), GASTOS_LAYOUT)

        self.assertFalse(source.has_rows())

    def test_rejects_files_that_are_not_workbooks(self) -> None:
        with self.assertRaises(ParseError):
            WorkbookRowSource(BytesIO(b"esto no es un archivo de Excel"), GASTOS_LAYOUT)


class RawRowTests(SimpleTestCase):
    def test_short_rows_are_padded_with_none(self) -> None:
        row = RawRow.from_values(7, ("2025-01-15", "Finca Norte"), GASTOS_LAYOUT)

        self.assertEqual(row.row_number, 7)
        self.assertEqual(row.negocio, "Finca Norte")
        self.assertIsNone(row.valor)
        self.assertEqual(row.extra, ())

    def test_whitespace_only_anchors_count_as_blank(self) -> None:
        row = RawRow.from_values(3, ("  ", " ", None, "Mantenimiento"), GASTOS_LAYOUT)

        self.assertTrue(row.is_blank())
