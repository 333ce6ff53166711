from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from finanzas.services.import_layouts import GASTOS_LAYOUT, INGRESOS_LAYOUT, RawRow
from finanzas.services.import_validation import RowValidationError, parse_valor, validate_row

from .support import gasto_row, ingreso_row


def _gasto(**overrides) -> RawRow:
    return RawRow.from_values(3, gasto_row(**overrides), GASTOS_LAYOUT)


class ValidateRowTests(SimpleTestCase):
    def test_valid_expense_row(self) -> None:
        checked = validate_row(_gasto(proveedor="Agroinsumos", observaciones="Lote 3"), GASTOS_LAYOUT)

        self.assertEqual(checked.row_number, 3)
        self.assertEqual(checked.fecha, "2025-01-15")
        self.assertEqual(checked.valor, Decimal("120000.00"))
        self.assertEqual(checked.text("concepto"), "Poda de árboles")
        self.assertEqual(checked.text("proveedor"), "Agroinsumos")
        self.assertEqual(checked.observaciones, "Lote 3")
        self.assertEqual(checked.estado, "Confirmado")

    def test_stops_at_first_missing_field_in_column_order(self) -> None:
        with self.assertRaises(RowValidationError) as ctx:
            validate_row(_gasto(fecha=None, negocio=""), GASTOS_LAYOUT)

        self.assertEqual(ctx.exception.field, "Fecha")
        self.assertEqual(ctx.exception.message, "Fecha es obligatoria o tiene formato inválido")

    def test_missing_required_text_fields(self) -> None:
        cases = {
            "negocio": ("Negocio", "Negocio es obligatorio"),
            "region": ("Región", "Región es obligatoria"),
            "concepto": ("Concepto", "Concepto es obligatorio"),
            "medio_pago": ("Medio de Pago", "Medio de Pago es obligatorio"),
            "nombre": ("Nombre del Gasto", "Nombre del Gasto es obligatorio"),
        }
        for field_name, (label, message) in cases.items():
            with self.subTest(field=field_name):
                with self.assertRaises(RowValidationError) as ctx:
                    validate_row(_gasto(**{field_name: "   "}), GASTOS_LAYOUT)
                self.assertEqual(ctx.exception.field, label)
                self.assertEqual(ctx.exception.message, message)

    def test_invalid_dates_are_reported_on_fecha(self) -> None:
        with self.assertRaises(RowValidationError) as ctx:
            validate_row(_gasto(fecha="15/01/2025"), GASTOS_LAYOUT)

        self.assertEqual(ctx.exception.field, "Fecha")

    def test_serial_dates_are_normalized(self) -> None:
        checked = validate_row(_gasto(fecha=45672), GASTOS_LAYOUT)

        self.assertEqual(checked.fecha, "2025-01-15")

    def test_estado_defaults_to_pendiente(self) -> None:
        for value in (None, "", "pendiente", "confirmado", "Anulado"):
            with self.subTest(value=value):
                checked = validate_row(_gasto(estado=value), GASTOS_LAYOUT)
                self.assertEqual(checked.estado, "Pendiente")

    def test_estado_confirmado_ignores_surrounding_spaces(self) -> None:
        checked = validate_row(_gasto(estado="  Confirmado "), GASTOS_LAYOUT)

        self.assertEqual(checked.estado, "Confirmado")

    def test_optional_fields_must_be_text(self) -> None:
        with self.assertRaises(RowValidationError) as ctx:
            validate_row(_gasto(proveedor=True), GASTOS_LAYOUT)

        self.assertEqual(ctx.exception.message, "Proveedor debe ser texto")

        with self.assertRaises(RowValidationError) as ctx:
            validate_row(_gasto(observaciones=date(2025, 1, 1)), GASTOS_LAYOUT)

        self.assertEqual(ctx.exception.field, "Observaciones")

    def test_numeric_optional_cells_are_read_as_text(self) -> None:
        checked = validate_row(_gasto(observaciones=123.0), GASTOS_LAYOUT)

        self.assertEqual(checked.observaciones, "123")

    def test_income_rows_have_no_estado(self) -> None:
        row = RawRow.from_values(4, ingreso_row(comprador="Cooperativa"), INGRESOS_LAYOUT)

        checked = validate_row(row, INGRESOS_LAYOUT)

        self.assertIsNone(checked.estado)
        self.assertEqual(checked.text("comprador"), "Cooperativa")
        self.assertEqual(checked.text("categoria"), "Venta de café")
        self.assertEqual(checked.valor, Decimal("850000.00"))

    def test_texts_longer_than_their_column_are_rejected(self) -> None:
        cases = {
            "nombre": ("x" * 256, "Nombre del Gasto", "Nombre del Gasto excede 255 caracteres"),
            "concepto": ("c" * 201, "Concepto", "Concepto excede 200 caracteres"),
            "proveedor": ("p" * 201, "Proveedor", "Proveedor excede 200 caracteres"),
        }
        for field_name, (value, label, message) in cases.items():
            with self.subTest(field=field_name):
                with self.assertRaises(RowValidationError) as ctx:
                    validate_row(_gasto(**{field_name: value}), GASTOS_LAYOUT)
                self.assertEqual(ctx.exception.field, label)
                self.assertEqual(ctx.exception.message, message)

    def test_texts_that_fill_their_column_are_accepted(self) -> None:
        checked = validate_row(_gasto(nombre="x" * 255, proveedor="p" * 200), GASTOS_LAYOUT)

        self.assertEqual(len(checked.text("nombre")), 255)
        self.assertEqual(len(checked.text("proveedor")), 200)


class ParseValorTests(SimpleTestCase):
    def _parse(self, value):
        return parse_valor(value, "Valor", "Valor debe ser numérico")

    def test_accepts_numbers_and_numeric_text(self) -> None:
        self.assertEqual(self._parse(50000), Decimal("50000.00"))
        self.assertEqual(self._parse(1234.567), Decimal("1234.57"))
        self.assertEqual(self._parse(" 2500.5 "), Decimal("2500.50"))
        self.assertEqual(self._parse(-300), Decimal("-300.00"))

    def test_rejects_non_numeric_and_zero(self) -> None:
        for value in (None, "", "abc", "12,5", True, 0, "0", float("inf"), date(2025, 1, 1)):
            with self.subTest(value=value):
                with self.assertRaises(RowValidationError) as ctx:
                    self._parse(value)
                self.assertEqual(ctx.exception.message, "Valor debe ser numérico")

    def test_rejects_values_beyond_the_column_capacity(self) -> None:
        with self.assertRaises(RowValidationError) as ctx:
            self._parse("1e20")

        self.assertEqual(ctx.exception.message, "Valor excede el máximo permitido")

    def test_amounts_that_round_to_zero_are_rejected(self) -> None:
        for value in ("0.001", -0.004, "0.00499"):
            with self.subTest(value=value):
                with self.assertRaises(RowValidationError) as ctx:
                    self._parse(value)
                self.assertEqual(ctx.exception.message, "Valor debe ser numérico")

        self.assertEqual(self._parse("0.006"), Decimal("0.01"))
