from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any

from finanzas.models import Gasto
from finanzas.services.catalog_store import CATALOG_MODELS, RECORD_MODELS
from finanzas.services.import_dates import InvalidDate, normalize_import_date
from finanzas.services.import_layouts import ImportLayout, RawRow

MAX_VALOR = Decimal("99999999999999.99")
CENT = Decimal("0.01")


class RowValidationError(Exception):
    """First problem found on a row; the row is not checked any further."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass
class CheckedRow:
    row_number: int
    fecha: str
    texts: dict[str, str]
    valor: Decimal
    observaciones: str | None = None
    estado: str | None = None

    def text(self, field_name: str) -> str:
        return self.texts.get(field_name, "")


def validate_row(row: RawRow, layout: ImportLayout) -> CheckedRow:
    """Check the row's required fields in layout order, then its optional ones."""
    fecha = ""
    valor = Decimal("0")
    texts: dict[str, str] = {}
    for field_name in layout.required_fields:
        column = layout.column(field_name)
        raw_value = row.value(field_name)
        if field_name == "fecha":
            try:
                fecha = normalize_import_date(raw_value)
            except InvalidDate as exc:
                raise RowValidationError(column.label, column.required_message) from exc
        elif field_name == "valor":
            valor = parse_valor(raw_value, column.label, column.required_message)
        else:
            text = stringify_cell(raw_value)
            if not text:
                raise RowValidationError(column.label, column.required_message)
            _check_length(text, layout, field_name)
            texts[field_name] = text

    for field_name in layout.optional_text_fields:
        raw_value = row.value(field_name)
        if raw_value is None or raw_value == "":
            continue
        if not _is_text_like(raw_value):
            label = layout.label_for(field_name)
            raise RowValidationError(label, f"{label} debe ser texto")
        text = stringify_cell(raw_value)
        if text:
            _check_length(text, layout, field_name)
            texts[field_name] = text

    estado = None
    if layout.has_estado:
        estado = resolve_estado(texts.pop("estado", ""))
    observaciones = texts.pop("observaciones", "") or None
    return CheckedRow(
        row_number=row.row_number,
        fecha=fecha,
        texts=texts,
        valor=valor,
        observaciones=observaciones,
        estado=estado,
    )


def parse_valor(value: Any, label: str, message: str) -> Decimal:
    if value is None or isinstance(value, (bool, date, datetime, time)):
        raise RowValidationError(label, message)
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise RowValidationError(label, message)
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError) as exc:
            raise RowValidationError(label, message) from exc
    if not amount.is_finite():
        raise RowValidationError(label, message)
    if abs(amount) > MAX_VALOR:
        raise RowValidationError(label, f"{label} excede el máximo permitido")
    amount = amount.quantize(CENT)
    if amount == 0:
        raise RowValidationError(label, message)
    return amount


def text_max_length(layout: ImportLayout, field_name: str) -> int | None:
    """Column capacity of the model field a spreadsheet text ends up in."""
    for reference in layout.references:
        if reference.field == field_name:
            return CATALOG_MODELS[reference.kind]._meta.get_field("nombre").max_length
    if field_name == "nombre":
        return RECORD_MODELS[layout.record_kind]._meta.get_field("nombre").max_length
    return None


def _check_length(text: str, layout: ImportLayout, field_name: str) -> None:
    max_length = text_max_length(layout, field_name)
    if max_length is not None and len(text) > max_length:
        label = layout.label_for(field_name)
        raise RowValidationError(label, f"{label} excede {max_length} caracteres")


def resolve_estado(value: str) -> str:
    if value == Gasto.Estado.CONFIRMADO:
        return Gasto.Estado.CONFIRMADO
    return Gasto.Estado.PENDIENTE


def stringify_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_text_like(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float, Decimal))
