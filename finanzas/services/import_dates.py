from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
import math
import re
from typing import Any

from django.utils.dateparse import parse_date

# Spreadsheet serial day zero, including the 1900 leap-year offset.
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SERIAL_PATTERN = re.compile(r"^\d+(\.\d+)?$")


class InvalidDate(ValueError):
    """Raised when a cell cannot be read as an import date."""


def normalize_import_date(value: Any) -> str:
    """Return ``value`` as a ``YYYY-MM-DD`` string.

    Accepts ISO strings, spreadsheet serial numbers and native date cells.
    """
    if value is None or isinstance(value, bool):
        raise InvalidDate("La fecha es obligatoria.")
    if isinstance(value, datetime):
        return _format_date(value.date())
    if isinstance(value, date):
        return _format_date(value)
    if isinstance(value, (int, float, Decimal)):
        return serial_to_iso_date(value)
    if isinstance(value, str):
        text = value.strip()
        if ISO_DATE_PATTERN.match(text):
            try:
                parsed = parse_date(text)
            except ValueError as exc:
                raise InvalidDate(f"La fecha {text} no existe en el calendario.") from exc
            if parsed is None:
                raise InvalidDate(f"La fecha {text} no tiene el formato esperado.")
            return text
        if SERIAL_PATTERN.match(text):
            return serial_to_iso_date(float(text))
    raise InvalidDate(f"No se reconoce el valor {value!r} como fecha.")


def serial_to_iso_date(serial: int | float | Decimal) -> str:
    number = float(serial)
    if not math.isfinite(number) or number <= 0:
        raise InvalidDate(f"El número {serial} no es una fecha de hoja de cálculo válida.")
    try:
        moment = SPREADSHEET_EPOCH + timedelta(days=number)
    except OverflowError as exc:
        raise InvalidDate(f"El número {serial} está fuera del rango de fechas.") from exc
    return _format_date(moment.date())


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
