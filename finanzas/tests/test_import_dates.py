from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from django.test import SimpleTestCase

from finanzas.services.import_dates import InvalidDate, normalize_import_date, serial_to_iso_date


class NormalizeImportDateTests(SimpleTestCase):
    def test_iso_string_is_returned_unchanged(self) -> None:
        self.assertEqual(normalize_import_date("2025-01-15"), "2025-01-15")
        self.assertEqual(normalize_import_date("  2025-01-15 "), "2025-01-15")

    def test_spreadsheet_serials_are_converted(self) -> None:
        self.assertEqual(normalize_import_date(45658), "2025-01-01")
        self.assertEqual(normalize_import_date(45672), "2025-01-15")
        self.assertEqual(normalize_import_date(45672.75), "2025-01-15")
        self.assertEqual(normalize_import_date(Decimal("45672")), "2025-01-15")
        self.assertEqual(normalize_import_date("45672"), "2025-01-15")

    def test_native_date_cells_are_formatted(self) -> None:
        self.assertEqual(normalize_import_date(datetime(2025, 3, 4, 10, 30)), "2025-03-04")
        self.assertEqual(normalize_import_date(date(2024, 12, 31)), "2024-12-31")

    def test_small_serials_are_zero_padded(self) -> None:
        self.assertEqual(serial_to_iso_date(1), "1899-12-31")
        self.assertEqual(serial_to_iso_date(61), "1900-03-01")

    def test_rejects_unrecognized_values(self) -> None:
        for value in (None, True, "", "15/01/2025", "enero", "2025-1-5", 0, -3, float("nan")):
            with self.subTest(value=value):
                with self.assertRaises(InvalidDate):
                    normalize_import_date(value)

    def test_rejects_iso_strings_that_are_not_calendar_dates(self) -> None:
        with self.assertRaises(InvalidDate):
            normalize_import_date("2025-02-30")
        with self.assertRaises(InvalidDate):
            normalize_import_date("2025-13-01")

    def test_rejects_serials_out_of_range(self) -> None:
        with self.assertRaises(InvalidDate):
            serial_to_iso_date(10 ** 9)
