from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from finanzas.models import RecordKind
from finanzas.services.import_layouts import GASTOS_LAYOUT
from finanzas.services.import_persistence import BatchPersister, PersistenceError
from finanzas.services.import_records import ValidatedRecord

from .support import InMemoryRecordStore


def _records(count: int) -> list[ValidatedRecord]:
    return [
        ValidatedRecord(
            row_number=index + 3,
            fecha="2025-01-15",
            negocio_id=1,
            region_id=2,
            categoria_id=3,
            concepto_id=4,
            medio_pago_id=5,
            nombre=f"Gasto {index}",
            valor=Decimal("1000.00"),
            estado="Pendiente",
        )
        for index in range(count)
    ]


class BatchPersisterTests(SimpleTestCase):
    def setUp(self) -> None:
        self.store = InMemoryRecordStore()
        self.persister = BatchPersister(
            self.store,
            RecordKind.GASTO,
            GASTOS_LAYOUT.record_fields,
            chunk_size=50,
        )

    def test_writes_in_chunks_and_reports_progress(self) -> None:
        progress: list[tuple[float, int, int]] = []

        result = self.persister.persist(_records(120), on_progress=lambda *args: progress.append(args))

        self.assertEqual(self.store.chunk_sizes, [50, 50, 20])
        self.assertEqual(result.inserted_count, 120)
        self.assertEqual(result.chunks_written, 3)
        self.assertEqual([item[1] for item in progress], [50, 100, 120])
        self.assertAlmostEqual(progress[0][0], 41.67, places=2)
        self.assertAlmostEqual(progress[1][0], 83.33, places=2)
        self.assertEqual(progress[2][0], 100.0)

    def test_records_only_carry_the_layout_fields(self) -> None:
        self.persister.persist(_records(1))

        stored = self.store.records[RecordKind.GASTO][0]
        self.assertEqual(tuple(stored), GASTOS_LAYOUT.record_fields)
        self.assertIsNone(stored["proveedor_id"])
        self.assertEqual(stored["valor"], Decimal("1000.00"))

    def test_stops_at_the_first_failing_chunk(self) -> None:
        self.store.failing_chunks.add(2)
        progress: list[tuple[float, int, int]] = []

        with self.assertRaises(PersistenceError) as ctx:
            self.persister.persist(_records(120), on_progress=lambda *args: progress.append(args))

        self.assertEqual(ctx.exception.inserted_count, 50)
        self.assertEqual(ctx.exception.chunks_written, 1)
        self.assertEqual(ctx.exception.total, 120)
        self.assertEqual(str(ctx.exception), "Error al insertar registros: se perdió la conexión")
        self.assertEqual(self.store.chunk_sizes, [50, 50])
        self.assertEqual(len(self.store.records[RecordKind.GASTO]), 50)
        self.assertEqual(len(progress), 1)

    def test_resumes_after_already_written_records(self) -> None:
        records = _records(120)

        result = self.persister.persist(records, start=50)

        self.assertEqual(self.store.chunk_sizes, [50, 20])
        self.assertEqual(result.inserted_count, 120)
        self.assertEqual(self.store.records[RecordKind.GASTO][0]["nombre"], "Gasto 50")

    @override_settings(FINANZAS_IMPORT_CHUNK_SIZE=25)
    def test_chunk_size_defaults_to_settings(self) -> None:
        persister = BatchPersister(self.store, RecordKind.GASTO, GASTOS_LAYOUT.record_fields)

        self.assertEqual(persister.chunk_size, 25)

    def test_rejects_non_positive_chunk_size(self) -> None:
        with self.assertRaises(ValueError):
            BatchPersister(self.store, RecordKind.GASTO, GASTOS_LAYOUT.record_fields, chunk_size=0)
