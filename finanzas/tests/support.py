from __future__ import annotations

from collections import defaultdict
from io import BytesIO
from typing import Any, Iterable, Mapping

from openpyxl import Workbook

from finanzas.services.catalog_store import CATALOG_SCOPE_FIELDS, CatalogEntity, RecordStore, RecordStoreError
from finanzas.services.import_layouts import GASTOS_LAYOUT, INGRESOS_LAYOUT


class InMemoryRecordStore(RecordStore):
    """Record store double that keeps everything in dictionaries and counts calls."""

    def __init__(self) -> None:
        self.catalogs: dict[str, list[tuple[CatalogEntity, bool]]] = defaultdict(list)
        self.records: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.find_calls: list[str] = []
        self.created: list[CatalogEntity] = []
        self.chunk_sizes: list[int] = []
        self.failing_chunks: set[int] = set()
        self.failing_names: set[str] = set()
        self.failing_finds = False
        self._next_id = 1

    def add(self, kind: str, name: str, *, scope_id: int | None = None, activo: bool = True) -> CatalogEntity:
        entity = CatalogEntity.build(id=self._next_id, kind=kind, raw_name=name, scope_id=scope_id)
        self._next_id += 1
        self.catalogs[kind].append((entity, activo))
        return entity

    def find(self, kind: str, filter: Mapping[str, Any] | None = None) -> list[CatalogEntity]:
        self.find_calls.append(kind)
        if self.failing_finds:
            raise RecordStoreError("sin conexión")
        only_active = bool(filter and filter.get("activo"))
        return [entity for entity, activo in self.catalogs[kind] if activo or not only_active]

    def insert(self, kind: str, record: Mapping[str, Any]) -> CatalogEntity:
        if record["nombre"] in self.failing_names:
            raise RecordStoreError("registro duplicado")
        scope_field = CATALOG_SCOPE_FIELDS.get(kind)
        entity = self.add(kind, record["nombre"], scope_id=record.get(scope_field) if scope_field else None)
        self.created.append(entity)
        return entity

    def insert_many(self, kind: str, records: Iterable[Mapping[str, Any]]) -> int:
        batch = [dict(record) for record in records]
        self.chunk_sizes.append(len(batch))
        if len(self.chunk_sizes) in self.failing_chunks:
            raise RecordStoreError("se perdió la conexión")
        self.records[kind].extend(batch)
        return len(batch)


def build_workbook(rows: list[list[Any]], *, layout=GASTOS_LAYOUT) -> BytesIO:
    """Workbook with the label and instruction rows followed by ``rows``."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(layout.labels)
    sheet.append([column.instruction for column in layout.columns])
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer


def gasto_row(**overrides: Any) -> list[Any]:
    values = {
        "fecha": "2025-01-15",
        "negocio": "Finca Norte",
        "region": "Antioquia",
        "categoria": "Mantenimiento",
        "concepto": "Poda de árboles",
        "proveedor": "",
        "medio_pago": "Efectivo",
        "nombre": "Poda lote 3",
        "valor": 120000,
        "observaciones": "",
        "estado": "Confirmado",
    }
    values.update(overrides)
    return [values[name] for name in GASTOS_LAYOUT.field_names]


def ingreso_row(**overrides: Any) -> list[Any]:
    values = {
        "fecha": "2025-02-01",
        "negocio": "Finca Norte",
        "region": "Antioquia",
        "categoria": "Venta de café",
        "comprador": "",
        "medio_pago": "Efectivo",
        "nombre": "Venta cosecha",
        "valor": 850000,
        "observaciones": "",
    }
    values.update(overrides)
    return [values[name] for name in INGRESOS_LAYOUT.field_names]
