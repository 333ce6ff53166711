from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from django.core.exceptions import FieldError
from django.db import DatabaseError, transaction

from finanzas.models import (
    CatalogKind,
    CategoriaGasto,
    CategoriaIngreso,
    Comprador,
    ConceptoGasto,
    Gasto,
    Ingreso,
    MedioPago,
    Negocio,
    Proveedor,
    RecordKind,
    Region,
)

CATALOG_MODELS = {
    CatalogKind.NEGOCIO: Negocio,
    CatalogKind.REGION: Region,
    CatalogKind.CATEGORIA_GASTO: CategoriaGasto,
    CatalogKind.CONCEPTO_GASTO: ConceptoGasto,
    CatalogKind.PROVEEDOR: Proveedor,
    CatalogKind.CATEGORIA_INGRESO: CategoriaIngreso,
    CatalogKind.COMPRADOR: Comprador,
    CatalogKind.MEDIO_PAGO: MedioPago,
}

# Catalogs whose names are only unique inside a parent entity.
CATALOG_SCOPE_FIELDS = {
    CatalogKind.CONCEPTO_GASTO: "categoria_id",
    CatalogKind.CATEGORIA_INGRESO: "negocio_id",
}

RECORD_MODELS = {
    RecordKind.GASTO: Gasto,
    RecordKind.INGRESO: Ingreso,
}


def normalize_catalog_name(value: Any) -> str:
    return str(value or "").strip().casefold()


@dataclass(frozen=True)
class CatalogEntity:
    id: int
    kind: str
    raw_name: str
    normalized_name: str
    scope_id: int | None = None

    @classmethod
    def build(cls, *, id: int, kind: str, raw_name: str, scope_id: int | None = None) -> "CatalogEntity":
        return cls(
            id=id,
            kind=str(kind),
            raw_name=raw_name,
            normalized_name=normalize_catalog_name(raw_name),
            scope_id=scope_id,
        )

    def as_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "raw_name": self.raw_name,
            "scope_id": self.scope_id,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CatalogEntity":
        return cls.build(
            id=payload["id"],
            kind=payload["kind"],
            raw_name=payload["raw_name"],
            scope_id=payload.get("scope_id"),
        )


class RecordStoreError(Exception):
    """Raised by a record store when the backing database rejects an operation."""


class RecordStore:
    """Backing store used by the import engine.

    ``find`` and ``insert`` work on catalog kinds, ``insert_many`` on record
    kinds (gastos, ingresos).
    """

    def find(self, kind: str, filter: Mapping[str, Any] | None = None) -> list[CatalogEntity]:
        raise NotImplementedError

    def insert(self, kind: str, record: Mapping[str, Any]) -> CatalogEntity:
        raise NotImplementedError

    def insert_many(self, kind: str, records: Iterable[Mapping[str, Any]]) -> int:
        raise NotImplementedError


class DjangoRecordStore(RecordStore):
    def find(self, kind: str, filter: Mapping[str, Any] | None = None) -> list[CatalogEntity]:
        model = CATALOG_MODELS[kind]
        try:
            queryset = model.objects.filter(**dict(filter or {})).order_by("nombre", "pk")
            return [self._to_entity(kind, instance) for instance in queryset]
        except (DatabaseError, FieldError) as exc:
            raise RecordStoreError(f"No fue posible consultar el catálogo {kind}: {exc}") from exc

    def insert(self, kind: str, record: Mapping[str, Any]) -> CatalogEntity:
        model = CATALOG_MODELS[kind]
        try:
            with transaction.atomic():
                instance = model.objects.create(**dict(record))
        except DatabaseError as exc:
            raise RecordStoreError(str(exc)) from exc
        return self._to_entity(kind, instance)

    def insert_many(self, kind: str, records: Iterable[Mapping[str, Any]]) -> int:
        model = RECORD_MODELS[kind]
        instances = [model(**dict(record)) for record in records]
        try:
            with transaction.atomic():
                created = model.objects.bulk_create(instances)
        except DatabaseError as exc:
            raise RecordStoreError(str(exc)) from exc
        return len(created)

    @staticmethod
    def _to_entity(kind: str, instance) -> CatalogEntity:
        scope_field = CATALOG_SCOPE_FIELDS.get(kind)
        return CatalogEntity.build(
            id=instance.pk,
            kind=kind,
            raw_name=instance.nombre,
            scope_id=getattr(instance, scope_field) if scope_field else None,
        )
