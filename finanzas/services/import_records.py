from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from finanzas.services.catalog_store import CatalogEntity


@dataclass(frozen=True)
class ImportRowError:
    row_number: int
    field: str
    message: str

    def as_payload(self) -> dict[str, Any]:
        return {"row_number": self.row_number, "field": self.field, "message": self.message}


@dataclass
class ValidatedRecord:
    """A spreadsheet row with every catalog reference resolved to an id."""

    row_number: int
    fecha: str
    negocio_id: int
    region_id: int
    categoria_id: int
    medio_pago_id: int
    nombre: str
    valor: Decimal
    concepto_id: int | None = None
    proveedor_id: int | None = None
    comprador_id: int | None = None
    observaciones: str | None = None
    estado: str | None = None
    created_entities: tuple[CatalogEntity, ...] = field(default_factory=tuple)

    def as_record(self, record_fields) -> dict[str, Any]:
        return {name: getattr(self, name) for name in record_fields}

    def as_payload(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "fecha": self.fecha,
            "negocio_id": self.negocio_id,
            "region_id": self.region_id,
            "categoria_id": self.categoria_id,
            "medio_pago_id": self.medio_pago_id,
            "nombre": self.nombre,
            "valor": str(self.valor),
            "concepto_id": self.concepto_id,
            "proveedor_id": self.proveedor_id,
            "comprador_id": self.comprador_id,
            "observaciones": self.observaciones,
            "estado": self.estado,
            "created_entities": [entity.as_payload() for entity in self.created_entities],
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ValidatedRecord":
        data = dict(payload)
        data["valor"] = Decimal(data["valor"])
        data["created_entities"] = tuple(
            CatalogEntity.from_payload(entity) for entity in data.get("created_entities") or ()
        )
        return cls(**data)
