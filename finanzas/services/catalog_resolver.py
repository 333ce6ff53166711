from __future__ import annotations

from collections import Counter
import logging
from typing import Iterable

from finanzas.models import CatalogKind
from finanzas.services.catalog_store import (
    CATALOG_SCOPE_FIELDS,
    CatalogEntity,
    RecordStore,
    RecordStoreError,
    normalize_catalog_name,
)

logger = logging.getLogger(__name__)

# A miss on these catalogs is always rejected, never created.
CLOSED_CATALOGS = frozenset(
    {
        CatalogKind.NEGOCIO,
        CatalogKind.REGION,
        CatalogKind.CATEGORIA_GASTO,
        CatalogKind.MEDIO_PAGO,
    }
)

OPEN_CATALOGS = frozenset(
    {
        CatalogKind.CONCEPTO_GASTO,
        CatalogKind.PROVEEDOR,
        CatalogKind.CATEGORIA_INGRESO,
        CatalogKind.COMPRADOR,
    }
)

MISSING_MESSAGES = {
    CatalogKind.NEGOCIO: 'Negocio "{name}" no encontrado en catálogo',
    CatalogKind.REGION: 'Región "{name}" no encontrada en catálogo',
    CatalogKind.CATEGORIA_GASTO: 'Categoría "{name}" no encontrada en catálogo',
    CatalogKind.MEDIO_PAGO: 'Medio de Pago "{name}" no encontrado en catálogo',
}

CREATE_LABELS = {
    CatalogKind.CONCEPTO_GASTO: "concepto",
    CatalogKind.PROVEEDOR: "proveedor",
    CatalogKind.CATEGORIA_INGRESO: "categoría",
    CatalogKind.COMPRADOR: "comprador",
}

CatalogKey = tuple[int | None, str]


class CatalogCreateError(Exception):
    """A reference could not be matched nor created for a catalog."""

    def __init__(self, kind: str, raw_name: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.raw_name = raw_name


def is_closed_catalog(kind: str) -> bool:
    return kind in CLOSED_CATALOGS


class CatalogResolver:
    """Maps free-text catalog references to entities for a single import.

    The loaded cache is the source of truth for the rest of the batch: names
    created while resolving are appended to it and to the kind's pending list,
    so a name is created at most once per kind and scope.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self._cache: dict[str, dict[CatalogKey, CatalogEntity]] = {}
        self._pending: dict[str, list[CatalogEntity]] = {}
        self._created: list[CatalogEntity] = []

    def load(self, kinds: Iterable[str]) -> None:
        for kind in kinds:
            if kind in self._cache:
                continue
            entries: dict[CatalogKey, CatalogEntity] = {}
            for entity in self.store.find(kind, {"activo": True}):
                entries.setdefault((entity.scope_id, entity.normalized_name), entity)
            self._cache[kind] = entries
            logger.debug("Catálogo %s cargado con %s registros.", kind, len(entries))

    def resolve(self, kind: str, raw_name: str, *, scope_id: int | None = None) -> CatalogEntity:
        normalized = normalize_catalog_name(raw_name)
        cache = self._cache.setdefault(kind, {})
        entity = cache.get((scope_id, normalized))
        if entity is not None:
            return entity
        for pending in self._pending.get(kind, []):
            if pending.scope_id == scope_id and pending.normalized_name == normalized:
                return pending
        if is_closed_catalog(kind):
            template = MISSING_MESSAGES.get(kind, 'Valor "{name}" no encontrado en catálogo')
            raise CatalogCreateError(kind, raw_name, template.format(name=raw_name))
        entity = self._create(kind, raw_name, scope_id)
        self._pending.setdefault(kind, []).append(entity)
        cache[(scope_id, normalized)] = entity
        self._created.append(entity)
        return entity

    def created_entities(self) -> list[CatalogEntity]:
        return list(self._created)

    def created_counts(self) -> dict[str, int]:
        return dict(Counter(entity.kind for entity in self._created))

    def restore_created(self, entities: Iterable[CatalogEntity]) -> None:
        for entity in entities:
            self._pending.setdefault(entity.kind, []).append(entity)
            self._cache.setdefault(entity.kind, {})[(entity.scope_id, entity.normalized_name)] = entity
            self._created.append(entity)

    def discard_pending(self) -> None:
        for kind, entities in self._pending.items():
            cache = self._cache.get(kind, {})
            for entity in entities:
                cache.pop((entity.scope_id, entity.normalized_name), None)
        self._pending.clear()
        self._created.clear()

    def _create(self, kind: str, raw_name: str, scope_id: int | None) -> CatalogEntity:
        name = str(raw_name).strip()
        record: dict[str, object] = {"nombre": name, "activo": True}
        scope_field = CATALOG_SCOPE_FIELDS.get(kind)
        if scope_field:
            record[scope_field] = scope_id
        label = CREATE_LABELS.get(kind, str(kind))
        try:
            entity = self.store.insert(kind, record)
        except RecordStoreError as exc:
            logger.warning("No se pudo crear %s '%s' durante la carga masiva.", label, name, exc_info=exc)
            raise CatalogCreateError(kind, raw_name, f'Error al crear {label} "{name}": {exc}') from exc
        logger.info("Se creó %s '%s' (id=%s) durante la carga masiva.", label, name, entity.id)
        return entity
