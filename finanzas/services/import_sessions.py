from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
import logging
from typing import Any, Callable, Iterable, Mapping

from django.conf import settings
from django.db import models

from finanzas.services.catalog_resolver import CatalogCreateError, CatalogResolver
from finanzas.services.catalog_store import CatalogEntity, RecordStore, RecordStoreError
from finanzas.services.import_layouts import ImportLayout, RawRow, get_layout
from finanzas.services.import_persistence import (
    BatchPersister,
    PersistenceError,
    PersistenceResult,
    ProgressCallback,
)
from finanzas.services.import_records import ImportRowError, ValidatedRecord
from finanzas.services.import_rows import ParseError, WorkbookRowSource
from finanzas.services.import_validation import CheckedRow, RowValidationError, validate_row

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISPLAYED_ERRORS = 20


class ImportState(models.TextChoices):
    IDLE = "idle", "Sin archivo"
    PARSING = "parsing", "Leyendo archivo"
    VALIDATING = "validating", "Validando"
    VALIDATION_FAILED = "validation_failed", "Con errores de validación"
    AWAITING_CONFIRMATION = "awaiting_confirmation", "Pendiente de confirmación"
    INSERTING = "inserting", "Insertando"
    COMPLETED = "completed", "Completada"
    INSERTION_FAILED = "insertion_failed", "Inserción fallida"


class ImportStateError(Exception):
    """Raised when an operation is not allowed in the session's current state."""


class CatalogLoadError(Exception):
    """The catalogs needed to validate the file could not be read from the store."""


@dataclass
class ImportNotifier:
    on_success: Callable[[int], None] | None = None
    on_error: Callable[[str], None] | None = None

    def success(self, count: int) -> None:
        if self.on_success is not None:
            self.on_success(count)

    def error(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)


@dataclass
class ImportSummary:
    row_count: int
    total_value: Decimal
    created_counts: dict[str, int] = field(default_factory=dict)

    @property
    def created_total(self) -> int:
        return sum(self.created_counts.values())


class ImportSession:
    """Coordinates one upload-to-persist cycle for a spreadsheet import.

    The session owns its catalog caches, the collected row errors and the
    validated records. Nothing is written to the gastos/ingresos tables until
    ``confirm`` is called from ``AWAITING_CONFIRMATION``; catalog entities for
    open catalogs may already have been created during ``load``.
    """

    def __init__(
        self,
        layout: ImportLayout,
        store: RecordStore,
        *,
        notifier: ImportNotifier | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self.layout = layout
        self.store = store
        self.notifier = notifier or ImportNotifier()
        self.resolver = CatalogResolver(store)
        self.persister = BatchPersister(
            store,
            layout.record_kind,
            layout.record_fields,
            chunk_size=chunk_size,
        )
        self.state = ImportState.IDLE
        self.filename = ""
        self.errors: list[ImportRowError] = []
        self.records: list[ValidatedRecord] = []
        self.persisted_count = 0
        self.progress = 0.0
        self.last_error = ""

    # Parsing and validation

    def load(self, file_obj, *, filename: str = "") -> str:
        self._require(ImportState.IDLE, ImportState.VALIDATION_FAILED)
        self._reset()
        self.filename = filename or getattr(file_obj, "name", "") or ""
        self._transition(ImportState.PARSING)
        try:
            source = WorkbookRowSource(file_obj, self.layout)
            if not source.has_rows():
                raise ParseError("El archivo no contiene datos válidos")
        except ParseError as exc:
            self.last_error = str(exc)
            self._transition(ImportState.IDLE)
            self.notifier.error(f"Error al procesar el archivo: {exc}")
            raise

        self._transition(ImportState.VALIDATING)
        try:
            self.resolver.load(self.layout.catalog_kinds)
        except RecordStoreError as exc:
            logger.warning("No se pudieron cargar los catálogos de %s.", self.layout.record_label, exc_info=exc)
            self.last_error = str(exc)
            self._transition(ImportState.IDLE)
            self.notifier.error(f"No fue posible cargar los catálogos: {exc}")
            raise CatalogLoadError(f"No fue posible cargar los catálogos: {exc}") from exc
        self.accumulate(source)

        if self.errors:
            self._transition(ImportState.VALIDATION_FAILED)
            self.notifier.error(f"Se encontraron {len(self.errors)} errores de validación")
        else:
            self._transition(ImportState.AWAITING_CONFIRMATION)
        return self.state

    def accumulate(self, rows: Iterable[RawRow]) -> None:
        """Attempt every row, keeping errors and resolved records apart."""
        for row in rows:
            try:
                record = self.reconcile(row)
            except RowValidationError as exc:
                self.errors.append(ImportRowError(row.row_number, exc.field, exc.message))
                continue
            self.records.append(record)
        logger.info(
            "Validación de %s terminada: %s registros válidos, %s errores.",
            self.layout.record_label,
            len(self.records),
            len(self.errors),
        )

    def reconcile(self, row: RawRow) -> ValidatedRecord:
        checked = validate_row(row, self.layout)
        created_before = len(self.resolver.created_entities())
        references = self._resolve_references(checked)
        created = tuple(self.resolver.created_entities()[created_before:])
        return ValidatedRecord(
            row_number=checked.row_number,
            fecha=checked.fecha,
            nombre=checked.text("nombre"),
            valor=checked.valor,
            observaciones=checked.observaciones,
            estado=checked.estado,
            created_entities=created,
            **references,
        )

    def _resolve_references(self, checked: CheckedRow) -> dict[str, int | None]:
        resolved: dict[str, CatalogEntity] = {}
        references: dict[str, int | None] = {}
        for reference in self.layout.references:
            raw_name = checked.text(reference.field)
            if not raw_name:
                if not reference.optional:
                    column = self.layout.column(reference.field)
                    raise RowValidationError(column.label, column.required_message)
                references[f"{reference.field}_id"] = None
                continue
            scope_id = resolved[reference.scope_field].id if reference.scope_field else None
            try:
                entity = self.resolver.resolve(reference.kind, raw_name, scope_id=scope_id)
            except CatalogCreateError as exc:
                raise RowValidationError(self.layout.label_for(reference.field), str(exc)) from exc
            resolved[reference.field] = entity
            references[f"{reference.field}_id"] = entity.id
        return references

    # Confirmation gate

    def summary(self) -> ImportSummary:
        total = sum((record.valor for record in self.records), Decimal("0.00"))
        return ImportSummary(
            row_count=len(self.records),
            total_value=total,
            created_counts=self.resolver.created_counts(),
        )

    def error_preview(self, limit: int | None = None) -> tuple[list[ImportRowError], int]:
        if limit is None:
            limit = getattr(settings, "FINANZAS_IMPORT_MAX_DISPLAYED_ERRORS", DEFAULT_MAX_DISPLAYED_ERRORS)
        shown = self.errors[:limit]
        return shown, len(self.errors) - len(shown)

    def cancel(self) -> None:
        """Discard the validated records; entities already created stay in the store."""
        self._require(ImportState.AWAITING_CONFIRMATION)
        self.records = []
        self.resolver.discard_pending()
        self.persisted_count = 0
        self.progress = 0.0
        self._transition(ImportState.IDLE)

    def confirm(self, on_progress: ProgressCallback | None = None) -> PersistenceResult:
        self._require(ImportState.AWAITING_CONFIRMATION)
        if not self.records:
            raise ImportStateError("No hay registros validados para insertar.")
        self._transition(ImportState.INSERTING)

        def _track(progress: float, inserted: int, total: int) -> None:
            self.progress = progress
            self.persisted_count = inserted
            if on_progress is not None:
                on_progress(progress, inserted, total)

        try:
            result = self.persister.persist(self.records, start=self.persisted_count, on_progress=_track)
        except PersistenceError as exc:
            self.persisted_count = exc.inserted_count
            self.last_error = str(exc)
            self._transition(ImportState.INSERTION_FAILED)
            self.notifier.error(
                f"{exc} Se insertaron {exc.inserted_count} de {exc.total} {self.layout.record_label} "
                "antes del error; puedes reintentar."
            )
            self._transition(ImportState.AWAITING_CONFIRMATION)
            raise
        self.persisted_count = result.inserted_count
        self.progress = 100.0
        self._transition(ImportState.COMPLETED)
        self.notifier.success(result.inserted_count)
        return result

    # Serialization between requests

    def to_payload(self) -> dict[str, Any]:
        self._require(ImportState.AWAITING_CONFIRMATION)
        return {
            "layout": self.layout.code,
            "state": str(self.state),
            "filename": self.filename,
            "persisted_count": self.persisted_count,
            "last_error": self.last_error,
            "records": [record.as_payload() for record in self.records],
            "created_entities": [entity.as_payload() for entity in self.resolver.created_entities()],
        }

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        store: RecordStore,
        *,
        notifier: ImportNotifier | None = None,
        chunk_size: int | None = None,
    ) -> "ImportSession":
        session = cls(get_layout(payload["layout"]), store, notifier=notifier, chunk_size=chunk_size)
        session.state = ImportState(payload["state"])
        session.filename = payload.get("filename", "")
        session.persisted_count = int(payload.get("persisted_count") or 0)
        session.last_error = payload.get("last_error", "")
        session.records = [ValidatedRecord.from_payload(item) for item in payload.get("records", [])]
        session.resolver.restore_created(
            CatalogEntity.from_payload(item) for item in payload.get("created_entities", [])
        )
        return session

    # Helpers

    def _reset(self) -> None:
        self.resolver = CatalogResolver(self.store)
        self.errors = []
        self.records = []
        self.persisted_count = 0
        self.progress = 0.0
        self.last_error = ""

    def _require(self, *states: str) -> None:
        if self.state not in states:
            raise ImportStateError(
                f"La carga masiva está en estado '{ImportState(self.state).label}' y no admite esta acción."
            )

    def _transition(self, state: str) -> None:
        logger.info("Carga masiva de %s: %s -> %s", self.layout.record_label, self.state, state)
        self.state = state
