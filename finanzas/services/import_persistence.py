from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterator, Sequence

from django.conf import settings

from finanzas.services.catalog_store import RecordStore, RecordStoreError
from finanzas.services.import_records import ValidatedRecord

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50

ProgressCallback = Callable[[float, int, int], None]


class PersistenceError(Exception):
    """A chunk write failed; earlier chunks remain stored."""

    def __init__(self, message: str, *, inserted_count: int, chunks_written: int, total: int) -> None:
        super().__init__(message)
        self.inserted_count = inserted_count
        self.chunks_written = chunks_written
        self.total = total


@dataclass
class PersistenceResult:
    inserted_count: int
    chunks_written: int
    total: int

    @property
    def progress(self) -> float:
        if not self.total:
            return 100.0
        return self.inserted_count / self.total * 100


class BatchPersister:
    def __init__(
        self,
        store: RecordStore,
        record_kind: str,
        record_fields: Sequence[str],
        *,
        chunk_size: int | None = None,
    ) -> None:
        if chunk_size is None:
            chunk_size = getattr(settings, "FINANZAS_IMPORT_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)
        if chunk_size <= 0:
            raise ValueError("El tamaño de lote debe ser un entero positivo.")
        self.store = store
        self.record_kind = record_kind
        self.record_fields = tuple(record_fields)
        self.chunk_size = chunk_size

    def iter_chunks(
        self,
        records: Sequence[ValidatedRecord],
        start: int = 0,
    ) -> Iterator[Sequence[ValidatedRecord]]:
        for offset in range(start, len(records), self.chunk_size):
            yield records[offset:offset + self.chunk_size]

    def persist(
        self,
        records: Sequence[ValidatedRecord],
        *,
        start: int = 0,
        on_progress: ProgressCallback | None = None,
    ) -> PersistenceResult:
        """Write ``records[start:]`` chunk by chunk, stopping at the first failure."""
        total = len(records)
        inserted = start
        chunks_written = 0
        for chunk in self.iter_chunks(records, start):
            payload = [record.as_record(self.record_fields) for record in chunk]
            try:
                self.store.insert_many(self.record_kind, payload)
            except RecordStoreError as exc:
                logger.warning(
                    "Falló el lote %s al insertar registros de tipo %s (insertados %s de %s).",
                    chunks_written + 1,
                    self.record_kind,
                    inserted,
                    total,
                    exc_info=exc,
                )
                raise PersistenceError(
                    f"Error al insertar registros: {exc}",
                    inserted_count=inserted,
                    chunks_written=chunks_written,
                    total=total,
                ) from exc
            inserted += len(chunk)
            chunks_written += 1
            logger.info("Lote %s insertado: %s de %s registros.", chunks_written, inserted, total)
            if on_progress is not None:
                on_progress(inserted / total * 100, inserted, total)
        return PersistenceResult(inserted_count=inserted, chunks_written=chunks_written, total=total)
