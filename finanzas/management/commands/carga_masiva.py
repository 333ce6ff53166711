from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from finanzas.services.catalog_store import DjangoRecordStore
from finanzas.services.import_layouts import IMPORT_LAYOUTS
from finanzas.services.import_persistence import PersistenceError
from finanzas.services.import_rows import ParseError
from finanzas.services.import_sessions import CatalogLoadError, ImportNotifier, ImportSession, ImportState
from finanzas.services.import_templates import build_import_template


class Command(BaseCommand):
    help = "Valida e inserta gastos o ingresos desde una plantilla de Excel (.xlsx)."

    def add_arguments(self, parser):
        parser.add_argument("tipo", choices=sorted(IMPORT_LAYOUTS), help="Tipo de registros a cargar.")
        parser.add_argument("archivo", nargs="?", help="Ruta del archivo .xlsx a cargar.")
        parser.add_argument(
            "--confirmar",
            action="store_true",
            default=False,
            help="Inserta los registros si la validación no encuentra errores.",
        )
        parser.add_argument(
            "--chunk-size",
            dest="chunk_size",
            type=int,
            default=None,
            help="Cantidad de registros por lote (default: FINANZAS_IMPORT_CHUNK_SIZE).",
        )
        parser.add_argument(
            "--plantilla",
            dest="plantilla",
            help="Escribe la plantilla del tipo indicado en esta ruta y termina.",
        )

    def handle(self, *args, **options):
        layout = IMPORT_LAYOUTS[options["tipo"]]
        chunk_size = options["chunk_size"]
        if chunk_size is not None and chunk_size <= 0:
            raise CommandError("El parámetro --chunk-size debe ser un entero positivo.")

        if options.get("plantilla"):
            self._write_template(layout, options["plantilla"])
            return

        archivo = options.get("archivo")
        if not archivo:
            raise CommandError("Indica el archivo .xlsx a cargar o usa --plantilla.")
        path = Path(archivo)
        if path.suffix.lower() != ".xlsx":
            raise CommandError("El archivo debe tener extensión .xlsx.")
        if not path.is_file():
            raise CommandError(f"No existe el archivo '{archivo}'.")

        self.stdout.write(self.style.MIGRATE_HEADING(f"Validando {layout.record_label} desde {path.name}"))
        notifier = ImportNotifier(on_success=self._on_success(layout.record_label), on_error=self._on_error)
        session = ImportSession(layout, DjangoRecordStore(), notifier=notifier, chunk_size=chunk_size)
        with path.open("rb") as handle:
            try:
                state = session.load(handle, filename=path.name)
            except (ParseError, CatalogLoadError) as exc:
                raise CommandError(str(exc)) from exc

        if state == ImportState.VALIDATION_FAILED:
            shown, remaining = session.error_preview()
            for error in shown:
                self.stdout.write(f"  Fila {error.row_number} · {error.field}: {error.message}")
            if remaining:
                self.stdout.write(f"  ... y {remaining} errores más.")
            raise CommandError("La carga no se realizó por errores de validación.")

        summary = session.summary()
        self.stdout.write(
            self.style.HTTP_INFO(
                f"  → {summary.row_count} {layout.record_label} válidos por un total de {summary.total_value}"
            )
        )
        for kind, count in sorted(summary.created_counts.items()):
            self.stdout.write(self.style.HTTP_INFO(f"  → Catálogo {kind}: {count} registros creados"))

        if not options["confirmar"]:
            self.stdout.write(self.style.WARNING("Validación completada. Usa --confirmar para insertar los registros."))
            return

        try:
            session.confirm(on_progress=self._on_progress)
        except PersistenceError as exc:
            raise CommandError(
                f"{exc} Se insertaron {exc.inserted_count} de {exc.total} {layout.record_label}."
            ) from exc

    def _write_template(self, layout, destination: str) -> None:
        path = Path(destination)
        workbook = build_import_template(layout, DjangoRecordStore())
        try:
            workbook.save(path)
        except OSError as exc:
            raise CommandError(f"No fue posible escribir la plantilla en '{destination}': {exc}") from exc
        self.stdout.write(self.style.SUCCESS(f"Plantilla de {layout.record_label} escrita en {path}."))

    def _on_progress(self, progress: float, inserted: int, total: int) -> None:
        self.stdout.write(self.style.HTTP_INFO(f"  → Insertados {inserted} de {total} ({progress:.0f}%)"))

    def _on_success(self, record_label: str):
        def _notify(count: int) -> None:
            self.stdout.write(self.style.SUCCESS(f"Carga completada. Se insertaron {count} {record_label}."))

        return _notify

    def _on_error(self, message: str) -> None:
        self.stderr.write(message)
