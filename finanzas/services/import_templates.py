from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Any

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from finanzas.models import CatalogKind
from finanzas.services.catalog_store import CatalogEntity, RecordStore
from finanzas.services.import_layouts import ImportLayout

CATALOG_SHEET_TITLE = "Catálogos"
CATALOG_SHEET_HEADING = "CATÁLOGOS DISPONIBLES"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class AppendixSection:
    title: str
    kind: str
    group_by: str | None = None


APPENDIX_SECTIONS: dict[str, tuple[AppendixSection, ...]] = {
    "gastos": (
        AppendixSection("NEGOCIOS:", CatalogKind.NEGOCIO),
        AppendixSection("REGIONES:", CatalogKind.REGION),
        AppendixSection("CATEGORÍAS:", CatalogKind.CATEGORIA_GASTO),
        AppendixSection("CONCEPTOS (por categoría):", CatalogKind.CONCEPTO_GASTO, group_by=CatalogKind.CATEGORIA_GASTO),
        AppendixSection("PROVEEDORES:", CatalogKind.PROVEEDOR),
        AppendixSection("MEDIOS DE PAGO:", CatalogKind.MEDIO_PAGO),
    ),
    "ingresos": (
        AppendixSection("NEGOCIOS:", CatalogKind.NEGOCIO),
        AppendixSection("REGIONES:", CatalogKind.REGION),
        AppendixSection("CATEGORÍAS (por negocio):", CatalogKind.CATEGORIA_INGRESO, group_by=CatalogKind.NEGOCIO),
        AppendixSection("COMPRADORES:", CatalogKind.COMPRADOR),
        AppendixSection("MEDIOS DE PAGO:", CatalogKind.MEDIO_PAGO),
    ),
}

EXAMPLE_FALLBACKS = {
    "negocio": "Ejemplo Negocio",
    "region": "Ejemplo Región",
    "categoria": "Ejemplo Categoría",
    "concepto": "Ejemplo Concepto",
    "proveedor": "",
    "comprador": "",
    "medio_pago": "Efectivo",
}


def load_template_catalogs(layout: ImportLayout, store: RecordStore) -> dict[str, list[CatalogEntity]]:
    kinds: list[str] = []
    for section in APPENDIX_SECTIONS[layout.code]:
        for kind in (section.kind, section.group_by):
            if kind and kind not in kinds:
                kinds.append(kind)
    return {kind: store.find(kind, {"activo": True}) for kind in kinds}


def build_import_template(layout: ImportLayout, store: RecordStore) -> Workbook:
    """Build the downloadable workbook from the catalogs active right now."""
    catalogs = load_template_catalogs(layout, store)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = layout.sheet_title
    sheet.append(layout.labels)
    sheet.append([column.instruction for column in layout.columns])
    sheet.append(build_example_row(layout, catalogs))
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for cell in sheet[2]:
        cell.font = Font(italic=True)
    for index, column in enumerate(layout.columns, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = column.width

    appendix = workbook.create_sheet(CATALOG_SHEET_TITLE)
    for row in build_catalog_appendix(layout, catalogs):
        appendix.append(row)
    appendix.column_dimensions["A"].width = 40
    appendix["A1"].font = Font(bold=True)
    return workbook


def build_example_row(layout: ImportLayout, catalogs: dict[str, list[CatalogEntity]]) -> list[Any]:
    chosen: dict[str, CatalogEntity] = {}
    for reference in layout.references:
        candidates = catalogs.get(reference.kind, [])
        if reference.scope_field and reference.scope_field in chosen:
            parent_id = chosen[reference.scope_field].id
            candidates = [entity for entity in candidates if entity.scope_id == parent_id] or candidates
        if candidates:
            chosen[reference.field] = candidates[0]
    row: list[Any] = []
    for column in layout.columns:
        if column.field in chosen:
            row.append(chosen[column.field].raw_name)
        elif column.field in layout.example_values:
            row.append(layout.example_values[column.field])
        else:
            row.append(EXAMPLE_FALLBACKS.get(column.field, ""))
    return row


def build_catalog_appendix(layout: ImportLayout, catalogs: dict[str, list[CatalogEntity]]) -> list[list[str]]:
    rows: list[list[str]] = [[CATALOG_SHEET_HEADING], []]
    sections = APPENDIX_SECTIONS[layout.code]
    for position, section in enumerate(sections):
        rows.append([section.title])
        entities = catalogs.get(section.kind, [])
        if section.group_by:
            for parent in catalogs.get(section.group_by, []):
                children = [entity for entity in entities if entity.scope_id == parent.id]
                if not children:
                    continue
                rows.append([f"{parent.raw_name}:"])
                rows.extend([f"  - {child.raw_name}"] for child in children)
        else:
            rows.extend([entity.raw_name] for entity in entities)
        if position < len(sections) - 1:
            rows.append([])
    return rows


def template_filename(layout: ImportLayout, today: date | None = None) -> str:
    today = today or timezone.localdate()
    return f"plantilla_{layout.code}_{today.isoformat()}.xlsx"


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()
