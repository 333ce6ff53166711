from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from finanzas.models import CatalogKind, RecordKind


@dataclass(frozen=True)
class ImportColumn:
    field: str
    label: str
    instruction: str
    width: int
    required_message: str = ""


@dataclass(frozen=True)
class CatalogReference:
    """A spreadsheet column whose text is resolved against a catalog."""

    field: str
    kind: str
    scope_field: str | None = None
    optional: bool = False


@dataclass(frozen=True)
class ImportLayout:
    code: str
    record_kind: str
    record_label: str
    sheet_title: str
    columns: tuple[ImportColumn, ...]
    required_fields: tuple[str, ...]
    optional_text_fields: tuple[str, ...]
    references: tuple[CatalogReference, ...]
    record_fields: tuple[str, ...]
    example_values: dict[str, Any]

    @property
    def labels(self) -> list[str]:
        return [column.label for column in self.columns]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(column.field for column in self.columns)

    @property
    def catalog_kinds(self) -> tuple[str, ...]:
        return tuple(reference.kind for reference in self.references)

    def column(self, field_name: str) -> ImportColumn:
        for column in self.columns:
            if column.field == field_name:
                return column
        raise KeyError(field_name)

    def label_for(self, field_name: str) -> str:
        return self.column(field_name).label

    @property
    def has_estado(self) -> bool:
        return "estado" in self.field_names


@dataclass
class RawRow:
    """One spreadsheet line mapped onto the fixed import columns."""

    row_number: int
    fecha: Any = None
    negocio: Any = None
    region: Any = None
    categoria: Any = None
    concepto: Any = None
    proveedor: Any = None
    comprador: Any = None
    medio_pago: Any = None
    nombre: Any = None
    valor: Any = None
    observaciones: Any = None
    estado: Any = None
    extra: tuple[Any, ...] = field(default_factory=tuple)

    ANCHOR_FIELDS = ("fecha", "negocio", "nombre")

    @classmethod
    def from_values(cls, row_number: int, values, layout: ImportLayout) -> "RawRow":
        values = tuple(values or ())
        names = layout.field_names
        mapped = {name: values[idx] if idx < len(values) else None for idx, name in enumerate(names)}
        extra = tuple(value for value in values[len(names):] if not _is_blank(value))
        return cls(row_number=row_number, extra=extra, **mapped)

    def value(self, field_name: str) -> Any:
        return getattr(self, field_name)

    def is_blank(self) -> bool:
        return all(_is_blank(self.value(name)) for name in self.ANCHOR_FIELDS)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


GASTOS_LAYOUT = ImportLayout(
    code="gastos",
    record_kind=RecordKind.GASTO,
    record_label="gastos",
    sheet_title="Plantilla Gastos",
    columns=(
        ImportColumn("fecha", "Fecha", "YYYY-MM-DD", 12, "Fecha es obligatoria o tiene formato inválido"),
        ImportColumn("negocio", "Negocio", "Nombre exacto del negocio", 20, "Negocio es obligatorio"),
        ImportColumn("region", "Región", "Nombre exacto de la región", 20, "Región es obligatoria"),
        ImportColumn("categoria", "Categoría", "Nombre exacto de la categoría", 20, "Categoría es obligatoria"),
        ImportColumn("concepto", "Concepto", "Nombre exacto del concepto", 25, "Concepto es obligatorio"),
        ImportColumn("proveedor", "Proveedor", "Nombre del proveedor (opcional)", 25),
        ImportColumn("medio_pago", "Medio de Pago", "Nombre del medio de pago", 20, "Medio de Pago es obligatorio"),
        ImportColumn("nombre", "Nombre del Gasto", "Descripción del gasto", 35, "Nombre del Gasto es obligatorio"),
        ImportColumn("valor", "Valor", "Valor numérico sin formato", 15, "Valor debe ser numérico"),
        ImportColumn("observaciones", "Observaciones", "Observaciones (opcional)", 30),
        ImportColumn("estado", "Estado", "Pendiente o Confirmado", 12),
    ),
    required_fields=("fecha", "negocio", "region", "categoria", "concepto", "medio_pago", "nombre", "valor"),
    optional_text_fields=("proveedor", "observaciones", "estado"),
    references=(
        CatalogReference("negocio", CatalogKind.NEGOCIO),
        CatalogReference("region", CatalogKind.REGION),
        CatalogReference("categoria", CatalogKind.CATEGORIA_GASTO),
        CatalogReference("concepto", CatalogKind.CONCEPTO_GASTO, scope_field="categoria"),
        CatalogReference("medio_pago", CatalogKind.MEDIO_PAGO),
        CatalogReference("proveedor", CatalogKind.PROVEEDOR, optional=True),
    ),
    record_fields=(
        "fecha",
        "negocio_id",
        "region_id",
        "categoria_id",
        "concepto_id",
        "proveedor_id",
        "medio_pago_id",
        "nombre",
        "valor",
        "observaciones",
        "estado",
    ),
    example_values={
        "fecha": "2025-01-15",
        "nombre": "Compra de materiales",
        "valor": 50000,
        "observaciones": "Gasto de ejemplo",
        "estado": "Pendiente",
    },
)

INGRESOS_LAYOUT = ImportLayout(
    code="ingresos",
    record_kind=RecordKind.INGRESO,
    record_label="ingresos",
    sheet_title="Plantilla Ingresos",
    columns=(
        ImportColumn("fecha", "Fecha", "YYYY-MM-DD", 12, "Fecha es obligatoria o tiene formato inválido"),
        ImportColumn("negocio", "Negocio", "Nombre exacto del negocio", 20, "Negocio es obligatorio"),
        ImportColumn("region", "Región", "Nombre exacto de la región", 20, "Región es obligatoria"),
        ImportColumn("categoria", "Categoría", "Nombre exacto de la categoría", 25, "Categoría es obligatoria"),
        ImportColumn("comprador", "Comprador", "Nombre del comprador (opcional)", 25),
        ImportColumn("medio_pago", "Medio de Pago", "Nombre del medio de pago", 20, "Medio de Pago es obligatorio"),
        ImportColumn(
            "nombre",
            "Nombre del Ingreso",
            "Descripción del ingreso",
            35,
            "Nombre del Ingreso es obligatorio",
        ),
        ImportColumn("valor", "Valor", "Valor numérico sin formato", 15, "Valor debe ser numérico"),
        ImportColumn("observaciones", "Observaciones", "Observaciones (opcional)", 30),
    ),
    required_fields=("fecha", "negocio", "region", "categoria", "medio_pago", "nombre", "valor"),
    optional_text_fields=("comprador", "observaciones"),
    references=(
        CatalogReference("negocio", CatalogKind.NEGOCIO),
        CatalogReference("region", CatalogKind.REGION),
        CatalogReference("categoria", CatalogKind.CATEGORIA_INGRESO, scope_field="negocio"),
        CatalogReference("medio_pago", CatalogKind.MEDIO_PAGO),
        CatalogReference("comprador", CatalogKind.COMPRADOR, optional=True),
    ),
    record_fields=(
        "fecha",
        "negocio_id",
        "region_id",
        "categoria_id",
        "comprador_id",
        "medio_pago_id",
        "nombre",
        "valor",
        "observaciones",
    ),
    example_values={
        "fecha": "2025-01-15",
        "nombre": "Venta de productos",
        "valor": 150000,
        "observaciones": "Ingreso de ejemplo",
    },
)

IMPORT_LAYOUTS: dict[str, ImportLayout] = {
    GASTOS_LAYOUT.code: GASTOS_LAYOUT,
    INGRESOS_LAYOUT.code: INGRESOS_LAYOUT,
}


def get_layout(code: str) -> ImportLayout:
    return IMPORT_LAYOUTS[code]
