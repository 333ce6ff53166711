from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


def _catalog_fields(*extra):
    return [
        (
            "id",
            models.BigAutoField(
                auto_created=True,
                primary_key=True,
                serialize=False,
                verbose_name="ID",
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("nombre", models.CharField(max_length=200, verbose_name="Nombre")),
        ("descripcion", models.TextField(blank=True, verbose_name="Descripción")),
        ("activo", models.BooleanField(default=True, verbose_name="Activo")),
        *extra,
    ]


def _record_fields(name_label: str, *extra):
    return [
        (
            "id",
            models.BigAutoField(
                auto_created=True,
                primary_key=True,
                serialize=False,
                verbose_name="ID",
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("fecha", models.DateField(verbose_name="Fecha")),
        ("nombre", models.CharField(max_length=255, verbose_name=name_label)),
        ("valor", models.DecimalField(decimal_places=2, max_digits=16, verbose_name="Valor")),
        ("observaciones", models.TextField(blank=True, null=True, verbose_name="Observaciones")),
        *extra,
    ]


def _protected_fk(to: str, related_name: str, verbose_name: str, *, optional: bool = False):
    kwargs = {"blank": True, "null": True} if optional else {}
    return models.ForeignKey(
        on_delete=django.db.models.deletion.PROTECT,
        related_name=related_name,
        to=to,
        verbose_name=verbose_name,
        **kwargs,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Negocio",
            fields=_catalog_fields(),
            options={
                "verbose_name": "Negocio",
                "verbose_name_plural": "Negocios",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Region",
            fields=_catalog_fields(),
            options={
                "verbose_name": "Región",
                "verbose_name_plural": "Regiones",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="MedioPago",
            fields=_catalog_fields(),
            options={
                "verbose_name": "Medio de pago",
                "verbose_name_plural": "Medios de pago",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="CategoriaGasto",
            fields=_catalog_fields(),
            options={
                "verbose_name": "Categoría de gasto",
                "verbose_name_plural": "Categorías de gasto",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="ConceptoGasto",
            fields=_catalog_fields(
                ("categoria", _protected_fk("finanzas.categoriagasto", "conceptos", "Categoría")),
            ),
            options={
                "verbose_name": "Concepto de gasto",
                "verbose_name_plural": "Conceptos de gasto",
                "ordering": ("categoria__nombre", "nombre"),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Proveedor",
            fields=_catalog_fields(
                ("nit", models.CharField(blank=True, max_length=50, verbose_name="NIT")),
                ("telefono", models.CharField(blank=True, max_length=50, verbose_name="Teléfono")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Correo")),
            ),
            options={
                "verbose_name": "Proveedor",
                "verbose_name_plural": "Proveedores",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="CategoriaIngreso",
            fields=_catalog_fields(
                ("negocio", _protected_fk("finanzas.negocio", "categorias_ingreso", "Negocio")),
            ),
            options={
                "verbose_name": "Categoría de ingreso",
                "verbose_name_plural": "Categorías de ingreso",
                "ordering": ("negocio__nombre", "nombre"),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Comprador",
            fields=_catalog_fields(
                ("telefono", models.CharField(blank=True, max_length=50, verbose_name="Teléfono")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Correo")),
            ),
            options={
                "verbose_name": "Comprador",
                "verbose_name_plural": "Compradores",
                "ordering": ("nombre",),
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Gasto",
            fields=_record_fields(
                "Nombre del gasto",
                (
                    "estado",
                    models.CharField(
                        choices=[("Pendiente", "Pendiente"), ("Confirmado", "Confirmado")],
                        default="Pendiente",
                        max_length=20,
                        verbose_name="Estado",
                    ),
                ),
                ("negocio", _protected_fk("finanzas.negocio", "gastos", "Negocio")),
                ("region", _protected_fk("finanzas.region", "gastos", "Región")),
                ("categoria", _protected_fk("finanzas.categoriagasto", "gastos", "Categoría")),
                ("concepto", _protected_fk("finanzas.conceptogasto", "gastos", "Concepto")),
                ("proveedor", _protected_fk("finanzas.proveedor", "gastos", "Proveedor", optional=True)),
                ("medio_pago", _protected_fk("finanzas.mediopago", "gastos", "Medio de pago")),
            ),
            options={
                "verbose_name": "Gasto",
                "verbose_name_plural": "Gastos",
                "ordering": ("-fecha", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Ingreso",
            fields=_record_fields(
                "Nombre del ingreso",
                ("negocio", _protected_fk("finanzas.negocio", "ingresos", "Negocio")),
                ("region", _protected_fk("finanzas.region", "ingresos", "Región")),
                ("categoria", _protected_fk("finanzas.categoriaingreso", "ingresos", "Categoría")),
                ("comprador", _protected_fk("finanzas.comprador", "ingresos", "Comprador", optional=True)),
                ("medio_pago", _protected_fk("finanzas.mediopago", "ingresos", "Medio de pago")),
            ),
            options={
                "verbose_name": "Ingreso",
                "verbose_name_plural": "Ingresos",
                "ordering": ("-fecha", "-id"),
            },
        ),
    ]
