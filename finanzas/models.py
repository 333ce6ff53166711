from __future__ import annotations

from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CatalogKind(models.TextChoices):
    NEGOCIO = "negocio", "Negocio"
    REGION = "region", "Región"
    CATEGORIA_GASTO = "categoria_gasto", "Categoría de gasto"
    CONCEPTO_GASTO = "concepto_gasto", "Concepto de gasto"
    PROVEEDOR = "proveedor", "Proveedor"
    CATEGORIA_INGRESO = "categoria_ingreso", "Categoría de ingreso"
    COMPRADOR = "comprador", "Comprador"
    MEDIO_PAGO = "medio_pago", "Medio de pago"


class RecordKind(models.TextChoices):
    GASTO = "gasto", "Gasto"
    INGRESO = "ingreso", "Ingreso"


class CatalogModel(TimeStampedModel):
    nombre = models.CharField("Nombre", max_length=200)
    descripcion = models.TextField("Descripción", blank=True)
    activo = models.BooleanField("Activo", default=True)

    class Meta:
        abstract = True
        ordering = ("nombre",)

    def __str__(self) -> str:
        return self.nombre


class Negocio(CatalogModel):
    class Meta(CatalogModel.Meta):
        verbose_name = "Negocio"
        verbose_name_plural = "Negocios"


class Region(CatalogModel):
    class Meta(CatalogModel.Meta):
        verbose_name = "Región"
        verbose_name_plural = "Regiones"


class MedioPago(CatalogModel):
    class Meta(CatalogModel.Meta):
        verbose_name = "Medio de pago"
        verbose_name_plural = "Medios de pago"


class CategoriaGasto(CatalogModel):
    class Meta(CatalogModel.Meta):
        verbose_name = "Categoría de gasto"
        verbose_name_plural = "Categorías de gasto"


class ConceptoGasto(CatalogModel):
    categoria = models.ForeignKey(
        CategoriaGasto,
        on_delete=models.PROTECT,
        related_name="conceptos",
        verbose_name="Categoría",
    )

    class Meta(CatalogModel.Meta):
        verbose_name = "Concepto de gasto"
        verbose_name_plural = "Conceptos de gasto"
        ordering = ("categoria__nombre", "nombre")


class Proveedor(CatalogModel):
    nit = models.CharField("NIT", max_length=50, blank=True)
    telefono = models.CharField("Teléfono", max_length=50, blank=True)
    email = models.EmailField("Correo", blank=True)

    class Meta(CatalogModel.Meta):
        verbose_name = "Proveedor"
        verbose_name_plural = "Proveedores"


class CategoriaIngreso(CatalogModel):
    negocio = models.ForeignKey(
        Negocio,
        on_delete=models.PROTECT,
        related_name="categorias_ingreso",
        verbose_name="Negocio",
    )

    class Meta(CatalogModel.Meta):
        verbose_name = "Categoría de ingreso"
        verbose_name_plural = "Categorías de ingreso"
        ordering = ("negocio__nombre", "nombre")


class Comprador(CatalogModel):
    telefono = models.CharField("Teléfono", max_length=50, blank=True)
    email = models.EmailField("Correo", blank=True)

    class Meta(CatalogModel.Meta):
        verbose_name = "Comprador"
        verbose_name_plural = "Compradores"


class Gasto(TimeStampedModel):
    class Estado(models.TextChoices):
        PENDIENTE = "Pendiente", "Pendiente"
        CONFIRMADO = "Confirmado", "Confirmado"

    fecha = models.DateField("Fecha")
    negocio = models.ForeignKey(Negocio, on_delete=models.PROTECT, related_name="gastos", verbose_name="Negocio")
    region = models.ForeignKey(Region, on_delete=models.PROTECT, related_name="gastos", verbose_name="Región")
    categoria = models.ForeignKey(
        CategoriaGasto,
        on_delete=models.PROTECT,
        related_name="gastos",
        verbose_name="Categoría",
    )
    concepto = models.ForeignKey(
        ConceptoGasto,
        on_delete=models.PROTECT,
        related_name="gastos",
        verbose_name="Concepto",
    )
    proveedor = models.ForeignKey(
        Proveedor,
        on_delete=models.PROTECT,
        related_name="gastos",
        verbose_name="Proveedor",
        null=True,
        blank=True,
    )
    medio_pago = models.ForeignKey(
        MedioPago,
        on_delete=models.PROTECT,
        related_name="gastos",
        verbose_name="Medio de pago",
    )
    nombre = models.CharField("Nombre del gasto", max_length=255)
    valor = models.DecimalField("Valor", max_digits=16, decimal_places=2)
    observaciones = models.TextField("Observaciones", blank=True, null=True)
    estado = models.CharField("Estado", max_length=20, choices=Estado.choices, default=Estado.PENDIENTE)

    class Meta:
        verbose_name = "Gasto"
        verbose_name_plural = "Gastos"
        ordering = ("-fecha", "-id")

    def __str__(self) -> str:
        return f"{self.fecha:%Y-%m-%d} · {self.nombre}"


class Ingreso(TimeStampedModel):
    fecha = models.DateField("Fecha")
    negocio = models.ForeignKey(Negocio, on_delete=models.PROTECT, related_name="ingresos", verbose_name="Negocio")
    region = models.ForeignKey(Region, on_delete=models.PROTECT, related_name="ingresos", verbose_name="Región")
    categoria = models.ForeignKey(
        CategoriaIngreso,
        on_delete=models.PROTECT,
        related_name="ingresos",
        verbose_name="Categoría",
    )
    comprador = models.ForeignKey(
        Comprador,
        on_delete=models.PROTECT,
        related_name="ingresos",
        verbose_name="Comprador",
        null=True,
        blank=True,
    )
    medio_pago = models.ForeignKey(
        MedioPago,
        on_delete=models.PROTECT,
        related_name="ingresos",
        verbose_name="Medio de pago",
    )
    nombre = models.CharField("Nombre del ingreso", max_length=255)
    valor = models.DecimalField("Valor", max_digits=16, decimal_places=2)
    observaciones = models.TextField("Observaciones", blank=True, null=True)

    class Meta:
        verbose_name = "Ingreso"
        verbose_name_plural = "Ingresos"
        ordering = ("-fecha", "-id")

    def __str__(self) -> str:
        return f"{self.fecha:%Y-%m-%d} · {self.nombre}"
