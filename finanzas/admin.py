from django.contrib import admin

from .models import (
    CategoriaGasto,
    CategoriaIngreso,
    Comprador,
    ConceptoGasto,
    Gasto,
    Ingreso,
    MedioPago,
    Negocio,
    Proveedor,
    Region,
)


@admin.register(Negocio, Region, MedioPago, CategoriaGasto)
class CatalogoCerradoAdmin(admin.ModelAdmin):
    list_display = ("nombre", "activo", "updated_at")
    search_fields = ("nombre",)
    list_filter = ("activo",)


@admin.register(ConceptoGasto)
class ConceptoGastoAdmin(admin.ModelAdmin):
    list_display = ("nombre", "categoria", "activo", "created_at")
    search_fields = ("nombre", "categoria__nombre")
    list_filter = ("activo", "categoria")


@admin.register(CategoriaIngreso)
class CategoriaIngresoAdmin(admin.ModelAdmin):
    list_display = ("nombre", "negocio", "activo", "created_at")
    search_fields = ("nombre", "negocio__nombre")
    list_filter = ("activo", "negocio")


@admin.register(Proveedor)
class ProveedorAdmin(admin.ModelAdmin):
    list_display = ("nombre", "nit", "telefono", "email", "activo")
    search_fields = ("nombre", "nit", "email")
    list_filter = ("activo",)


@admin.register(Comprador)
class CompradorAdmin(admin.ModelAdmin):
    list_display = ("nombre", "telefono", "email", "activo")
    search_fields = ("nombre", "email")
    list_filter = ("activo",)


@admin.register(Gasto)
class GastoAdmin(admin.ModelAdmin):
    list_display = ("fecha", "nombre", "negocio", "categoria", "concepto", "valor", "estado")
    search_fields = ("nombre", "observaciones", "proveedor__nombre")
    list_filter = ("estado", "negocio", "region", "categoria")
    date_hierarchy = "fecha"
    autocomplete_fields = ("concepto", "proveedor")


@admin.register(Ingreso)
class IngresoAdmin(admin.ModelAdmin):
    list_display = ("fecha", "nombre", "negocio", "categoria", "comprador", "valor")
    search_fields = ("nombre", "observaciones", "comprador__nombre")
    list_filter = ("negocio", "region", "categoria")
    date_hierarchy = "fecha"
    autocomplete_fields = ("categoria", "comprador")
