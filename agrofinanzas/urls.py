"""
URL configuration for agrofinanzas project.

Finance bulk uploads live under ``finanzas/``; everything else in the farm
suite is served by other deployments.
"""
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

admin.site.site_header = "Finanzas de la finca"
admin.site.site_title = "Finanzas de la finca"
admin.site.index_title = "Panel de administracion"

urlpatterns = [
    path('admin/', admin.site.urls),
    path(
        '',
        RedirectView.as_view(url='/finanzas/carga-masiva/gastos/', permanent=False),
    ),
    path('finanzas/', include('finanzas.urls', namespace='finanzas')),
]
