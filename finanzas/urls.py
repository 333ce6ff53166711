from django.urls import path

from . import views

app_name = 'finanzas'

urlpatterns = [
    path('carga-masiva/<str:tipo>/', views.CargaMasivaView.as_view(), name='carga-masiva'),
    path(
        'carga-masiva/<str:tipo>/plantilla/',
        views.CargaMasivaPlantillaView.as_view(),
        name='carga-masiva-plantilla',
    ),
]
