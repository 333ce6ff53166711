from __future__ import annotations

from django import forms
from django.core.exceptions import ValidationError


class CargaMasivaForm(forms.Form):
    archivo = forms.FileField(
        label="Archivo de Excel (.xlsx)",
        help_text="Usa la plantilla descargada; los datos inician en la tercera fila.",
        widget=forms.FileInput(attrs={"accept": ".xlsx"}),
    )

    def clean_archivo(self):
        uploaded = self.cleaned_data["archivo"]
        filename = uploaded.name.lower()
        if not filename.endswith(".xlsx"):
            raise ValidationError("El archivo debe tener extensión .xlsx.")
        return uploaded
