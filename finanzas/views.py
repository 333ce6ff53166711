from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.contrib import messages
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import redirect
from django.urls import reverse
from django.views import generic

from agrofinanzas.mixins import StaffRequiredMixin

from .forms import CargaMasivaForm
from .models import CatalogKind
from .services.catalog_store import DjangoRecordStore
from .services.import_layouts import IMPORT_LAYOUTS, ImportLayout
from .services.import_persistence import PersistenceError
from .services.import_rows import ParseError
from .services.import_sessions import (
    CatalogLoadError,
    ImportNotifier,
    ImportSession,
    ImportState,
    ImportStateError,
)
from .services.import_templates import (
    XLSX_CONTENT_TYPE,
    build_import_template,
    template_filename,
    workbook_to_bytes,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = 'finanzas_carga_masiva'


class ImportLayoutMixin:
    """Resolves the ``tipo`` URL argument to an import layout or 404s."""

    layout: ImportLayout

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        layout = IMPORT_LAYOUTS.get(kwargs.get('tipo', ''))
        if layout is None:
            raise Http404('Tipo de carga masiva no soportado.')
        self.layout = layout
        return super().dispatch(request, *args, **kwargs)


class CargaMasivaView(StaffRequiredMixin, ImportLayoutMixin, generic.TemplateView):
    template_name = 'finanzas/carga_masiva.html'

    def post(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        action = request.POST.get('form_action')
        if action == 'upload':
            return self._upload()
        if action == 'confirm':
            return self._confirm()
        if action == 'cancel':
            return self._cancel()
        messages.error(request, 'Acción no soportada.')
        return redirect(self._base_url())

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        pending = self._restore_session()
        import_errors = kwargs.get('import_errors')
        if import_errors is None:
            import_errors = self.request.session.pop(self._errors_key, None)
        import_errors = import_errors or {}
        summary = pending.summary() if pending else None
        context.update(
            layout=self.layout,
            layouts=list(IMPORT_LAYOUTS.values()),
            upload_form=kwargs.get('upload_form') or CargaMasivaForm(),
            pending_import=pending,
            import_summary=summary,
            created_catalogs=self._created_labels(summary.created_counts) if summary else [],
            import_errors=import_errors.get('errors', []),
            import_errors_remaining=import_errors.get('remaining', 0),
            template_url=reverse('finanzas:carga-masiva-plantilla', kwargs={'tipo': self.layout.code}),
        )
        return context

    def _upload(self) -> HttpResponse:
        form = CargaMasivaForm(self.request.POST, self.request.FILES)
        if not form.is_valid():
            messages.error(self.request, 'Selecciona un archivo de Excel válido para la carga masiva.')
            return self.render_to_response(self.get_context_data(upload_form=form))

        self.request.session.pop(self._pending_key, None)
        self.request.session.pop(self._errors_key, None)
        upload = form.cleaned_data['archivo']
        session = ImportSession(self.layout, DjangoRecordStore(), notifier=self._notifier())
        try:
            state = session.load(upload, filename=upload.name)
        except (ParseError, CatalogLoadError):
            return self.render_to_response(self.get_context_data(upload_form=form))

        if state == ImportState.VALIDATION_FAILED:
            shown, remaining = session.error_preview()
            self.request.session[self._errors_key] = {
                'errors': [error.as_payload() for error in shown],
                'remaining': remaining,
            }
            return redirect(self._base_url())

        summary = session.summary()
        self.request.session[self._pending_key] = session.to_payload()
        messages.info(
            self.request,
            f"{summary.row_count} {self.layout.record_label} listos para insertar por un total de "
            f"{summary.total_value}. Revisa el resumen y confirma la carga.",
        )
        return redirect(self._base_url())

    def _confirm(self) -> HttpResponse:
        session = self._restore_session()
        if session is None:
            messages.error(self.request, 'No hay una carga pendiente de confirmación.')
            return redirect(self._base_url())
        try:
            session.confirm()
        except PersistenceError:
            self.request.session[self._pending_key] = session.to_payload()
            return redirect(self._base_url())
        except ImportStateError as exc:
            self.request.session.pop(self._pending_key, None)
            messages.error(self.request, str(exc))
            return redirect(self._base_url())
        self.request.session.pop(self._pending_key, None)
        return redirect(self._base_url())

    def _cancel(self) -> HttpResponse:
        session = self._restore_session()
        if session is None:
            messages.info(self.request, 'No hay una carga pendiente para cancelar.')
            return redirect(self._base_url())
        created_total = session.summary().created_total
        session.cancel()
        self.request.session.pop(self._pending_key, None)
        if created_total:
            messages.warning(
                self.request,
                f"Carga cancelada. Los {created_total} registros de catálogo creados durante la validación se conservan.",
            )
        else:
            messages.info(self.request, 'Carga cancelada. No se insertó ningún registro.')
        return redirect(self._base_url())

    def _restore_session(self) -> ImportSession | None:
        payload = self.request.session.get(self._pending_key)
        if not payload:
            return None
        try:
            return ImportSession.from_payload(payload, DjangoRecordStore(), notifier=self._notifier())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning('Se descartó una carga pendiente ilegible para %s.', self.layout.code, exc_info=exc)
            self.request.session.pop(self._pending_key, None)
            return None

    def _notifier(self) -> ImportNotifier:
        record_label = self.layout.record_label

        def _on_success(count: int) -> None:
            messages.success(self.request, f"Se insertaron {count} {record_label} correctamente.")

        def _on_error(message: str) -> None:
            messages.error(self.request, message)

        return ImportNotifier(on_success=_on_success, on_error=_on_error)

    @staticmethod
    def _created_labels(created_counts: dict[str, int]) -> list[dict[str, Any]]:
        return [
            {'label': CatalogKind(kind).label, 'count': count}
            for kind, count in sorted(created_counts.items())
        ]

    @property
    def _pending_key(self) -> str:
        return f"{self._session_prefix}_{self.layout.code}"

    @property
    def _errors_key(self) -> str:
        return f"{self._session_prefix}_{self.layout.code}_errores"

    @property
    def _session_prefix(self) -> str:
        return getattr(settings, 'FINANZAS_IMPORT_SESSION_KEY', DEFAULT_SESSION_KEY)

    def _base_url(self) -> str:
        return reverse('finanzas:carga-masiva', kwargs={'tipo': self.layout.code})


class CargaMasivaPlantillaView(StaffRequiredMixin, ImportLayoutMixin, generic.View):
    http_method_names = ['get']

    def get(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        workbook = build_import_template(self.layout, DjangoRecordStore())
        response = HttpResponse(workbook_to_bytes(workbook), content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{template_filename(self.layout)}"'
        return response
