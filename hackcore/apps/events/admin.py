from __future__ import annotations

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from hackcore.apps.core.errors import DomainError
from hackcore.apps.certificates.services.allocator import generate_certificates
from hackcore.apps.credentials.services.issuer import issue_event_credentials
from hackcore.apps.judging.services.panel import confirm_grand_finale, lock_scores
from hackcore.apps.leaderboard.services.ranking import confirm_shortlist
from .models import Event
from .services.phases import publish_event, sync, sync_many


# -----------------------------
# Event
# -----------------------------
@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "phase",
        "registration_deadline",
        "proposal_deadline",
        "execution_start",
        "execution_end",
        "shortlist_target_count",
    )
    list_filter = ("phase",)
    search_fields = ("title", "slug", "committee_name")
    prepopulated_fields = {"slug": ("title",)}
    # La fase solo la cambian los servicios (sync / acciones)
    readonly_fields = ("phase", "created_at", "updated_at")
    actions = [
        "action_sync_phase",
        "action_publish",
        "action_confirm_shortlist",
        "action_issue_credentials",
        "action_grand_finale",
        "action_generate_certificates",
        "action_lock_scores",
    ]

    @admin.action(description=_("Sincronizar fase con las fechas"))
    def action_sync_phase(self, request, queryset):
        changed = sync_many(queryset)
        self.message_user(request, f"{changed} eventos cambiaron de fase.", level=messages.SUCCESS)

    @admin.action(description=_("Publicar (abrir inscripción)"))
    def action_publish(self, request, queryset):
        published = 0
        for event in queryset:
            try:
                publish_event(event)
            except DomainError as exc:
                self.message_user(request, f"{event}: {exc.message}", level=messages.WARNING)
            else:
                published += 1
        self.message_user(request, f"{published} eventos publicados.", level=messages.SUCCESS)

    def _run_each(self, request, queryset, operation, done_message):
        done = 0
        for event in queryset:
            try:
                operation(event)
            except DomainError as exc:
                self.message_user(request, f"{event}: {exc.message}", level=messages.WARNING)
            else:
                done += 1
        self.message_user(request, done_message.format(done), level=messages.SUCCESS)

    @admin.action(description=_("Confirmar preselección (top N)"))
    def action_confirm_shortlist(self, request, queryset):
        self._run_each(request, queryset, confirm_shortlist, "Preselección confirmada en {} eventos.")

    @admin.action(description=_("Emitir QR de ingreso y comidas"))
    def action_issue_credentials(self, request, queryset):
        self._run_each(request, queryset, issue_event_credentials, "QR emitidos en {} eventos.")

    @admin.action(description=_("Confirmar gran final (pasar a evaluación)"))
    def action_grand_finale(self, request, queryset):
        self._run_each(request, queryset, confirm_grand_finale, "Gran final confirmada en {} eventos.")

    @admin.action(description=_("Generar certificados"))
    def action_generate_certificates(self, request, queryset):
        self._run_each(request, queryset, generate_certificates, "Certificados generados en {} eventos.")

    @admin.action(description=_("Bloquear puntajes y finalizar"))
    def action_lock_scores(self, request, queryset):
        self._run_each(request, queryset, lock_scores, "{} eventos finalizados.")

    def get_object(self, request, object_id, from_field=None):
        # Mantener la fase al día también en el admin (lectura)
        obj = super().get_object(request, object_id, from_field)
        return sync(obj) if obj is not None else obj
