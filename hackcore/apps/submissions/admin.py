from __future__ import annotations

from django.contrib import admin, messages

from .models import FinalSubmission, ProposalSubmission
from .services.entries import lock_final_submissions


@admin.register(ProposalSubmission)
class ProposalSubmissionAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "artifact_url", "submitted_by", "submitted_at")
    list_filter = ("event",)
    search_fields = ("team__name",)
    raw_id_fields = ("event", "team", "submitted_by")


@admin.register(FinalSubmission)
class FinalSubmissionAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "repository_url", "locked", "submitted_at")
    list_filter = ("event", "locked")
    search_fields = ("team__name",)
    raw_id_fields = ("event", "team", "submitted_by")
    actions = ["action_lock_event"]

    @admin.action(description="Bloquear entregas finales del evento")
    def action_lock_event(self, request, queryset):
        total = 0
        for event_id in set(queryset.values_list("event_id", flat=True)):
            total += lock_final_submissions(queryset.filter(event_id=event_id).first().event)
        self.message_user(request, f"{total} entregas bloqueadas.", level=messages.SUCCESS)
