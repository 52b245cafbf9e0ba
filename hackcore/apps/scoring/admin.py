from __future__ import annotations

from django.contrib import admin

from .models import ScoreRecord


@admin.register(ScoreRecord)
class ScoreRecordAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "kind", "evaluator", "total", "locked", "updated_at")
    list_filter = ("event", "kind", "locked")
    search_fields = ("team__name", "evaluator__username")
    raw_id_fields = ("event", "team", "evaluator")
    # El total lo calcula el motor; el bloqueo lo ponen los servicios
    readonly_fields = ("total", "locked", "created_at", "updated_at")

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.locked:
            return False
        return super().has_change_permission(request, obj)
