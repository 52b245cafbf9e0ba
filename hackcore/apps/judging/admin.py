from __future__ import annotations

from django.contrib import admin

from .models import JudgeAssignment


@admin.register(JudgeAssignment)
class JudgeAssignmentAdmin(admin.ModelAdmin):
    list_display = ("judge", "team", "event", "assigned_by", "created_at")
    list_filter = ("event",)
    search_fields = ("judge__username", "team__name")
    raw_id_fields = ("event", "judge", "team", "assigned_by")
