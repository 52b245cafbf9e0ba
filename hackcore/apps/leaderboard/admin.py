from __future__ import annotations

from django.contrib import admin

from .models import ShortlistEntry


@admin.register(ShortlistEntry)
class ShortlistEntryAdmin(admin.ModelAdmin):
    list_display = ("rank", "team", "event", "total", "created_at")
    list_filter = ("event",)
    search_fields = ("team__name",)
    ordering = ("event", "rank")

    # La foto solo la escribe confirm_shortlist
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
