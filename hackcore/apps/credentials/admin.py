from __future__ import annotations

from django.contrib import admin

from .models import AttendanceAggregate, Credential


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    list_display = ("holder", "team", "event", "purpose", "used", "used_at", "used_by")
    list_filter = ("event", "purpose", "used")
    search_fields = ("holder__username", "holder__email", "team__name", "token")
    raw_id_fields = ("event", "holder", "team", "used_by")
    # El canje solo pasa por el escáner (compare-and-set)
    readonly_fields = ("token", "used", "used_at", "used_by", "created_at")


@admin.register(AttendanceAggregate)
class AttendanceAggregateAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "members_scanned", "total_members", "reported", "reported_at")
    list_filter = ("event", "reported")
    search_fields = ("team__name",)
    readonly_fields = ("members_scanned", "reported", "reported_at", "updated_at")
