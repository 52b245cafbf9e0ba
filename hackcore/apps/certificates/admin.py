from __future__ import annotations

from django.contrib import admin

from .models import Certificate


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ("certificate_id", "holder", "team", "event", "issued_at")
    list_filter = ("event",)
    search_fields = ("certificate_id", "holder__username", "holder__email", "team__name")
    raw_id_fields = ("event", "holder", "team")
    readonly_fields = ("certificate_id", "sequence", "artifact_ref", "issued_at")
