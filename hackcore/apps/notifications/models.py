from __future__ import annotations

from django.conf import settings
from django.db import models


class Notification(models.Model):
    """Bandeja in-app de cada usuario."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    title = models.CharField(max_length=160)
    message = models.TextField(blank=True)
    kind = models.CharField(max_length=32, db_index=True)
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return f"{self.user} · {self.kind} · {self.title}"


class Announcement(models.Model):
    """Aviso del comité a los equipos de un evento; se reparte como Notification."""

    class Audience(models.TextChoices):
        ALL = "all", "Todos los equipos confirmados"
        SHORTLISTED = "shortlisted", "Solo preseleccionados"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="announcements")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="announcements"
    )
    title = models.CharField(max_length=160)
    message = models.TextField()
    link = models.URLField(max_length=500, blank=True)
    audience = models.CharField(max_length=16, choices=Audience.choices, default=Audience.ALL)
    notified_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return f"{self.event} · {self.title} ({self.audience})"
