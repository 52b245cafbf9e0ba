from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.db import models

ENTRY = "entry"
MEAL_PREFIX = "meal:"


def meal_purpose(kind: str) -> str:
    return f"{MEAL_PREFIX}{kind}"


class Credential(models.Model):
    """
    QR de un solo uso para (evento, titular, propósito).
    Una vez `used=True` es terminal: no se vuelve a tocar.
    """
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="credentials")
    holder = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="credentials")
    team = models.ForeignKey(
        "registration.Team", on_delete=models.SET_NULL, null=True, blank=True, related_name="credentials"
    )
    purpose = models.CharField(max_length=40, help_text='"entry" o "meal:<tipo>"')
    token = models.CharField(max_length=64, unique=True, editable=False)

    used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)
    used_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("event", "holder", "purpose")
        constraints = [
            models.UniqueConstraint(fields=("event", "holder", "purpose"), name="uniq_credential_per_purpose"),
        ]

    def __str__(self) -> str:
        return f"{self.purpose} · {self.holder} · {'usado' if self.used else 'vigente'}"

    @property
    def is_entry(self) -> bool:
        return self.purpose == ENTRY

    @property
    def meal_kind(self) -> Optional[str]:
        if self.purpose.startswith(MEAL_PREFIX):
            return self.purpose[len(MEAL_PREFIX):]
        return None


class AttendanceAggregate(models.Model):
    """Asistencia por equipo. Solo la muta el canje de QR de entrada (contador atómico)."""
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="attendance")
    team = models.OneToOneField("registration.Team", on_delete=models.CASCADE, related_name="attendance")
    total_members = models.PositiveIntegerField(default=0)
    members_scanned = models.PositiveIntegerField(default=0)
    reported = models.BooleanField(default=False, help_text="Todos los miembros ingresaron.")
    reported_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("event", "team")

    def __str__(self) -> str:
        return f"{self.team.name}: {self.members_scanned}/{self.total_members}"
