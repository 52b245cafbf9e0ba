from __future__ import annotations

from django.conf import settings
from django.db import models

from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import Team


class ProposalSubmission(models.Model):
    """Presentación de la propuesta (una por equipo; se reemplaza al reenviar)."""
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="proposals")
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="proposal")
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")
    artifact_url = models.URLField(max_length=500)
    submitted_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("event", "submitted_at")

    def __str__(self) -> str:
        return f"Propuesta · {self.team.name}"


class FinalSubmission(models.Model):
    """Entrega final del hackathon. Bloqueada = congelada para evaluación."""
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="final_submissions")
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="final_submission")
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")
    artifact_url = models.URLField(max_length=500)
    repository_url = models.URLField(max_length=500)
    demo_url = models.URLField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    locked = models.BooleanField(default=False)
    submitted_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("event", "submitted_at")

    def __str__(self) -> str:
        return f"Entrega final · {self.team.name}"
