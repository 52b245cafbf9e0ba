# hackcore/apps/judging/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models


class JudgeAssignment(models.Model):
    """
    Equipo asignado a un juez para la evaluación final.
    Solo con asignación el juez puede cargar puntajes de `judging`.
    """
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="judge_assignments")
    judge = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="judge_assignments")
    team = models.ForeignKey("registration.Team", on_delete=models.CASCADE, related_name="judge_assignments")
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("event", "judge", "team"),)
        ordering = ("event_id", "judge_id", "team_id")

    def __str__(self) -> str:
        return f"{self.judge} → {self.team.name}"
