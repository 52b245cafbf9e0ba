from __future__ import annotations

from django.db import models


class ShortlistEntry(models.Model):
    """Foto de una preselección confirmada. Cada confirmación reemplaza la anterior completa."""
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="shortlist")
    team = models.ForeignKey("registration.Team", on_delete=models.CASCADE, related_name="shortlist_entries")
    rank = models.PositiveIntegerField()
    total = models.DecimalField(max_digits=5, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("event", "rank")
        constraints = [
            models.UniqueConstraint(fields=("event", "team"), name="uniq_shortlist_team"),
            models.UniqueConstraint(fields=("event", "rank"), name="uniq_shortlist_rank"),
        ]
        verbose_name_plural = "shortlist entries"

    def __str__(self) -> str:
        return f"#{self.rank} · {self.team.name}"
