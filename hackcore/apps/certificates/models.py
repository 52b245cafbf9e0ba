from __future__ import annotations

from django.conf import settings
from django.db import models


class Certificate(models.Model):
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="certificates")
    holder = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="certificates")
    team = models.ForeignKey(
        "registration.Team", on_delete=models.SET_NULL, null=True, blank=True, related_name="certificates"
    )
    certificate_id = models.CharField(max_length=40, unique=True)
    sequence = models.PositiveIntegerField()
    artifact_ref = models.CharField(max_length=500, blank=True)
    issued_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("event", "sequence")
        constraints = [
            models.UniqueConstraint(fields=("event", "holder"), name="uniq_certificate_per_holder"),
        ]

    def __str__(self) -> str:
        return self.certificate_id
