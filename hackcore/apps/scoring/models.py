from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import Team

_DIM = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("10"))]


class ScoreRecord(models.Model):
    """
    Puntaje de un equipo en una ronda.
      - screening: uno por (evento, equipo); guarda el último evaluador.
      - judging:   uno por (evento, juez, equipo).
    Una vez `locked`, queda congelado.
    """
    class Kind(models.TextChoices):
        SCREENING = "screening", "Preselección"
        JUDGING = "judging", "Evaluación final"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="score_records")
    kind = models.CharField(max_length=10, choices=Kind.choices, db_index=True)
    evaluator = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="score_records"
    )
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="score_records")

    # Rúbrica (0..10)
    innovation = models.DecimalField(max_digits=4, decimal_places=2, validators=_DIM)
    feasibility = models.DecimalField(max_digits=4, decimal_places=2, validators=_DIM)
    technical_depth = models.DecimalField(max_digits=4, decimal_places=2, validators=_DIM)
    presentation_clarity = models.DecimalField(max_digits=4, decimal_places=2, validators=_DIM)
    social_impact = models.DecimalField(max_digits=4, decimal_places=2, validators=_DIM)

    # Pesos en % (suman 100)
    weight_innovation = models.PositiveSmallIntegerField(default=20)
    weight_feasibility = models.PositiveSmallIntegerField(default=20)
    weight_technical_depth = models.PositiveSmallIntegerField(default=20)
    weight_presentation_clarity = models.PositiveSmallIntegerField(default=20)
    weight_social_impact = models.PositiveSmallIntegerField(default=20)

    total = models.DecimalField(max_digits=5, decimal_places=2)
    remarks = models.TextField(blank=True)
    locked = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("event", "kind", "created_at", "id")
        constraints = [
            models.UniqueConstraint(
                fields=("event", "team"),
                condition=models.Q(kind="screening"),
                name="uniq_screening_score_per_team",
            ),
            models.UniqueConstraint(
                fields=("event", "evaluator", "team"),
                condition=models.Q(kind="judging"),
                name="uniq_judging_score_per_judge",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()} · {self.team.name} · {self.total}"

    def dimensions(self) -> dict:
        from .services.engine import DIMENSIONS
        return {d: getattr(self, d) for d in DIMENSIONS}

    def weights(self) -> dict:
        from .services.engine import DIMENSIONS
        return {d: getattr(self, f"weight_{d}") for d in DIMENSIONS}

    def clean(self):
        from hackcore.apps.core.errors import ValidationError as DomainValidationError
        from .services.engine import score

        try:
            self.total = score(self.dimensions(), self.weights())
        except DomainValidationError as exc:
            raise ValidationError(exc.message)
