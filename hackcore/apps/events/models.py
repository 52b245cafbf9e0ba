from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.text import slugify


class Phase(models.TextChoices):
    DRAFT = "draft", "Borrador"
    REGISTRATION_OPEN = "registration_open", "Inscripción abierta"
    PROPOSAL_SUBMISSION = "proposal_submission", "Entrega de propuestas"
    SHORTLISTING = "shortlisting", "Preselección"
    EXECUTION_ACTIVE = "execution_active", "Hackathon en curso"
    JUDGING = "judging", "Evaluación"
    COMPLETED = "completed", "Finalizado"


# Orden canónico (solo hacia adelante en operación normal)
PHASE_ORDER = [
    Phase.DRAFT,
    Phase.REGISTRATION_OPEN,
    Phase.PROPOSAL_SUBMISSION,
    Phase.SHORTLISTING,
    Phase.EXECUTION_ACTIVE,
    Phase.JUDGING,
    Phase.COMPLETED,
]
PHASE_INDEX = {p.value: i for i, p in enumerate(PHASE_ORDER)}

# Nunca se sobrescriben por cálculo de fechas
FROZEN_PHASES = frozenset({Phase.DRAFT.value, Phase.COMPLETED.value})


def default_shortlist_count() -> int:
    return getattr(settings, "HACKCORE_DEFAULT_SHORTLIST_COUNT", 5)


class Event(models.Model):
    title = models.CharField(max_length=160)
    slug = models.SlugField(unique=True)
    description = models.TextField(blank=True)
    committee_name = models.CharField(max_length=160, blank=True)

    # Hitos (día calendario; el orden se valida en clean())
    registration_deadline = models.DateField()
    proposal_deadline = models.DateField(
        null=True,
        blank=True,
        help_text="Opcional. Si está vacío, se pasa directo a preselección.",
    )
    execution_start = models.DateField()
    execution_end = models.DateField()

    # Único campo derivado; lo muta solo services.phases
    phase = models.CharField(max_length=24, choices=Phase.choices, default=Phase.DRAFT, db_index=True)

    shortlist_target_count = models.PositiveIntegerField(
        default=default_shortlist_count,
        validators=[MinValueValidator(1)],
        help_text="Cantidad de equipos a preseleccionar (top N).",
    )
    min_team_size = models.PositiveIntegerField(default=1)
    max_team_size = models.PositiveIntegerField(default=4)
    meals = models.JSONField(
        default=list,
        blank=True,
        help_text='Comidas con QR propio, en orden. Ej.: ["breakfast", "lunch", "dinner"]',
    )
    problem_statement_url = models.URLField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-execution_start", "title")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(shortlist_target_count__gte=1),
                name="event_shortlist_target_positive",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self):
        from .services.phases import Milestones
        from hackcore.apps.core.errors import MilestoneOrderError

        if None in (self.registration_deadline, self.execution_start, self.execution_end):
            return
        try:
            Milestones.from_event(self).validate()
        except MilestoneOrderError as exc:
            raise ValidationError(exc.message)
        if self.min_team_size and self.max_team_size and self.min_team_size > self.max_team_size:
            raise ValidationError("min_team_size no puede ser mayor que max_team_size.")

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.title)
        super().save(*args, **kwargs)

    @property
    def is_frozen(self) -> bool:
        return self.phase in FROZEN_PHASES
