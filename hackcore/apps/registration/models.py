from __future__ import annotations

from django.conf import settings
from django.db import models
import secrets
import string

from hackcore.apps.events.models import Event


def make_join_code(length: int = 6) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class MemberStatus(models.TextChoices):
    LEADER = "leader", "Líder"
    ACCEPTED = "accepted", "Aceptado"
    PENDING = "pending", "Invitación pendiente"


# Miembros que cuentan para el equipo (QR, certificados, avisos)
ACTIVE_MEMBER_STATUSES = (MemberStatus.LEADER.value, MemberStatus.ACCEPTED.value)


class Team(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pendiente"
        CONFIRMED = "confirmed", "Confirmado"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=160)
    leader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="led_teams")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)
    join_code = models.CharField(max_length=8, unique=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("event", "name"),)
        ordering = ("event", "id")

    def __str__(self) -> str:
        return f"{self.name} · {self.event}"

    def save(self, *args, **kwargs):
        if not self.join_code:
            code = make_join_code()
            while Team.objects.filter(join_code=code).exists():
                code = make_join_code()
            self.join_code = code
        super().save(*args, **kwargs)

    def active_members(self):
        """Líder primero, luego en orden de alta."""
        return self.members.filter(status__in=ACTIVE_MEMBER_STATUSES).select_related("user").order_by("position")

    def member_count(self) -> int:
        return self.members.count()


class TeamMember(models.Model):
    """
    Fila de membresía. position=1 es el líder.
    `event` se repite para garantizar un solo equipo por usuario y evento.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="+")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memberships")
    position = models.PositiveIntegerField()
    status = models.CharField(max_length=12, choices=MemberStatus.choices, default=MemberStatus.PENDING)
    joined_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("event", "user"), name="uniq_member_per_event"),
            models.UniqueConstraint(fields=("team", "position"), name="uniq_team_position"),
        ]
        ordering = ("team", "position")

    def __str__(self) -> str:
        return f"{self.user} · {self.team.name} · #{self.position}"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_MEMBER_STATUSES
