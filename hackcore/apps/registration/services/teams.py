# hackcore/apps/registration/services/teams.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from hackcore.apps.core.errors import ForbiddenError, NotFoundError, ValidationError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import require_phase
from hackcore.apps.notifications.services.sink import notify, notify_many
from ..models import ACTIVE_MEMBER_STATUSES, MemberStatus, Team, TeamMember

logger = logging.getLogger(__name__)


def _already_registered(event: Event, users) -> list:
    ids = [u.pk for u in users]
    return list(
        TeamMember.objects.filter(event=event, user_id__in=ids).values_list("user__username", flat=True)
    )


def create_team(event: Event, leader, name: str, members: Sequence = (), today: Optional[date] = None) -> Team:
    """
    Inscribe un equipo: el líder queda como miembro #1 y el resto como
    invitaciones pendientes (en el orden recibido).
    """
    event = require_phase(
        event, Phase.REGISTRATION_OPEN, today=today, message="La inscripción del evento no está abierta."
    )

    name = (name or "").strip()
    if not name:
        raise ValidationError("El nombre del equipo es obligatorio.")

    invitees = []
    for u in members:
        if u.pk == leader.pk or any(u.pk == x.pk for x in invitees):
            continue
        invitees.append(u)

    size = len(invitees) + 1
    if size < event.min_team_size:
        raise ValidationError(f"El tamaño mínimo de equipo es {event.min_team_size}.")
    if size > event.max_team_size:
        raise ValidationError(f"El tamaño máximo de equipo es {event.max_team_size}.")

    taken = _already_registered(event, [leader, *invitees])
    if taken:
        raise ValidationError(f"Ya están en un equipo de este evento: {', '.join(taken)}", users=taken)

    now = timezone.now()
    try:
        with transaction.atomic():
            team = Team.objects.create(event=event, name=name, leader=leader)
            TeamMember.objects.create(
                team=team, event=event, user=leader, position=1, status=MemberStatus.LEADER, joined_at=now
            )
            for i, u in enumerate(invitees, start=2):
                TeamMember.objects.create(team=team, event=event, user=u, position=i, status=MemberStatus.PENDING)
    except IntegrityError:
        # Nombre repetido o usuario inscrito en paralelo
        raise ValidationError("El nombre del equipo ya existe o algún miembro ya tiene equipo en este evento.")

    logger.info("Equipo %s creado en evento %s (%d invitaciones)", team.pk, event.pk, len(invitees))

    notify_many(
        [u.pk for u in invitees],
        title="👥 Invitación a equipo",
        message=f'{leader.get_full_name() or leader.username} te invitó al equipo "{team.name}" en "{event.title}".',
        kind="team_invite",
        payload={"event_id": event.pk, "team_id": team.pk},
    )
    refresh_team_status(team)
    return team


def _membership(team: Team, user) -> TeamMember:
    try:
        return TeamMember.objects.get(team=team, user=user)
    except TeamMember.DoesNotExist:
        raise NotFoundError("Membresía no encontrada.")


def accept_invitation(team: Team, user) -> Team:
    member = _membership(team, user)
    if member.status != MemberStatus.PENDING:
        raise ValidationError(f"La invitación ya fue respondida ({member.status}).")
    TeamMember.objects.filter(pk=member.pk, status=MemberStatus.PENDING).update(
        status=MemberStatus.ACCEPTED, joined_at=timezone.now()
    )
    return refresh_team_status(team)


def decline_invitation(team: Team, user) -> Team:
    """Rechazar o abandonar: se elimina la fila. El líder no puede salir."""
    member = _membership(team, user)
    if member.status == MemberStatus.LEADER:
        raise ValidationError("El líder no puede abandonar el equipo.")
    member.delete()
    notify(
        team.leader_id,
        title="❌ Un miembro salió del equipo",
        message=f'{user.get_full_name() or user.username} rechazó o abandonó el equipo "{team.name}".',
        kind="team_member_left",
        payload={"team_id": team.pk},
    )
    return refresh_team_status(team)


def join_team_by_code(event: Event, user, join_code: str, today: Optional[date] = None) -> Team:
    event = require_phase(
        event, Phase.REGISTRATION_OPEN, today=today, message="La inscripción del evento no está abierta."
    )
    code = (join_code or "").upper().strip()
    try:
        team = Team.objects.get(event=event, join_code=code)
    except Team.DoesNotExist:
        raise NotFoundError("Código de unión inválido.")

    if _already_registered(event, [user]):
        raise ValidationError("Ya estás en un equipo de este evento.")

    try:
        with transaction.atomic():
            locked = Team.objects.select_for_update().get(pk=team.pk)
            if locked.member_count() >= event.max_team_size:
                raise ValidationError(f"El equipo ya alcanzó el tamaño máximo ({event.max_team_size}).")
            last = locked.members.aggregate(m=Max("position"))["m"] or 0
            TeamMember.objects.create(
                team=locked,
                event=event,
                user=user,
                position=last + 1,
                status=MemberStatus.ACCEPTED,
                joined_at=timezone.now(),
            )
    except IntegrityError:
        raise ValidationError("Ya estás en un equipo de este evento.")
    return refresh_team_status(team)


def refresh_team_status(team: Team) -> Team:
    """Confirmado si todos los miembros son líder/aceptados; si no, pendiente."""
    statuses = list(team.members.values_list("status", flat=True))
    confirmed = bool(statuses) and all(s in ACTIVE_MEMBER_STATUSES for s in statuses)
    new_status = Team.Status.CONFIRMED if confirmed else Team.Status.PENDING
    if team.status == new_status:
        return team

    Team.objects.filter(pk=team.pk).update(status=new_status, updated_at=timezone.now())
    team.status = new_status
    if confirmed:
        notify_many(
            team.members.values_list("user_id", flat=True),
            title="🎉 ¡Equipo confirmado!",
            message=f'Todos los miembros de "{team.name}" aceptaron la invitación.',
            kind="team_confirmed",
            payload={"team_id": team.pk},
        )
    return team


def ensure_team_leader(team: Team, user) -> None:
    if team.leader_id != user.pk:
        raise ForbiddenError("Solo el líder del equipo puede realizar esta acción.")
