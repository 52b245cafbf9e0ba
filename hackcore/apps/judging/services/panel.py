# hackcore/apps/judging/services/panel.py
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from django.db import transaction

from hackcore.apps.core.errors import NoScoresError, NotFoundError, PhaseError, ValidationError
from hackcore.apps.core.http import user_is_judge
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import advance, complete_event, require_phase
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.notifications.services.sink import notify, notify_many
from hackcore.apps.registration.models import ACTIVE_MEMBER_STATUSES, Team, TeamMember
from hackcore.apps.scoring.models import ScoreRecord
from hackcore.apps.submissions.services.entries import lock_final_submissions
from ..models import JudgeAssignment

logger = logging.getLogger(__name__)


def assign_teams(event: Event, judge, teams: Iterable[Team], assigned_by=None) -> List[JudgeAssignment]:
    """Asigna equipos preseleccionados a un juez. Las asignaciones ya existentes se conservan."""
    if not user_is_judge(judge):
        raise ValidationError("El usuario no es juez.")
    teams = list(teams)
    if not teams:
        raise ValidationError("No se indicaron equipos.")

    shortlisted = set(ShortlistEntry.objects.filter(event=event).values_list("team_id", flat=True))
    outside = [t.name for t in teams if t.event_id != event.pk or t.pk not in shortlisted]
    if outside:
        raise ValidationError(
            f"Solo se pueden asignar equipos preseleccionados: {', '.join(outside)}", teams=outside
        )

    created: List[JudgeAssignment] = []
    with transaction.atomic():
        for team in teams:
            obj, was_created = JudgeAssignment.objects.get_or_create(
                event=event, judge=judge, team=team, defaults={"assigned_by": assigned_by}
            )
            if was_created:
                created.append(obj)

    if created:
        names = ", ".join(a.team.name for a in created)
        notify(
            judge.pk,
            title="⚖️ Nuevos equipos asignados",
            message=f'Se te asignaron {len(created)} equipos en "{event.title}": {names}.',
            kind="judge_assignment",
            payload={"event_id": event.pk, "team_ids": [a.team_id for a in created]},
        )
    logger.info("Evento %s: %d equipos asignados al juez %s", event.pk, len(created), judge.pk)
    return created


def unassign_team(event: Event, judge, team: Team) -> None:
    deleted, _ = JudgeAssignment.objects.filter(event=event, judge=judge, team=team).delete()
    if not deleted:
        raise NotFoundError("La asignación no existe.")


def assigned_teams(event: Event, judge) -> List[Team]:
    return [
        a.team
        for a in JudgeAssignment.objects.filter(event=event, judge=judge).select_related("team").order_by("team_id")
    ]


def lock_scores(event: Event, today: Optional[date] = None) -> int:
    """Bloquea todos los puntajes finales y cierra el evento (JUDGING -> COMPLETED)."""
    event = require_phase(event, Phase.JUDGING, today=today, message="Solo se bloquean puntajes durante la evaluación.")
    with transaction.atomic():
        qs = ScoreRecord.objects.filter(event=event, kind=ScoreRecord.Kind.JUDGING)
        if not qs.exists():
            raise NoScoresError("No hay puntajes de evaluación para bloquear.")
        n = qs.filter(locked=False).update(locked=True)
        complete_event(event)
    logger.info("Evento %s: %d puntajes bloqueados, evento finalizado", event.pk, n)
    return n


def confirm_grand_finale(event: Event, today: Optional[date] = None) -> dict:
    """
    Gran final: EXECUTION_ACTIVE -> JUDGING por decisión del admin, sin
    esperar a execution_end. Los finalistas son la preselección confirmada;
    se congelan las entregas finales y se avisa a sus miembros.
    """
    event = require_phase(
        event, Phase.EXECUTION_ACTIVE, today=today, message="La gran final se confirma durante la ejecución."
    )
    with transaction.atomic():
        locked = Event.objects.select_for_update().get(pk=event.pk)
        if locked.phase != Phase.EXECUTION_ACTIVE:
            raise PhaseError(locked.phase, Phase.EXECUTION_ACTIVE)
        finalists = list(ShortlistEntry.objects.filter(event=locked).order_by("rank").values_list("team_id", flat=True))
        if not finalists:
            raise ValidationError("No hay equipos preseleccionados. Confirma la preselección primero.")
        advance(locked, Phase.EXECUTION_ACTIVE, Phase.JUDGING)
        frozen = lock_final_submissions(locked)

    event.phase = locked.phase
    user_ids = (
        TeamMember.objects.filter(team_id__in=finalists, status__in=ACTIVE_MEMBER_STATUSES)
        .order_by("team_id", "position")
        .values_list("user_id", flat=True)
    )
    notified = notify_many(
        user_ids,
        title="🏆 ¡Clasificados a la gran final!",
        message=f'Tu equipo pasó a la gran final de "{event.title}". Las entregas quedaron cerradas.',
        kind="grand_finale",
        payload={"event_id": event.pk},
    )
    logger.info("Evento %s: gran final con %d equipos, %d entregas bloqueadas", event.pk, len(finalists), frozen)
    return {"finalists": len(finalists), "locked_submissions": frozen, "notified": notified}
