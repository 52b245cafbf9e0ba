# hackcore/apps/submissions/services/entries.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import transaction

from hackcore.apps.core.errors import ForbiddenError, LockedError, NotFoundError, PhaseError, ValidationError
from hackcore.apps.events.models import Event, PHASE_INDEX, Phase
from hackcore.apps.events.services.phases import require_phase, sync
from hackcore.apps.registration.models import Team
from hackcore.apps.registration.services.teams import ensure_team_leader
from ..models import FinalSubmission, ProposalSubmission

logger = logging.getLogger(__name__)

_url = URLValidator(schemes=["http", "https"])


def _clean_url(value: str, field: str, required: bool = True) -> str:
    value = (value or "").strip()
    if not value:
        if required:
            raise ValidationError(f"{field} es obligatorio.", field=field)
        return ""
    try:
        _url(value)
    except DjangoValidationError:
        raise ValidationError(f"URL inválida en {field}.", field=field)
    return value


def _check_team(event: Event, team: Team, user) -> None:
    if team.event_id != event.pk:
        raise NotFoundError("El equipo no pertenece a este evento.")
    ensure_team_leader(team, user)


def submit_proposal(event: Event, team: Team, user, artifact_url: str, today: Optional[date] = None) -> ProposalSubmission:
    """Sube (o reemplaza) la propuesta del equipo. Solo el líder, equipo confirmado."""
    event = require_phase(
        event, Phase.PROPOSAL_SUBMISSION, today=today, message="La entrega de propuestas no está abierta."
    )
    _check_team(event, team, user)
    if team.status != Team.Status.CONFIRMED:
        raise ValidationError("Todos los miembros deben aceptar la invitación antes de entregar.")
    artifact_url = _clean_url(artifact_url, "artifact_url")

    proposal, created = ProposalSubmission.objects.update_or_create(
        team=team,
        defaults={"event": event, "submitted_by": user, "artifact_url": artifact_url},
    )
    logger.info("Propuesta %s del equipo %s (%s)", proposal.pk, team.pk, "nueva" if created else "reemplazo")
    return proposal


def submit_final(
    event: Event,
    team: Team,
    user,
    artifact_url: str,
    repository_url: str,
    demo_url: str = "",
    description: str = "",
    today: Optional[date] = None,
) -> FinalSubmission:
    from hackcore.apps.leaderboard.models import ShortlistEntry

    event = require_phase(
        event, Phase.EXECUTION_ACTIVE, today=today, message="La entrega final solo se acepta durante el hackathon."
    )
    _check_team(event, team, user)
    if not ShortlistEntry.objects.filter(event=event, team=team).exists():
        raise ForbiddenError("Solo los equipos preseleccionados pueden hacer la entrega final.")

    fields = {
        "event": event,
        "submitted_by": user,
        "artifact_url": _clean_url(artifact_url, "artifact_url"),
        "repository_url": _clean_url(repository_url, "repository_url"),
        "demo_url": _clean_url(demo_url, "demo_url", required=False),
        "description": (description or "").strip(),
    }

    with transaction.atomic():
        current = FinalSubmission.objects.select_for_update().filter(team=team).first()
        if current is None:
            final = FinalSubmission.objects.create(team=team, **fields)
        else:
            if current.locked:
                raise LockedError("La entrega final está bloqueada.")
            for k, v in fields.items():
                setattr(current, k, v)
            current.save()
            final = current
    logger.info("Entrega final %s del equipo %s", final.pk, team.pk)
    return final


def lock_final_submissions(event: Event) -> int:
    """Congela todas las entregas finales del evento. Devuelve cuántas se bloquearon."""
    n = FinalSubmission.objects.filter(event=event, locked=False).update(locked=True)
    logger.info("Evento %s: %d entregas finales bloqueadas", event.pk, n)
    return n


def problem_statement(event: Event, today: Optional[date] = None) -> str:
    """URL del enunciado; visible desde la entrega de propuestas en adelante."""
    event = sync(event, today=today)
    if event.phase == Phase.DRAFT or PHASE_INDEX[event.phase] < PHASE_INDEX[Phase.PROPOSAL_SUBMISSION]:
        raise PhaseError(
            event.phase, Phase.PROPOSAL_SUBMISSION, message="El enunciado aún no está disponible."
        )
    if not event.problem_statement_url:
        raise NotFoundError("El evento no tiene enunciado publicado.")
    return event.problem_statement_url
