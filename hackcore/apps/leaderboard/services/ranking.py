# hackcore/apps/leaderboard/services/ranking.py
"""
Clasificación y preselección.

- Orden: total descendente con sort estable (los empates conservan el orden
  de lectura: creación del registro). rank = posición 1-based tras ordenar.
- judging: promedio simple de los totales de todos los jueces del equipo.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from django.conf import settings
from django.db import transaction

from hackcore.apps.core.errors import NoScoresError, PhaseError, ValidationError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import advance, require_phase
from hackcore.apps.notifications.services.sink import notify_many
from hackcore.apps.registration.models import ACTIVE_MEMBER_STATUSES, TeamMember
from hackcore.apps.scoring.models import ScoreRecord
from hackcore.apps.scoring.services.engine import round2
from ..models import ShortlistEntry

logger = logging.getLogger(__name__)

TIE_POLICIES = ("strict", "include_ties")


@dataclass
class LeaderboardRow:
    rank: int
    team_id: int
    team_name: str
    total: Decimal
    evaluations: int = 1

    def as_dict(self) -> dict:
        return {
            "rank": self.rank,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "total": str(self.total),
            "evaluations": self.evaluations,
        }


def _ranked(rows: List[LeaderboardRow]) -> List[LeaderboardRow]:
    ordered = sorted(rows, key=lambda r: r.total, reverse=True)
    for i, row in enumerate(ordered, start=1):
        row.rank = i
    return ordered


def _records(event: Event, kind: str):
    return (
        ScoreRecord.objects.filter(event=event, kind=kind)
        .select_related("team")
        .order_by("created_at", "id")
    )


def screening_leaderboard(event: Event) -> List[LeaderboardRow]:
    rows = [
        LeaderboardRow(rank=0, team_id=r.team_id, team_name=r.team.name, total=r.total)
        for r in _records(event, ScoreRecord.Kind.SCREENING)
    ]
    return _ranked(rows)


def judging_leaderboard(event: Event) -> List[LeaderboardRow]:
    totals: Dict[int, List[Decimal]] = {}
    names: Dict[int, str] = {}
    for r in _records(event, ScoreRecord.Kind.JUDGING):
        # dict conserva el orden de la primera aparición
        totals.setdefault(r.team_id, []).append(r.total)
        names[r.team_id] = r.team.name

    rows = [
        LeaderboardRow(
            rank=0,
            team_id=team_id,
            team_name=names[team_id],
            total=round2(sum(values, Decimal("0")) / Decimal(len(values))),
            evaluations=len(values),
        )
        for team_id, values in totals.items()
    ]
    return _ranked(rows)


def leaderboard(event: Event, kind: str = ScoreRecord.Kind.SCREENING) -> List[LeaderboardRow]:
    if kind == ScoreRecord.Kind.SCREENING:
        return screening_leaderboard(event)
    if kind == ScoreRecord.Kind.JUDGING:
        return judging_leaderboard(event)
    raise ValidationError(f"Tipo de clasificación inválido: {kind}")


def tie_policy() -> str:
    policy = getattr(settings, "HACKCORE_SHORTLIST_TIE_POLICY", "strict")
    if policy not in TIE_POLICIES:
        raise ValidationError(f"HACKCORE_SHORTLIST_TIE_POLICY inválida: {policy}")
    return policy


def select_top(rows: Sequence[LeaderboardRow], count: int, policy: str = "strict") -> List[LeaderboardRow]:
    """
    Corte top-N sobre filas ya ordenadas.
      strict:       exactamente N (el orden estable decide empates en el borde).
      include_ties: además entra todo equipo con el mismo total que el N-ésimo.
    """
    rows = list(rows)
    if count < 1:
        raise ValidationError("La cantidad a preseleccionar debe ser al menos 1.")
    if len(rows) <= count:
        return rows
    if policy == "include_ties":
        cutoff = rows[count - 1].total
        return [r for r in rows if r.total >= cutoff]
    return rows[:count]


def confirm_shortlist(event: Event, today: Optional[date] = None, policy: Optional[str] = None) -> List[ShortlistEntry]:
    """
    Confirma la preselección: reemplaza la foto anterior, bloquea los puntajes
    de preselección y avanza a EXECUTION_ACTIVE. Avisa a todos los equipos puntuados.
    """
    policy = policy or tie_policy()
    event = require_phase(
        event, Phase.SHORTLISTING, today=today, message="La preselección solo se confirma en la fase de preselección."
    )

    with transaction.atomic():
        # Serializa confirmaciones concurrentes del mismo evento
        locked = Event.objects.select_for_update().get(pk=event.pk)
        if locked.phase != Phase.SHORTLISTING:
            raise PhaseError(locked.phase, Phase.SHORTLISTING)

        rows = screening_leaderboard(locked)
        if not rows:
            raise NoScoresError()
        chosen = select_top(rows, locked.shortlist_target_count, policy)

        ShortlistEntry.objects.filter(event=locked).delete()
        entries = ShortlistEntry.objects.bulk_create(
            [ShortlistEntry(event=locked, team_id=r.team_id, rank=r.rank, total=r.total) for r in chosen]
        )
        ScoreRecord.objects.filter(event=locked, kind=ScoreRecord.Kind.SCREENING).update(locked=True)
        advance(locked, Phase.SHORTLISTING, Phase.EXECUTION_ACTIVE)

    event.phase = locked.phase
    logger.info(
        "Evento %s: preselección confirmada (%d de %d equipos, política=%s)",
        event.pk, len(entries), len(rows), policy,
    )
    _announce_shortlist(event, rows, {r.team_id for r in chosen})
    return entries


def _members_of(team_ids) -> List[int]:
    return list(
        TeamMember.objects.filter(team_id__in=team_ids, status__in=ACTIVE_MEMBER_STATUSES)
        .order_by("team_id", "position")
        .values_list("user_id", flat=True)
    )


def _announce_shortlist(event: Event, rows: Sequence[LeaderboardRow], chosen: set) -> None:
    scored = [r.team_id for r in rows]
    notify_many(
        _members_of([t for t in scored if t in chosen]),
        title="🏆 ¡Tu equipo fue preseleccionado!",
        message=f'Felicitaciones: tu equipo pasó a la etapa final de "{event.title}".',
        kind="shortlisted",
        payload={"event_id": event.pk},
    )
    notify_many(
        _members_of([t for t in scored if t not in chosen]),
        title="Resultado de la preselección",
        message=f'Gracias por participar en "{event.title}". Tu equipo no fue preseleccionado esta vez.',
        kind="not_shortlisted",
        payload={"event_id": event.pk},
    )


def shortlist(event: Event) -> List[ShortlistEntry]:
    return list(ShortlistEntry.objects.filter(event=event).select_related("team").order_by("rank"))
