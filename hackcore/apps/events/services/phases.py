# hackcore/apps/events/services/phases.py
"""
Máquina de fases del evento.

- phase_for_date / next_phase: funciones puras (sin BD), testeables solas.
- sync: única vía que persiste el cambio de fase calculado por fechas. Es
  segura en cualquier lectura: idempotente y sin efectos si no hay transición.
- publish_event / complete_event / advance: transiciones explícitas (admin).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from hackcore.apps.core.errors import (
    ConcurrencyConflictError,
    MilestoneOrderError,
    PhaseError,
)
from ..models import Event, FROZEN_PHASES, PHASE_INDEX, Phase

logger = logging.getLogger(__name__)


# ------------------------------
# Hitos
# ------------------------------
@dataclass(frozen=True)
class Milestones:
    registration_deadline: date
    proposal_deadline: Optional[date]
    execution_start: date
    execution_end: date

    @classmethod
    def from_event(cls, event: Event) -> "Milestones":
        return cls(
            registration_deadline=event.registration_deadline,
            proposal_deadline=event.proposal_deadline,
            execution_start=event.execution_start,
            execution_end=event.execution_end,
        )

    def validate(self) -> None:
        """Los hitos deben ser no decrecientes en el orden listado."""
        chain = [("registration_deadline", self.registration_deadline)]
        if self.proposal_deadline is not None:
            chain.append(("proposal_deadline", self.proposal_deadline))
        chain.append(("execution_start", self.execution_start))
        chain.append(("execution_end", self.execution_end))

        for (prev_name, prev), (name, value) in zip(chain, chain[1:]):
            if value < prev:
                raise MilestoneOrderError(
                    f"{name} ({value}) no puede ser anterior a {prev_name} ({prev}).",
                    field=name,
                )


def _as_day(value) -> date:
    # Normaliza a día calendario local: las fases cambian una vez por día
    if isinstance(value, date) and not hasattr(value, "hour"):
        return value
    return timezone.localdate(value)


def phase_for_date(today: date, m: Milestones) -> str:
    """Fase que corresponde a `today` según los hitos (sin overrides)."""
    today = _as_day(today)
    if today < m.registration_deadline:
        return Phase.REGISTRATION_OPEN
    if m.proposal_deadline is not None and today < m.proposal_deadline:
        return Phase.PROPOSAL_SUBMISSION
    if today < m.execution_start:
        return Phase.SHORTLISTING
    if today <= m.execution_end:
        return Phase.EXECUTION_ACTIVE
    return Phase.JUDGING


def next_phase(current: str, today: date, m: Milestones) -> str:
    """
    Fase destino para `sync`:
      - DRAFT y COMPLETED quedan congeladas.
      - Solo avanza: si las fechas apuntan a una fase anterior, se mantiene la actual.
    """
    if current in FROZEN_PHASES:
        return current
    target = phase_for_date(today, m)
    if PHASE_INDEX[target] <= PHASE_INDEX[current]:
        return current
    return target


# ------------------------------
# Persistencia (compare-and-set sobre la fase)
# ------------------------------
def _compare_and_set(event: Event, expected: str, target: str) -> bool:
    moved = Event.objects.filter(pk=event.pk, phase=expected).update(
        phase=target, updated_at=timezone.now()
    )
    return moved == 1


def advance(event: Event, expected: str, target: str) -> Event:
    """
    Transición explícita expected -> target.
    Si otra request cambió la fase primero, ConcurrencyConflictError.
    """
    if not _compare_and_set(event, expected, target):
        raise ConcurrencyConflictError(
            f"La fase del evento cambió (se esperaba {expected}).",
            expected=expected,
        )
    event.phase = target
    logger.info("Evento %s: %s -> %s", event.pk, expected, target)
    return event


def sync(event: Event, today: Optional[date] = None) -> Event:
    """
    Recalcula y persiste la fase. Nunca lanza por fallas de BD: ante error
    devuelve el evento original sin sincronizar (fase desactualizada > 500).
    """
    today = _as_day(today or timezone.localdate())
    current = event.phase
    target = next_phase(current, today, Milestones.from_event(event))
    if target == current:
        return event

    try:
        with transaction.atomic():
            moved = _compare_and_set(event, current, target)
            if moved and target == Phase.JUDGING:
                _close_final_submissions(event)
        if not moved:
            # Otra request ya hizo la transición: el efecto es suyo
            fresh = Event.objects.get(pk=event.pk)
            event.phase = fresh.phase
            event.updated_at = fresh.updated_at
            return event
    except (DatabaseError, Event.DoesNotExist):
        logger.exception("No se pudo sincronizar la fase del evento %s (%s -> %s)", event.pk, current, target)
        return event

    event.phase = target
    logger.info("Evento %s: %s -> %s (por fecha %s)", event.pk, current, target, today)

    # Efecto único: solo en el borde de entrada a PROPOSAL_SUBMISSION
    if target == Phase.PROPOSAL_SUBMISSION:
        _announce_proposal_window(event)
    return event


def sync_many(events: Iterable[Event], today: Optional[date] = None) -> int:
    changed = 0
    for event in events:
        before = event.phase
        if sync(event, today=today).phase != before:
            changed += 1
    return changed


def _close_final_submissions(event: Event) -> None:
    # Al entrar en JUDGING (por fecha o por la gran final) no se edita más
    from hackcore.apps.submissions.services.entries import lock_final_submissions

    lock_final_submissions(event)


def _announce_proposal_window(event: Event) -> None:
    from hackcore.apps.registration.models import ACTIVE_MEMBER_STATUSES, Team, TeamMember
    from hackcore.apps.notifications.services.sink import notify_many

    user_ids = TeamMember.objects.filter(
        team__event=event,
        team__status=Team.Status.CONFIRMED,
        status__in=ACTIVE_MEMBER_STATUSES,
    ).order_by("team_id", "position").values_list("user_id", flat=True)

    notify_many(
        user_ids,
        title="📋 ¡Abierta la entrega de propuestas!",
        message=f'Comenzó la entrega de propuestas para "{event.title}". Sube tu presentación antes del cierre.',
        kind="proposal_open",
        payload={"event_id": event.pk},
    )


# ------------------------------
# Consultas de fase
# ------------------------------
def require_phase(event: Event, *allowed: str, today: Optional[date] = None, message: Optional[str] = None) -> Event:
    """Sincroniza y exige que la fase actual esté en `allowed`."""
    event = sync(event, today=today)
    if event.phase not in allowed:
        raise PhaseError(event.phase, allowed[0] if len(allowed) == 1 else list(allowed), message=message)
    return event


# ------------------------------
# Transiciones explícitas (admin / juez)
# ------------------------------
def publish_event(event: Event, today: Optional[date] = None) -> Event:
    """DRAFT -> REGISTRATION_OPEN y luego alinea con las fechas."""
    if event.phase != Phase.DRAFT:
        raise PhaseError(event.phase, Phase.DRAFT, message="Solo se pueden publicar eventos en borrador.")
    with transaction.atomic():
        advance(event, Phase.DRAFT, Phase.REGISTRATION_OPEN)
    return sync(event, today=today)


def complete_event(event: Event) -> Event:
    """JUDGING -> COMPLETED (al bloquear los puntajes finales)."""
    if event.phase != Phase.JUDGING:
        raise PhaseError(event.phase, Phase.JUDGING, message="Solo se puede finalizar un evento en evaluación.")
    return advance(event, Phase.JUDGING, Phase.COMPLETED)


RESCHEDULABLE = ("registration_deadline", "proposal_deadline", "execution_start", "execution_end")


def reschedule(event: Event, today: Optional[date] = None, **changes) -> Event:
    """
    Edición de hitos por el admin. Puede retroceder la fase (vía de escape
    deliberada), salvo a antes de EXECUTION_ACTIVE si ya hay preselección.
    Solo retrocede si las nuevas fechas calculan una fase anterior a la que
    calculaban las viejas: un avance explícito (p. ej. confirmar la
    preselección antes de execution_start) se respeta.
    Las fases congeladas no se tocan.
    """
    from hackcore.apps.leaderboard.models import ShortlistEntry

    unknown = set(changes) - set(RESCHEDULABLE)
    if unknown:
        raise MilestoneOrderError(f"Campos no editables: {', '.join(sorted(unknown))}")

    today = _as_day(today or timezone.localdate())

    with transaction.atomic():
        locked = Event.objects.select_for_update().get(pk=event.pk)
        before = phase_for_date(today, Milestones.from_event(locked))
        for field, value in changes.items():
            setattr(locked, field, value)
        m = Milestones.from_event(locked)
        m.validate()

        current = locked.phase
        rewind_to = None
        if not locked.is_frozen:
            target = phase_for_date(today, m)
            if PHASE_INDEX[target] < PHASE_INDEX[before] and PHASE_INDEX[target] < PHASE_INDEX[current]:
                shortlisted = ShortlistEntry.objects.filter(event=locked).exists()
                if shortlisted and PHASE_INDEX[target] < PHASE_INDEX[Phase.EXECUTION_ACTIVE]:
                    raise PhaseError(
                        current,
                        message="No se puede volver a una fase previa a la preselección ya confirmada.",
                    )
                rewind_to = target

        locked.save(update_fields=[*changes.keys(), "updated_at"])
        if rewind_to is not None:
            advance(locked, current, rewind_to)

    for field in (*changes.keys(), "phase", "updated_at"):
        setattr(event, field, getattr(locked, field))
    # Si las nuevas fechas empujan hacia adelante, el avance pasa por sync (con su efecto)
    return sync(event, today=today)
