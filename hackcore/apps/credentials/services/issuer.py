# hackcore/apps/credentials/services/issuer.py
"""
Emisión de QR. El token es sha256(titular, evento, propósito, tiempo, 128 bits
aleatorios): opaco y sin colisiones prácticas. Uno por (evento, titular, propósito).
"""
from __future__ import annotations

import hashlib
import logging
import secrets
import time
from datetime import date
from typing import Dict, Optional

from django.db import IntegrityError, transaction
from django.db.models import F

from hackcore.apps.core.errors import AlreadyIssuedError, ValidationError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import require_phase
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.notifications.services.sink import notify_many
from hackcore.apps.registration.models import Team
from ..models import ENTRY, MEAL_PREFIX, AttendanceAggregate, Credential, meal_purpose

logger = logging.getLogger(__name__)


def make_token(holder_id: int, event_id: int, purpose: str) -> str:
    seed = f"{holder_id}-{event_id}-{purpose}-{time.time_ns()}-{secrets.token_hex(16)}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def validate_purpose(purpose: str) -> str:
    purpose = (purpose or "").strip()
    if purpose == ENTRY:
        return purpose
    if purpose.startswith(MEAL_PREFIX) and purpose[len(MEAL_PREFIX):].strip():
        return purpose
    raise ValidationError(f'Propósito inválido: "{purpose}". Usa "entry" o "meal:<tipo>".', purpose=purpose)


def event_purposes(event: Event) -> list[str]:
    """entry + una comida por cada tipo configurado, en orden y sin repetidos."""
    purposes = [ENTRY]
    for kind in event.meals or []:
        kind = str(kind).strip()
        if kind and meal_purpose(kind) not in purposes:
            purposes.append(meal_purpose(kind))
    return purposes


def issue(event: Event, holder, purpose: str, team: Optional[Team] = None) -> Credential:
    """Emite un QR. Si ya existe para (evento, titular, propósito) -> AlreadyIssuedError con el existente."""
    purpose = validate_purpose(purpose)
    existing = Credential.objects.filter(event=event, holder=holder, purpose=purpose).first()
    if existing is not None:
        raise AlreadyIssuedError(existing)
    try:
        with transaction.atomic():
            return Credential.objects.create(
                event=event,
                holder=holder,
                team=team,
                purpose=purpose,
                token=make_token(holder.pk, event.pk, purpose),
            )
    except IntegrityError:
        # Emisión concurrente: gana la otra
        existing = Credential.objects.filter(event=event, holder=holder, purpose=purpose).first()
        if existing is None:
            raise
        raise AlreadyIssuedError(existing)


def _refresh_attendance(event: Event, team: Team, total_members: int) -> AttendanceAggregate:
    agg, created = AttendanceAggregate.objects.get_or_create(
        event=event, team=team, defaults={"total_members": total_members}
    )
    if not created and agg.total_members != total_members:
        AttendanceAggregate.objects.filter(pk=agg.pk).update(total_members=total_members)
    # El equipo pudo quedar completo si cambió la cantidad de miembros
    AttendanceAggregate.objects.filter(
        pk=agg.pk, reported=False, total_members__gt=0, members_scanned__gte=F("total_members")
    ).update(reported=True)
    agg.refresh_from_db()
    return agg


def issue_event_credentials(event: Event, today: Optional[date] = None) -> Dict[str, int]:
    """
    QR de entrada + comidas para cada miembro activo de cada equipo preseleccionado.
    Re-ejecutable: los ya emitidos cuentan como `skipped`.
    """
    event = require_phase(
        event, Phase.EXECUTION_ACTIVE, today=today, message="Los QR se emiten durante el hackathon."
    )
    purposes = event_purposes(event)
    issued = skipped = 0
    fresh_holders: list[int] = []

    entries = ShortlistEntry.objects.filter(event=event).select_related("team").order_by("rank")
    for entry in entries:
        team = entry.team
        members = list(team.active_members())
        _refresh_attendance(event, team, len(members))
        for member in members:
            for purpose in purposes:
                try:
                    issue(event, member.user, purpose, team=team)
                except AlreadyIssuedError:
                    skipped += 1
                else:
                    issued += 1
                    fresh_holders.append(member.user_id)

    notify_many(
        fresh_holders,
        title="🎟️ Tus códigos QR están listos",
        message=f'Ya puedes ver tus QR de ingreso y comidas para "{event.title}".',
        kind="credentials_issued",
        payload={"event_id": event.pk},
    )
    logger.info("Evento %s: %d QR emitidos, %d ya existían", event.pk, issued, skipped)
    return {"issued": issued, "skipped": skipped, "teams": len(entries)}
