# hackcore/apps/credentials/services/ledger.py
"""
Canje de QR (exactamente una vez).

El pre-chequeo de `used` es solo para responder rápido; la garantía la da el
UPDATE condicionado a used=False (compare-and-set). El contador de asistencia
se incrementa con F() en la misma transacción: nunca lectura-modificación-escritura.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from hackcore.apps.core.errors import DuplicateRedemptionError, InvalidCredentialError
from hackcore.apps.events.models import Event
from ..models import MEAL_PREFIX, AttendanceAggregate, Credential
from .issuer import event_purposes

logger = logging.getLogger(__name__)

_NON_HEX = re.compile(r"[^0-9a-f]")


@dataclass
class Redemption:
    credential: Credential
    attendance: Optional[AttendanceAggregate] = None

    def as_dict(self) -> Dict[str, Any]:
        c = self.credential
        data: Dict[str, Any] = {
            "purpose": c.purpose,
            "meal": c.meal_kind,
            "holder": c.holder_id,
            "holder_name": c.holder.get_full_name() or c.holder.username,
            "team": c.team_id,
            "used_at": c.used_at.isoformat() if c.used_at else None,
        }
        if self.attendance is not None:
            a = self.attendance
            data["attendance"] = {
                "members_scanned": a.members_scanned,
                "total_members": a.total_members,
                "reported": a.reported,
            }
        return data


def normalize_token(raw: str) -> str:
    """Lo que entrega un lector QR: espacios, mayúsculas, saltos de línea."""
    return _NON_HEX.sub("", (raw or "").strip().lower())


def _lookup(token: str) -> Credential:
    try:
        return Credential.objects.select_related("holder").get(token=token)
    except Credential.DoesNotExist:
        raise InvalidCredentialError()


def inspect_credential(raw_token: str) -> Credential:
    """Consulta sin consumir."""
    token = normalize_token(raw_token)
    if not token:
        raise InvalidCredentialError()
    return _lookup(token)


def _bump_attendance(credential: Credential, now) -> AttendanceAggregate:
    qs = AttendanceAggregate.objects.filter(event_id=credential.event_id, team_id=credential.team_id)
    if not qs.update(members_scanned=F("members_scanned") + 1):
        # Equipo sin agregado (QR emitido a mano): se crea con el tamaño actual
        from hackcore.apps.registration.models import Team

        team = Team.objects.get(pk=credential.team_id)
        AttendanceAggregate.objects.get_or_create(
            event_id=credential.event_id,
            team=team,
            defaults={"total_members": team.active_members().count()},
        )
        qs.update(members_scanned=F("members_scanned") + 1)
    qs.filter(reported=False, members_scanned__gte=F("total_members")).update(reported=True, reported_at=now)
    return qs.get()


def redeem(raw_token: str, purpose: str, redeemer) -> Redemption:
    token = normalize_token(raw_token)
    if not token:
        raise InvalidCredentialError()
    credential = _lookup(token)

    if credential.purpose != purpose:
        raise InvalidCredentialError(
            "El QR no corresponde a este punto de control.", expected=purpose, actual=credential.purpose
        )
    if credential.used:
        logger.info("QR %s ya canjeado (%s)", credential.pk, credential.purpose)
        raise DuplicateRedemptionError(credential)

    now = timezone.now()
    attendance = None
    with transaction.atomic():
        won = Credential.objects.filter(pk=credential.pk, used=False).update(
            used=True, used_at=now, used_by=redeemer
        )
        if won and credential.is_entry and credential.team_id:
            attendance = _bump_attendance(credential, now)

    if not won:
        # Perdió la carrera: otro canje llegó primero
        current = Credential.objects.get(pk=credential.pk)
        logger.info("QR %s ya canjeado en paralelo (%s)", credential.pk, credential.purpose)
        raise DuplicateRedemptionError(current)

    credential.used = True
    credential.used_at = now
    credential.used_by = redeemer
    logger.info("QR %s canjeado (%s) por %s", credential.pk, credential.purpose, redeemer.pk)
    if attendance is not None and attendance.reported:
        logger.info("Equipo %s completo: %d/%d", attendance.team_id, attendance.members_scanned, attendance.total_members)
    return Redemption(credential=credential, attendance=attendance)


# ------------------------------
# Reportes
# ------------------------------
def attendance_report(event: Event) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = [
        {
            "team_id": a.team_id,
            "team_name": a.team.name,
            "total_members": a.total_members,
            "members_scanned": a.members_scanned,
            "reported": a.reported,
            "reported_at": a.reported_at.isoformat() if a.reported_at else None,
        }
        for a in AttendanceAggregate.objects.filter(event=event).select_related("team").order_by("team__name")
    ]
    return {
        "teams": rows,
        "teams_total": len(rows),
        "teams_reported": sum(1 for r in rows if r["reported"]),
        "members_total": sum(r["total_members"] for r in rows),
        "members_scanned": sum(r["members_scanned"] for r in rows),
    }


def meal_report(event: Event) -> List[Dict[str, Any]]:
    counts = {
        row["purpose"]: row
        for row in Credential.objects.filter(event=event, purpose__startswith=MEAL_PREFIX)
        .values("purpose")
        .annotate(issued=Count("id"), redeemed=Count("id", filter=Q(used=True)))
    }
    report = []
    for purpose in event_purposes(event)[1:]:
        row = counts.get(purpose, {})
        report.append({
            "meal": purpose[len(MEAL_PREFIX):],
            "issued": row.get("issued", 0),
            "redeemed": row.get("redeemed", 0),
        })
    return report
