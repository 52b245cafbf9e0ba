# hackcore/apps/scoring/services/records.py
"""
Escritura de puntajes (upsert). Ventanas:
  - screening: fase SHORTLISTING, cualquier juez/admin, un registro por equipo.
  - judging:   fase JUDGING, solo jueces asignados al equipo, uno por juez.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import IntegrityError, transaction

from hackcore.apps.core.errors import (
    ConcurrencyConflictError,
    ForbiddenError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from hackcore.apps.core.http import user_is_judge
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import require_phase
from hackcore.apps.judging.models import JudgeAssignment
from hackcore.apps.registration.models import Team
from ..models import ScoreRecord
from .engine import DIMENSIONS, Values, clean_dimensions, clean_weights, default_weights, score

logger = logging.getLogger(__name__)

WINDOW = {
    ScoreRecord.Kind.SCREENING: Phase.SHORTLISTING,
    ScoreRecord.Kind.JUDGING: Phase.JUDGING,
}


def _record_key(event: Event, team: Team, evaluator, kind: str) -> dict:
    if kind == ScoreRecord.Kind.SCREENING:
        return {"event": event, "team": team, "kind": kind}
    return {"event": event, "team": team, "evaluator": evaluator, "kind": kind}


def submit_score(
    event: Event,
    team: Team,
    evaluator,
    kind: str,
    dimensions: Values,
    weights: Optional[Values] = None,
    remarks: str = "",
    today: Optional[date] = None,
) -> ScoreRecord:
    if kind not in WINDOW:
        raise ValidationError(f"Tipo de puntaje inválido: {kind}")
    if team.event_id != event.pk:
        raise NotFoundError("El equipo no pertenece a este evento.")
    if not user_is_judge(evaluator):
        raise ForbiddenError("Solo jueces o administradores pueden puntuar.")

    # Validación antes de tocar la BD
    w = clean_weights(weights if weights is not None else default_weights())
    dims = clean_dimensions(dimensions)
    total = score(dims, w)

    event = require_phase(
        event,
        WINDOW[kind],
        today=today,
        message="La ventana de puntaje no está abierta para esta ronda.",
    )

    if kind == ScoreRecord.Kind.JUDGING:
        if not JudgeAssignment.objects.filter(event=event, judge=evaluator, team=team).exists():
            raise ForbiddenError("El equipo no está asignado a este juez.")

    fields = {f"weight_{d}": w[d] for d in DIMENSIONS}
    fields.update(dims)
    fields.update(total=total, remarks=(remarks or "").strip(), evaluator=evaluator)

    key = _record_key(event, team, evaluator, kind)
    try:
        with transaction.atomic():
            record = ScoreRecord.objects.select_for_update().filter(**key).first()
            if record is None:
                record = ScoreRecord.objects.create(**{**fields, **key})
            else:
                if record.locked:
                    raise LockedError("El puntaje está bloqueado y no puede modificarse.")
                for k, v in fields.items():
                    setattr(record, k, v)
                record.save()
    except IntegrityError:
        # Dos altas simultáneas para la misma clave
        raise ConcurrencyConflictError("Otro evaluador guardó este puntaje al mismo tiempo. Reintenta.")

    logger.info(
        "Puntaje %s (%s) equipo=%s juez=%s total=%s", record.pk, kind, team.pk, evaluator.pk, record.total
    )
    return record

