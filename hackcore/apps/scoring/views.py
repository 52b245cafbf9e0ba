from __future__ import annotations

from typing import Any, Dict

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_POST

from hackcore.apps.core.http import domain_errors, judge_required, ok, read_json
from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import Team
from .models import ScoreRecord
from .services.records import submit_score


def score_payload(record: ScoreRecord) -> Dict[str, Any]:
    return {
        "id": record.pk,
        "kind": record.kind,
        "team_id": record.team_id,
        "evaluator_id": record.evaluator_id,
        "dimensions": {k: str(v) for k, v in record.dimensions().items()},
        "weights": record.weights(),
        "total": str(record.total),
        "locked": record.locked,
    }


@require_POST
@judge_required
@domain_errors
def score_submit(request: HttpRequest, slug: str, team_id: int, kind: str):
    event = get_object_or_404(Event, slug=slug)
    team = get_object_or_404(Team, pk=team_id, event=event)
    body = read_json(request)
    record = submit_score(
        event,
        team,
        request.user,
        kind,
        dimensions=body.get("dimensions") or {},
        weights=body.get("weights"),
        remarks=body.get("remarks", ""),
    )
    return ok(score_payload(record), message="Puntaje guardado.")
