from __future__ import annotations

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.http import domain_errors, judge_required, ok, staff_required
from hackcore.apps.events.models import Event
from hackcore.apps.events.services.phases import sync
from .services.ranking import confirm_shortlist, leaderboard, shortlist


@require_GET
@judge_required
@domain_errors
def leaderboard_view(request: HttpRequest, slug: str):
    event = sync(get_object_or_404(Event, slug=slug))
    kind = request.GET.get("kind", "screening")
    rows = leaderboard(event, kind)
    return ok({"event": event.slug, "phase": event.phase, "kind": kind, "rows": [r.as_dict() for r in rows]})


@require_GET
def shortlist_view(request: HttpRequest, slug: str):
    event = sync(get_object_or_404(Event, slug=slug))
    return ok([
        {"rank": e.rank, "team_id": e.team_id, "team_name": e.team.name, "total": str(e.total)}
        for e in shortlist(event)
    ])


@require_POST
@staff_required
@domain_errors
def shortlist_confirm(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    entries = confirm_shortlist(event)
    return ok(
        [{"rank": e.rank, "team_id": e.team_id, "total": str(e.total)} for e in entries],
        message=f"Preselección confirmada: {len(entries)} equipos.",
    )
