from __future__ import annotations

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.http import domain_errors, login_required_json, ok, read_json
from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import Team
from .services.entries import problem_statement, submit_final, submit_proposal


@require_POST
@login_required_json
@domain_errors
def proposal_submit(request: HttpRequest, slug: str, team_id: int):
    event = get_object_or_404(Event, slug=slug)
    team = get_object_or_404(Team, pk=team_id, event=event)
    body = read_json(request)
    proposal = submit_proposal(event, team, request.user, body.get("artifact_url", ""))
    return ok(
        {"team_id": team.pk, "artifact_url": proposal.artifact_url, "submitted_at": proposal.submitted_at.isoformat()},
        message="Propuesta enviada.",
    )


@require_POST
@login_required_json
@domain_errors
def final_submit(request: HttpRequest, slug: str, team_id: int):
    event = get_object_or_404(Event, slug=slug)
    team = get_object_or_404(Team, pk=team_id, event=event)
    body = read_json(request)
    final = submit_final(
        event,
        team,
        request.user,
        artifact_url=body.get("artifact_url", ""),
        repository_url=body.get("repository_url", ""),
        demo_url=body.get("demo_url", ""),
        description=body.get("description", ""),
    )
    return ok(
        {
            "team_id": team.pk,
            "artifact_url": final.artifact_url,
            "repository_url": final.repository_url,
            "demo_url": final.demo_url,
            "locked": final.locked,
        },
        message="Entrega final guardada.",
    )


@require_GET
@login_required_json
@domain_errors
def problem_statement_view(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    return ok({"problem_statement_url": problem_statement(event)})
