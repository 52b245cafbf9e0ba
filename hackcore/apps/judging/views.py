# hackcore/apps/judging/views.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.errors import ValidationError
from hackcore.apps.core.http import domain_errors, judge_required, ok, read_json, staff_required
from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import Team
from .services.panel import assign_teams, assigned_teams, confirm_grand_finale, lock_scores, unassign_team

User = get_user_model()


@require_GET
@judge_required
def my_teams(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    teams = assigned_teams(event, request.user)
    return ok([{"id": t.pk, "name": t.name} for t in teams])


@require_POST
@staff_required
@domain_errors
def assign(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    body = read_json(request)
    judge = get_object_or_404(User, pk=body.get("judge_id"))
    ids = body.get("team_ids") or []
    if not isinstance(ids, list):
        raise ValidationError("team_ids debe ser una lista.")
    teams = list(Team.objects.filter(event=event, pk__in=ids))
    created = assign_teams(event, judge, teams, assigned_by=request.user)
    return ok([a.team_id for a in created], message=f"{len(created)} equipos asignados.")


@require_POST
@staff_required
@domain_errors
def unassign(request: HttpRequest, slug: str, judge_id: int, team_id: int):
    event = get_object_or_404(Event, slug=slug)
    judge = get_object_or_404(User, pk=judge_id)
    team = get_object_or_404(Team, pk=team_id, event=event)
    unassign_team(event, judge, team)
    return ok(message="Asignación eliminada.")


@require_POST
@staff_required
@domain_errors
def scores_lock(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    n = lock_scores(event)
    return ok({"locked": n, "phase": event.phase}, message="Puntajes bloqueados. Evento finalizado.")


@require_POST
@staff_required
@domain_errors
def grand_finale(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    summary = confirm_grand_finale(event)
    return ok({**summary, "phase": event.phase}, message="Gran final confirmada. Comienza la evaluación.")
