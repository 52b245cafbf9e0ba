from __future__ import annotations

from typing import Any, Dict

from django.contrib.auth import get_user_model
from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_POST

from hackcore.apps.core.errors import ValidationError
from hackcore.apps.core.http import domain_errors, login_required_json, ok, read_json
from hackcore.apps.events.models import Event
from .models import Team
from .services.teams import accept_invitation, create_team, decline_invitation, join_team_by_code

User = get_user_model()


def team_payload(team: Team) -> Dict[str, Any]:
    return {
        "id": team.id,
        "name": team.name,
        "status": team.status,
        "join_code": team.join_code,
        "members": [
            {"user_id": m.user_id, "position": m.position, "status": m.status}
            for m in team.members.order_by("position")
        ],
    }


@require_POST
@login_required_json
@domain_errors
def team_create(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    body = read_json(request)
    emails = [str(e).strip().lower() for e in body.get("member_emails", []) if str(e).strip()]
    members = []
    for email in emails:
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise ValidationError(f"No hay usuario registrado con el email: {email}")
        members.append(user)
    team = create_team(event, request.user, body.get("name", ""), members)
    return ok(team_payload(team), message=f"Equipo '{team.name}' creado.", status=201)


@require_POST
@login_required_json
@domain_errors
def team_join(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    body = read_json(request)
    team = join_team_by_code(event, request.user, body.get("join_code", ""))
    return ok(team_payload(team), message=f"Te uniste al equipo '{team.name}'.")


@require_POST
@login_required_json
@domain_errors
def invitation_accept(request: HttpRequest, team_id: int):
    team = get_object_or_404(Team, pk=team_id)
    team = accept_invitation(team, request.user)
    return ok(team_payload(team), message="¡Invitación aceptada!")


@require_POST
@login_required_json
@domain_errors
def invitation_decline(request: HttpRequest, team_id: int):
    team = get_object_or_404(Team, pk=team_id)
    decline_invitation(team, request.user)
    return ok(message="Saliste del equipo.")
