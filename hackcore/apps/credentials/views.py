from __future__ import annotations

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.http import domain_errors, login_required_json, ok, read_json, staff_required
from hackcore.apps.events.models import Event
from .models import Credential
from .services.issuer import issue_event_credentials
from .services.ledger import attendance_report, inspect_credential, meal_report, redeem


@require_POST
@staff_required
@domain_errors
def scan(request: HttpRequest):
    body = read_json(request)
    result = redeem(body.get("token", ""), body.get("purpose", "entry"), request.user)
    return ok(result.as_dict(), message="✅ QR válido.")


@require_GET
@staff_required
@domain_errors
def inspect(request: HttpRequest):
    c = inspect_credential(request.GET.get("token", ""))
    return ok({
        "purpose": c.purpose,
        "holder": c.holder_id,
        "team": c.team_id,
        "used": c.used,
        "used_at": c.used_at.isoformat() if c.used_at else None,
        "used_by": c.used_by_id,
    })


@require_GET
@login_required_json
def my_credentials(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    creds = Credential.objects.filter(event=event, holder=request.user).order_by("purpose")
    return ok([{"purpose": c.purpose, "token": c.token, "used": c.used} for c in creds])


@require_POST
@staff_required
@domain_errors
def issue_for_event(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    summary = issue_event_credentials(event)
    return ok(summary, message=f"{summary['issued']} QR emitidos.")


@require_GET
@staff_required
def attendance(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    return ok(attendance_report(event))


@require_GET
@staff_required
def meals(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    return ok(meal_report(event))
