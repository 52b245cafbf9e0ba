from __future__ import annotations

from datetime import date
from typing import Any, Dict

from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.errors import ValidationError
from hackcore.apps.core.http import domain_errors, ok, read_json, staff_required
from .models import Event
from .services.phases import RESCHEDULABLE, publish_event, reschedule, sync


def event_payload(event: Event) -> Dict[str, Any]:
    return {
        "id": event.id,
        "slug": event.slug,
        "title": event.title,
        "phase": event.phase,
        "registration_deadline": event.registration_deadline.isoformat(),
        "proposal_deadline": event.proposal_deadline.isoformat() if event.proposal_deadline else None,
        "execution_start": event.execution_start.isoformat(),
        "execution_end": event.execution_end.isoformat(),
        "shortlist_target_count": event.shortlist_target_count,
        "meals": list(event.meals or []),
    }


@require_GET
def event_list(request: HttpRequest):
    # Borradores no se listan
    events = Event.objects.exclude(phase="draft").order_by("-execution_start", "title")
    return ok([event_payload(sync(e)) for e in events])


@require_GET
def event_detail(request: HttpRequest, slug: str):
    event = sync(get_object_or_404(Event, slug=slug))
    return ok(event_payload(event))


@require_POST
@staff_required
@domain_errors
def event_publish(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    event = publish_event(event)
    return ok(event_payload(event), message="Evento publicado.")


@require_POST
@staff_required
@domain_errors
def event_reschedule(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    body = read_json(request)
    changes = {}
    for field in RESCHEDULABLE:
        if field not in body:
            continue
        raw = body[field]
        if raw in (None, ""):
            if field != "proposal_deadline":
                raise ValidationError(f"{field} es obligatorio.")
            changes[field] = None
            continue
        try:
            changes[field] = date.fromisoformat(str(raw))
        except ValueError:
            raise ValidationError(f"Fecha inválida en {field}: {raw}")
    event = reschedule(event, **changes)
    return ok(event_payload(event), message="Fechas actualizadas.")


def health(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True})
