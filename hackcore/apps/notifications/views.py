from __future__ import annotations

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.http import domain_errors, login_required_json, ok, read_json, staff_required
from hackcore.apps.events.models import Event
from .models import Announcement, Notification
from .services.announcements import announcements_for, create_announcement, delete_announcement


@require_GET
@login_required_json
def my_notifications(request: HttpRequest):
    qs = Notification.objects.filter(user=request.user)[:100]
    data = [
        {
            "id": n.id,
            "title": n.title,
            "message": n.message,
            "kind": n.kind,
            "payload": n.payload,
            "is_read": n.is_read,
            "created_at": n.created_at.isoformat(),
        }
        for n in qs
    ]
    return ok(data)


@require_POST
@login_required_json
@domain_errors
def mark_all_read(request: HttpRequest):
    updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
    return ok({"updated": updated})


def announcement_payload(a: Announcement) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "message": a.message,
        "link": a.link or None,
        "audience": a.audience,
        "notified_count": a.notified_count,
        "created_by": a.created_by_id,
        "created_at": a.created_at.isoformat(),
    }


@require_GET
@login_required_json
def announcement_list(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    return ok([announcement_payload(a) for a in announcements_for(event, request.user)])


@require_POST
@staff_required
@domain_errors
def announcement_create(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    body = read_json(request)
    announcement = create_announcement(
        event,
        request.user,
        title=body.get("title", ""),
        message=body.get("message", ""),
        audience=body.get("audience") or Announcement.Audience.ALL,
        link=body.get("link", ""),
    )
    return ok(
        announcement_payload(announcement),
        message=f"Aviso enviado a {announcement.notified_count} participantes.",
        status=201,
    )


@require_POST
@staff_required
@domain_errors
def announcement_delete(request: HttpRequest, pk: int):
    delete_announcement(pk, request.user)
    return ok(message="Aviso eliminado.")
