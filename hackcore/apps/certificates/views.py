from __future__ import annotations

from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from hackcore.apps.core.http import domain_errors, ok, staff_required
from hackcore.apps.events.models import Event
from .services.allocator import generate_certificates, verify_certificate


@require_POST
@staff_required
@domain_errors
def generate(request: HttpRequest, slug: str):
    event = get_object_or_404(Event, slug=slug)
    created = generate_certificates(event)
    return ok(
        [{"holder_id": c.holder_id, "certificate_id": c.certificate_id} for c in created],
        message=f"{len(created)} certificados generados.",
    )


@require_GET
@domain_errors
def verify(request: HttpRequest, certificate_id: str):
    # Público: lo que se imprime en el certificado
    c = verify_certificate(certificate_id)
    return ok({
        "certificate_id": c.certificate_id,
        "holder_name": c.holder.get_full_name() or c.holder.username,
        "team_name": c.team.name if c.team else "",
        "event_title": c.event.title,
        "issued_at": c.issued_at.isoformat(),
    })
