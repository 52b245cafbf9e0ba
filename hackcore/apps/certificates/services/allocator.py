# hackcore/apps/certificates/services/allocator.py
"""
IDs de certificado: CERT-{SIGLA}{AÑO}-{NNN}.

La secuencia recorre la preselección por rank y luego los miembros por
posición; quien ya tiene certificado se salta. Re-ejecutar nunca renumera.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from hackcore.apps.core.errors import NotFoundError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import require_phase
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.notifications.services.sink import notify_many
from ..models import Certificate
from ..rendering import Renderer, get_renderer

logger = logging.getLogger(__name__)

MAX_ACRONYM = 6
CERTIFICATE_PHASES = (Phase.EXECUTION_ACTIVE, Phase.JUDGING, Phase.COMPLETED)


def acronym(title: str) -> str:
    letters = []
    for word in (title or "").split():
        first = next((ch for ch in word if ch.isalnum()), "")
        if first:
            letters.append(first.upper())
    return "".join(letters)[:MAX_ACRONYM]


def allocate(event_title: str, sequence_index: int, year: Optional[int] = None) -> str:
    year = year or timezone.localdate().year
    return f"CERT-{acronym(event_title)}{year}-{sequence_index:03d}"


def _render_fields(event: Event, cert: Certificate, entry: ShortlistEntry) -> dict:
    holder = cert.holder
    return {
        "certificate_id": cert.certificate_id,
        "holder_name": holder.get_full_name() or holder.username,
        "team_name": entry.team.name,
        "rank": entry.rank,
        "event_title": event.title,
        "event_slug": event.slug,
        "committee_name": event.committee_name,
        "start_date": event.execution_start.isoformat(),
        "end_date": event.execution_end.isoformat(),
    }


def generate_certificates(
    event: Event, renderer: Optional[Renderer] = None, today: Optional[date] = None
) -> List[Certificate]:
    """Emite los certificados faltantes. Devuelve solo los nuevos."""
    event = require_phase(
        event, *CERTIFICATE_PHASES, today=today, message="Los certificados se generan desde el inicio del hackathon."
    )
    renderer = renderer or get_renderer()
    year = (today or timezone.localdate()).year

    created: List[Certificate] = []
    with transaction.atomic():
        # Una corrida a la vez por evento
        Event.objects.select_for_update().get(pk=event.pk)
        has_cert = set(Certificate.objects.filter(event=event).values_list("holder_id", flat=True))
        index = len(has_cert) + 1

        for entry in ShortlistEntry.objects.filter(event=event).select_related("team").order_by("rank"):
            for member in entry.team.active_members():
                if member.user_id in has_cert:
                    continue
                cert_id = allocate(event.title, index, year)
                while Certificate.objects.filter(certificate_id=cert_id).exists():
                    index += 1
                    cert_id = allocate(event.title, index, year)

                cert = Certificate.objects.create(
                    event=event,
                    holder=member.user,
                    team=entry.team,
                    certificate_id=cert_id,
                    sequence=index,
                )
                cert.artifact_ref = renderer(_render_fields(event, cert, entry))
                cert.save(update_fields=["artifact_ref"])

                has_cert.add(member.user_id)
                created.append(cert)
                index += 1

    logger.info("Evento %s: %d certificados nuevos", event.pk, len(created))
    notify_many(
        [c.holder_id for c in created],
        title="📜 Tu certificado está disponible",
        message=f'Ya puedes descargar tu certificado de "{event.title}".',
        kind="certificate_ready",
        payload={"event_id": event.pk},
    )
    return created


def verify_certificate(certificate_id: str) -> Certificate:
    code = (certificate_id or "").strip().upper()
    try:
        return Certificate.objects.select_related("event", "holder", "team").get(certificate_id=code)
    except Certificate.DoesNotExist:
        raise NotFoundError("Certificado no encontrado.", certificate_id=code)
