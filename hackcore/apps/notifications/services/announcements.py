# hackcore/apps/notifications/services/announcements.py
"""
Avisos del comité.

- audience "all": miembros activos de todos los equipos confirmados.
- audience "shortlisted": solo miembros de equipos preseleccionados.
El aviso se guarda siempre; el reparto va por notify_many (fire-and-forget).
"""
from __future__ import annotations

import logging
from typing import List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator

from hackcore.apps.core.errors import ForbiddenError, NotFoundError, ValidationError
from hackcore.apps.events.models import Event
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.registration.models import ACTIVE_MEMBER_STATUSES, Team, TeamMember
from ..models import Announcement
from .sink import notify_many

logger = logging.getLogger(__name__)

Audience = Announcement.Audience


def audience_user_ids(event: Event, audience: str) -> List[int]:
    members = TeamMember.objects.filter(team__event=event, status__in=ACTIVE_MEMBER_STATUSES)
    if audience == Audience.ALL:
        members = members.filter(team__status=Team.Status.CONFIRMED)
    elif audience == Audience.SHORTLISTED:
        members = members.filter(team_id__in=ShortlistEntry.objects.filter(event=event).values("team_id"))
    else:
        raise ValidationError("audience debe ser 'all' o 'shortlisted'.", audience=audience)
    return list(members.order_by("team_id", "position").values_list("user_id", flat=True))


def create_announcement(event: Event, author, title: str, message: str, audience: str = Audience.ALL, link: str = "") -> Announcement:
    title = (title or "").strip()
    message = (message or "").strip()
    link = (link or "").strip()
    if not title or not message:
        raise ValidationError("El aviso necesita título y mensaje.")
    if link:
        try:
            URLValidator()(link)
        except DjangoValidationError:
            raise ValidationError("URL inválida en link.", field="link")

    user_ids = audience_user_ids(event, audience)
    announcement = Announcement.objects.create(
        event=event, created_by=author, title=title, message=message, link=link, audience=audience
    )
    sent = notify_many(
        user_ids,
        title=f"📢 {title}",
        message=message,
        kind="announcement",
        payload={"event_id": event.pk, "announcement_id": announcement.pk, "link": link or None},
    )
    Announcement.objects.filter(pk=announcement.pk).update(notified_count=sent)
    announcement.notified_count = sent
    logger.info("Evento %s: aviso %s (%s) enviado a %d usuarios", event.pk, announcement.pk, audience, sent)
    return announcement


def announcements_for(event: Event, user) -> List[Announcement]:
    """El staff ve todo; los preseleccionados ven ambos públicos; el resto solo 'all'."""
    qs = Announcement.objects.filter(event=event)
    if not user.is_staff:
        shortlisted = TeamMember.objects.filter(
            user=user,
            status__in=ACTIVE_MEMBER_STATUSES,
            team_id__in=ShortlistEntry.objects.filter(event=event).values("team_id"),
        ).exists()
        if not shortlisted:
            qs = qs.filter(audience=Audience.ALL)
    return list(qs)


def delete_announcement(announcement_id: int, user) -> None:
    announcement = Announcement.objects.filter(pk=announcement_id).first()
    if announcement is None:
        raise NotFoundError("El aviso no existe.")
    if announcement.created_by_id != user.pk and not user.is_superuser:
        raise ForbiddenError("Solo puedes borrar tus propios avisos.")
    announcement.delete()
    logger.info("Aviso %s eliminado por %s", announcement_id, user.pk)
