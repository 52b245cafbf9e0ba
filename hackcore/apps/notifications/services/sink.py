# hackcore/apps/notifications/services/sink.py
"""
Sumidero de notificaciones: fire-and-forget.

Cada escritura va en su propio savepoint; si falla se registra y se sigue,
nunca revierte la operación de dominio que la disparó.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from django.db import DatabaseError, transaction

from ..models import Notification

logger = logging.getLogger(__name__)


def notify(
    user_id: int,
    title: str,
    message: str,
    kind: str,
    payload: Optional[Dict[str, Any]] = None,
) -> Optional[Notification]:
    try:
        with transaction.atomic():
            return Notification.objects.create(
                user_id=user_id,
                title=title,
                message=message,
                kind=kind,
                payload=payload or {},
            )
    except DatabaseError:
        logger.warning("No se pudo notificar a user=%s (kind=%s)", user_id, kind, exc_info=True)
        return None


def notify_many(
    user_ids: Iterable[int],
    title: str,
    message: str,
    kind: str,
    payload: Optional[Dict[str, Any]] = None,
) -> int:
    """Una notificación por usuario (sin duplicados). Devuelve cuántas se guardaron."""
    seen = set()
    rows = []
    for uid in user_ids:
        if uid in seen:
            continue
        seen.add(uid)
        rows.append(Notification(user_id=uid, title=title, message=message, kind=kind, payload=payload or {}))
    if not rows:
        return 0
    try:
        with transaction.atomic():
            Notification.objects.bulk_create(rows)
    except DatabaseError:
        logger.warning("Fallo el envío masivo de notificaciones (kind=%s, n=%d)", kind, len(rows), exc_info=True)
        return 0
    return len(rows)
