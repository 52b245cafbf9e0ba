# hackcore/apps/certificates/rendering.py
"""
Colaborador de renderizado: recibe los campos del certificado y devuelve una
referencia opaca (ruta o URL). El dominio nunca inspecciona el contenido.
Se configura con HACKCORE_CERTIFICATE_RENDERER (ruta con puntos).
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from django.conf import settings
from django.utils.module_loading import import_string

DEFAULT_RENDERER = "hackcore.apps.certificates.rendering.StoragePathRenderer"

Renderer = Callable[[Dict[str, Any]], str]


class StoragePathRenderer:
    """Solo calcula dónde quedaría el PDF; otro proceso lo genera."""

    prefix = "certificates"

    def __call__(self, fields: Dict[str, Any]) -> str:
        return f"{self.prefix}/{fields['event_slug']}/{fields['certificate_id']}.pdf"


def get_renderer() -> Renderer:
    path = getattr(settings, "HACKCORE_CERTIFICATE_RENDERER", DEFAULT_RENDERER)
    renderer = import_string(path)
    # Acepta clase o función
    return renderer() if isinstance(renderer, type) else renderer
