# hackcore/apps/core/http.py
from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Dict

from django.db import DatabaseError
from django.http import HttpRequest, JsonResponse

from .errors import DomainError, ForbiddenError, StorageError, ValidationError

logger = logging.getLogger(__name__)


# -------------------------------
# Permisos
# -------------------------------
def user_is_judge(user) -> bool:
    if not user.is_authenticated:
        return False
    # Permitimos staff o miembros del grupo "judges"
    return user.is_staff or user.groups.filter(name="judges").exists()


def _auth_required(check, denied_message: str):
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request: HttpRequest, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse(
                    {"success": False, "code": "unauthenticated", "message": "Debes iniciar sesión."},
                    status=401,
                )
            if not check(request.user):
                return JsonResponse(ForbiddenError(denied_message).as_dict(), status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


login_required_json = _auth_required(lambda u: True, "")
staff_required = _auth_required(lambda u: u.is_staff or u.is_superuser, "Solo administradores.")
judge_required = _auth_required(user_is_judge, "Solo jueces.")


# -------------------------------
# Errores de dominio -> JSON
# -------------------------------
def domain_errors(view_func):
    """
    Traduce DomainError a JsonResponse con su status.
    Las fallas de BD se registran y se devuelven como 503 (StorageError).
    """
    @wraps(view_func)
    def _wrapped(request: HttpRequest, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except DomainError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status)
        except DatabaseError:
            logger.exception("Falla de almacenamiento en %s", request.path)
            err = StorageError()
            return JsonResponse(err.as_dict(), status=err.status)
    return _wrapped


def read_json(request: HttpRequest) -> Dict[str, Any]:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (TypeError, ValueError):
        raise ValidationError("Cuerpo JSON inválido.")
    if not isinstance(payload, dict):
        raise ValidationError("Se esperaba un objeto JSON.")
    return payload


def ok(data: Any = None, message: str = "", status: int = 200) -> JsonResponse:
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return JsonResponse(body, status=status)
