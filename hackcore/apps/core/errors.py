# hackcore/apps/core/errors.py
"""
Taxonomía de errores de dominio.

Los servicios lanzan estas excepciones; las vistas JSON las traducen a una
respuesta con `status` y `code` (ver core.http.domain_errors). Cualquier otra
excepción se considera una falla inesperada y se deja propagar.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    status = 400
    code = "domain_error"
    default_message = "Operación no permitida."

    def __init__(self, message: Optional[str] = None, **data: Any):
        self.message = message or self.default_message
        self.data: Dict[str, Any] = data
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        return {"success": False, "code": self.code, "message": self.message, "data": self.data}


# -------------------------------
# Entrada inválida (culpa del llamador)
# -------------------------------
class ValidationError(DomainError):
    status = 400
    code = "validation_error"
    default_message = "Datos inválidos."


class WeightSumError(ValidationError):
    code = "weight_sum"

    def __init__(self, weight_sum: int):
        super().__init__(
            f"Los pesos deben sumar 100. Suma actual: {weight_sum}",
            weight_sum=weight_sum,
        )


class DimensionRangeError(ValidationError):
    code = "dimension_range"

    def __init__(self, dimension: str, value: Any):
        super().__init__(
            f"El puntaje de '{dimension}' debe estar entre 0 y 10 (recibido: {value}).",
            dimension=dimension,
            value=str(value),
        )


class MilestoneOrderError(ValidationError):
    code = "milestone_order"


# -------------------------------
# Fase / estado terminal
# -------------------------------
class PhaseError(DomainError):
    status = 409
    code = "phase"

    def __init__(self, current: str, required: Any = None, message: Optional[str] = None):
        if isinstance(required, (list, tuple, set, frozenset)):
            required = sorted(required)
        super().__init__(
            message or f"Acción no permitida en la fase actual: {current}",
            current=current,
            required=required,
        )
        self.current = current
        self.required = required


class LockedError(DomainError):
    status = 423
    code = "locked"
    default_message = "El registro está bloqueado y no puede modificarse."


class DuplicateRedemptionError(DomainError):
    """QR ya usado. Es un caso esperado: el llamador muestra quién y cuándo."""

    status = 409
    code = "already_redeemed"

    def __init__(self, credential):
        self.credential = credential
        used_at = credential.used_at.isoformat() if credential.used_at else None
        super().__init__(
            "QR ya escaneado.",
            purpose=credential.purpose,
            holder=credential.holder_id,
            team=credential.team_id,
            used_by=credential.used_by_id,
            used_at=used_at,
        )


class AlreadyIssuedError(DomainError):
    """Ya existe una credencial para (evento, titular, propósito)."""

    status = 409
    code = "already_issued"

    def __init__(self, credential):
        self.credential = credential
        super().__init__(
            "Ya existe una credencial para este participante y propósito.",
            purpose=credential.purpose,
            holder=credential.holder_id,
        )


# -------------------------------
# Entidades / permisos
# -------------------------------
class NotFoundError(DomainError):
    status = 404
    code = "not_found"
    default_message = "No encontrado."


class InvalidCredentialError(NotFoundError):
    code = "invalid_credential"
    default_message = "Código QR inválido."


class ForbiddenError(DomainError):
    status = 403
    code = "forbidden"
    default_message = "No tienes permiso para esta acción."


class NoScoresError(DomainError):
    status = 400
    code = "no_scores"
    default_message = "No hay equipos puntuados. Puntúa los equipos primero."


# -------------------------------
# Concurrencia / almacenamiento
# -------------------------------
class ConcurrencyConflictError(DomainError):
    """Se perdió la carrera del compare-and-set: reintentar la operación completa."""

    status = 409
    code = "concurrency_conflict"
    default_message = "Otra operación modificó el registro. Reintenta."


class StorageError(DomainError):
    status = 503
    code = "storage"
    default_message = "Error de almacenamiento."
