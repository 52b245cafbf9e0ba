# hackcore/apps/scoring/services/engine.py
"""
Motor de puntaje compartido por preselección y evaluación final.

total = round2(Σ dimensión × peso / 100), redondeo half-up.
Sin acceso a BD: se puede probar solo.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Sequence, Union

from django.conf import settings

from hackcore.apps.core.errors import DimensionRangeError, ValidationError, WeightSumError

DIMENSIONS = (
    "innovation",
    "feasibility",
    "technical_depth",
    "presentation_clarity",
    "social_impact",
)

MIN_SCORE = Decimal("0")
MAX_SCORE = Decimal("10")
TWO_PLACES = Decimal("0.01")

Values = Union[Mapping[str, Any], Sequence[Any]]


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _by_dimension(values: Values, what: str) -> Dict[str, Any]:
    if isinstance(values, Mapping):
        missing = [d for d in DIMENSIONS if d not in values]
        if missing:
            raise ValidationError(f"Faltan {what}: {', '.join(missing)}", missing=missing)
        return {d: values[d] for d in DIMENSIONS}
    values = list(values)
    if len(values) != len(DIMENSIONS):
        raise ValidationError(f"Se esperaban {len(DIMENSIONS)} {what}, llegaron {len(values)}.")
    return dict(zip(DIMENSIONS, values))


def _to_decimal(dimension: str, raw: Any) -> Decimal:
    if isinstance(raw, bool):
        raise DimensionRangeError(dimension, raw)
    try:
        # str() evita arrastrar el error binario de los float
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise DimensionRangeError(dimension, raw)
    if not value.is_finite() or value < MIN_SCORE or value > MAX_SCORE:
        raise DimensionRangeError(dimension, raw)
    if value.normalize().as_tuple().exponent < -2:
        raise ValidationError(f"'{dimension}' admite como máximo 2 decimales.", dimension=dimension)
    return value


def _to_weight(dimension: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"Peso inválido para '{dimension}': {raw}", dimension=dimension)
    try:
        weight = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Peso inválido para '{dimension}': {raw}", dimension=dimension)
    if weight != raw and str(weight) != str(raw).strip():
        raise ValidationError(f"El peso de '{dimension}' debe ser entero.", dimension=dimension)
    if weight < 0:
        raise ValidationError(f"El peso de '{dimension}' no puede ser negativo.", dimension=dimension)
    return weight


def default_weights() -> Dict[str, int]:
    return dict(zip(DIMENSIONS, getattr(settings, "HACKCORE_DEFAULT_WEIGHTS", (20, 20, 20, 20, 20))))


def clean_weights(weights: Values, require_weight_sum: int = 100) -> Dict[str, int]:
    raw = _by_dimension(weights, "pesos")
    w = {d: _to_weight(d, raw[d]) for d in DIMENSIONS}
    weight_sum = sum(w.values())
    if weight_sum != require_weight_sum:
        raise WeightSumError(weight_sum)
    return w


def clean_dimensions(dimensions: Values) -> Dict[str, Decimal]:
    raw = _by_dimension(dimensions, "dimensiones")
    return {d: _to_decimal(d, raw[d]) for d in DIMENSIONS}


def score(dimensions: Values, weights: Values, require_weight_sum: int = 100) -> Decimal:
    # La suma de pesos se valida primero: falla igual con cualquier dimensión
    w = clean_weights(weights, require_weight_sum)
    dims = clean_dimensions(dimensions)
    weighted = sum((dims[d] * w[d] for d in DIMENSIONS), Decimal("0"))
    return round2(weighted / Decimal(100))
