"""Funciones numéricas canónicas compartidas por los analizadores.

Política:
- Cálculos internos: Python float, sin redondeos intermedios.
- Redondeo: SOLO en frontera (to_dict / textos para el usuario).
- Todo score derivado (salud, estabilidad, congestión, confianza) se acota a [0, 100].
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence


def safe_float(value, default: float = 0.0) -> float:
    """Convierte un valor a float con validación de NaN/Infinity.

    Args:
        value: Valor a convertir (puede ser None, str, Decimal, etc.)
        default: Valor por defecto si es inválido

    Returns:
        Float válido o default si el valor es None, NaN o Infinity
    """
    if value is None:
        return default
    try:
        f = float(value)
        if not math.isfinite(f):
            return default
        return f
    except (TypeError, ValueError):
        return default


def mean(values: Iterable[float]) -> float:
    seq = [safe_float(v) for v in values]
    if not seq:
        return 0.0
    return sum(seq) / len(seq)


def population_std(values: Sequence[float]) -> float:
    """Desviación estándar poblacional (sin corrección de Bessel)."""
    if len(values) < 2:
        return 0.0
    m = mean(values)
    return math.sqrt(sum((safe_float(v) - m) ** 2 for v in values) / len(values))


def percent_drop(reference: float, value: float) -> Optional[float]:
    """Porcentaje que ``value`` está por debajo de ``reference``.

    Devuelve None si la referencia no es positiva (evita división por cero).
    """
    if reference <= 0 or not math.isfinite(reference) or not math.isfinite(value):
        return None
    return (reference - value) / reference * 100.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_score(value: float) -> float:
    return clamp(value, 0.0, 100.0)

