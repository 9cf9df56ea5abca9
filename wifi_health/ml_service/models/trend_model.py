from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


Trend = Literal["up", "down", "stable"]


@dataclass(frozen=True)
class TrendFit:
    """Ajuste lineal simple de una métrica.

    Representa y = intercept_ + coef_ * i, donde i es el índice de la muestra
    (la muestra más antigua de la ventana es i = 0).
    """

    metric: str
    coef_: float
    intercept_: float
    r2: float
    n_samples: int
    last_value: float

    def extrapolate(self, steps_ahead: float) -> float:
        """Valor esperado ``steps_ahead`` muestras después de la última."""
        return self.last_value + self.coef_ * steps_ahead


def compute_trend(coef: float, eps: float = 1e-3) -> Trend:
    if coef > eps:
        return "up"
    if coef < -eps:
        return "down"
    return "stable"
