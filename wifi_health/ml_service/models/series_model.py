from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class SeriesModel:
    """Modelo ARIMA ajustado para una métrica.

    ``results`` guarda el ajuste de statsmodels; se reaplica con los mismos
    parámetros sobre las observaciones más recientes en cada pronóstico.
    Una serie sin ruido (constante o recta) no tiene ajuste: se pronostica
    con ``drift`` por paso y sin intervalo.
    """

    metric: str
    order: tuple[int, int, int]
    train_size: int
    trained_at: datetime
    results: Optional[Any] = field(default=None, compare=False, repr=False)
    drift: float = 0.0


@dataclass(frozen=True)
class SeriesForecast:
    """Pronóstico a N pasos con intervalo de confianza por paso."""

    metric: str
    values: tuple[float, ...]
    lower: tuple[float, ...]
    upper: tuple[float, ...]

    @property
    def horizon(self) -> int:
        return len(self.values)

    @property
    def average_interval_width(self) -> float:
        if not self.values:
            return 0.0
        widths = [u - lo for lo, u in zip(self.lower, self.upper)]
        return sum(widths) / len(widths)

    def first_step_below(self, threshold: float) -> int | None:
        """Primer paso (1-based) cuyo valor pronosticado cae bajo ``threshold``."""
        for idx, value in enumerate(self.values):
            if value < threshold:
                return idx + 1
        return None
