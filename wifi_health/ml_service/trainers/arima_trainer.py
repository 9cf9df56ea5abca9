from __future__ import annotations

import logging
import warnings
from datetime import datetime
from typing import Sequence

import numpy as np
from statsmodels.tools.sm_exceptions import ConvergenceWarning
from statsmodels.tsa.arima.model import ARIMA

from wifi_health.ml_service.config.ml_config import SeriesConfig
from wifi_health.ml_service.models.series_model import SeriesForecast, SeriesModel

logger = logging.getLogger(__name__)


class ArimaTrainer:
    """Ajusta y aplica un ARIMA con deriva por métrica (statsmodels).

    Con ``d=1`` y tendencia ``"t"`` el término de tendencia es la pendiente
    media por paso, así que una caída sostenida se sigue pronosticando como
    caída. El intervalo por paso sale de ``get_forecast().conf_int()``.
    """

    def __init__(self, cfg: SeriesConfig) -> None:
        self.cfg = cfg

    def fit(self, metric: str, values: Sequence[float], trained_at: datetime) -> SeriesModel:
        """``values`` en orden cronológico (la más antigua primero).

        Lanza ValueError / LinAlgError si la serie no permite un modelo válido.
        """
        x = self._series(metric, values)
        n = x.size
        if n < self.cfg.series_length:
            raise ValueError(
                f"ARIMA {metric}: {n} puntos, se necesitan al menos {self.cfg.series_length}"
            )

        steps = np.diff(x)
        if np.ptp(steps) == 0.0:
            # Sin ruido la verosimilitud degenera; basta con la pendiente
            drift = float(steps[0])
            logger.debug("[ARIMA] %s sin ruido n=%d drift=%.3f", metric, n, drift)
            return SeriesModel(
                metric=metric,
                order=self.cfg.arima_order,
                train_size=n,
                trained_at=trained_at,
                drift=drift,
            )

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            results = ARIMA(x, order=self.cfg.arima_order, trend=self.cfg.arima_trend).fit()

        params = np.asarray(results.params, dtype=float)
        if not np.all(np.isfinite(params)):
            raise ValueError(f"ARIMA {metric}: parámetros no finitos tras el ajuste")
        retvals = getattr(results, "mle_retvals", None) or {}
        if not retvals.get("converged", True):
            logger.warning("[ARIMA] %s: el optimizador no convergió, se usa el último ajuste", metric)

        logger.debug(
            "[ARIMA] %s entrenado n=%d order=%s params=%s",
            metric,
            n,
            self.cfg.arima_order,
            np.round(params, 3).tolist(),
        )
        return SeriesModel(
            metric=metric,
            order=self.cfg.arima_order,
            train_size=n,
            trained_at=trained_at,
            results=results,
        )

    def forecast(self, model: SeriesModel, recent: Sequence[float]) -> SeriesForecast:
        """Pronostica ``cfg.horizon`` pasos a partir de las observaciones más recientes."""
        history = self._series(model.metric, recent)
        if history.size < 2:
            raise ValueError(f"ARIMA {model.metric}: se necesitan al menos 2 observaciones recientes")
        horizon = self.cfg.horizon

        if model.results is None:
            values = history[-1] + model.drift * np.arange(1, horizon + 1)
            return SeriesForecast(
                metric=model.metric,
                values=tuple(float(v) for v in values),
                lower=tuple(float(v) for v in values),
                upper=tuple(float(v) for v in values),
            )

        prediction = model.results.apply(history).get_forecast(horizon)
        values = np.asarray(prediction.predicted_mean, dtype=float)
        bounds = np.asarray(prediction.conf_int(alpha=1.0 - self.cfg.confidence_level), dtype=float)
        if not (np.all(np.isfinite(values)) and np.all(np.isfinite(bounds))):
            raise ValueError(f"ARIMA {model.metric}: pronóstico no finito")

        return SeriesForecast(
            metric=model.metric,
            values=tuple(float(v) for v in values),
            lower=tuple(float(v) for v in bounds[:, 0]),
            upper=tuple(float(v) for v in bounds[:, 1]),
        )

    def _series(self, metric: str, values: Sequence[float]) -> np.ndarray:
        x = np.asarray(values, dtype=float)[-self.cfg.train_size:]
        if not np.all(np.isfinite(x)):
            raise ValueError(f"ARIMA {metric}: la serie contiene NaN/Infinity")
        return x
