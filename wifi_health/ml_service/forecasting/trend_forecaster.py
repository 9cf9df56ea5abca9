from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, TrendConfig
from wifi_health.ml_service.explain.explanation_builder import format_hour
from wifi_health.ml_service.models.alert import Severity
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.models.prediction import (
    Prediction,
    PredictionCategory,
    PredictionImpact,
)
from wifi_health.ml_service.models.trend_model import compute_trend
from wifi_health.ml_service.trainers.trend_trainer import fit_trend
from wifi_health.ml_service.utils.numeric_precision import mean, percent_drop

logger = logging.getLogger(__name__)


def heuristic_confidence(strength: float, sample_size: int) -> int:
    """Confianza 0-100: hasta 50 por tamaño de muestra + hasta 50 por intensidad."""
    size_confidence = min(sample_size / 2.0, 50.0)
    strength_confidence = min(abs(strength) * 5.0, 50.0)
    return int(min(size_confidence + strength_confidence, 100.0))


class TrendForecaster:
    """Motor estadístico: tendencia lineal de señal + patrones por hora del día."""

    def __init__(
        self,
        cfg: TrendConfig | None = None,
        sample_interval_seconds: int = 30,
    ) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.trend
        self._samples_per_hour = 3600.0 / sample_interval_seconds

    def predict(self, metrics: Sequence[MetricSample], now: datetime) -> list[Prediction]:
        """``metrics`` de la más reciente a la más antigua."""
        cfg = self._cfg
        recent = list(metrics[: cfg.history_limit])

        if len(recent) < cfg.min_samples:
            logger.debug("[TREND] datos insuficientes (%d/%d muestras)", len(recent), cfg.min_samples)
            return []

        predictions: list[Prediction] = []
        for builder in (self.predict_signal, self.predict_speed, self.predict_congestion):
            prediction = builder(recent, now)
            if prediction is not None:
                predictions.append(prediction)
        return predictions

    def predict_signal(self, metrics: Sequence[MetricSample], now: datetime) -> Optional[Prediction]:
        cfg = self._cfg
        window = sorted(metrics[: cfg.regression_window], key=lambda m: m.timestamp)
        if len(window) < cfg.min_regression_samples:
            return None

        fit = fit_trend("signal", [float(m.signal_percent) for m in window])
        logger.debug(
            "[TREND] señal %s (pendiente=%.3f, r2=%.2f)", compute_trend(fit.coef_), fit.coef_, fit.r2
        )
        if fit.coef_ >= cfg.slope_threshold:
            return None

        current = fit.last_value
        projected = fit.extrapolate(self._samples_per_hour)
        if current < cfg.signal_threshold or projected >= cfg.signal_threshold:
            return None

        return Prediction(
            category=PredictionCategory.SIGNAL_DEGRADATION,
            severity=Severity.MEDIUM,
            impact=PredictionImpact.MEDIUM,
            confidence=heuristic_confidence(fit.coef_, len(window)),
            title="Degradación de señal prevista",
            message=(
                f"La señal está bajando. Ahora está en {current:.0f}% y se prevé que llegue a "
                f"{max(projected, 0.0):.0f}% en la próxima hora. Acércate al router o revisa "
                "posibles interferencias."
            ),
            estimated_timeframe="En la próxima hora",
            created_at=now,
        )

    def predict_speed(self, metrics: Sequence[MetricSample], now: datetime) -> Optional[Prediction]:
        cfg = self._cfg
        current_hour = now.hour
        next_hour = (current_hour + 1) % 24

        current_speeds = [m.receive_speed_mbps for m in metrics if m.timestamp.hour == current_hour]
        next_speeds = [m.receive_speed_mbps for m in metrics if m.timestamp.hour == next_hour]
        if len(current_speeds) < cfg.min_hour_samples or len(next_speeds) < cfg.min_hour_samples:
            return None

        drop = percent_drop(mean(current_speeds), mean(next_speeds))
        if drop is None or drop <= cfg.speed_drop_percent:
            return None

        return Prediction(
            category=PredictionCategory.SPEED_DEGRADATION,
            severity=Severity.LOW,
            impact=PredictionImpact.LOW,
            confidence=heuristic_confidence(drop / 10.0, len(next_speeds)),
            title="Bajada de velocidad prevista",
            message=(
                f"Según el histórico, la velocidad suele bajar un {drop:.0f}% hacia las "
                f"{format_hour(next_hour)}. Programa las descargas grandes para más tarde."
            ),
            estimated_timeframe=f"Hacia las {format_hour(next_hour)}",
            created_at=now,
        )

    def predict_congestion(
        self, metrics: Sequence[MetricSample], now: datetime
    ) -> Optional[Prediction]:
        cfg = self._cfg
        similar = sorted(
            (
                m
                for m in metrics
                if m.timestamp.hour == now.hour and m.timestamp.weekday() == now.weekday()
            ),
            key=lambda m: m.timestamp,
            reverse=True,
        )[: cfg.congestion_window]

        if len(similar) < cfg.congestion_min_samples:
            return None

        avg_utilization = mean(m.channel_utilization for m in similar)
        if avg_utilization <= cfg.utilization_threshold:
            return None

        return Prediction(
            category=PredictionCategory.CONGESTION,
            severity=Severity.LOW,
            impact=PredictionImpact.MEDIUM,
            confidence=heuristic_confidence(avg_utilization / 10.0, len(similar)),
            title="Congestión de red probable",
            message=(
                "Esta franja horaria suele tener mucha congestión "
                f"(media de {avg_utilization:.0f}% de uso del canal). Usa la banda de 5 GHz "
                "o deja las tareas pesadas para más tarde."
            ),
            estimated_timeframe="Franja horaria actual",
            created_at=now,
        )
