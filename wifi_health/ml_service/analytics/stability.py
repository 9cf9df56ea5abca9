from __future__ import annotations

import logging
from datetime import timedelta
from typing import Sequence

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, StabilityConfig
from wifi_health.ml_service.models.analytics_results import NetworkStability
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.utils.numeric_precision import clamp_score, mean, population_std

logger = logging.getLogger(__name__)


class StabilityAnalyzer:
    """Scores de estabilidad basados en varianza de señal y velocidad.

    Los pesos (50/30/20, factor 2, penalización 5 por caída) son constantes de
    diseño fijas, no aprendidas; viven en ``StabilityConfig``.
    """

    def __init__(self, cfg: StabilityConfig | None = None) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.stability

    def analyze(self, samples: Sequence[MetricSample], period: timedelta) -> NetworkStability:
        """Analiza muestras en orden cronológico ascendente."""
        cfg = self._cfg
        period_hours = period.total_seconds() / 3600.0

        if len(samples) < cfg.min_samples:
            logger.debug(
                "Estabilidad: datos insuficientes (%d/%d muestras)", len(samples), cfg.min_samples
            )
            return NetworkStability.insufficient(period_hours, sample_count=len(samples))

        ordered = sorted(samples, key=lambda s: s.timestamp)
        signals = [float(s.signal_percent) for s in ordered]
        speeds = [float(s.receive_speed_mbps) for s in ordered]

        avg_signal = mean(signals)
        signal_std = population_std(signals)
        avg_speed = mean(speeds)
        speed_std = population_std(speeds)

        drops = count_significant_drops(signals, cfg.significant_drop_points)

        signal_stability = clamp_score(100.0 - cfg.signal_stability_factor * signal_std)
        if avg_speed > 0:
            speed_stability = clamp_score(100.0 - speed_std / avg_speed * 100.0)
        else:
            # Sin velocidad media no hay base para el coeficiente de variación
            speed_stability = 0.0

        return NetworkStability(
            period_hours=period_hours,
            insufficient_data=False,
            sample_count=len(ordered),
            average_signal=avg_signal,
            signal_stability=signal_stability,
            average_speed=avg_speed,
            speed_stability=speed_stability,
            significant_drops=drops,
            stability_score=self.stability_score(signal_std, speed_std, drops),
            is_stable=signal_std < cfg.stable_signal_stddev and drops < cfg.stable_max_drops,
        )

    def stability_score(self, signal_std: float, speed_std: float, drops: int) -> float:
        cfg = self._cfg
        signal_score = max(0.0, cfg.signal_score_base - signal_std)
        drop_score = max(0.0, cfg.drop_score_base - drops * cfg.drop_penalty)
        speed_score = max(0.0, cfg.speed_score_base - speed_std / cfg.speed_stddev_divisor)
        return clamp_score(signal_score + drop_score + speed_score)


def count_significant_drops(signals: Sequence[float], threshold: float) -> int:
    drops = 0
    for prev, cur in zip(signals, signals[1:]):
        if prev - cur > threshold:
            drops += 1
    return drops
