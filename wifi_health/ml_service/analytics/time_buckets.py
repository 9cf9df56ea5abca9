from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional, Sequence

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, TimeBucketConfig
from wifi_health.ml_service.explain.explanation_builder import build_time_recommendation
from wifi_health.ml_service.models.analytics_results import BestTimeAnalysis, HourlyStats
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.utils.numeric_precision import mean

logger = logging.getLogger(__name__)


def hourly_stats(samples: Sequence[MetricSample], min_bucket_samples: int) -> list[HourlyStats]:
    """Agrupa por hora del día y descarta buckets con pocas muestras."""
    buckets: dict[int, list[MetricSample]] = defaultdict(list)
    for s in samples:
        buckets[s.timestamp.hour].append(s)

    stats: list[HourlyStats] = []
    for hour, items in sorted(buckets.items()):
        if len(items) < min_bucket_samples:
            continue
        speeds = [float(s.receive_speed_mbps) for s in items]
        stats.append(
            HourlyStats(
                hour=hour,
                average_speed=mean(speeds),
                average_signal=mean(float(s.signal_percent) for s in items),
                sample_count=len(items),
                min_speed=min(speeds),
                max_speed=max(speeds),
            )
        )
    return stats


class TimeBucketAnalyzer:
    """Mejores y peores horas para descargas a partir de buckets horarios."""

    def __init__(self, cfg: TimeBucketConfig | None = None) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.time_buckets

    def analyze(self, samples: Sequence[MetricSample]) -> Optional[BestTimeAnalysis]:
        cfg = self._cfg

        if len(samples) < cfg.min_total_samples:
            logger.debug(
                "Mejores horas: datos insuficientes (%d/%d muestras)",
                len(samples),
                cfg.min_total_samples,
            )
            return None

        stats = hourly_stats(samples, cfg.min_bucket_samples)
        if len(stats) < cfg.min_buckets:
            logger.debug(
                "Mejores horas: solo %d buckets con >=%d muestras (mínimo %d)",
                len(stats),
                cfg.min_bucket_samples,
                cfg.min_buckets,
            )
            return None

        ranked = sorted(stats, key=lambda h: (-h.average_speed, h.hour))

        # Mejores y peores nunca comparten hora: con pocos buckets se reparte la mitad a cada lado
        per_side = min(cfg.top_n, len(ranked) // 2)
        best = ranked[:per_side]
        worst = ranked[len(ranked) - per_side:]

        consistent, recommendation = build_time_recommendation(
            best=ranked[0],
            worst=ranked[-1],
            consistent_percent=cfg.consistent_speed_percent,
        )

        return BestTimeAnalysis(
            best_hours=sorted(best, key=lambda h: h.hour),
            worst_hours=sorted(worst, key=lambda h: h.hour),
            overall_average=mean(float(s.receive_speed_mbps) for s in samples),
            data_points=len(samples),
            speeds_consistent=consistent,
            recommendation=recommendation,
        )
