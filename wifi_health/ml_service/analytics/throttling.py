from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional, Sequence

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, ThrottlingConfig
from wifi_health.ml_service.explain.explanation_builder import (
    build_isp_recommendation,
    speed_spread_percent,
)
from wifi_health.ml_service.models.analytics_results import IspAnalysis, ThrottlingClass
from wifi_health.ml_service.models.network_sample import SpeedTestSample
from wifi_health.ml_service.utils.numeric_precision import mean, percent_drop

logger = logging.getLogger(__name__)


class ThrottlingDetector:
    """Compara speed tests recientes contra el histórico para detectar degradación sostenida."""

    def __init__(self, cfg: ThrottlingConfig | None = None) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.throttling

    def analyze(self, tests: Sequence[SpeedTestSample]) -> Optional[IspAnalysis]:
        cfg = self._cfg

        if len(tests) < cfg.min_tests:
            logger.debug("ISP: datos insuficientes (%d/%d speed tests)", len(tests), cfg.min_tests)
            return None

        newest_first = sorted(tests, key=lambda t: t.timestamp, reverse=True)

        hourly = self._hourly_download_averages(newest_first)
        best = max(hourly, key=lambda h: (h[1], -h[0])) if hourly else None
        worst = min(hourly, key=lambda h: (h[1], h[0])) if hourly else None

        degradation = self.degradation_percent(newest_first)
        classification = self.classify(degradation)

        # Solo se reportan mejor/peor hora si la diferencia supera el umbral
        best_hour: Optional[int] = None
        worst_hour: Optional[int] = None
        if best is not None and worst is not None and best[0] != worst[0]:
            if speed_spread_percent(best[1], worst[1]) > cfg.min_hour_spread_percent:
                best_hour, worst_hour = best[0], worst[0]

        return IspAnalysis(
            total_tests=len(newest_first),
            average_download=mean(t.download_mbps for t in newest_first),
            average_upload=mean(t.upload_mbps for t in newest_first),
            average_latency=mean(t.latency_ms for t in newest_first),
            best_hour=best_hour,
            worst_hour=worst_hour,
            speed_degradation=degradation,
            classification=classification,
            recommendation=build_isp_recommendation(
                degradation, best, worst, len(hourly), cfg
            ),
        )

    def degradation_percent(self, newest_first: Sequence[SpeedTestSample]) -> float:
        """(media histórica - media reciente) / media histórica * 100.

        Requiere MÁS de ``min_tests_for_degradation`` tests; si no, 0.
        """
        cfg = self._cfg
        if len(newest_first) <= cfg.min_tests_for_degradation:
            return 0.0

        recent = newest_first[: cfg.recent_window]
        historical = newest_first[cfg.recent_window:]
        if not historical:
            return 0.0

        drop = percent_drop(
            mean(t.download_mbps for t in historical),
            mean(t.download_mbps for t in recent),
        )
        return drop if drop is not None else 0.0

    def classify(self, degradation: float) -> ThrottlingClass:
        cfg = self._cfg
        if degradation > cfg.likely_threshold_percent:
            return ThrottlingClass.LIKELY
        if degradation > cfg.possible_threshold_percent:
            return ThrottlingClass.POSSIBLE
        return ThrottlingClass.STABLE

    def _hourly_download_averages(
        self, tests: Sequence[SpeedTestSample]
    ) -> list[tuple[int, float]]:
        buckets: dict[int, list[float]] = defaultdict(list)
        for t in tests:
            buckets[t.timestamp.hour].append(t.download_mbps)
        return [
            (hour, mean(values))
            for hour, values in sorted(buckets.items())
            if len(values) >= self._cfg.min_bucket_tests
        ]
