"""Selección del motor de predicción (trend | series) según el volumen de muestras.

La selección es una función pura del número de muestras recientes en el momento
de la llamada: no hay flag de modo persistido. Con un histórico que solo crece,
la transición trend -> series no se revierte.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Protocol, Sequence

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, SelectorConfig
from wifi_health.ml_service.explain.explanation_builder import format_upgrade_eta
from wifi_health.ml_service.forecasting.model_cache import ModelCache
from wifi_health.ml_service.metrics import PREDICTION_CYCLES, PREDICTIONS_EMITTED
from wifi_health.ml_service.models.engine_status import EngineStatus, EngineTag
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.models.prediction import Prediction

logger = logging.getLogger(__name__)


class Forecaster(Protocol):
    def predict(self, metrics: Sequence[MetricSample], now: datetime) -> list[Prediction]:
        ...


def select_engine(sample_count: int, upgrade_threshold: int = 500) -> EngineTag:
    if sample_count >= upgrade_threshold:
        return EngineTag.SERIES
    return EngineTag.TREND


class ForecastSelector:
    """API unificada de predicción sobre los dos motores intercambiables."""

    def __init__(
        self,
        trend: Forecaster,
        series: Forecaster,
        cfg: SelectorConfig | None = None,
        model_cache: Optional[ModelCache] = None,
        sample_interval_seconds: int = 30,
    ) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.selector
        self._engines: dict[EngineTag, Forecaster] = {
            EngineTag.TREND: trend,
            EngineTag.SERIES: series,
        }
        self._model_cache = model_cache
        self._samples_per_hour = 3600.0 / sample_interval_seconds

    def predict(self, metrics: Sequence[MetricSample], now: datetime) -> list[Prediction]:
        """``metrics``: hasta ``history_limit`` muestras, de la más reciente a la más antigua."""
        engine = select_engine(len(metrics), self._cfg.upgrade_threshold)
        logger.info(
            "[SELECTOR] motor=%s (%d/%d muestras)",
            engine.value,
            len(metrics),
            self._cfg.upgrade_threshold,
        )
        PREDICTION_CYCLES.labels(engine=engine.value).inc()

        predictions = [
            p.with_engine(engine.value) for p in self._engines[engine].predict(metrics, now)
        ]
        for p in predictions:
            PREDICTIONS_EMITTED.labels(engine=engine.value, category=p.category.value).inc()
        return predictions

    def status(self, sample_count: int, now: datetime) -> EngineStatus:
        cfg = self._cfg
        engine = select_engine(sample_count, cfg.upgrade_threshold)
        remaining = max(0, cfg.upgrade_threshold - sample_count)
        is_series = engine is EngineTag.SERIES

        status = EngineStatus(
            active_engine=engine,
            samples_collected=sample_count,
            samples_required=cfg.upgrade_threshold,
            samples_remaining=remaining,
            expected_accuracy=cfg.series_accuracy if is_series else cfg.trend_accuracy,
            time_to_upgrade=format_upgrade_eta(remaining, self._samples_per_hour),
            will_upgrade=not is_series,
        )

        if is_series and self._model_cache is not None:
            model_status = self._model_cache.status(now)
            status = replace(
                status,
                model_trained=model_status.is_trained,
                last_training=model_status.last_training,
                hours_until_retrain=model_status.hours_until_retrain,
            )
        return status
