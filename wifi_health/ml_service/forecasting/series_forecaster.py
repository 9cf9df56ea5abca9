from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Optional, Sequence

import numpy as np

from wifi_health.ml_service.config.ml_config import DEFAULT_ANALYTICS_CONFIG, SeriesConfig
from wifi_health.ml_service.forecasting.model_cache import CachedModels, ModelCache
from wifi_health.ml_service.metrics import MODEL_TRAINING_FAILURES, MODEL_TRAINING_SECONDS
from wifi_health.ml_service.models.alert import Severity
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.models.prediction import (
    Prediction,
    PredictionCategory,
    PredictionImpact,
)
from wifi_health.ml_service.models.series_model import SeriesForecast, SeriesModel
from wifi_health.ml_service.trainers.arima_trainer import ArimaTrainer
from wifi_health.ml_service.utils.numeric_precision import (
    clamp,
    mean,
    percent_drop,
    population_std,
)

logger = logging.getLogger(__name__)

_TRAINING_ERRORS = (ValueError, np.linalg.LinAlgError)


class SeriesForecaster:
    """Motor basado en modelos: ARIMA por métrica (señal, velocidad) + patrón de congestión."""

    def __init__(
        self,
        cfg: SeriesConfig | None = None,
        cache: ModelCache | None = None,
        trainer: ArimaTrainer | None = None,
        sample_interval_seconds: int = 30,
    ) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.series
        self.cache = cache or ModelCache(retrain_after=timedelta(hours=self._cfg.retrain_hours))
        self._trainer = trainer or ArimaTrainer(self._cfg)
        self._interval_seconds = sample_interval_seconds

    def predict(self, metrics: Sequence[MetricSample], now: datetime) -> list[Prediction]:
        """``metrics`` de la más reciente a la más antigua."""
        cfg = self._cfg
        recent = list(metrics[: cfg.history_limit])
        if len(recent) < cfg.min_samples:
            logger.debug("[SERIES] datos insuficientes (%d/%d muestras)", len(recent), cfg.min_samples)
            return []

        chronological = sorted(recent, key=lambda m: m.timestamp)
        models = self.cache.get_or_train(now, lambda: self.train(chronological, now))

        predictions: list[Prediction] = []
        if models is not None:
            signal = self.predict_signal(models.signal, chronological, now)
            if signal is not None:
                predictions.append(signal)
            speed = self.predict_speed(models.speed, chronological, now)
            if speed is not None:
                predictions.append(speed)

        congestion = self.predict_congestion(recent, now)
        if congestion is not None:
            predictions.append(congestion)
        return predictions

    def train(self, chronological: Sequence[MetricSample], now: datetime) -> CachedModels:
        signal = self._train_metric("signal", [float(m.signal_percent) for m in chronological], now)
        speed = self._train_metric("speed", [float(m.receive_speed_mbps) for m in chronological], now)
        if signal is not None and speed is not None:
            logger.info("[SERIES] modelos entrenados con %d muestras", len(chronological))
        return CachedModels(signal=signal, speed=speed, trained_at=now)

    def _train_metric(
        self,
        metric: str,
        values: list[float],
        now: datetime,
    ) -> Optional[SeriesModel]:
        started = time.perf_counter()
        try:
            model = self._trainer.fit(metric, values, trained_at=now)
        except _TRAINING_ERRORS:
            MODEL_TRAINING_FAILURES.labels(metric=metric).inc()
            logger.exception("[SERIES] entrenamiento de %s fallido; sin predicción este ciclo", metric)
            return None
        MODEL_TRAINING_SECONDS.labels(metric=metric).observe(time.perf_counter() - started)
        return model

    def _forecast(self, model: SeriesModel, values: list[float]) -> Optional[SeriesForecast]:
        try:
            return self._trainer.forecast(model, values)
        except _TRAINING_ERRORS:
            logger.exception("[SERIES] pronóstico de %s fallido", model.metric)
            return None

    def predict_signal(
        self,
        model: Optional[SeriesModel],
        chronological: Sequence[MetricSample],
        now: datetime,
    ) -> Optional[Prediction]:
        if model is None:
            return None
        cfg = self._cfg

        forecast = self._forecast(model, [float(m.signal_percent) for m in chronological])
        if forecast is None:
            return None

        current = chronological[-1].signal_percent
        min_forecast = min(forecast.values)
        if min_forecast >= cfg.signal_threshold or current < cfg.signal_threshold:
            return None

        low, high = cfg.signal_confidence_bounds
        confidence = int(clamp(100.0 - forecast.average_interval_width, low, high))

        step = forecast.first_step_below(cfg.signal_threshold) or forecast.horizon
        minutes = step * self._interval_seconds / 60.0

        return Prediction(
            category=PredictionCategory.SIGNAL_DEGRADATION,
            severity=Severity.MEDIUM,
            impact=(
                PredictionImpact.HIGH
                if min_forecast < cfg.high_impact_signal
                else PredictionImpact.MEDIUM
            ),
            confidence=confidence,
            title="Degradación de señal prevista",
            message=(
                f"El modelo prevé que la señal baje de {current}% a {max(min_forecast, 0.0):.0f}% "
                f"en {minutes:.1f} minutos. Acércate al router o revisa posibles interferencias."
            ),
            estimated_timeframe=f"En {minutes:.1f} minutos",
            created_at=now,
        )

    def predict_speed(
        self,
        model: Optional[SeriesModel],
        chronological: Sequence[MetricSample],
        now: datetime,
    ) -> Optional[Prediction]:
        if model is None:
            return None
        cfg = self._cfg

        speeds = [float(m.receive_speed_mbps) for m in chronological]
        forecast = self._forecast(model, speeds)
        if forecast is None:
            return None

        current_speed = speeds[-1]
        historical_avg = mean(speeds)
        avg_forecast = mean(forecast.values)

        degradation = percent_drop(historical_avg, avg_forecast)
        if degradation is None or degradation <= cfg.speed_drop_percent:
            return None
        if avg_forecast >= current_speed:
            return None

        low, high = cfg.speed_confidence_bounds
        confidence = int(
            clamp(100.0 - forecast.average_interval_width / historical_avg * 100.0, low, high)
        )
        horizon_minutes = forecast.horizon * self._interval_seconds / 60.0

        return Prediction(
            category=PredictionCategory.SPEED_DEGRADATION,
            severity=Severity.MEDIUM,
            impact=(
                PredictionImpact.HIGH
                if degradation > cfg.high_impact_speed_drop
                else PredictionImpact.MEDIUM
            ),
            confidence=confidence,
            title="Bajada de velocidad prevista",
            message=(
                f"El modelo prevé que la velocidad baje de {current_speed:.1f} Mbps a "
                f"{max(avg_forecast, 0.0):.1f} Mbps ({degradation:.0f}% más lenta) en los próximos "
                f"{horizon_minutes:.0f} minutos. Pospón las descargas grandes."
            ),
            estimated_timeframe=f"Próximos {horizon_minutes:.0f} minutos",
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

        utilization = [float(m.channel_utilization) for m in similar]
        avg_utilization = mean(utilization)
        std = population_std(utilization)
        if avg_utilization <= cfg.utilization_threshold or std >= cfg.congestion_max_stddev:
            return None

        confidence = int(min(95.0, 60.0 + (30.0 - std) * 2.0))

        return Prediction(
            category=PredictionCategory.CONGESTION,
            severity=Severity.LOW,
            impact=(
                PredictionImpact.HIGH
                if avg_utilization > cfg.high_impact_utilization
                else PredictionImpact.MEDIUM
            ),
            confidence=confidence,
            title="Congestión de red probable",
            message=(
                f"Según {len(similar)} muestras históricas, esta franja horaria suele tener "
                f"{avg_utilization:.0f}% de uso del canal. Usa la banda de 5 GHz o deja las "
                "tareas pesadas para más tarde."
            ),
            estimated_timeframe="Franja horaria actual",
            created_at=now,
        )
