"""Fachada del core: alertas, analítica histórica y predicciones.

Cada operación pública atrapa los fallos de los colaboradores (almacén,
escaneo), los registra y degrada a "datos insuficientes" / None / lista
vacía. El core nunca propaga esos errores al llamador.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Generic, Optional, Sequence, TypeVar

from wifi_health.ml_service.analytics.alert_rules import AlertRules
from wifi_health.ml_service.analytics.congestion import (
    ChannelRecommender,
    CongestionScorer,
    build_channel_snapshot,
)
from wifi_health.ml_service.analytics.health import compute_health
from wifi_health.ml_service.analytics.stability import StabilityAnalyzer
from wifi_health.ml_service.analytics.throttling import ThrottlingDetector
from wifi_health.ml_service.analytics.time_buckets import TimeBucketAnalyzer
from wifi_health.ml_service.config.ml_config import (
    DEFAULT_ANALYTICS_CONFIG,
    GlobalAnalyticsConfig,
)
from wifi_health.ml_service.explain.explanation_builder import build_health_summary
from wifi_health.ml_service.forecasting.model_cache import ModelCache
from wifi_health.ml_service.forecasting.selector import ForecastSelector
from wifi_health.ml_service.forecasting.series_forecaster import SeriesForecaster
from wifi_health.ml_service.forecasting.trend_forecaster import TrendForecaster
from wifi_health.ml_service.metrics import COLLABORATOR_FAILURES
from wifi_health.ml_service.models.alert import Alert, AlertCategory, Severity
from wifi_health.ml_service.models.analytics_results import (
    BestTimeAnalysis,
    HealthReport,
    IspAnalysis,
    NetworkStability,
)
from wifi_health.ml_service.models.channel import ChannelRecommendation, ScannedNetwork
from wifi_health.ml_service.models.engine_status import EngineStatus
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.models.prediction import Prediction, PredictionCategory
from wifi_health.ml_service.repository.store import ChannelScanSource, MetricsStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PREDICTION_ALERT_CATEGORY = {
    PredictionCategory.SIGNAL_DEGRADATION: AlertCategory.SIGNAL,
    PredictionCategory.SPEED_DEGRADATION: AlertCategory.SPEED,
    PredictionCategory.CONGESTION: AlertCategory.CONGESTION,
    PredictionCategory.DISCONNECTION: AlertCategory.SIGNAL,
    PredictionCategory.SECURITY: AlertCategory.SECURITY,
}


@dataclass(frozen=True)
class AnalysisResult(Generic[T]):
    """Resultado etiquetado con el snapshot de datos del que se calculó.

    ``snapshot`` es el timestamp de la muestra más reciente usada (None si no había datos).
    """

    snapshot: Optional[datetime]
    payload: T


class ResultLedger:
    """Registro de los últimos resultados aceptados por operación.

    Un resultado cuyo snapshot es anterior al último aceptado se descarta:
    un ciclo lento no puede sobrescribir el resultado de uno más reciente.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, AnalysisResult] = {}

    def accept(self, operation: str, result: AnalysisResult) -> bool:
        with self._lock:
            current = self._latest.get(operation)
            if (
                current is not None
                and current.snapshot is not None
                and (result.snapshot is None or result.snapshot < current.snapshot)
            ):
                logger.info(
                    "[LEDGER] %s descartado: snapshot %s anterior a %s",
                    operation,
                    result.snapshot,
                    current.snapshot,
                )
                return False
            self._latest[operation] = result
            return True

    def latest(self, operation: str) -> Optional[AnalysisResult]:
        with self._lock:
            return self._latest.get(operation)


class AnalyticsFacade:
    def __init__(
        self,
        store: MetricsStore,
        scanner: Optional[ChannelScanSource] = None,
        cfg: GlobalAnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
        model_cache: Optional[ModelCache] = None,
        clock: Callable[[], datetime] = datetime.now,
        sample_interval_seconds: int = 30,
    ) -> None:
        self._store = store
        self._scanner = scanner
        self._cfg = cfg
        self._clock = clock

        self.model_cache = model_cache or ModelCache(
            retrain_after=timedelta(hours=cfg.series.retrain_hours)
        )
        self._stability = StabilityAnalyzer(cfg.stability)
        self._time_buckets = TimeBucketAnalyzer(cfg.time_buckets)
        self._throttling = ThrottlingDetector(cfg.throttling)
        self._recommender = ChannelRecommender(CongestionScorer(cfg.congestion), cfg.congestion)
        self._selector = ForecastSelector(
            trend=TrendForecaster(cfg.trend, sample_interval_seconds),
            series=SeriesForecaster(
                cfg.series,
                cache=self.model_cache,
                sample_interval_seconds=sample_interval_seconds,
            ),
            cfg=cfg.selector,
            model_cache=self.model_cache,
            sample_interval_seconds=sample_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Alertas
    # ------------------------------------------------------------------

    def analyze_current_sample(
        self,
        current: MetricSample,
        history: Sequence[MetricSample],
        nearby: Optional[Sequence[ScannedNetwork]] = None,
    ) -> list[Alert]:
        return AlertRules.evaluate(current, history, nearby, self._cfg.alerts)

    def current_window(
        self, history_size: Optional[int] = None
    ) -> Optional[tuple[MetricSample, list[MetricSample]]]:
        """(muestra actual, historial más reciente primero) o None si no hay datos."""
        size = history_size or self._cfg.alerts.history_window
        recent = self._fetch("current_window", lambda: self._store.get_recent_metrics(size + 1))
        if not recent:
            return None
        return recent[0], list(recent[1:])

    def nearby_networks(self) -> Optional[list[ScannedNetwork]]:
        if self._scanner is None:
            return None
        return self._fetch("channel_scan", self._scanner.scan)

    def prediction_alerts(self, predictions: Sequence[Prediction]) -> list[Alert]:
        """Promueve a alerta las predicciones con confianza suficiente."""
        threshold = self._cfg.alerts.prediction_alert_confidence
        return [
            Alert(
                timestamp=p.created_at,
                category=_PREDICTION_ALERT_CATEGORY[p.category],
                severity=p.severity,
                title=p.title,
                message=f"{p.message} (confianza: {p.confidence}%)",
            )
            for p in predictions
            if p.confidence >= threshold
        ]

    def channel_recommendation_alert(
        self, recommendation: Optional[ChannelRecommendation]
    ) -> Optional[Alert]:
        if recommendation is None:
            return None
        if recommendation.improvement_percent <= self._cfg.congestion.alert_improvement_percent:
            return None
        return Alert(
            timestamp=self._clock(),
            category=AlertCategory.RECOMMENDATION,
            severity=Severity.INFO,
            title="Cambio de canal recomendado",
            message=recommendation.reason,
        )

    # ------------------------------------------------------------------
    # Analítica histórica
    # ------------------------------------------------------------------

    def get_best_download_times(self) -> Optional[BestTimeAnalysis]:
        samples = self._fetch(
            "best_download_times",
            lambda: self._store.get_recent_metrics(self._cfg.time_buckets.history_limit),
        )
        if samples is None:
            return None
        return self._time_buckets.analyze(samples)

    def analyze_isp_performance(self) -> Optional[IspAnalysis]:
        tests = self._fetch(
            "isp_performance",
            lambda: self._store.get_recent_speed_tests(self._cfg.throttling.history_limit),
        )
        if tests is None:
            return None
        return self._throttling.analyze(tests)

    def get_network_stability(self, period: Optional[timedelta] = None) -> NetworkStability:
        period = period or timedelta(hours=self._cfg.stability.default_period_hours)
        since = self._clock() - period
        samples = self._fetch("network_stability", lambda: self._store.get_metrics_since(since))
        if samples is None:
            return NetworkStability.insufficient(period.total_seconds() / 3600.0)
        return self._stability.analyze(samples, period)

    def get_channel_recommendation(
        self,
        current: Optional[MetricSample] = None,
        nearby: Optional[Sequence[ScannedNetwork]] = None,
    ) -> Optional[ChannelRecommendation]:
        if nearby is None:
            nearby = self.nearby_networks()
        if nearby is None:
            logger.debug("Canal: sin resultado de escaneo")
            return None

        if current is None:
            latest = self._fetch("channel_recommendation", lambda: self._store.get_recent_metrics(1))
            if not latest:
                return None
            current = latest[0]

        snapshot = build_channel_snapshot(nearby)
        return self._recommender.recommend(snapshot, current.channel, current.band)

    def health(self, sample: MetricSample) -> HealthReport:
        return compute_health(sample)

    def health_summary(self, sample: MetricSample) -> str:
        return build_health_summary(sample, compute_health(sample))

    # ------------------------------------------------------------------
    # Predicciones
    # ------------------------------------------------------------------

    def predict_issues(self) -> list[Prediction]:
        return self.predict_issues_tagged().payload

    def predict_issues_tagged(self) -> AnalysisResult[list[Prediction]]:
        metrics = self._fetch(
            "predict_issues",
            lambda: self._store.get_recent_metrics(self._cfg.selector.history_limit),
        )
        if not metrics:
            return AnalysisResult(snapshot=None, payload=[])

        snapshot = max(m.timestamp for m in metrics)
        predictions = self._selector.predict(metrics, self._clock())
        return AnalysisResult(snapshot=snapshot, payload=predictions)

    def get_engine_status(self) -> EngineStatus:
        metrics = self._fetch(
            "engine_status",
            lambda: self._store.get_recent_metrics(self._cfg.selector.history_limit),
        )
        return self._selector.status(len(metrics or []), self._clock())

    # ------------------------------------------------------------------

    def _fetch(self, operation: str, call: Callable[[], T]) -> Optional[T]:
        try:
            return call()
        except Exception:
            COLLABORATOR_FAILURES.labels(operation=operation).inc()
            logger.exception("[FACADE] fallo de colaborador en %s; resultado degradado", operation)
            return None
