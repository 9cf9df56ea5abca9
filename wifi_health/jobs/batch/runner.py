"""Batch runner orchestrator: un ciclo de alertas + predicciones sobre el almacén."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from wifi_health.ml_service.facade import AnalyticsFacade, ResultLedger
from wifi_health.ml_service.models.alert import Alert
from wifi_health.ml_service.models.prediction import Prediction

from .config import RunnerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    snapshot: Optional[datetime]
    alerts: list[Alert] = field(default_factory=list)
    predictions: list[Prediction] = field(default_factory=list)
    predictions_accepted: bool = False


def run_once(cfg: RunnerConfig, facade: AnalyticsFacade, ledger: ResultLedger) -> CycleReport:
    """Ejecuta un ciclo completo. Los resultados de un snapshot antiguo se descartan."""
    window = facade.current_window(cfg.history_window)
    if window is None:
        logger.info("Sin muestras en el almacén, ciclo omitido")
        return CycleReport(snapshot=None)

    current, history = window
    nearby = facade.nearby_networks()

    alerts = facade.analyze_current_sample(current, history, nearby)

    tagged = facade.predict_issues_tagged()
    accepted = ledger.accept("predictions", tagged)
    predictions = tagged.payload if accepted else []
    if accepted:
        alerts.extend(facade.prediction_alerts(predictions))

    if cfg.check_channel and nearby is not None:
        channel_alert = facade.channel_recommendation_alert(
            facade.get_channel_recommendation(current, nearby)
        )
        if channel_alert is not None:
            alerts.append(channel_alert)

    for alert in alerts:
        logger.info(
            "[ALERT] %s/%s %s: %s",
            alert.category.value,
            alert.severity.value,
            alert.title,
            alert.message,
        )
    for p in predictions:
        logger.info(
            "[PREDICTION] %s engine=%s confianza=%d%% %s",
            p.category.value,
            p.engine,
            p.confidence,
            p.estimated_timeframe,
        )

    logger.info(
        "Ciclo completado snapshot=%s alertas=%d predicciones=%d",
        current.timestamp.isoformat(),
        len(alerts),
        len(predictions),
    )
    return CycleReport(
        snapshot=current.timestamp,
        alerts=alerts,
        predictions=predictions,
        predictions_accepted=accepted,
    )
