from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Query
from prometheus_client import make_asgi_app

from wifi_health.common.config import get_settings
from wifi_health.common.db import get_engine
from wifi_health.ml_service.facade import AnalyticsFacade
from wifi_health.ml_service.repository.metrics_repository import SqlMetricsStore
from wifi_health.ml_service.schemas import (
    AlertOut,
    AlertsRequest,
    AlertsResponse,
    EngineStatusOut,
    PredictionOut,
    PredictionsResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="WiFi Health Analytics", version="0.1.0")
app.mount("/metrics", make_asgi_app())


@lru_cache(maxsize=1)
def get_facade() -> AnalyticsFacade:
    """Dependencia FastAPI: una única fachada (y caché de modelos) por proceso.

    Sin fuente de escaneo configurada, /analytics/channel responde sin recomendación.
    """
    settings = get_settings()
    store = SqlMetricsStore(get_engine(settings))
    return AnalyticsFacade(store, sample_interval_seconds=settings.sample_interval_seconds)


FacadeDep = Annotated[AnalyticsFacade, Depends(get_facade)]


def _insufficient(**extra: Any) -> dict[str, Any]:
    return {"insufficient_data": True, **extra}


@app.get("/health")
async def health() -> dict[str, str]:
    logger.info("[ANALYTICS] Health check solicitado")
    return {"status": "ok"}


@app.post("/analytics/alerts", response_model=AlertsResponse)
def analytics_alerts(payload: AlertsRequest, facade: FacadeDep) -> AlertsResponse:
    current = payload.current.to_domain()
    history = [m.to_domain() for m in payload.history]
    nearby = [n.to_domain() for n in payload.nearby] if payload.nearby is not None else None

    logger.info(
        "[ANALYTICS] /analytics/alerts history=%d nearby=%s",
        len(history),
        len(nearby) if nearby is not None else "-",
    )

    alerts = facade.analyze_current_sample(current, history, nearby)
    report = facade.health(current)
    return AlertsResponse(
        alerts=[AlertOut(**a.to_dict()) for a in alerts],
        health_score=report.score,
        health_status=report.status,
    )


@app.get("/analytics/best-times")
def analytics_best_times(facade: FacadeDep) -> dict[str, Any]:
    result = facade.get_best_download_times()
    if result is None:
        return _insufficient(
            message="Se necesitan al menos 100 muestras repartidas en 3 horas distintas."
        )
    return result.to_dict()


@app.get("/analytics/isp")
def analytics_isp(facade: FacadeDep) -> dict[str, Any]:
    result = facade.analyze_isp_performance()
    if result is None:
        return _insufficient(message="Se necesitan al menos 2 speed tests.")
    return result.to_dict()


@app.get("/analytics/stability")
def analytics_stability(
    facade: FacadeDep,
    hours: Annotated[int, Query(gt=0, le=24 * 30)] = 24,
) -> dict[str, Any]:
    return facade.get_network_stability(timedelta(hours=hours)).to_dict()


@app.get("/analytics/channel")
def analytics_channel(facade: FacadeDep) -> dict[str, Any]:
    result = facade.get_channel_recommendation()
    if result is None:
        return {"recommendation": None}
    return {"recommendation": result.to_dict()}


@app.get("/predictions", response_model=PredictionsResponse)
def predictions(facade: FacadeDep) -> PredictionsResponse:
    result = facade.predict_issues_tagged()
    return PredictionsResponse(
        snapshot=result.snapshot,
        predictions=[PredictionOut(**p.to_dict()) for p in result.payload],
    )


@app.get("/predictions/engine", response_model=EngineStatusOut)
def predictions_engine(facade: FacadeDep) -> EngineStatusOut:
    return EngineStatusOut(**facade.get_engine_status().to_dict())
