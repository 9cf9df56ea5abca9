"""Métricas Prometheus del motor de analítica y predicción."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

PREDICTION_CYCLES = Counter(
    "wifi_health_prediction_cycles_total",
    "Ciclos de predicción ejecutados",
    ["engine"],  # trend, series
)
PREDICTIONS_EMITTED = Counter(
    "wifi_health_predictions_emitted_total",
    "Predicciones emitidas",
    ["engine", "category"],
)
MODEL_TRAINING_SECONDS = Histogram(
    "wifi_health_model_training_seconds",
    "Duración del entrenamiento de modelos ARIMA",
    ["metric"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
MODEL_TRAINING_FAILURES = Counter(
    "wifi_health_model_training_failures_total",
    "Entrenamientos de modelos ARIMA fallidos",
    ["metric"],
)
COLLABORATOR_FAILURES = Counter(
    "wifi_health_collaborator_failures_total",
    "Fallos de colaboradores externos (almacén, escaneo) capturados en la fachada",
    ["operation"],
)
