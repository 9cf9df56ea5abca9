from __future__ import annotations

from typing import Sequence

import numpy as np
from sklearn.linear_model import LinearRegression, Ridge

from wifi_health.ml_service.models.trend_model import TrendFit


def _build_sklearn_model(model_type: str):
    if model_type == "linear":
        return LinearRegression()
    if model_type == "ridge":
        return Ridge(alpha=1.0)
    raise ValueError(f"Unsupported model_type: {model_type}")


def _series_to_index_features(values: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    """Convierte la serie en X, y.

    X: índice de la muestra (0 = la más antigua).
    y: valores de la métrica.
    """
    if not values:
        raise ValueError("Serie vacía")

    X = np.arange(len(values), dtype=float).reshape(-1, 1)
    y = np.asarray(values, dtype=float)
    return X, y


def fit_trend(
    metric: str,
    values: Sequence[float],
    model_type: str = "linear",
) -> TrendFit:
    """Ajusta una recta por mínimos cuadrados a ``values`` (orden cronológico).

    La pendiente ``coef_`` está en unidades de la métrica por muestra.
    """
    X, y = _series_to_index_features(values)
    if X.shape[0] < 2:
        raise ValueError("Se necesitan al menos 2 puntos para ajustar una tendencia")

    model = _build_sklearn_model(model_type)
    model.fit(X, y)

    r2 = float(model.score(X, y)) if float(np.var(y)) > 0 else 0.0

    return TrendFit(
        metric=metric,
        coef_=float(model.coef_[0]),
        intercept_=float(model.intercept_),
        r2=r2,
        n_samples=int(X.shape[0]),
        last_value=float(y[-1]),
    )
