from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from wifi_health.ml_service.models.engine_status import ModelStatus
from wifi_health.ml_service.models.series_model import SeriesModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedModels:
    """Par de modelos entrenados en el mismo ciclo; None = métrica sin modelo válido."""

    signal: Optional[SeriesModel]
    speed: Optional[SeriesModel]
    trained_at: datetime

    @property
    def is_trained(self) -> bool:
        return self.signal is not None and self.speed is not None


class ModelCache:
    """Caché explícita de los modelos ARIMA compartida entre llamadas.

    - El intercambio del par de modelos es atómico (un único puntero protegido
      por lock); un predict concurrente ve el par anterior o el nuevo completo.
    - Solo un hilo entrena a la vez. Si otro ciclo llega mientras se entrena,
      usa los modelos anteriores en lugar de bloquearse.
    """

    def __init__(self, retrain_after: timedelta = timedelta(hours=24)) -> None:
        self._retrain_after = retrain_after
        self._lock = threading.Lock()
        self._training_lock = threading.Lock()
        self._entry: Optional[CachedModels] = None
        self._last_success: Optional[datetime] = None

    def current(self) -> Optional[CachedModels]:
        with self._lock:
            return self._entry

    def needs_retrain(self, now: datetime) -> bool:
        entry = self.current()
        if entry is None or not entry.is_trained:
            return True
        return now - entry.trained_at > self._retrain_after

    def get_or_train(
        self,
        now: datetime,
        train: Callable[[], CachedModels],
    ) -> Optional[CachedModels]:
        """Devuelve los modelos vigentes, reentrenando con ``train`` si hace falta.

        ``train`` nunca debe lanzar: las métricas que fallen vienen como None.
        """
        if not self.needs_retrain(now):
            return self.current()

        if not self._training_lock.acquire(blocking=False):
            logger.info("[MODEL-CACHE] entrenamiento en curso, se usan los modelos anteriores")
            return self.current()

        try:
            # Otro hilo pudo terminar de entrenar mientras esperábamos
            if not self.needs_retrain(now):
                return self.current()
            entry = train()
            self.swap(entry)
            return entry
        finally:
            self._training_lock.release()

    def swap(self, entry: CachedModels) -> None:
        with self._lock:
            self._entry = entry
            if entry.is_trained:
                self._last_success = entry.trained_at

    def status(self, now: datetime) -> ModelStatus:
        entry = self.current()
        with self._lock:
            last_success = self._last_success

        is_trained = entry is not None and entry.is_trained
        hours_until_retrain = 0
        if entry is not None:
            hours_since = (now - entry.trained_at).total_seconds() / 3600.0
            hours_until_retrain = max(0, int(self._retrain_after.total_seconds() / 3600.0 - hours_since))

        return ModelStatus(
            is_trained=is_trained,
            last_training=last_success,
            hours_until_retrain=hours_until_retrain,
        )
