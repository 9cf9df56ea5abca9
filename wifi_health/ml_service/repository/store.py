from __future__ import annotations

import threading
from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from wifi_health.ml_service.models.channel import ScannedNetwork
from wifi_health.ml_service.models.network_sample import MetricSample, SpeedTestSample


class MetricsStore(Protocol):
    """Colaborador de almacenamiento (solo lectura para el core)."""

    def get_recent_metrics(self, limit: int) -> list[MetricSample]:
        """Las ``limit`` muestras más recientes, de la más nueva a la más antigua."""
        ...

    def get_metrics_since(self, since: datetime) -> list[MetricSample]:
        """Muestras con timestamp >= ``since`` en orden ascendente."""
        ...

    def get_recent_speed_tests(self, limit: int) -> list[SpeedTestSample]:
        """Los ``limit`` speed tests más recientes, del más nuevo al más antiguo."""
        ...


class ChannelScanSource(Protocol):
    """Colaborador de escaneo WiFi: redes visibles en este momento."""

    def scan(self) -> list[ScannedNetwork]:
        ...


class InMemoryMetricsStore:
    """Almacén en memoria con la misma semántica de orden que el adaptador SQL.

    Útil para tests y para ejecutar el runner sin base de datos.
    """

    def __init__(
        self,
        metrics: Optional[Iterable[MetricSample]] = None,
        speed_tests: Optional[Iterable[SpeedTestSample]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._metrics: list[MetricSample] = sorted(metrics or [], key=lambda m: m.timestamp)
        self._speed_tests: list[SpeedTestSample] = sorted(
            speed_tests or [], key=lambda t: t.timestamp
        )

    def add_metric(self, sample: MetricSample) -> None:
        with self._lock:
            self._metrics.append(sample)
            self._metrics.sort(key=lambda m: m.timestamp)

    def add_speed_test(self, sample: SpeedTestSample) -> None:
        with self._lock:
            self._speed_tests.append(sample)
            self._speed_tests.sort(key=lambda t: t.timestamp)

    def get_recent_metrics(self, limit: int) -> list[MetricSample]:
        with self._lock:
            return list(reversed(self._metrics[-limit:])) if limit > 0 else []

    def get_metrics_since(self, since: datetime) -> list[MetricSample]:
        with self._lock:
            return [m for m in self._metrics if m.timestamp >= since]

    def get_recent_speed_tests(self, limit: int) -> list[SpeedTestSample]:
        with self._lock:
            return list(reversed(self._speed_tests[-limit:])) if limit > 0 else []


class StaticChannelScanSource:
    """Fuente de escaneo con una lista fija de redes (tests, despliegues sin radio)."""

    def __init__(self, networks: Sequence[ScannedNetwork] = ()) -> None:
        self._networks = list(networks)

    def scan(self) -> list[ScannedNetwork]:
        return list(self._networks)
