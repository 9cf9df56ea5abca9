"""Fixtures compartidas: fábricas de muestras y speed tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

import pytest

from wifi_health.ml_service.models.network_sample import MetricSample, SpeedTestSample

# Lunes a mediodía: fija hora del día y día de la semana para los tests de patrones
BASE_TS = datetime(2026, 3, 2, 12, 0, 0)


def _sample(timestamp: datetime = BASE_TS, **overrides) -> MetricSample:
    fields = dict(
        timestamp=timestamp,
        signal_percent=80,
        rssi_dbm=-55,
        band="2.4 GHz",
        channel=6,
        receive_speed_mbps=100.0,
        transmit_speed_mbps=50.0,
        channel_utilization=30,
        radio_type="802.11ax",
        authentication="WPA3-Personal",
        ssid="HomeNet",
        bssid="aa:bb:cc:dd:ee:ff",
        connected_devices=3,
    )
    fields.update(overrides)
    return MetricSample(**fields)


def _speed_test(timestamp: datetime = BASE_TS, download: float = 100.0, **overrides) -> SpeedTestSample:
    fields = dict(
        timestamp=timestamp,
        download_mbps=download,
        upload_mbps=20.0,
        latency_ms=15.0,
        isp="FibraNet",
        server="Madrid (ES)",
        jitter_ms=2.0,
    )
    fields.update(overrides)
    return SpeedTestSample(**fields)


@pytest.fixture
def base_ts() -> datetime:
    return BASE_TS


@pytest.fixture
def make_sample() -> Callable[..., MetricSample]:
    """Fábrica de MetricSample con valores sanos por defecto (sin alertas)."""
    return _sample


@pytest.fixture
def make_speed_test() -> Callable[..., SpeedTestSample]:
    return _speed_test


@pytest.fixture
def make_series() -> Callable[..., list[MetricSample]]:
    """Serie cronológica de ``n`` muestras cada ``step_seconds`` hasta ``end``."""

    def factory(
        n: int,
        end: datetime = BASE_TS,
        step_seconds: int = 30,
        **overrides,
    ) -> list[MetricSample]:
        start = end - timedelta(seconds=step_seconds * (n - 1))
        return [
            _sample(start + timedelta(seconds=step_seconds * i), **overrides) for i in range(n)
        ]

    return factory


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: BASE_TS
