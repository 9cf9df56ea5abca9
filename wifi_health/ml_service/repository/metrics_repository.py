"""Adaptador de lectura sobre el almacén de métricas (tablas network_metrics y speed_tests).

El esquema y la durabilidad son responsabilidad del almacén: aquí solo se lee.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from wifi_health.ml_service.models.network_sample import MetricSample, SpeedTestSample
from wifi_health.ml_service.utils.numeric_precision import safe_float

_METRIC_COLUMNS = """
    timestamp, signal_percent, rssi_dbm, band, channel,
    receive_speed_mbps, transmit_speed_mbps, channel_utilization,
    radio_type, authentication, ssid, bssid, connected_devices
"""


def _to_datetime(value) -> datetime:
    # SQLite devuelve TEXT ISO-8601 con text(); otros motores devuelven datetime
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _row_to_metric(row) -> MetricSample:
    return MetricSample(
        timestamp=_to_datetime(row.timestamp),
        signal_percent=int(row.signal_percent or 0),
        rssi_dbm=int(row.rssi_dbm or 0),
        band=str(row.band or ""),
        channel=int(row.channel or 0),
        receive_speed_mbps=safe_float(row.receive_speed_mbps),
        transmit_speed_mbps=safe_float(row.transmit_speed_mbps),
        channel_utilization=int(row.channel_utilization or 0),
        radio_type=str(row.radio_type or ""),
        authentication=str(row.authentication or ""),
        ssid=str(row.ssid or ""),
        bssid=str(row.bssid or ""),
        connected_devices=int(row.connected_devices or 0),
    )


def _row_to_speed_test(row) -> SpeedTestSample:
    return SpeedTestSample(
        timestamp=_to_datetime(row.timestamp),
        download_mbps=safe_float(row.download_mbps),
        upload_mbps=safe_float(row.upload_mbps),
        latency_ms=safe_float(row.latency_ms),
        isp=str(row.isp or ""),
        server=str(row.server or ""),
        jitter_ms=safe_float(row.jitter_ms),
    )


def load_recent_metrics(conn: Connection, limit: int) -> list[MetricSample]:
    rows = conn.execute(
        text(
            f"""
            SELECT {_METRIC_COLUMNS}
            FROM network_metrics
            ORDER BY timestamp DESC
            LIMIT :limit
            """
        ),
        {"limit": limit},
    ).fetchall()
    return [_row_to_metric(r) for r in rows]


def load_metrics_since(conn: Connection, since: datetime) -> list[MetricSample]:
    rows = conn.execute(
        text(
            f"""
            SELECT {_METRIC_COLUMNS}
            FROM network_metrics
            WHERE timestamp >= :since
            ORDER BY timestamp ASC
            """
        ),
        {"since": since},
    ).fetchall()
    return [_row_to_metric(r) for r in rows]


def load_recent_speed_tests(conn: Connection, limit: int) -> list[SpeedTestSample]:
    rows = conn.execute(
        text(
            """
            SELECT timestamp, download_mbps, upload_mbps, latency_ms, isp, server, jitter_ms
            FROM speed_tests
            ORDER BY timestamp DESC
            LIMIT :limit
            """
        ),
        {"limit": limit},
    ).fetchall()
    return [_row_to_speed_test(r) for r in rows]


class SqlMetricsStore:
    """MetricsStore sobre un Engine de SQLAlchemy; una conexión por consulta."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_recent_metrics(self, limit: int) -> list[MetricSample]:
        with self._engine.connect() as conn:
            return load_recent_metrics(conn, limit)

    def get_metrics_since(self, since: datetime) -> list[MetricSample]:
        with self._engine.connect() as conn:
            return load_metrics_since(conn, since)

    def get_recent_speed_tests(self, limit: int) -> list[SpeedTestSample]:
        with self._engine.connect() as conn:
            return load_recent_speed_tests(conn, limit)
