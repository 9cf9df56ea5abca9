from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MetricSample:
    """Muestra de calidad de red tomada por el colector cada N segundos.

    Es inmutable: una vez persistida pertenece al almacén y el core solo la lee.
    """

    timestamp: datetime
    signal_percent: int
    rssi_dbm: int
    band: str
    channel: int
    receive_speed_mbps: float
    transmit_speed_mbps: float
    channel_utilization: int
    radio_type: str
    authentication: str
    ssid: str = ""
    bssid: str = ""
    connected_devices: int = 0

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "signal_percent": self.signal_percent,
            "rssi_dbm": self.rssi_dbm,
            "band": self.band,
            "channel": self.channel,
            "receive_speed_mbps": self.receive_speed_mbps,
            "transmit_speed_mbps": self.transmit_speed_mbps,
            "channel_utilization": self.channel_utilization,
            "radio_type": self.radio_type,
            "authentication": self.authentication,
            "ssid": self.ssid,
            "bssid": self.bssid,
            "connected_devices": self.connected_devices,
        }


@dataclass(frozen=True)
class SpeedTestSample:
    """Resultado de un speed test externo (bajada/subida/latencia)."""

    timestamp: datetime
    download_mbps: float
    upload_mbps: float
    latency_ms: float
    isp: str = ""
    server: str = ""
    jitter_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "download_mbps": self.download_mbps,
            "upload_mbps": self.upload_mbps,
            "latency_ms": self.latency_ms,
            "isp": self.isp,
            "server": self.server,
            "jitter_ms": self.jitter_ms,
        }
