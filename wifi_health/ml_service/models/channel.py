from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScannedNetwork:
    """Red visible en un escaneo WiFi (salida del colaborador de escaneo)."""

    ssid: str
    band: str
    channel: int
    signal_percent: int


@dataclass(frozen=True)
class ChannelUsage:
    """Uso observado de un canal en un snapshot de escaneo."""

    channel: int
    band: str
    network_count: int
    networks: tuple[str, ...] = ()
    average_signal: float = 0.0


@dataclass(frozen=True)
class ChannelInfo:
    """Canal con su score de congestión (0-100, mayor = más congestionado)."""

    channel: int
    band: str
    network_count: int
    networks: tuple[str, ...]
    average_signal: float
    congestion_score: int

    @property
    def congestion_level(self) -> str:
        if self.congestion_score >= 75:
            return "high"
        if self.congestion_score >= 50:
            return "medium"
        if self.congestion_score >= 25:
            return "low"
        return "none"

    @property
    def is_recommended(self) -> bool:
        return self.congestion_score < 25

    def to_dict(self) -> dict:
        return {
            "channel": self.channel,
            "band": self.band,
            "network_count": self.network_count,
            "networks": list(self.networks),
            "average_signal": round(self.average_signal, 2),
            "congestion_score": self.congestion_score,
            "congestion_level": self.congestion_level,
            "is_recommended": self.is_recommended,
        }


@dataclass(frozen=True)
class ChannelRecommendation:
    current_channel: int
    recommended_channel: int
    reason: str
    current_congestion: int
    recommended_congestion: int
    improvement_percent: int
    all_channels: list[ChannelInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current_channel": self.current_channel,
            "recommended_channel": self.recommended_channel,
            "reason": self.reason,
            "current_congestion": self.current_congestion,
            "recommended_congestion": self.recommended_congestion,
            "improvement_percent": self.improvement_percent,
            "all_channels": [c.to_dict() for c in self.all_channels],
        }
