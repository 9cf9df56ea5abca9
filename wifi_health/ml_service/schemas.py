from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from wifi_health.ml_service.models.channel import ScannedNetwork
from wifi_health.ml_service.models.network_sample import MetricSample


class MetricSampleIn(BaseModel):
    timestamp: datetime
    signal_percent: int = Field(..., ge=0, le=100)
    rssi_dbm: int = 0
    band: str
    channel: int = Field(..., ge=0)
    receive_speed_mbps: float = Field(0.0, ge=0)
    transmit_speed_mbps: float = Field(0.0, ge=0)
    channel_utilization: int = Field(0, ge=0, le=100)
    radio_type: str = ""
    authentication: str = ""
    ssid: str = ""
    bssid: str = ""
    connected_devices: int = Field(0, ge=0)

    def to_domain(self) -> MetricSample:
        return MetricSample(**self.model_dump())


class ScannedNetworkIn(BaseModel):
    ssid: str
    band: str
    channel: int = Field(..., ge=0)
    signal_percent: int = Field(..., ge=0, le=100)

    def to_domain(self) -> ScannedNetwork:
        return ScannedNetwork(**self.model_dump())


class AlertsRequest(BaseModel):
    current: MetricSampleIn
    # De la más reciente a la más antigua
    history: list[MetricSampleIn] = Field(default_factory=list, max_length=1000)
    nearby: Optional[list[ScannedNetworkIn]] = None


class AlertOut(BaseModel):
    timestamp: datetime
    category: str
    severity: str
    title: str
    message: str
    acknowledged: bool


class AlertsResponse(BaseModel):
    alerts: list[AlertOut]
    health_score: int
    health_status: str


class PredictionOut(BaseModel):
    category: str
    severity: str
    impact: str
    confidence: int
    title: str
    message: str
    estimated_timeframe: str
    created_at: datetime
    engine: Optional[str] = None


class PredictionsResponse(BaseModel):
    snapshot: Optional[datetime]
    predictions: list[PredictionOut]


class EngineStatusOut(BaseModel):
    active_engine: str
    samples_collected: int
    samples_required: int
    samples_remaining: int
    expected_accuracy: str
    time_to_upgrade: str
    will_upgrade: bool
    model_trained: bool
    last_training: Optional[datetime] = None
    hours_until_retrain: int
