from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from wifi_health.ml_service.models.alert import Severity


class PredictionCategory(str, Enum):
    SIGNAL_DEGRADATION = "signal-degradation"
    SPEED_DEGRADATION = "speed-degradation"
    CONGESTION = "congestion"
    DISCONNECTION = "disconnection"
    SECURITY = "security"


class PredictionImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Prediction:
    """Predicción de degradación generada en un ciclo de análisis.

    ``confidence`` es un entero 0-100 heurístico, no una probabilidad calibrada.
    ``engine`` lo rellena el selector con el motor que la produjo.
    """

    category: PredictionCategory
    severity: Severity
    impact: PredictionImpact
    confidence: int
    title: str
    message: str
    estimated_timeframe: str
    created_at: datetime
    engine: Optional[str] = None

    def with_engine(self, engine: str) -> "Prediction":
        return replace(self, engine=engine)

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "impact": self.impact.value,
            "confidence": self.confidence,
            "title": self.title,
            "message": self.message,
            "estimated_timeframe": self.estimated_timeframe,
            "created_at": self.created_at.isoformat(),
            "engine": self.engine,
        }
