from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AlertCategory(str, Enum):
    SIGNAL = "signal"
    SPEED = "speed"
    CONGESTION = "congestion"
    SECURITY = "security"
    DEVICE = "device"
    RECOMMENDATION = "recommendation"


class Severity(str, Enum):
    """Severidad compartida por alertas y predicciones (info < ... < critical)."""

    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (
    Severity.INFO,
    Severity.LOW,
    Severity.MEDIUM,
    Severity.HIGH,
    Severity.CRITICAL,
)


@dataclass
class Alert:
    """Alerta legible para el usuario.

    Solo el flag ``acknowledged`` cambia tras la creación; el borrado y la
    retención son cosa del almacén.
    """

    timestamp: datetime
    category: AlertCategory
    severity: Severity
    title: str
    message: str
    acknowledged: bool = False

    def acknowledge(self) -> None:
        self.acknowledged = True

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "acknowledged": self.acknowledged,
        }
