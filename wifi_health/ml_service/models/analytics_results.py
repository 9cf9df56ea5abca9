from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class HourlyStats:
    """Agregados de un bucket (muestras que comparten hora del día)."""

    hour: int
    average_speed: float
    average_signal: float
    sample_count: int
    min_speed: float
    max_speed: float

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "average_speed": round(self.average_speed, 2),
            "average_signal": round(self.average_signal, 2),
            "sample_count": self.sample_count,
            "min_speed": round(self.min_speed, 2),
            "max_speed": round(self.max_speed, 2),
        }


@dataclass(frozen=True)
class BestTimeAnalysis:
    best_hours: list[HourlyStats]
    worst_hours: list[HourlyStats]
    overall_average: float
    data_points: int
    speeds_consistent: bool
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "insufficient_data": False,
            "best_hours": [h.to_dict() for h in self.best_hours],
            "worst_hours": [h.to_dict() for h in self.worst_hours],
            "overall_average": round(self.overall_average, 2),
            "data_points": self.data_points,
            "speeds_consistent": self.speeds_consistent,
            "recommendation": self.recommendation,
        }


class ThrottlingClass(str, Enum):
    STABLE = "stable"
    POSSIBLE = "possible_throttling"
    LIKELY = "likely_throttling"


@dataclass(frozen=True)
class IspAnalysis:
    total_tests: int
    average_download: float
    average_upload: float
    average_latency: float
    best_hour: Optional[int]
    worst_hour: Optional[int]
    speed_degradation: float
    classification: ThrottlingClass
    recommendation: str

    @property
    def possible_throttling(self) -> bool:
        return self.classification is not ThrottlingClass.STABLE

    @property
    def likely_throttling(self) -> bool:
        return self.classification is ThrottlingClass.LIKELY

    def to_dict(self) -> dict:
        return {
            "insufficient_data": False,
            "total_tests": self.total_tests,
            "average_download": round(self.average_download, 2),
            "average_upload": round(self.average_upload, 2),
            "average_latency": round(self.average_latency, 2),
            "best_hour": self.best_hour,
            "worst_hour": self.worst_hour,
            "speed_degradation": round(self.speed_degradation, 2),
            "classification": self.classification.value,
            "possible_throttling": self.possible_throttling,
            "likely_throttling": self.likely_throttling,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class NetworkStability:
    """Estabilidad de la red en un periodo.

    Siempre se devuelve; con ``insufficient_data=True`` los campos numéricos
    quedan en None en lugar de calcularse sobre pocas muestras.
    """

    period_hours: float
    insufficient_data: bool
    sample_count: int = 0
    average_signal: Optional[float] = None
    signal_stability: Optional[float] = None
    average_speed: Optional[float] = None
    speed_stability: Optional[float] = None
    significant_drops: Optional[int] = None
    stability_score: Optional[float] = None
    is_stable: Optional[bool] = None

    @classmethod
    def insufficient(cls, period_hours: float, sample_count: int = 0) -> "NetworkStability":
        return cls(period_hours=period_hours, insufficient_data=True, sample_count=sample_count)

    def to_dict(self) -> dict:
        def _r(value: Optional[float]) -> Optional[float]:
            return round(value, 2) if value is not None else None

        return {
            "period_hours": self.period_hours,
            "insufficient_data": self.insufficient_data,
            "sample_count": self.sample_count,
            "average_signal": _r(self.average_signal),
            "signal_stability": _r(self.signal_stability),
            "average_speed": _r(self.average_speed),
            "speed_stability": _r(self.speed_stability),
            "significant_drops": self.significant_drops,
            "stability_score": _r(self.stability_score),
            "is_stable": self.is_stable,
        }


@dataclass(frozen=True)
class HealthReport:
    """Puntuación de salud (0-100) de una muestra individual."""

    score: int
    status: str
    signal_points: int = 0
    speed_points: int = 0
    utilization_points: int = 0
    security_points: int = 0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "status": self.status,
            "signal_points": self.signal_points,
            "speed_points": self.speed_points,
            "utilization_points": self.utilization_points,
            "security_points": self.security_points,
        }
