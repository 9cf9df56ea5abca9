from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EngineTag(str, Enum):
    TREND = "trend"
    SERIES = "series"


@dataclass(frozen=True)
class ModelStatus:
    is_trained: bool
    last_training: Optional[datetime]
    hours_until_retrain: int


@dataclass(frozen=True)
class EngineStatus:
    active_engine: EngineTag
    samples_collected: int
    samples_required: int
    samples_remaining: int
    expected_accuracy: str
    time_to_upgrade: str
    will_upgrade: bool
    model_trained: bool = False
    last_training: Optional[datetime] = None
    hours_until_retrain: int = 0

    def to_dict(self) -> dict:
        return {
            "active_engine": self.active_engine.value,
            "samples_collected": self.samples_collected,
            "samples_required": self.samples_required,
            "samples_remaining": self.samples_remaining,
            "expected_accuracy": self.expected_accuracy,
            "time_to_upgrade": self.time_to_upgrade,
            "will_upgrade": self.will_upgrade,
            "model_trained": self.model_trained,
            "last_training": self.last_training.isoformat() if self.last_training else None,
            "hours_until_retrain": self.hours_until_retrain,
        }
