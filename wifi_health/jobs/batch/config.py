"""Batch runner configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RunnerConfig:
    """Configuración del runner periódico de alertas y predicciones."""
    sleep_seconds: float
    once: bool
    history_window: int = 20
    check_channel: bool = True
