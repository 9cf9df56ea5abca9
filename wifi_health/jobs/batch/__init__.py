"""Batch runner package: ciclo periódico de alertas y predicciones.

Modules:
- config: RunnerConfig dataclass
- runner: Orchestrator (run_once)
- cli: CLI entry point (main)
"""

from .config import RunnerConfig
from .runner import CycleReport, run_once
from .cli import main

__all__ = ["RunnerConfig", "CycleReport", "run_once", "main"]
