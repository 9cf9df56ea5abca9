"""CLI entry point for the batch runner."""

from __future__ import annotations

import argparse
import logging
import time

from wifi_health.common.config import get_settings
from wifi_health.common.db import get_engine
from wifi_health.ml_service.facade import AnalyticsFacade, ResultLedger
from wifi_health.ml_service.repository.metrics_repository import SqlMetricsStore

from .config import RunnerConfig
from .runner import run_once

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="WiFi health runner (alertas + predicciones)")
    p.add_argument("--history-window", type=int, default=20)
    p.add_argument("--sleep-seconds", type=float, default=300.0)
    p.add_argument("--no-channel", action="store_true", help="no evaluar recomendación de canal")
    p.add_argument("--once", action="store_true", help="run a single iteration and exit")
    args = p.parse_args()

    cfg = RunnerConfig(
        sleep_seconds=args.sleep_seconds,
        once=bool(args.once),
        history_window=args.history_window,
        check_channel=not args.no_channel,
    )

    facade = AnalyticsFacade(
        SqlMetricsStore(get_engine(settings)),
        sample_interval_seconds=settings.sample_interval_seconds,
    )
    ledger = ResultLedger()

    logger.info("WiFi Health Runner started")
    logger.info(
        "Config: history=%d, sleep=%.1fs, interval=%ds",
        cfg.history_window,
        cfg.sleep_seconds,
        settings.sample_interval_seconds,
    )

    while True:
        try:
            run_once(cfg, facade, ledger)
            if cfg.once:
                return
            logger.info("Iteración completada, esperando %.1fs...", cfg.sleep_seconds)
            time.sleep(cfg.sleep_seconds)
        except Exception as e:
            logger.error("Error en iteración: %s", e)
            if cfg.once:
                raise
            logger.info("Continuando con siguiente iteración...")
            time.sleep(cfg.sleep_seconds)


if __name__ == "__main__":
    main()
