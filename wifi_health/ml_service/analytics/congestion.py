"""Scoring de congestión por canal y recomendación del canal menos congestionado.

score = min(redes * 20, 100) + floor(señal_media / 2) + penalización_solapamiento

La penalización (20) aplica a canales 2.4 GHz fuera del conjunto sin
solapamiento {1, 6, 11}. Los canales no observados de la banda actual se
sintetizan con score 0 (se asumen libres) para representar siempre el
espacio completo de canales.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence

from wifi_health.ml_service.config.ml_config import (
    BAND_24GHZ,
    BAND_5GHZ,
    DEFAULT_ANALYTICS_CONFIG,
    CongestionConfig,
)
from wifi_health.ml_service.explain.explanation_builder import build_channel_reason
from wifi_health.ml_service.models.channel import (
    ChannelInfo,
    ChannelRecommendation,
    ChannelUsage,
    ScannedNetwork,
)

logger = logging.getLogger(__name__)


def normalize_band(band: str) -> str:
    """'2.4GHz', '2.4 ghz', '2,4 GHz' -> '2.4 GHz'; '5GHz' -> '5 GHz'."""
    compact = band.replace(" ", "").replace(",", ".").lower()
    if compact.startswith("2.4"):
        return BAND_24GHZ
    if compact.startswith("5"):
        return BAND_5GHZ
    return band.strip()


def build_channel_snapshot(networks: Iterable[ScannedNetwork]) -> list[ChannelUsage]:
    """Agrega las redes de un escaneo en uso por canal (conteo, nombres, señal media)."""
    by_channel: dict[int, list[ScannedNetwork]] = {}
    for net in networks:
        by_channel.setdefault(net.channel, []).append(net)

    snapshot: list[ChannelUsage] = []
    for channel, nets in sorted(by_channel.items()):
        snapshot.append(
            ChannelUsage(
                channel=channel,
                band=normalize_band(nets[0].band),
                network_count=len(nets),
                networks=tuple(n.ssid for n in nets),
                average_signal=sum(n.signal_percent for n in nets) / len(nets),
            )
        )
    return snapshot


class CongestionScorer:
    """Calcula el score 0-100 de cada canal a partir de un snapshot de escaneo."""

    def __init__(self, cfg: CongestionConfig | None = None) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.congestion

    def overlap_penalty(self, channel: int, band: str) -> int:
        if normalize_band(band) == BAND_24GHZ and channel not in self._cfg.non_overlapping_24ghz:
            return self._cfg.overlap_penalty
        return 0

    def score_usage(self, usage: ChannelUsage) -> int:
        cfg = self._cfg
        base = min(usage.network_count * cfg.network_weight, 100)
        signal_factor = int(math.floor(max(0.0, usage.average_signal) / cfg.signal_divisor))
        score = base + signal_factor + self.overlap_penalty(usage.channel, usage.band)
        return max(0, min(score, 100))

    def channel_space(self, band: str) -> tuple[int, ...]:
        band = normalize_band(band)
        if band == BAND_24GHZ:
            return self._cfg.channels_24ghz
        if band == BAND_5GHZ:
            return self._cfg.channels_5ghz
        return ()

    def score(self, snapshot: Sequence[ChannelUsage], current_band: str) -> list[ChannelInfo]:
        infos: dict[int, ChannelInfo] = {}
        for usage in snapshot:
            infos[usage.channel] = ChannelInfo(
                channel=usage.channel,
                band=normalize_band(usage.band),
                network_count=usage.network_count,
                networks=tuple(usage.networks),
                average_signal=usage.average_signal,
                congestion_score=self.score_usage(usage),
            )

        band = normalize_band(current_band)
        for channel in self.channel_space(band):
            if channel not in infos:
                infos[channel] = ChannelInfo(
                    channel=channel,
                    band=band,
                    network_count=0,
                    networks=(),
                    average_signal=0.0,
                    congestion_score=0,
                )

        return [infos[ch] for ch in sorted(infos)]


class ChannelRecommender:
    """Elige el canal menos congestionado de la banda actual y explica la elección."""

    def __init__(
        self,
        scorer: CongestionScorer | None = None,
        cfg: CongestionConfig | None = None,
    ) -> None:
        self._cfg = cfg or DEFAULT_ANALYTICS_CONFIG.congestion
        self._scorer = scorer or CongestionScorer(self._cfg)

    def recommend(
        self,
        snapshot: Sequence[ChannelUsage],
        current_channel: int,
        current_band: str,
    ) -> Optional[ChannelRecommendation]:
        band = normalize_band(current_band)
        channels = self._scorer.score(snapshot, band)
        if not channels:
            return None

        observed = {u.channel for u in snapshot}
        preferred = self._cfg.non_overlapping_24ghz

        def rank(info: ChannelInfo) -> tuple:
            # A igual score: canal observado libre antes que uno asumido libre,
            # y en 2.4 GHz los canales sin solapamiento primero.
            non_preferred = band == BAND_24GHZ and info.channel not in preferred
            return (info.congestion_score, info.channel not in observed, non_preferred, info.channel)

        candidates = [c for c in channels if c.band == band]
        current = next((c for c in channels if c.channel == current_channel), None)
        if not candidates or current is None:
            logger.debug(
                "Canal: sin candidatos o canal actual %s no presente (banda=%s)",
                current_channel,
                band,
            )
            return None

        best = min(candidates, key=rank)

        if current.congestion_score > 0:
            improvement = int(
                (current.congestion_score - best.congestion_score) * 100 / current.congestion_score
            )
        else:
            improvement = 0

        return ChannelRecommendation(
            current_channel=current_channel,
            recommended_channel=best.channel,
            reason=build_channel_reason(current, best, improvement, self._cfg),
            current_congestion=current.congestion_score,
            recommended_congestion=best.congestion_score,
            improvement_percent=improvement,
            all_channels=channels,
        )
