"""Reglas de negocio para el pipeline de ALERTAS."""

from __future__ import annotations

from typing import Optional, Sequence

from wifi_health.ml_service.analytics.congestion import normalize_band
from wifi_health.ml_service.config.ml_config import (
    BAND_24GHZ,
    BAND_5GHZ,
    DEFAULT_ANALYTICS_CONFIG,
    AlertConfig,
)
from wifi_health.ml_service.models.alert import Alert, AlertCategory, Severity
from wifi_health.ml_service.models.channel import ScannedNetwork
from wifi_health.ml_service.models.network_sample import MetricSample
from wifi_health.ml_service.utils.numeric_precision import mean


class AlertRules:
    """Reglas de umbral sobre la muestra actual + ventana de historial.

    Todas son funciones puras: la marca de tiempo de cada alerta es la de la
    muestra evaluada, así que las mismas entradas producen las mismas alertas.
    """

    @staticmethod
    def evaluate(
        current: MetricSample,
        history: Sequence[MetricSample],
        nearby: Optional[Sequence[ScannedNetwork]] = None,
        cfg: AlertConfig | None = None,
    ) -> list[Alert]:
        """Evalúa todas las reglas; cada regla es independiente (sin salida temprana).

        ``history`` va de la muestra más reciente a la más antigua.
        """
        cfg = cfg or DEFAULT_ANALYTICS_CONFIG.alerts

        alerts: list[Alert] = []
        alerts.extend(AlertRules.check_signal(current, cfg))
        alerts.extend(AlertRules.check_band(current, nearby, cfg))
        alerts.extend(AlertRules.check_speed(current, history, cfg))
        alerts.extend(AlertRules.check_congestion(current, cfg))
        alerts.extend(AlertRules.check_security(current))
        return alerts

    @staticmethod
    def check_signal(current: MetricSample, cfg: AlertConfig) -> list[Alert]:
        """Regla: <40% severidad alta; 40-59% media; >=60% nada."""
        if current.signal_percent < cfg.weak_signal_percent:
            return [
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SIGNAL,
                    severity=Severity.HIGH,
                    title="Señal débil",
                    message=(
                        f"La señal WiFi es débil ({current.signal_percent}%). Acércate al router "
                        "o reduce los obstáculos entre el dispositivo y el router."
                    ),
                )
            ]
        if current.signal_percent < cfg.fair_signal_percent:
            return [
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SIGNAL,
                    severity=Severity.MEDIUM,
                    title="Señal regular",
                    message=(
                        f"La señal WiFi es regular ({current.signal_percent}%). Pueden aparecer "
                        "ralentizaciones ocasionales; acercarte al router mejoraría el rendimiento."
                    ),
                )
            ]
        return []

    @staticmethod
    def check_band(
        current: MetricSample,
        nearby: Optional[Sequence[ScannedNetwork]],
        cfg: AlertConfig,
    ) -> list[Alert]:
        """Regla: en 2.4 GHz con variante 5 GHz de la misma red visible -> recomendación."""
        if normalize_band(current.band) != BAND_24GHZ or not nearby:
            return []
        if not is_5ghz_variant_available(current.ssid, nearby, cfg.five_ghz_suffix):
            return []
        return [
            Alert(
                timestamp=current.timestamp,
                category=AlertCategory.RECOMMENDATION,
                severity=Severity.INFO,
                title="Cambiar a 5 GHz",
                message=(
                    f"Hay una red de 5 GHz disponible para {current.ssid}. Cambiar a 5 GHz "
                    "puede dar velocidades 3-5x mayores con menos interferencias."
                ),
            )
        ]

    @staticmethod
    def check_speed(
        current: MetricSample,
        history: Sequence[MetricSample],
        cfg: AlertConfig,
    ) -> list[Alert]:
        """Regla: velocidad actual < 50% de la media de las últimas 20 muestras.

        Requiere al menos 10 muestras de historial; bajada y subida se evalúan por separado.
        """
        if len(history) < cfg.min_history:
            return []

        window = history[: cfg.history_window]
        avg_rx = mean(m.receive_speed_mbps for m in window)
        avg_tx = mean(m.transmit_speed_mbps for m in window)

        alerts: list[Alert] = []
        if current.receive_speed_mbps < avg_rx * cfg.speed_drop_ratio:
            alerts.append(
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SPEED,
                    severity=Severity.MEDIUM,
                    title="Velocidad de bajada lenta",
                    message=(
                        f"La velocidad de bajada ({current.receive_speed_mbps:.1f} Mbps) está muy por "
                        f"debajo de la media ({avg_rx:.1f} Mbps). Puede deberse a congestión de la red "
                        "o a problemas del ISP."
                    ),
                )
            )
        if current.transmit_speed_mbps < avg_tx * cfg.speed_drop_ratio:
            alerts.append(
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SPEED,
                    severity=Severity.MEDIUM,
                    title="Velocidad de subida lenta",
                    message=(
                        f"La velocidad de subida ({current.transmit_speed_mbps:.1f} Mbps) está muy por "
                        f"debajo de la media ({avg_tx:.1f} Mbps). Puede deberse a congestión de la red "
                        "o a problemas del ISP."
                    ),
                )
            )
        return alerts

    @staticmethod
    def check_congestion(current: MetricSample, cfg: AlertConfig) -> list[Alert]:
        """Regla: utilización del canal > 70% -> recomendación de severidad media."""
        if current.channel_utilization <= cfg.utilization_threshold:
            return []
        return [
            Alert(
                timestamp=current.timestamp,
                category=AlertCategory.CONGESTION,
                severity=Severity.MEDIUM,
                title="Canal congestionado",
                message=(
                    f"El canal WiFi está muy congestionado ({current.channel_utilization}% de uso). "
                    "Considera cambiar a un canal menos congestionado en la configuración del router."
                ),
            )
        ]

    @staticmethod
    def check_security(current: MetricSample) -> list[Alert]:
        """Regla: sin WPA2/WPA3 -> alta; WPA2 sin WPA3 -> baja (sugerencia de mejora)."""
        auth = current.authentication.upper()
        has_wpa2 = "WPA2" in auth
        has_wpa3 = "WPA3" in auth

        if not has_wpa2 and not has_wpa3:
            return [
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SECURITY,
                    severity=Severity.HIGH,
                    title="Seguridad débil",
                    message=(
                        f"La red usa autenticación {current.authentication or 'desconocida'}. "
                        "Actualiza a WPA2 o WPA3 para mejorar la seguridad."
                    ),
                )
            ]
        if has_wpa2 and not has_wpa3:
            return [
                Alert(
                    timestamp=current.timestamp,
                    category=AlertCategory.SECURITY,
                    severity=Severity.LOW,
                    title="Recomendación de seguridad",
                    message=(
                        "La red usa WPA2. Si el router lo soporta, considera actualizar a WPA3 "
                        "para una seguridad mayor."
                    ),
                )
            ]
        return []


def is_5ghz_variant_available(
    ssid: str,
    nearby: Sequence[ScannedNetwork],
    suffix: str,
) -> bool:
    """True si la misma red (o ``<ssid>_5G``) se ve en la banda de 5 GHz."""
    if not ssid:
        return False
    variants = {ssid, f"{ssid}{suffix}"}
    return any(
        net.ssid in variants and normalize_band(net.band) == BAND_5GHZ for net in nearby
    )
