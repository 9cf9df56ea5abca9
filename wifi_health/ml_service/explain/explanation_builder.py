from __future__ import annotations

from typing import Optional

from wifi_health.ml_service.config.ml_config import (
    BAND_24GHZ,
    CongestionConfig,
    ThrottlingConfig,
)
from wifi_health.ml_service.models.analytics_results import HourlyStats, HealthReport
from wifi_health.ml_service.models.channel import ChannelInfo
from wifi_health.ml_service.models.network_sample import MetricSample


def format_hour(hour: int) -> str:
    return f"{hour % 24:02d}:00"


def format_hour_range(hour: int) -> str:
    return f"{format_hour(hour)}-{format_hour(hour + 1)}"


def speed_spread_percent(best_speed: float, worst_speed: float) -> float:
    """Diferencia relativa (%) de la hora más rápida frente a la más lenta."""
    if worst_speed <= 0:
        return 100.0 if best_speed > 0 else 0.0
    return (best_speed - worst_speed) / worst_speed * 100.0


def build_time_recommendation(
    best: HourlyStats,
    worst: HourlyStats,
    consistent_percent: float,
) -> tuple[bool, str]:
    """Devuelve (velocidades_consistentes, texto).

    Nunca nombra una "mejor hora" si empata con la peor: por debajo del umbral
    se informa que la velocidad es estable durante el día.
    """
    spread = speed_spread_percent(best.average_speed, worst.average_speed)

    if best.hour == worst.hour or spread <= consistent_percent:
        return True, (
            "La velocidad de la red es bastante constante a lo largo del día "
            f"(±{spread:.0f}% de variación). Velocidad media: {best.average_speed:.1f} Mbps. "
            "Las descargas pueden programarse a cualquier hora."
        )

    return False, (
        "Para descargas grandes, prográmalas entre "
        f"{format_hour_range(best.hour)} (media de {best.average_speed:.1f} Mbps). "
        f"Evita {format_hour_range(worst.hour)}, cuando la velocidad baja a "
        f"{worst.average_speed:.1f} Mbps ({spread:.0f}% más lenta)."
    )


def build_isp_recommendation(
    degradation_percent: float,
    best: Optional[tuple[int, float]],
    worst: Optional[tuple[int, float]],
    qualifying_hours: int,
    cfg: ThrottlingConfig,
) -> str:
    # Throttling primero (máxima prioridad)
    if degradation_percent > cfg.likely_threshold_percent:
        return (
            f"ATENCIÓN: degradación de velocidad significativa (>{cfg.likely_threshold_percent:.0f}%). "
            "Posible throttling del ISP o problemas de servicio. Ejecuta speed tests a distintas "
            "horas y contacta con tu proveedor."
        )

    if degradation_percent > cfg.possible_threshold_percent:
        return (
            "AVISO: degradación moderada de velocidad. Monitoriza la conexión y documenta "
            "las velocidades por si necesitas reclamar al ISP."
        )

    # Patrones horarios solo con datos de varias horas y diferencia relevante
    if best is not None and worst is not None and qualifying_hours >= cfg.min_hours_for_pattern:
        best_hour, best_speed = best
        worst_hour, worst_speed = worst
        if best_hour != worst_hour:
            spread = speed_spread_percent(best_speed, worst_speed)
            if spread > cfg.min_hour_spread_percent:
                return (
                    f"Tu conexión rinde mejor hacia las {format_hour(best_hour)} ({best_speed:.1f} Mbps) "
                    f"y peor hacia las {format_hour(worst_hour)} ({worst_speed:.1f} Mbps). "
                    f"Esta variación del {spread:.0f}% es congestión típica de red."
                )

    return (
        "El rendimiento del ISP es estable a lo largo del día. No se detectan patrones "
        "de throttling ni de congestión."
    )


def build_channel_reason(
    current: ChannelInfo,
    recommended: ChannelInfo,
    improvement_percent: int,
    cfg: CongestionConfig,
) -> str:
    if improvement_percent <= cfg.optimal_improvement_percent:
        return f"Tu canal actual ({current.channel}) ya es óptimo. No hace falta cambiarlo."

    reasons: list[str] = []

    if current.network_count > recommended.network_count:
        diff = current.network_count - recommended.network_count
        reasons.append(f"El canal {recommended.channel} tiene {diff} redes competidoras menos")

    if current.congestion_score >= cfg.heavy_congestion_score:
        reasons.append("El canal actual está muy congestionado")

    if recommended.congestion_score < cfg.minimal_interference_score:
        reasons.append(f"El canal {recommended.channel} tiene interferencia mínima")

    preferred = cfg.non_overlapping_24ghz
    if (
        current.band == BAND_24GHZ
        and current.channel not in preferred
        and recommended.channel in preferred
    ):
        reasons.append(f"El canal {recommended.channel} evita el solapamiento con canales vecinos")

    if reasons:
        return (
            f"Cambiar al canal {recommended.channel} mejoraría el rendimiento ~{improvement_percent}%. "
            + ". ".join(reasons)
            + "."
        )

    return f"El canal {recommended.channel} está menos congestionado que el canal {current.channel}."


def format_upgrade_eta(samples_needed: int, samples_per_hour: float) -> str:
    if samples_needed <= 0:
        return "ya activo"

    hours_needed = samples_needed / samples_per_hour
    if hours_needed < 1:
        return f"{int(hours_needed * 60)} minutos"
    if hours_needed < 24:
        return f"{hours_needed:.1f} horas"
    return f"{hours_needed / 24:.1f} días"


def build_health_summary(sample: MetricSample, report: HealthReport) -> str:
    lines = [
        f"Salud de la red: {report.status} ({report.score}/100)",
        "",
        f"Señal: {sample.signal_percent}% ({sample.rssi_dbm} dBm)",
        f"Velocidad: ↓ {sample.receive_speed_mbps:.1f} Mbps / ↑ {sample.transmit_speed_mbps:.1f} Mbps",
        f"Banda: {sample.band} (canal {sample.channel})",
        f"Seguridad: {sample.authentication}",
    ]
    if sample.channel_utilization > 0:
        lines.append(f"Uso del canal: {sample.channel_utilization}%")
    return "\n".join(lines) + "\n"
