from __future__ import annotations

from wifi_health.ml_service.models.analytics_results import HealthReport
from wifi_health.ml_service.models.network_sample import MetricSample


def compute_health(sample: MetricSample) -> HealthReport:
    """Puntuación de salud 0-100: señal 40 + velocidad 30 + uso de canal 20 + seguridad 10."""
    if sample.signal_percent >= 80:
        signal_points = 40
    elif sample.signal_percent >= 60:
        signal_points = 30
    elif sample.signal_percent >= 40:
        signal_points = 20
    else:
        signal_points = 10

    avg_speed = (sample.receive_speed_mbps + sample.transmit_speed_mbps) / 2
    if avg_speed >= 100:
        speed_points = 30
    elif avg_speed >= 50:
        speed_points = 20
    elif avg_speed >= 25:
        speed_points = 15
    else:
        speed_points = 5

    if sample.channel_utilization < 20:
        utilization_points = 20
    elif sample.channel_utilization < 40:
        utilization_points = 15
    elif sample.channel_utilization < 60:
        utilization_points = 10
    else:
        utilization_points = 5

    auth = sample.authentication.upper()
    if "WPA3" in auth:
        security_points = 10
    elif "WPA2" in auth:
        security_points = 8
    elif "WPA" in auth:
        security_points = 5
    else:
        security_points = 0

    score = min(signal_points + speed_points + utilization_points + security_points, 100)
    return HealthReport(
        score=score,
        status=health_status(score),
        signal_points=signal_points,
        speed_points=speed_points,
        utilization_points=utilization_points,
        security_points=security_points,
    )


def health_status(score: int) -> str:
    if score >= 80:
        return "excelente"
    if score >= 60:
        return "buena"
    if score >= 40:
        return "regular"
    return "mala"
