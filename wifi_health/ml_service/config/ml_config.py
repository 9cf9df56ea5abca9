from __future__ import annotations

from dataclasses import dataclass, field

# Los umbrales y pesos de este módulo son heurísticos: no provienen de datos
# etiquetados. Se agrupan aquí para poder ajustarlos sin tocar los algoritmos.

BAND_24GHZ = "2.4 GHz"
BAND_5GHZ = "5 GHz"


@dataclass(frozen=True)
class StabilityConfig:
    """Configuración del análisis de estabilidad (varianza de señal y velocidad)."""

    min_samples: int = 10
    default_period_hours: int = 24

    # Caída de señal entre muestras consecutivas que cuenta como "significativa"
    significant_drop_points: float = 30.0

    # signalStability = 100 - k * std(señal)
    signal_stability_factor: float = 2.0

    # stabilityScore = max(0, 50 - std) + max(0, 30 - 5*drops) + max(0, 20 - std_vel/10)
    signal_score_base: float = 50.0
    drop_score_base: float = 30.0
    drop_penalty: float = 5.0
    speed_score_base: float = 20.0
    speed_stddev_divisor: float = 10.0

    # isStable = std(señal) < 15 y drops < 3
    stable_signal_stddev: float = 15.0
    stable_max_drops: int = 3


@dataclass(frozen=True)
class TimeBucketConfig:
    """Configuración del análisis por hora del día (mejores horas de descarga)."""

    history_limit: int = 1000
    min_total_samples: int = 100
    min_bucket_samples: int = 10
    min_buckets: int = 3
    top_n: int = 3
    # Diferencia mínima (%) entre mejor y peor hora para recomendar un horario
    consistent_speed_percent: float = 10.0


@dataclass(frozen=True)
class ThrottlingConfig:
    """Configuración de detección de throttling sobre speed tests."""

    history_limit: int = 100
    min_tests: int = 2
    # La degradación solo se calcula con MÁS de este número de tests
    min_tests_for_degradation: int = 10
    recent_window: int = 10
    possible_threshold_percent: float = 20.0
    likely_threshold_percent: float = 30.0
    min_bucket_tests: int = 3
    min_hours_for_pattern: int = 3
    min_hour_spread_percent: float = 15.0


@dataclass(frozen=True)
class CongestionConfig:
    """Configuración del scoring de congestión de canales WiFi."""

    network_weight: int = 20
    signal_divisor: int = 2
    overlap_penalty: int = 20
    non_overlapping_24ghz: tuple[int, ...] = (1, 6, 11)
    channels_24ghz: tuple[int, ...] = tuple(range(1, 12))
    channels_5ghz: tuple[int, ...] = (36, 40, 44, 48, 149, 153, 157, 161, 165)

    # Mejora (%) por debajo de la cual el canal actual se considera óptimo
    optimal_improvement_percent: float = 10.0
    heavy_congestion_score: int = 75
    minimal_interference_score: int = 25
    # Mejora (%) a partir de la cual se genera una alerta de recomendación
    alert_improvement_percent: float = 15.0


@dataclass(frozen=True)
class AlertConfig:
    """Umbrales de las reglas de alerta sobre la muestra actual."""

    weak_signal_percent: int = 40
    fair_signal_percent: int = 60
    min_history: int = 10
    history_window: int = 20
    speed_drop_ratio: float = 0.5
    utilization_threshold: int = 70
    five_ghz_suffix: str = "_5G"
    # Las predicciones con esta confianza o más se promueven a alerta
    prediction_alert_confidence: int = 60


@dataclass(frozen=True)
class TrendConfig:
    """Configuración del motor estadístico (regresión + patrones horarios)."""

    history_limit: int = 500
    min_samples: int = 100
    regression_window: int = 100
    min_regression_samples: int = 50
    # Pendiente (puntos de señal por muestra) a partir de la cual hay degradación
    slope_threshold: float = -0.5
    signal_threshold: float = 50.0
    min_hour_samples: int = 5
    speed_drop_percent: float = 30.0
    congestion_min_samples: int = 10
    congestion_window: int = 20
    utilization_threshold: float = 70.0


@dataclass(frozen=True)
class SeriesConfig:
    """Configuración del motor basado en modelos ARIMA por métrica."""

    history_limit: int = 500
    min_samples: int = 100
    train_size: int = 200
    # Mínimo de puntos para ajustar un modelo
    series_length: int = 30
    # ARIMA(p, d, q); con d=1 la tendencia "t" es la deriva por paso
    arima_order: tuple[int, int, int] = (1, 1, 0)
    arima_trend: str = "t"
    horizon: int = 12
    confidence_level: float = 0.95
    retrain_hours: int = 24

    signal_threshold: float = 50.0
    high_impact_signal: float = 40.0
    signal_confidence_bounds: tuple[int, int] = (30, 95)

    speed_drop_percent: float = 30.0
    high_impact_speed_drop: float = 50.0
    speed_confidence_bounds: tuple[int, int] = (40, 95)

    congestion_min_samples: int = 15
    congestion_window: int = 30
    congestion_max_stddev: float = 15.0
    utilization_threshold: float = 70.0
    high_impact_utilization: float = 85.0


@dataclass(frozen=True)
class SelectorConfig:
    """Configuración del selector de motor (trend -> series)."""

    history_limit: int = 1000
    upgrade_threshold: int = 500
    trend_accuracy: str = "30-75%"
    series_accuracy: str = "60-85%"


@dataclass(frozen=True)
class GlobalAnalyticsConfig:
    stability: StabilityConfig = field(default_factory=StabilityConfig)
    time_buckets: TimeBucketConfig = field(default_factory=TimeBucketConfig)
    throttling: ThrottlingConfig = field(default_factory=ThrottlingConfig)
    congestion: CongestionConfig = field(default_factory=CongestionConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    trend: TrendConfig = field(default_factory=TrendConfig)
    series: SeriesConfig = field(default_factory=SeriesConfig)
    selector: SelectorConfig = field(default_factory=SelectorConfig)


# Config global por defecto utilizable en facade/runners/servicios
DEFAULT_ANALYTICS_CONFIG = GlobalAnalyticsConfig()
