import threading
from datetime import timedelta
from unittest.mock import MagicMock

import numpy as np
import pytest

from wifi_health.ml_service.config.ml_config import SeriesConfig
from wifi_health.ml_service.forecasting.model_cache import CachedModels, ModelCache
from wifi_health.ml_service.forecasting.series_forecaster import SeriesForecaster
from wifi_health.ml_service.models.alert import Severity
from wifi_health.ml_service.models.prediction import PredictionCategory, PredictionImpact
from wifi_health.ml_service.models.series_model import SeriesForecast, SeriesModel
from wifi_health.ml_service.trainers.arima_trainer import ArimaTrainer

HORIZON = 12


def _forecast(metric, values, width=0.0):
    return SeriesForecast(
        metric=metric,
        values=tuple(values),
        lower=tuple(v - width / 2 for v in values),
        upper=tuple(v + width / 2 for v in values),
    )


def _model(metric, trained_at, n=200):
    return SeriesModel(metric=metric, order=(1, 1, 0), train_size=n, trained_at=trained_at)


def _decline(start, end, steps=200):
    """Caída lineal redondeada a enteros: pasos de 0 o -1, como una lectura real."""
    return [float(round(start - (start - end) * (i + 1) / steps)) for i in range(steps)]


def _ramp_samples(make_sample, base_ts, field, start, end, flat=400, falling=200):
    """``flat`` muestras estables en ``start`` y luego ``falling`` cayendo hasta ``end``."""
    values = [float(start)] * flat + _decline(start, end, falling)
    first = base_ts - timedelta(seconds=30 * (len(values) - 1))
    cast = int if field == "signal_percent" else float
    return [
        make_sample(first + timedelta(seconds=30 * i), **{field: cast(v)})
        for i, v in enumerate(values)
    ]


@pytest.fixture
def fake_trainer():
    """Trainer simulado: pronósticos planos y sanos salvo que el test los cambie."""
    trainer = MagicMock(spec=ArimaTrainer)
    trainer.forecasts = {
        "signal": _forecast("signal", [80.0] * HORIZON, width=10.0),
        "speed": _forecast("speed", [100.0] * HORIZON, width=10.0),
    }
    trainer.fit.side_effect = lambda metric, values, trained_at: _model(
        metric, trained_at, len(values)
    )
    trainer.forecast.side_effect = lambda model, values: trainer.forecasts[model.metric]
    return trainer


def _newest_first(samples):
    return sorted(samples, key=lambda m: m.timestamp, reverse=True)


class TestArimaTrainer:
    def test_sustained_decline_keeps_falling(self, base_ts):
        values = _decline(100, 51)
        trainer = ArimaTrainer(SeriesConfig())

        model = trainer.fit("signal", values, trained_at=base_ts)
        forecast = trainer.forecast(model, values)

        assert model.results is not None
        assert forecast.horizon == HORIZON
        assert forecast.values[-1] < forecast.values[0] < 52.0
        assert min(forecast.values) < 50.0
        assert all(lo <= v <= u for lo, v, u in zip(forecast.lower, forecast.values, forecast.upper))

    def test_intervals_widen_with_horizon(self, base_ts):
        values = _decline(100, 51)
        trainer = ArimaTrainer(SeriesConfig())

        forecast = trainer.forecast(trainer.fit("signal", values, base_ts), values)

        widths = [u - lo for lo, u in zip(forecast.lower, forecast.upper)]
        assert widths[0] > 0
        assert all(b > a for a, b in zip(widths, widths[1:]))

    def test_forecast_starts_from_recent_values(self, base_ts):
        values = _decline(100, 51)
        trainer = ArimaTrainer(SeriesConfig())
        model = trainer.fit("signal", values, base_ts)

        shifted = [v + 20.0 for v in values]
        forecast = trainer.forecast(model, shifted)

        assert min(forecast.values) > 60.0

    def test_constant_series_forecasts_flat_without_interval(self, base_ts):
        trainer = ArimaTrainer(SeriesConfig())

        model = trainer.fit("speed", [42.0] * 100, trained_at=base_ts)
        forecast = trainer.forecast(model, [42.0] * 100)

        assert model.results is None
        assert forecast.values == pytest.approx((42.0,) * HORIZON)
        assert forecast.average_interval_width == 0.0

    def test_noiseless_line_is_extrapolated(self, base_ts):
        values = [100.0 - 0.5 * i for i in range(100)]
        trainer = ArimaTrainer(SeriesConfig())

        forecast = trainer.forecast(trainer.fit("signal", values, base_ts), values)

        expected = [values[-1] - 0.5 * k for k in range(1, HORIZON + 1)]
        assert np.allclose(forecast.values, expected)

    def test_only_last_train_size_points_are_used(self, base_ts):
        trainer = ArimaTrainer(SeriesConfig(train_size=50))

        model = trainer.fit("signal", [70.0 + i % 3 for i in range(300)], trained_at=base_ts)

        assert model.train_size == 50

    def test_too_short_series_raises(self, base_ts):
        with pytest.raises(ValueError):
            ArimaTrainer(SeriesConfig()).fit("signal", [1.0, 2.0] * 14 + [1.0], base_ts)

    def test_non_finite_values_raise(self, base_ts):
        values = [50.0 + i % 2 for i in range(99)] + [float("nan")]

        with pytest.raises(ValueError):
            ArimaTrainer(SeriesConfig()).fit("signal", values, base_ts)


class TestSeriesPredictionsWithTrainedModels:
    def test_gradual_signal_decline_is_predicted(self, make_sample, base_ts):
        samples = _ramp_samples(make_sample, base_ts, "signal_percent", 100, 51)

        predictions = SeriesForecaster().predict(_newest_first(samples), base_ts)

        assert [p.category for p in predictions] == [PredictionCategory.SIGNAL_DEGRADATION]
        assert 30 <= predictions[0].confidence <= 95
        assert predictions[0].estimated_timeframe.startswith("En ")

    def test_gradual_speed_decline_is_predicted(self, make_sample, base_ts):
        samples = _ramp_samples(make_sample, base_ts, "receive_speed_mbps", 100, 40)

        predictions = SeriesForecaster().predict(_newest_first(samples), base_ts)

        assert [p.category for p in predictions] == [PredictionCategory.SPEED_DEGRADATION]
        p = predictions[0]
        assert 40 <= p.confidence <= 95
        assert p.impact is PredictionImpact.HIGH
        assert p.estimated_timeframe == "Próximos 6 minutos"

    def test_stable_network_emits_nothing(self, make_series, base_ts):
        forecaster = SeriesForecaster()

        assert forecaster.predict(_newest_first(make_series(600)), base_ts) == []
        assert forecaster.cache.status(base_ts).is_trained is True

class TestSeriesPredictions:
    def test_forecast_below_threshold_predicts_signal_degradation(
        self, fake_trainer, make_series, base_ts
    ):
        values = [75.0, 60.0, 48.0, 45.0] + [44.0] * 8
        fake_trainer.forecasts["signal"] = _forecast("signal", values, width=10.0)
        forecaster = SeriesForecaster(trainer=fake_trainer)

        predictions = forecaster.predict(_newest_first(make_series(150)), base_ts)

        assert [p.category for p in predictions] == [PredictionCategory.SIGNAL_DEGRADATION]
        p = predictions[0]
        assert p.severity is Severity.MEDIUM
        assert p.impact is PredictionImpact.MEDIUM
        assert p.confidence == 90
        # primer paso bajo 50% = 3 -> 3 * 30 s
        assert p.estimated_timeframe == "En 1.5 minutos"

    def test_very_low_forecast_is_high_impact_and_confidence_is_clamped(
        self, fake_trainer, make_series, base_ts
    ):
        fake_trainer.forecasts["signal"] = _forecast("signal", [30.0] * HORIZON, width=90.0)

        (p,) = SeriesForecaster(trainer=fake_trainer).predict(
            _newest_first(make_series(150)), base_ts
        )

        assert p.impact is PredictionImpact.HIGH
        assert p.confidence == 30
        assert p.estimated_timeframe == "En 0.5 minutos"

    def test_current_signal_already_weak_is_not_predicted(self, fake_trainer, make_series, base_ts):
        fake_trainer.forecasts["signal"] = _forecast("signal", [30.0] * HORIZON)

        predictions = SeriesForecaster(trainer=fake_trainer).predict(
            _newest_first(make_series(150, signal_percent=45)), base_ts
        )

        assert predictions == []

    def test_speed_drop_against_history(self, fake_trainer, make_series, base_ts):
        fake_trainer.forecasts["speed"] = _forecast("speed", [40.0] * HORIZON, width=20.0)

        (p,) = SeriesForecaster(trainer=fake_trainer).predict(
            _newest_first(make_series(150)), base_ts
        )

        assert p.category is PredictionCategory.SPEED_DEGRADATION
        assert p.impact is PredictionImpact.HIGH
        assert p.confidence == 80
        assert p.estimated_timeframe == "Próximos 6 minutos"

    def test_moderate_speed_drop_is_medium_impact(self, fake_trainer, make_series, base_ts):
        fake_trainer.forecasts["speed"] = _forecast("speed", [60.0] * HORIZON, width=100.0)

        (p,) = SeriesForecaster(trainer=fake_trainer).predict(
            _newest_first(make_series(150)), base_ts
        )

        assert p.impact is PredictionImpact.MEDIUM
        assert p.confidence == 40

    def test_stable_congestion_slot_is_predicted(self, fake_trainer, make_sample, make_series, base_ts):
        last_week = base_ts - timedelta(days=7)
        samples = [
            make_sample(last_week + timedelta(seconds=30 * i), channel_utilization=80)
            for i in range(15)
        ] + make_series(100, end=base_ts - timedelta(hours=1))

        (p,) = SeriesForecaster(trainer=fake_trainer).predict(_newest_first(samples), base_ts)

        assert p.category is PredictionCategory.CONGESTION
        assert p.severity is Severity.LOW
        assert p.impact is PredictionImpact.MEDIUM
        assert p.confidence == 95

    def test_erratic_congestion_slot_is_not_predicted(
        self, fake_trainer, make_sample, make_series, base_ts
    ):
        last_week = base_ts - timedelta(days=7)
        samples = [
            make_sample(
                last_week + timedelta(seconds=30 * i),
                channel_utilization=100 if i % 2 else 50,
            )
            for i in range(20)
        ] + make_series(100, end=base_ts - timedelta(hours=1))

        assert SeriesForecaster(trainer=fake_trainer).predict(_newest_first(samples), base_ts) == []

    def test_less_than_100_samples_skips_training(self, fake_trainer, make_series, base_ts):
        forecaster = SeriesForecaster(trainer=fake_trainer)

        assert forecaster.predict(_newest_first(make_series(99)), base_ts) == []
        fake_trainer.fit.assert_not_called()


class TestTrainingLifecycle:
    def test_training_failure_degrades_to_no_model_predictions(
        self, fake_trainer, make_series, base_ts
    ):
        fake_trainer.fit.side_effect = ValueError("serie inválida")
        forecaster = SeriesForecaster(trainer=fake_trainer)

        predictions = forecaster.predict(_newest_first(make_series(150)), base_ts)

        assert predictions == []
        fake_trainer.forecast.assert_not_called()
        assert forecaster.cache.status(base_ts).is_trained is False

    def test_models_are_reused_within_24_hours(self, fake_trainer, make_series, base_ts):
        forecaster = SeriesForecaster(trainer=fake_trainer)
        metrics = _newest_first(make_series(150))

        forecaster.predict(metrics, base_ts)
        forecaster.predict(metrics, base_ts + timedelta(hours=23))
        assert fake_trainer.fit.call_count == 2

        forecaster.predict(metrics, base_ts + timedelta(hours=25))
        assert fake_trainer.fit.call_count == 4

    def test_models_are_kept_at_exactly_24_hours(self, fake_trainer, make_series, base_ts):
        forecaster = SeriesForecaster(trainer=fake_trainer)
        metrics = _newest_first(make_series(150))

        forecaster.predict(metrics, base_ts)
        forecaster.predict(metrics, base_ts + timedelta(hours=24))

        assert fake_trainer.fit.call_count == 2
        assert forecaster.cache.needs_retrain(base_ts + timedelta(hours=24)) is False
        assert forecaster.cache.needs_retrain(base_ts + timedelta(hours=24, seconds=1)) is True

    def test_training_uses_chronological_values(self, fake_trainer, make_sample, base_ts):
        samples = [
            make_sample(base_ts + timedelta(seconds=30 * i), signal_percent=i % 100)
            for i in range(120)
        ]

        SeriesForecaster(trainer=fake_trainer).predict(_newest_first(samples), base_ts)

        signal_call = fake_trainer.fit.call_args_list[0]
        assert signal_call.args[0] == "signal"
        assert signal_call.args[1][:3] == [0.0, 1.0, 2.0]
        assert signal_call.kwargs["trained_at"] == base_ts


class TestModelCache:
    def _entry(self, ts, trained=True):
        model = _model("signal", ts) if trained else None
        return CachedModels(signal=model, speed=_model("speed", ts), trained_at=ts)

    def test_status_counts_down_to_retrain(self, base_ts):
        cache = ModelCache()
        cache.swap(self._entry(base_ts))

        status = cache.status(base_ts + timedelta(hours=5))

        assert status.is_trained is True
        assert status.last_training == base_ts
        assert status.hours_until_retrain == 19

    def test_status_never_goes_negative(self, base_ts):
        cache = ModelCache()
        cache.swap(self._entry(base_ts))

        assert cache.status(base_ts + timedelta(hours=30)).hours_until_retrain == 0

    def test_partial_entry_still_counts_down(self, base_ts):
        cache = ModelCache()
        cache.swap(self._entry(base_ts, trained=False))

        status = cache.status(base_ts + timedelta(hours=5))

        assert status.is_trained is False
        assert status.last_training is None
        assert status.hours_until_retrain == 19

    def test_failed_training_keeps_last_success(self, base_ts):
        cache = ModelCache()
        cache.swap(self._entry(base_ts))
        cache.swap(self._entry(base_ts + timedelta(hours=25), trained=False))

        status = cache.status(base_ts + timedelta(hours=26))

        assert status.is_trained is False
        assert status.last_training == base_ts
        assert cache.needs_retrain(base_ts + timedelta(hours=26)) is True

    def test_concurrent_training_uses_previous_models(self, base_ts):
        cache = ModelCache()
        old = self._entry(base_ts - timedelta(hours=30))
        cache.swap(old)
        train = MagicMock()

        cache._training_lock.acquire()
        try:
            result = cache.get_or_train(base_ts, train)
        finally:
            cache._training_lock.release()

        assert result is old
        train.assert_not_called()

    def test_parallel_callers_train_once(self, base_ts):
        cache = ModelCache()
        started = threading.Event()
        release = threading.Event()
        entry = self._entry(base_ts)

        def slow_train():
            started.set()
            release.wait(timeout=5)
            return entry

        results = []
        worker = threading.Thread(target=lambda: results.append(cache.get_or_train(base_ts, slow_train)))
        worker.start()
        started.wait(timeout=5)

        other = MagicMock()
        assert cache.get_or_train(base_ts, other) is None
        release.set()
        worker.join(timeout=5)

        other.assert_not_called()
        assert results == [entry]
        assert cache.current() is entry
