from datetime import timedelta

import pytest

from wifi_health.ml_service.analytics.throttling import ThrottlingDetector
from wifi_health.ml_service.models.analytics_results import ThrottlingClass


def _history(make_speed_test, base_ts, historical: list[float], recent: list[float]):
    """Speed tests horarios: primero los históricos (más antiguos), luego los recientes."""
    values = historical + recent
    return [
        make_speed_test(base_ts + timedelta(hours=i), download=v) for i, v in enumerate(values)
    ]


class TestDataSufficiency:
    def test_single_test_is_insufficient(self, make_speed_test):
        assert ThrottlingDetector().analyze([make_speed_test()]) is None

    def test_two_tests_give_summary_without_degradation(self, make_speed_test, base_ts):
        tests = _history(make_speed_test, base_ts, [], [100.0, 80.0])

        result = ThrottlingDetector().analyze(tests)

        assert result is not None
        assert result.total_tests == 2
        assert result.average_download == 90.0
        assert result.speed_degradation == 0.0
        assert result.classification is ThrottlingClass.STABLE

    def test_ten_tests_do_not_compute_degradation(self, make_speed_test, base_ts):
        tests = _history(make_speed_test, base_ts, [], [100.0] * 5 + [10.0] * 5)

        assert ThrottlingDetector().analyze(tests).speed_degradation == 0.0


class TestDegradation:
    def test_eleven_tests_half_speed_flags_throttling(self, make_speed_test, base_ts):
        tests = _history(make_speed_test, base_ts, [100.0], [50.0] * 10)

        result = ThrottlingDetector().analyze(tests)

        assert result.speed_degradation == pytest.approx(50.0)
        assert result.possible_throttling is True
        assert result.likely_throttling is True
        assert result.recommendation.startswith("ATENCIÓN")

    def test_moderate_drop_is_possible_throttling(self, make_speed_test, base_ts):
        tests = _history(make_speed_test, base_ts, [100.0] * 5, [75.0] * 10)

        result = ThrottlingDetector().analyze(tests)

        assert result.speed_degradation == pytest.approx(25.0)
        assert result.classification is ThrottlingClass.POSSIBLE
        assert result.possible_throttling is True
        assert result.likely_throttling is False
        assert result.recommendation.startswith("AVISO")

    def test_input_order_does_not_matter(self, make_speed_test, base_ts):
        tests = _history(make_speed_test, base_ts, [100.0], [50.0] * 10)

        result = ThrottlingDetector().analyze(list(reversed(tests)))

        assert result.speed_degradation == pytest.approx(50.0)

    @pytest.mark.parametrize(
        "degradation, expected",
        [
            (0.0, ThrottlingClass.STABLE),
            (20.0, ThrottlingClass.STABLE),
            (20.5, ThrottlingClass.POSSIBLE),
            (30.0, ThrottlingClass.POSSIBLE),
            (30.1, ThrottlingClass.LIKELY),
        ],
    )
    def test_classification_boundaries(self, degradation, expected):
        assert ThrottlingDetector().classify(degradation) is expected


class TestHourlyPattern:
    def test_best_and_worst_hour_reported_with_large_spread(self, make_speed_test, base_ts):
        tests = []
        for hour, speed in ((8, 100.0), (14, 80.0), (20, 50.0)):
            for day in range(3):
                ts = base_ts.replace(hour=hour) - timedelta(days=day)
                tests.append(make_speed_test(ts, download=speed))

        result = ThrottlingDetector().analyze(tests)

        assert result.best_hour == 8
        assert result.worst_hour == 20
        assert "08:00" in result.recommendation
        assert "20:00" in result.recommendation

    def test_sparse_hours_are_not_reported(self, make_speed_test, base_ts):
        tests = [
            make_speed_test(base_ts.replace(hour=8), download=100.0),
            make_speed_test(base_ts.replace(hour=8) - timedelta(days=1), download=100.0),
            make_speed_test(base_ts.replace(hour=20), download=20.0),
            make_speed_test(base_ts.replace(hour=20) - timedelta(days=1), download=20.0),
        ]

        result = ThrottlingDetector().analyze(tests)

        assert result.best_hour is None
        assert result.worst_hour is None

    def test_small_spread_is_not_reported(self, make_speed_test, base_ts):
        tests = []
        for hour, speed in ((8, 100.0), (20, 90.0)):
            for day in range(3):
                tests.append(make_speed_test(base_ts.replace(hour=hour) - timedelta(days=day), download=speed))

        result = ThrottlingDetector().analyze(tests)

        assert result.best_hour is None
        assert "estable" in result.recommendation
