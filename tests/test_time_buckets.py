from datetime import timedelta

from wifi_health.ml_service.analytics.time_buckets import TimeBucketAnalyzer, hourly_stats


def _samples_by_hour(make_sample, base_ts, speeds_by_hour: dict[int, float], per_hour: int):
    samples = []
    for hour, speed in speeds_by_hour.items():
        start = base_ts.replace(hour=hour, minute=0)
        for i in range(per_hour):
            samples.append(
                make_sample(start + timedelta(seconds=30 * i), receive_speed_mbps=speed)
            )
    return samples


class TestDataSufficiency:
    def test_two_hours_with_100_samples_is_insufficient(self, make_sample, base_ts):
        samples = _samples_by_hour(make_sample, base_ts, {8: 50.0, 20: 90.0}, per_hour=50)

        assert len(samples) == 100
        assert TimeBucketAnalyzer().analyze(samples) is None

    def test_less_than_100_samples_is_insufficient(self, make_sample, base_ts):
        samples = _samples_by_hour(
            make_sample, base_ts, {8: 50.0, 9: 60.0, 10: 70.0}, per_hour=30
        )

        assert TimeBucketAnalyzer().analyze(samples) is None

    def test_sparse_buckets_are_discarded(self, make_sample, base_ts):
        samples = _samples_by_hour(make_sample, base_ts, {8: 50.0, 9: 60.0}, per_hour=45)
        samples += _samples_by_hour(make_sample, base_ts, {10: 70.0, 11: 80.0}, per_hour=9)

        # 108 muestras pero solo 2 buckets con >= 10
        assert TimeBucketAnalyzer().analyze(samples) is None


class TestRanking:
    def test_five_hours_best_and_worst_are_disjoint(self, make_sample, base_ts):
        speeds = {6: 10.0, 9: 20.0, 12: 30.0, 15: 40.0, 18: 50.0}
        samples = _samples_by_hour(make_sample, base_ts, speeds, per_hour=20)

        result = TimeBucketAnalyzer().analyze(samples)

        assert result is not None
        best = {h.hour for h in result.best_hours}
        worst = {h.hour for h in result.worst_hours}
        assert best == {15, 18}
        assert worst == {6, 9}
        assert best.isdisjoint(worst)
        assert result.data_points == 100
        assert result.overall_average == 30.0

    def test_hours_are_sorted_for_display(self, make_sample, base_ts):
        speeds = {h: float(100 - h) for h in range(0, 12)}
        samples = _samples_by_hour(make_sample, base_ts, speeds, per_hour=10)

        result = TimeBucketAnalyzer().analyze(samples)

        assert [h.hour for h in result.best_hours] == [0, 1, 2]
        assert [h.hour for h in result.worst_hours] == [9, 10, 11]

    def test_recommendation_names_best_hour_when_spread_is_large(self, make_sample, base_ts):
        speeds = {6: 10.0, 9: 20.0, 12: 30.0, 15: 40.0, 18: 50.0}
        samples = _samples_by_hour(make_sample, base_ts, speeds, per_hour=20)

        result = TimeBucketAnalyzer().analyze(samples)

        assert result.speeds_consistent is False
        assert "18:00-19:00" in result.recommendation
        assert "06:00-07:00" in result.recommendation

    def test_equal_speeds_are_reported_as_consistent(self, make_sample, base_ts):
        speeds = {6: 50.0, 9: 50.0, 12: 50.0, 15: 50.0}
        samples = _samples_by_hour(make_sample, base_ts, speeds, per_hour=25)

        result = TimeBucketAnalyzer().analyze(samples)

        assert result.speeds_consistent is True
        assert "constante" in result.recommendation
        assert "prográmalas" not in result.recommendation

    def test_small_spread_is_consistent(self, make_sample, base_ts):
        speeds = {6: 100.0, 9: 105.0, 12: 109.0}
        samples = _samples_by_hour(make_sample, base_ts, speeds, per_hour=40)

        result = TimeBucketAnalyzer().analyze(samples)

        assert result.speeds_consistent is True


def test_hourly_stats_aggregates(make_sample, base_ts):
    samples = [
        make_sample(base_ts + timedelta(seconds=i), receive_speed_mbps=float(v))
        for i, v in enumerate([10, 20, 30])
    ]

    (stats,) = hourly_stats(samples, min_bucket_samples=3)

    assert stats.hour == base_ts.hour
    assert stats.average_speed == 20.0
    assert stats.min_speed == 10.0
    assert stats.max_speed == 30.0
    assert stats.sample_count == 3
