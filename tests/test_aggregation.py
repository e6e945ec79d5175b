from datetime import datetime, timedelta

import pytest

from src.core.exceptions import ValidationError
from src.schemas.reading import ReadingCreate
from src.services.aggregation import AggregationEngine, floor_timestamp, round_half_up
from src.services.readings import ReadingStore

def _add(session, sensor_id, timestamp, count):
    return ReadingStore(session).insert(ReadingCreate(sensor_id=sensor_id, timestamp=timestamp, count=count))

def test_same_hour_readings_form_one_bucket(db_session, fixed_now):
    _add(db_session, "s1", datetime(2026, 10, 18, 10, 5), 10)
    _add(db_session, "s1", datetime(2026, 10, 18, 10, 6), 5)

    buckets = AggregationEngine(db_session).aggregate(period="hour", sensor_id="s1", now=fixed_now)

    assert len(buckets) == 1
    bucket = buckets[0]
    assert bucket.sensor_id == "s1"
    assert bucket.period == "2026-10-18 10:00"
    assert bucket.total_count == 15
    assert bucket.data_points == 2
    assert bucket.avg_count == 7.5
    assert bucket.min_count == 5
    assert bucket.max_count == 10

def test_bucket_totals_match_reading_totals(db_session, fixed_now):
    counts = [3, 0, 17, 8, 22, 1, 9, 4]
    for index, count in enumerate(counts):
        sensor = "s1" if index % 2 else "s2"
        _add(db_session, sensor, fixed_now - timedelta(minutes=47 * index), count)

    engine = AggregationEngine(db_session)
    for period in ("hour", "day"):
        buckets = engine.aggregate(period=period, now=fixed_now)
        assert sum(bucket.total_count for bucket in buckets) == sum(counts)
        assert sum(bucket.data_points for bucket in buckets) == len(counts)
        for bucket in buckets:
            assert bucket.avg_count == round_half_up(bucket.total_count / bucket.data_points)

def test_buckets_ordered_by_start(db_session, fixed_now):
    _add(db_session, "s2", datetime(2026, 10, 18, 9, 10), 1)
    _add(db_session, "s1", datetime(2026, 10, 18, 7, 10), 2)
    _add(db_session, "s1", datetime(2026, 10, 18, 9, 40), 3)

    buckets = AggregationEngine(db_session).aggregate(period="hour", now=fixed_now)

    assert [bucket.period for bucket in buckets] == [
        "2026-10-18 07:00", "2026-10-18 09:00", "2026-10-18 09:00"
    ]

def test_default_range_is_last_24_hours(db_session, fixed_now):
    _add(db_session, "s1", fixed_now - timedelta(hours=25), 100)
    _add(db_session, "s1", fixed_now - timedelta(hours=23), 7)

    buckets = AggregationEngine(db_session).aggregate(period="day", now=fixed_now)

    assert sum(bucket.total_count for bucket in buckets) == 7

def test_explicit_range(db_session, fixed_now):
    _add(db_session, "s1", datetime(2026, 10, 10, 12, 0), 4)
    _add(db_session, "s1", datetime(2026, 10, 11, 12, 0), 6)

    buckets = AggregationEngine(db_session).aggregate(
        period="day", start=datetime(2026, 10, 10), end=datetime(2026, 10, 10, 23, 59)
    )

    assert [(bucket.period, bucket.total_count) for bucket in buckets] == [("2026-10-10", 4)]

def test_unsupported_period_rejected(db_session):
    with pytest.raises(ValidationError):
        AggregationEngine(db_session).aggregate(period="week")
    with pytest.raises(ValidationError):
        floor_timestamp(datetime(2026, 1, 1), "month")

def test_realtime_groups_by_minute(db_session, fixed_now):
    _add(db_session, "s1", fixed_now - timedelta(minutes=2, seconds=30), 2)
    _add(db_session, "s1", fixed_now - timedelta(minutes=2, seconds=10), 3)
    _add(db_session, "s1", fixed_now - timedelta(minutes=1), 4)
    _add(db_session, "s2", fixed_now - timedelta(minutes=90), 50)

    series = AggregationEngine(db_session).realtime(now=fixed_now)

    assert set(series) == {"s1"}
    assert series["s1"].labels == ["2026-10-18 10:27", "2026-10-18 10:29"]
    assert series["s1"].data == [5, 4]

def test_realtime_filters_by_sensor(db_session, fixed_now):
    _add(db_session, "s1", fixed_now - timedelta(minutes=5), 2)
    _add(db_session, "s2", fixed_now - timedelta(minutes=5), 3)

    series = AggregationEngine(db_session).realtime(sensor_id="s2", now=fixed_now)

    assert list(series) == ["s2"]

def test_summary_compares_with_yesterday(db_session, fixed_now):
    _add(db_session, "s1", datetime(2026, 10, 18, 8, 0), 30)
    _add(db_session, "s1", datetime(2026, 10, 18, 9, 0), 10)
    _add(db_session, "s2", datetime(2026, 10, 18, 9, 30), 20)
    _add(db_session, "s1", datetime(2026, 10, 17, 15, 0), 50)
    _add(db_session, "s1", datetime(2026, 10, 16, 15, 0), 999)

    summary = AggregationEngine(db_session).summary(now=fixed_now)

    assert summary.today.total_count == 60
    assert summary.today.sensor_count == 2
    assert summary.today.avg_per_sensor == 30
    assert summary.yesterday.total_count == 50
    assert summary.yesterday.sensor_count == 1
    assert summary.change_percent == 20.0
    details = {detail.sensor_id: detail for detail in summary.sensor_details}
    assert details["s1"].total_count == 40
    assert details["s1"].data_points == 2
    assert details["s1"].avg_count == 20.0

def test_summary_change_is_zero_without_yesterday(db_session, fixed_now):
    _add(db_session, "s1", datetime(2026, 10, 18, 9, 0), 12)

    summary = AggregationEngine(db_session).summary(now=fixed_now)

    assert summary.yesterday.total_count == 0
    assert summary.yesterday.avg_per_sensor == 0
    assert summary.change_percent == 0

def test_round_half_up():
    assert round_half_up(7.5) == 7.5
    assert round_half_up(2.345) == 2.35
    assert round_half_up(1 / 3) == 0.33
    assert round_half_up(2.5, 0) == 3
    assert round_half_up(-0.125) == -0.12
    assert round_half_up(-2.5, 0) == -2

def test_summary_negative_change_rounds_half_toward_positive(db_session, fixed_now):
    _add(db_session, "s1", datetime(2026, 10, 17, 15, 0), 800)
    _add(db_session, "s1", datetime(2026, 10, 18, 9, 0), 799)

    summary = AggregationEngine(db_session).summary(now=fixed_now)

    assert summary.change_percent == -0.12
