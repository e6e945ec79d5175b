"""
Aggregation engine for footfall readings

All queries are read-only. Buckets are computed in UTC from readings
fetched through the reading store.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from src.core.clock import utcnow
from src.core.exceptions import ValidationError
from src.schemas.analytics import (
    AggregateBucket,
    PeriodSummary,
    RealtimeSeries,
    SensorDetail,
    SummaryResponse,
)
from src.services.readings import ReadingStore

PERIOD_FORMATS = {
    "hour": "%Y-%m-%d %H:00",
    "day": "%Y-%m-%d",
}
MINUTE_FORMAT = "%Y-%m-%d %H:%M"
DEFAULT_RANGE = timedelta(hours=24)
REALTIME_WINDOW = timedelta(hours=1)


def round_half_up(value, places: int = 2):
    """Round like Math.round on scaled values: halves go toward +infinity"""
    scaled = Decimal(str(value)).scaleb(places) + Decimal("0.5")
    rounded = scaled.to_integral_value(rounding=ROUND_FLOOR).scaleb(-places)
    return int(rounded) if places == 0 else float(rounded)


def floor_timestamp(timestamp: datetime, period: str) -> datetime:
    if period == "hour":
        return timestamp.replace(minute=0, second=0, microsecond=0)
    if period == "day":
        return timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    raise ValidationError(f"Unsupported period '{period}', expected one of: hour, day")


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _per_sensor_totals(readings: Iterable) -> "OrderedDict[str, dict]":
    totals: "OrderedDict[str, dict]" = OrderedDict()
    for reading in readings:
        entry = totals.setdefault(reading.sensor_id, {"total_count": 0, "data_points": 0})
        entry["total_count"] += reading.count
        entry["data_points"] += 1
    return totals


def _period_summary(totals: Dict[str, dict]) -> PeriodSummary:
    total = sum(entry["total_count"] for entry in totals.values())
    sensor_count = len(totals)
    return PeriodSummary(
        total_count=total,
        sensor_count=sensor_count,
        avg_per_sensor=round_half_up(total / sensor_count, 0) if sensor_count else 0,
    )


class AggregationEngine:
    """Bucketed, realtime and day-over-day views over the reading store"""

    def __init__(self, db: Session):
        self.readings = ReadingStore(db)

    def aggregate(self, period: str = "hour", sensor_id: Optional[str] = None,
                  start: Optional[datetime] = None, end: Optional[datetime] = None,
                  now: Optional[datetime] = None) -> List[AggregateBucket]:
        if period not in PERIOD_FORMATS:
            raise ValidationError(f"Unsupported period '{period}', expected one of: hour, day")

        if start is None and end is None:
            now = now or utcnow()
            start, end = now - DEFAULT_RANGE, now

        groups: "OrderedDict[tuple, List[int]]" = OrderedDict()
        for reading in self.readings.query_range(start, end, sensor_id=sensor_id):
            key = (floor_timestamp(reading.timestamp, period), reading.sensor_id)
            groups.setdefault(key, []).append(reading.count)

        # Stable sort keeps first-seen sensor order within a bucket start
        ordered = sorted(groups.items(), key=lambda item: item[0][0])
        return [
            AggregateBucket(
                sensor_id=sensor,
                period=bucket_start.strftime(PERIOD_FORMATS[period]),
                total_count=sum(counts),
                data_points=len(counts),
                avg_count=round_half_up(sum(counts) / len(counts)),
                min_count=min(counts),
                max_count=max(counts),
            )
            for (bucket_start, sensor), counts in ordered
        ]

    def realtime(self, sensor_id: Optional[str] = None,
                 now: Optional[datetime] = None) -> Dict[str, RealtimeSeries]:
        """Per-minute totals over the trailing hour, keyed by sensor"""
        now = now or utcnow()
        minutes: "OrderedDict[str, OrderedDict[str, int]]" = OrderedDict()
        for reading in self.readings.query_range(now - REALTIME_WINDOW, sensor_id=sensor_id):
            label = reading.timestamp.strftime(MINUTE_FORMAT)
            series = minutes.setdefault(reading.sensor_id, OrderedDict())
            series[label] = series.get(label, 0) + reading.count

        return {
            sensor: RealtimeSeries(labels=list(series.keys()), data=list(series.values()))
            for sensor, series in minutes.items()
        }

    def summary(self, sensor_id: Optional[str] = None,
                now: Optional[datetime] = None) -> SummaryResponse:
        now = now or utcnow()
        today_start = start_of_day(now)
        yesterday_start = today_start - timedelta(days=1)

        today = _per_sensor_totals(
            self.readings.query_range(today_start, now, sensor_id=sensor_id, end_exclusive=True)
        )
        yesterday = _per_sensor_totals(
            self.readings.query_range(yesterday_start, today_start, sensor_id=sensor_id, end_exclusive=True)
        )

        today_summary = _period_summary(today)
        yesterday_summary = _period_summary(yesterday)
        if yesterday_summary.total_count > 0:
            change = Decimal(today_summary.total_count - yesterday_summary.total_count) * 100 / yesterday_summary.total_count
            change_percent = round_half_up(change)
        else:
            change_percent = 0

        return SummaryResponse(
            today=today_summary,
            yesterday=yesterday_summary,
            change_percent=change_percent,
            sensor_details=[
                SensorDetail(
                    sensor_id=sensor,
                    total_count=entry["total_count"],
                    data_points=entry["data_points"],
                    avg_count=round_half_up(entry["total_count"] / entry["data_points"]),
                )
                for sensor, entry in today.items()
            ],
        )

    def window_totals(self, sensor_id: str, since: datetime) -> dict:
        return self.readings.totals(sensor_id, since)
