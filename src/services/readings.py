"""
Reading store: append-only sensor readings
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session
import structlog

from src.core.clock import utcnow, to_naive_utc
from src.core.exceptions import ValidationError
from src.models.reading import SensorReading
from src.schemas.reading import ReadingCreate

logger = structlog.get_logger(__name__)


class ReadingStore:
    """Inserts and queries readings; readings are never updated or deleted"""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, reading) -> SensorReading:
        """Store a reading given as ReadingCreate or a plain mapping"""
        if not isinstance(reading, ReadingCreate):
            try:
                reading = ReadingCreate.model_validate(reading)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e) from e
        elif reading.count < 0:
            raise ValidationError("Count must be a non-negative number")

        longitude, latitude = reading.location.coordinates
        row = SensorReading(
            sensor_id=reading.sensor_id,
            timestamp=reading.timestamp or utcnow(),
            count=reading.count,
            longitude=longitude,
            latitude=latitude,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Reading stored", sensor_id=row.sensor_id, count=row.count)
        return row

    def _filtered(self, sensor_id: Optional[str], start: Optional[datetime],
                  end: Optional[datetime], end_exclusive: bool = False):
        query = self.db.query(SensorReading)
        if sensor_id:
            query = query.filter(SensorReading.sensor_id == sensor_id)
        start = to_naive_utc(start)
        end = to_naive_utc(end)
        if start is not None:
            query = query.filter(SensorReading.timestamp >= start)
        if end is not None:
            if end_exclusive:
                query = query.filter(SensorReading.timestamp < end)
            else:
                query = query.filter(SensorReading.timestamp <= end)
        return query

    def query(self, sensor_id: Optional[str] = None, start: Optional[datetime] = None,
              end: Optional[datetime] = None, limit: Optional[int] = None) -> List[SensorReading]:
        """Readings newest first"""
        query = self._filtered(sensor_id, start, end).order_by(
            desc(SensorReading.timestamp), desc(SensorReading.id)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def query_range(self, start: Optional[datetime], end: Optional[datetime] = None,
                    sensor_id: Optional[str] = None, end_exclusive: bool = False) -> List[SensorReading]:
        """Readings oldest first, for aggregation"""
        return self._filtered(sensor_id, start, end, end_exclusive).order_by(
            asc(SensorReading.timestamp), asc(SensorReading.id)
        ).all()

    def recent(self, sensor_id: str, limit: int = 10) -> List[SensorReading]:
        return self.query(sensor_id=sensor_id, limit=limit)

    def totals(self, sensor_id: str, since: datetime) -> dict:
        """Sum of counts and number of readings for a sensor since a point in time"""
        total_count, data_points = self.db.query(
            func.coalesce(func.sum(SensorReading.count), 0),
            func.count(SensorReading.id),
        ).filter(
            SensorReading.sensor_id == sensor_id,
            SensorReading.timestamp >= to_naive_utc(since),
        ).one()
        return {"total_count": int(total_count), "data_points": int(data_points)}
