"""
Sensor reading model for footfall counts
"""

from sqlalchemy import Column, BigInteger, Integer, String, DateTime, Float, Index
from sqlalchemy.sql import func
from src.database.connection import Base

class SensorReading(Base):
    """One timestamped occupancy count from one sensor"""

    __tablename__ = "sensor_readings"
    __table_args__ = (
        Index("ix_sensor_readings_sensor_timestamp", "sensor_id", "timestamp"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    sensor_id = Column(String(255), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    count = Column(Integer, nullable=False)
    longitude = Column(Float, default=0.0)
    latitude = Column(Float, default=0.0)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def location(self):
        return {"type": "Point", "coordinates": [self.longitude or 0.0, self.latitude or 0.0]}

    def __repr__(self):
        return f"<SensorReading(sensor_id={self.sensor_id}, timestamp={self.timestamp}, count={self.count})>"
