"""
Device model for footfall sensors
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, Text
from sqlalchemy.sql import func
from src.database.connection import Base

class Device(Base):
    """Device model representing footfall sensors"""

    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sensor_id = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    longitude = Column(Float, default=0.0)
    latitude = Column(Float, default=0.0)
    status = Column(String(50), default="active", index=True)  # active, inactive, maintenance
    last_seen = Column(DateTime, index=True)
    battery_level = Column(Integer, default=100)
    firmware_version = Column(String(50), default="1.0.0")
    installation_date = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def location(self):
        return {"type": "Point", "coordinates": [self.longitude or 0.0, self.latitude or 0.0]}

    def __repr__(self):
        return f"<Device(sensor_id={self.sensor_id}, name={self.name}, status={self.status})>"
