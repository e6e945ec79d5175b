"""
Sensor reading Pydantic schemas
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from src.core.clock import to_naive_utc
from src.schemas.common import GeoPoint, UTCDateTime

class ReadingCreate(BaseModel):
    """Schema for ingesting a reading; enforces the reading invariants"""
    sensor_id: str = Field(..., min_length=1, description="Sensor identifier")
    timestamp: Optional[datetime] = Field(None, description="Reading time, defaults to ingest time")
    count: int = Field(..., ge=0, description="Occupancy count, non-negative")
    location: GeoPoint = Field(default_factory=GeoPoint, description="Sensor location")

    @field_validator("sensor_id")
    @classmethod
    def _strip_sensor_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("sensor_id must be non-empty")
        return value

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

class ReadingResponse(BaseModel):
    """Schema for reading response"""
    id: int
    sensor_id: str
    timestamp: UTCDateTime
    count: int
    location: GeoPoint
    created_at: Optional[UTCDateTime] = None

    class Config:
        from_attributes = True

class ReadingCreatedResponse(BaseModel):
    message: str
    data: ReadingResponse

class ReadingListResponse(BaseModel):
    """Schema for reading list response"""
    count: int
    data: List[ReadingResponse]

class SensorReadingListResponse(ReadingListResponse):
    sensor_id: str
