"""
Device Pydantic schemas
"""

from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List
from datetime import datetime

from src.core.clock import to_naive_utc
from src.schemas.common import GeoPoint, UTCDateTime
from src.schemas.reading import ReadingResponse

class DeviceState(str, Enum):
    """Stored device status values"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"

class DeviceCreate(BaseModel):
    """Schema for registering or updating a device"""
    sensor_id: str = Field(..., min_length=1, description="Unique sensor identifier")
    name: str = Field(..., min_length=1, description="Device name")
    description: Optional[str] = Field(None, description="Free text description")
    location: Optional[GeoPoint] = Field(None, description="Device location")
    firmware_version: Optional[str] = Field(None, description="Firmware version")
    battery_level: Optional[int] = Field(None, ge=0, le=100, description="Battery level in percent")
    installation_date: Optional[datetime] = Field(None, description="Installation date")

    @field_validator("sensor_id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be non-empty")
        return value

    @field_validator("installation_date")
    @classmethod
    def _normalize_installation_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

class DeviceStatusUpdate(BaseModel):
    """Schema for an explicit status change"""
    status: DeviceState

class DeviceResponse(BaseModel):
    """Device as stored, plus liveness derived at read time"""
    sensor_id: str
    name: str
    description: Optional[str] = ""
    location: GeoPoint
    status: DeviceState
    last_seen: Optional[UTCDateTime] = None
    battery_level: Optional[int] = None
    firmware_version: Optional[str] = None
    installation_date: Optional[UTCDateTime] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None
    is_active: bool
    liveness: DeviceState
    time_since_last_seen: Optional[str] = None

class WindowStatistics(BaseModel):
    total_count: int = 0
    data_points: int = 0

class DeviceStatistics(BaseModel):
    last_hour: WindowStatistics
    last_24_hours: WindowStatistics

class DeviceDetailResponse(DeviceResponse):
    """Schema for a single device with recent activity"""
    recent_activity: List[ReadingResponse]
    statistics: DeviceStatistics

class DeviceListResponse(BaseModel):
    """Schema for device list response"""
    count: int
    data: List[DeviceResponse]

class DeviceMessageResponse(BaseModel):
    message: str
    data: DeviceResponse

class DeviceStatusSummary(BaseModel):
    """Counts by stored status plus liveness window totals"""
    total: int
    active: int
    inactive: int
    by_status: Dict[str, int]
