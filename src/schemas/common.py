"""
Shared Pydantic types
"""

from datetime import datetime
from typing import Annotated, List, Literal

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from src.core.clock import isoformat_utc

# Naive UTC datetimes rendered as ISO-8601 with a trailing Z
UTCDateTime = Annotated[datetime, PlainSerializer(isoformat_utc, return_type=str)]


class GeoPoint(BaseModel):
    """GeoJSON point, coordinates are [longitude, latitude]"""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0])

    @field_validator("coordinates")
    @classmethod
    def _two_coordinates(cls, value: List[float]) -> List[float]:
        if len(value) != 2:
            raise ValueError("coordinates must be [longitude, latitude]")
        return value
