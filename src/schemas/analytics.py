"""
Analytics Pydantic schemas
"""

from pydantic import BaseModel
from typing import Dict, List, Literal

class AggregateBucket(BaseModel):
    """Statistics for one sensor over one hour or day"""
    sensor_id: str
    period: str
    total_count: int
    data_points: int
    avg_count: float
    min_count: int
    max_count: int

class AnalyticsResponse(BaseModel):
    period: str
    count: int
    data: List[AggregateBucket]

class RealtimeSeries(BaseModel):
    labels: List[str]
    data: List[int]

class RealtimeResponse(BaseModel):
    period: Literal["realtime"] = "realtime"
    data: Dict[str, RealtimeSeries]

class PeriodSummary(BaseModel):
    total_count: int
    sensor_count: int
    avg_per_sensor: int

class SensorDetail(BaseModel):
    sensor_id: str
    total_count: int
    data_points: int
    avg_count: float

class SummaryResponse(BaseModel):
    """Day-over-day comparison"""
    today: PeriodSummary
    yesterday: PeriodSummary
    change_percent: float
    sensor_details: List[SensorDetail]
