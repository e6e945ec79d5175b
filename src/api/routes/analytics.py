"""
Footfall analytics endpoints
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from datetime import datetime

from src.api.dependencies import get_aggregation_engine
from src.schemas.analytics import AnalyticsResponse, RealtimeResponse, SummaryResponse
from src.services.aggregation import AggregationEngine

router = APIRouter()

@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    period: str = Query("hour", description="Bucket width: hour or day"),
    sensor_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Aggregated footfall per sensor and hour/day, last 24 hours by default"""

    buckets = engine.aggregate(period=period, sensor_id=sensor_id, start=start_date, end=end_date)
    return AnalyticsResponse(period=period, count=len(buckets), data=buckets)

@router.get("/analytics/realtime", response_model=RealtimeResponse)
async def get_realtime_analytics(
    sensor_id: Optional[str] = Query(None),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Per-minute counts for the past hour"""

    return RealtimeResponse(data=engine.realtime(sensor_id=sensor_id))

@router.get("/analytics/summary", response_model=SummaryResponse)
async def get_analytics_summary(
    sensor_id: Optional[str] = Query(None),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Today compared with yesterday"""

    return engine.summary(sensor_id=sensor_id)
