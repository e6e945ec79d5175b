"""
Sensor data ingest and query endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from datetime import datetime

from src.api.dependencies import get_ingest_service, get_reading_store
from src.core.exceptions import NotFoundError
from src.schemas.reading import (
    ReadingCreate,
    ReadingCreatedResponse,
    ReadingListResponse,
    ReadingResponse,
    SensorReadingListResponse,
)
from src.services.ingest import IngestService
from src.services.readings import ReadingStore

router = APIRouter()

@router.post("/sensor-data", response_model=ReadingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def post_sensor_data(
    reading: ReadingCreate,
    ingest: IngestService = Depends(get_ingest_service)
):
    """Accept a footfall count from a sensor"""

    stored = ingest.ingest(reading)
    return ReadingCreatedResponse(
        message="Sensor data recorded successfully",
        data=ReadingResponse.model_validate(stored)
    )

@router.get("/sensor-data", response_model=ReadingListResponse)
async def get_sensor_data(
    sensor_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    store: ReadingStore = Depends(get_reading_store)
):
    """Get readings newest first with optional filters"""

    readings = store.query(sensor_id=sensor_id, start=start_date, end=end_date, limit=limit)
    return ReadingListResponse(
        count=len(readings),
        data=[ReadingResponse.model_validate(reading) for reading in readings]
    )

@router.get("/sensor-data/{sensor_id}", response_model=SensorReadingListResponse)
async def get_sensor_data_by_id(
    sensor_id: str,
    limit: int = Query(100, ge=1, le=1000),
    store: ReadingStore = Depends(get_reading_store)
):
    """Get readings for one sensor"""

    readings = store.query(sensor_id=sensor_id, limit=limit)
    if not readings:
        raise NotFoundError("No data found for this sensor")

    return SensorReadingListResponse(
        sensor_id=sensor_id,
        count=len(readings),
        data=[ReadingResponse.model_validate(reading) for reading in readings]
    )
