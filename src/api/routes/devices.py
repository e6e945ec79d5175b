"""
Device management endpoints
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from datetime import timedelta

from src.api.dependencies import get_aggregation_engine, get_device_registry, get_reading_store
from src.core.clock import utcnow
from src.schemas.device import (
    DeviceCreate,
    DeviceDetailResponse,
    DeviceListResponse,
    DeviceMessageResponse,
    DeviceState,
    DeviceStatistics,
    DeviceStatusSummary,
    DeviceStatusUpdate,
    WindowStatistics,
)
from src.schemas.reading import ReadingResponse
from src.services.aggregation import AggregationEngine
from src.services.devices import DeviceRegistry, device_view
from src.services.readings import ReadingStore

router = APIRouter()

@router.get("/devices", response_model=DeviceListResponse)
async def get_devices(
    status: Optional[DeviceState] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    registry: DeviceRegistry = Depends(get_device_registry)
):
    """Get devices, most recently seen first, with liveness computed now"""

    devices = registry.list(status=status.value if status else None, limit=limit)
    now = utcnow()
    return DeviceListResponse(
        count=len(devices),
        data=[device_view(device, now) for device in devices]
    )

@router.get("/devices/status/summary", response_model=DeviceStatusSummary)
async def get_device_status_summary(registry: DeviceRegistry = Depends(get_device_registry)):
    """Device counts by stored status and by liveness window"""

    return DeviceStatusSummary(**registry.status_summary())

@router.get("/devices/{sensor_id}", response_model=DeviceDetailResponse)
async def get_device(
    sensor_id: str,
    registry: DeviceRegistry = Depends(get_device_registry),
    store: ReadingStore = Depends(get_reading_store),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Get a device with recent activity and hourly/daily totals"""

    device = registry.get(sensor_id)
    now = utcnow()

    recent = store.recent(sensor_id, limit=10)
    statistics = DeviceStatistics(
        last_hour=WindowStatistics(**engine.window_totals(sensor_id, now - timedelta(hours=1))),
        last_24_hours=WindowStatistics(**engine.window_totals(sensor_id, now - timedelta(days=1))),
    )

    return device_view(
        device, now, model=DeviceDetailResponse,
        recent_activity=[ReadingResponse.model_validate(reading) for reading in recent],
        statistics=statistics
    )

@router.post("/devices", response_model=DeviceMessageResponse, status_code=201)
async def create_or_update_device(
    device_data: DeviceCreate,
    registry: DeviceRegistry = Depends(get_device_registry)
):
    """Create or update a device"""

    device = registry.register(device_data)
    return DeviceMessageResponse(
        message="Device created/updated successfully",
        data=device_view(device)
    )

@router.put("/devices/{sensor_id}/status", response_model=DeviceMessageResponse)
async def update_device_status(
    sensor_id: str,
    update: DeviceStatusUpdate,
    registry: DeviceRegistry = Depends(get_device_registry)
):
    """Set a device status explicitly"""

    device = registry.set_status(sensor_id, update.status)
    return DeviceMessageResponse(
        message="Device status updated successfully",
        data=device_view(device)
    )
