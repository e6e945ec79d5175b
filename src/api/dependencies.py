"""
Request-scoped dependencies shared by the routers
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.database.connection import get_database
from src.services.aggregation import AggregationEngine
from src.services.broadcast import BroadcastChannel
from src.services.devices import DeviceRegistry
from src.services.ingest import IngestService
from src.services.readings import ReadingStore


def get_broadcast(request: Request) -> BroadcastChannel:
    return request.app.state.broadcast


def get_reading_store(db: Session = Depends(get_database)) -> ReadingStore:
    return ReadingStore(db)


def get_device_registry(db: Session = Depends(get_database)) -> DeviceRegistry:
    return DeviceRegistry(db)


def get_aggregation_engine(db: Session = Depends(get_database)) -> AggregationEngine:
    return AggregationEngine(db)


def get_ingest_service(
    db: Session = Depends(get_database),
    channel: BroadcastChannel = Depends(get_broadcast),
) -> IngestService:
    return IngestService(db, channel)
