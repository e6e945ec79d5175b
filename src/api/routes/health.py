"""
Health check endpoints
"""

import time

from fastapi import APIRouter

from src.core.clock import isoformat_utc, utcnow
from src.database.connection import store_monitor

router = APIRouter()

_started = time.monotonic()

@router.get("/health")
async def health_check():
    """Service health with store connectivity"""
    return {
        "status": "OK" if store_monitor.connected else "DEGRADED",
        "timestamp": isoformat_utc(utcnow()),
        "uptime": round(time.monotonic() - _started, 3),
        "database": "connected" if store_monitor.connected else "disconnected",
    }
