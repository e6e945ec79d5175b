"""
Device registry: one record per sensor_id
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from src.core.clock import utcnow
from src.core.exceptions import NotFoundError
from src.models.device import Device
from src.schemas.common import GeoPoint
from src.schemas.device import DeviceCreate, DeviceResponse, DeviceState
from src.services import liveness

logger = structlog.get_logger(__name__)


class DeviceRegistry:
    """Reads and upserts devices; devices are never deleted"""

    def __init__(self, db: Session):
        self.db = db

    def find(self, sensor_id: str) -> Optional[Device]:
        return self.db.query(Device).filter(Device.sensor_id == sensor_id).first()

    def get(self, sensor_id: str) -> Device:
        device = self.find(sensor_id)
        if device is None:
            raise NotFoundError("Device not found")
        return device

    def list(self, status: Optional[str] = None, limit: int = 50) -> List[Device]:
        """Devices most recently seen first"""
        query = self.db.query(Device)
        if status:
            query = query.filter(Device.status == status)
        return query.order_by(desc(Device.last_seen).nulls_last(), Device.sensor_id).limit(limit).all()

    def _upsert(self, sensor_id: str, values: dict, defaults: dict) -> Device:
        device = self.find(sensor_id)
        if device is None:
            device = Device(sensor_id=sensor_id, **defaults)
            for field, value in values.items():
                setattr(device, field, value)
            self.db.add(device)
            try:
                self.db.commit()
            except IntegrityError:
                # Another writer created the row first; last write wins
                self.db.rollback()
                device = self.get(sensor_id)
            else:
                self.db.refresh(device)
                return device

        for field, value in values.items():
            setattr(device, field, value)
        self.db.commit()
        self.db.refresh(device)
        return device

    def touch(self, sensor_id: str, now: Optional[datetime] = None) -> Device:
        """Record an ingest: refresh last_seen and mark active, overriding any status"""
        now = now or utcnow()
        return self._upsert(
            sensor_id,
            {"last_seen": now, "status": DeviceState.ACTIVE.value},
            {"name": sensor_id, "installation_date": now},
        )

    def register(self, device_data: DeviceCreate, now: Optional[datetime] = None) -> Device:
        """Create or update a device from an explicit registration"""
        now = now or utcnow()
        values = {
            "name": device_data.name,
            "last_seen": now,
            "status": DeviceState.ACTIVE.value,
        }
        if device_data.location is not None:
            values["longitude"], values["latitude"] = device_data.location.coordinates
        for field in ("description", "firmware_version", "battery_level", "installation_date"):
            value = getattr(device_data, field)
            if value is not None:
                values[field] = value

        device = self._upsert(device_data.sensor_id, values, {"installation_date": now})
        logger.info("Device registered", sensor_id=device.sensor_id, name=device.name)
        return device

    def set_status(self, sensor_id: str, status: DeviceState, now: Optional[datetime] = None) -> Device:
        """Explicit status change; only 'active' refreshes last_seen"""
        device = self.get(sensor_id)
        previous = device.status
        device.status = status.value
        if status == DeviceState.ACTIVE:
            device.last_seen = now or utcnow()
        self.db.commit()
        self.db.refresh(device)
        logger.info("Device status changed", sensor_id=sensor_id,
                    old_status=previous, new_status=status.value)
        return device

    def status_summary(self, now: Optional[datetime] = None) -> dict:
        """Counts by stored status plus totals from the liveness window"""
        now = now or utcnow()
        by_status = {
            status: count
            for status, count in self.db.query(Device.status, func.count(Device.id)).group_by(Device.status)
        }
        total = self.db.query(func.count(Device.id)).scalar() or 0
        active = self.db.query(func.count(Device.id)).filter(
            Device.last_seen >= now - liveness.LIVENESS_WINDOW
        ).scalar() or 0
        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "by_status": by_status,
        }


def device_view(device: Device, now: Optional[datetime] = None,
                model=DeviceResponse, **extra) -> DeviceResponse:
    """Device with liveness fields recomputed for the given instant"""
    now = now or utcnow()
    return model(
        sensor_id=device.sensor_id,
        name=device.name,
        description=device.description or "",
        location=GeoPoint(coordinates=[device.longitude or 0.0, device.latitude or 0.0]),
        status=device.status,
        last_seen=device.last_seen,
        battery_level=device.battery_level,
        firmware_version=device.firmware_version,
        installation_date=device.installation_date,
        created_at=device.created_at,
        updated_at=device.updated_at,
        is_active=liveness.is_active(device.last_seen, now),
        liveness=liveness.effective_status(device.status, device.last_seen, now),
        time_since_last_seen=liveness.time_since_last_seen(device.last_seen, now),
        **extra
    )
