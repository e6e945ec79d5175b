"""
Ingest path: store the reading, touch the device, notify observers
"""

from typing import Optional

from sqlalchemy.orm import Session
import structlog

from src.core.clock import isoformat_utc, utcnow
from src.models.reading import SensorReading
from src.schemas.reading import ReadingCreate
from src.services.broadcast import BroadcastChannel, sensor_data_event
from src.services.devices import DeviceRegistry
from src.services.readings import ReadingStore

logger = structlog.get_logger(__name__)


class IngestService:
    """Runs one ingest as two independent writes followed by a broadcast"""

    def __init__(self, db: Session, channel: Optional[BroadcastChannel] = None):
        self.readings = ReadingStore(db)
        self.devices = DeviceRegistry(db)
        self.channel = channel

    def ingest(self, reading: ReadingCreate) -> SensorReading:
        now = utcnow()
        if reading.timestamp is None:
            reading = reading.model_copy(update={"timestamp": now})

        stored = self.readings.insert(reading)
        self.devices.touch(stored.sensor_id, now)

        observers = 0
        if self.channel is not None:
            observers = self.channel.publish(
                sensor_data_event(stored.sensor_id, isoformat_utc(stored.timestamp), stored.count)
            )

        logger.info("Sensor data recorded", sensor_id=stored.sensor_id,
                    count=stored.count, observers=observers)
        return stored
