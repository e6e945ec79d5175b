#!/usr/bin/env python3
"""
Initialize the database with sample devices and a day of footfall readings
"""

import sys
import os
from datetime import timedelta
import random

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.core.clock import utcnow
from src.database.connection import init_database, SessionLocal
from src.schemas.device import DeviceCreate, DeviceState
from src.schemas.reading import ReadingCreate
from src.services.devices import DeviceRegistry
from src.services.readings import ReadingStore

SAMPLE_DEVICES = [
    {
        "sensor_id": "sensor_001",
        "name": "Main Entrance Sensor",
        "description": "Primary entrance footfall monitoring",
        "location": {"type": "Point", "coordinates": [-74.0060, 40.7128]},
    },
    {
        "sensor_id": "sensor_002",
        "name": "Side Entrance Sensor",
        "description": "Secondary entrance footfall monitoring",
        "location": {"type": "Point", "coordinates": [-73.9851, 40.7589]},
    },
    {
        "sensor_id": "sensor_003",
        "name": "Loading Dock Sensor",
        "description": "Staff entrance, currently serviced",
        "location": {"type": "Point", "coordinates": [-73.9772, 40.7527]},
        "firmware_version": "0.9.4",
        "battery_level": 12,
    },
]

def create_sample_data():
    """Create sample data for testing"""

    # Initialize database
    init_database()

    session = SessionLocal()
    registry = DeviceRegistry(session)
    store = ReadingStore(session)

    try:
        now = utcnow()
        for device_data in SAMPLE_DEVICES:
            registry.register(DeviceCreate(**device_data), now)
        registry.set_status("sensor_003", DeviceState.MAINTENANCE)
        print("✅ Sample devices created")

        # Hourly readings for the last 24 hours
        readings = 0
        for device_data in SAMPLE_DEVICES[:2]:
            for hours_ago in range(24, 0, -1):
                store.insert(ReadingCreate(
                    sensor_id=device_data["sensor_id"],
                    timestamp=now - timedelta(hours=hours_ago),
                    count=random.randint(0, 50),
                    location=device_data["location"],
                ))
                readings += 1
        print(f"✅ {readings} sample readings created")

        print("\n🎉 Database initialization complete!")
        print("You can now start the API with: python -m src.main")

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        session.rollback()
        raise
    finally:
        session.close()

if __name__ == "__main__":
    create_sample_data()
