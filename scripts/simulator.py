#!/usr/bin/env python3
"""
Footfall sensor simulator

Registers the sample sensors and posts a time-of-day shaped count for each
one on a fixed interval.
"""

import os
import random
import time
from datetime import datetime, timezone

import requests

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api")
INTERVAL_SECONDS = int(os.getenv("SIMULATOR_INTERVAL", "3600"))

DEVICES = [
    {
        "sensor_id": "sensor_001",
        "name": "Main Entrance Sensor",
        "location": {"type": "Point", "coordinates": [-74.0060, 40.7128]},
        "description": "Primary entrance footfall monitoring",
    },
    {
        "sensor_id": "sensor_002",
        "name": "Side Entrance Sensor",
        "location": {"type": "Point", "coordinates": [-73.9851, 40.7589]},
        "description": "Secondary entrance footfall monitoring",
    },
]

def generate_footfall_count(hour: int) -> int:
    """More traffic during rush and business hours"""
    if 6 <= hour <= 9:
        base = random.randint(20, 49)
    elif 10 <= hour <= 16:
        base = random.randint(10, 29)
    elif 17 <= hour <= 20:
        base = random.randint(15, 39)
    else:
        base = random.randint(1, 10)
    return max(0, base + random.randint(-5, 4))

def setup_devices(session: requests.Session):
    for device in DEVICES:
        try:
            response = session.post(f"{API_BASE_URL}/devices", json=device, timeout=10)
            response.raise_for_status()
            print(f"✅ Device {device['sensor_id']} setup complete")
        except requests.RequestException as e:
            print(f"⚠️ Device {device['sensor_id']} setup failed: {e}")

def send_sensor_data(session: requests.Session, sensor_id: str, count: int):
    payload = {
        "sensor_id": sensor_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "count": count,
    }
    try:
        response = session.post(f"{API_BASE_URL}/sensor-data", json=payload, timeout=10)
        response.raise_for_status()
        print(f"✅ Sent data for {sensor_id}: {count} people")
        return response.json()
    except requests.RequestException as e:
        print(f"❌ Error sending data for {sensor_id}: {e}")
        return None

def simulate_once(session: requests.Session):
    hour = datetime.now().hour
    for device in DEVICES:
        send_sensor_data(session, device["sensor_id"], generate_footfall_count(hour))

def run_simulation():
    print(f"🚀 Starting footfall simulator against {API_BASE_URL}")
    with requests.Session() as session:
        setup_devices(session)
        while True:
            simulate_once(session)
            time.sleep(INTERVAL_SECONDS)

if __name__ == "__main__":
    run_simulation()
