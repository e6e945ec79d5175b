from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from src.core.clock import utcnow
from src.database.connection import store_monitor
from src.services.devices import DeviceRegistry
from src.services.readings import ReadingStore

def test_ingest_reading(client):
    response = client.post("/api/sensor-data", json={"sensor_id": "s1", "count": 10})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Sensor data recorded successfully"
    assert body["data"]["sensor_id"] == "s1"
    assert body["data"]["count"] == 10
    assert body["data"]["location"] == {"type": "Point", "coordinates": [0.0, 0.0]}
    assert body["data"]["timestamp"].endswith("Z")

def test_ingest_registers_device(client):
    client.post("/api/sensor-data", json={"sensor_id": "fresh", "count": 1})

    response = client.get("/api/devices/fresh")

    assert response.status_code == 200
    device = response.json()
    assert device["status"] == "active"
    assert device["is_active"] is True
    assert device["time_since_last_seen"] == "a few seconds ago"
    assert device["statistics"]["last_hour"] == {"total_count": 1, "data_points": 1}
    assert len(device["recent_activity"]) == 1

def test_ingest_with_offset_timestamp(client):
    response = client.post("/api/sensor-data", json={
        "sensor_id": "s1", "count": 3, "timestamp": "2026-10-18T12:15:00+02:00"
    })

    assert response.json()["data"]["timestamp"] == "2026-10-18T10:15:00Z"

def test_ingest_validation(client):
    assert client.post("/api/sensor-data", json={"count": 1}).status_code == 400
    assert client.post("/api/sensor-data", json={"sensor_id": "s1"}).status_code == 400
    response = client.post("/api/sensor-data", json={"sensor_id": "s1", "count": -1})
    assert response.status_code == 400
    assert "count" in response.json()["error"]
    assert client.get("/api/sensor-data").json()["count"] == 0

def test_query_readings(client, db_session):
    store = ReadingStore(db_session)
    base = datetime(2026, 10, 1, 12, 0)
    for hours in range(5):
        store.insert({"sensor_id": "s1" if hours % 2 else "s2", "count": hours,
                      "timestamp": base + timedelta(hours=hours)})

    response = client.get("/api/sensor-data", params={
        "sensor_id": "s2", "start_date": "2026-10-01T12:00:00Z", "end_date": "2026-10-01T15:00:00Z"
    })

    body = response.json()
    assert body["count"] == 2
    assert [reading["count"] for reading in body["data"]] == [2, 0]
    assert client.get("/api/sensor-data", params={"limit": 3}).json()["count"] == 3

def test_readings_for_sensor(client):
    client.post("/api/sensor-data", json={"sensor_id": "s1", "count": 2})

    assert client.get("/api/sensor-data/s1").json()["sensor_id"] == "s1"
    assert client.get("/api/sensor-data/unknown").status_code == 404

def test_hourly_analytics(client, db_session):
    store = ReadingStore(db_session)
    store.insert({"sensor_id": "s1", "count": 10, "timestamp": datetime(2026, 10, 1, 9, 5)})
    store.insert({"sensor_id": "s1", "count": 5, "timestamp": datetime(2026, 10, 1, 9, 6)})

    response = client.get("/api/analytics", params={
        "period": "hour", "sensor_id": "s1",
        "start_date": "2026-10-01T00:00:00", "end_date": "2026-10-01T23:59:59",
    })

    assert response.status_code == 200
    assert response.json() == {
        "period": "hour",
        "count": 1,
        "data": [{
            "sensor_id": "s1",
            "period": "2026-10-01 09:00",
            "total_count": 15,
            "data_points": 2,
            "avg_count": 7.5,
            "min_count": 5,
            "max_count": 10,
        }],
    }

def test_analytics_rejects_unknown_period(client):
    response = client.get("/api/analytics", params={"period": "fortnight"})

    assert response.status_code == 400
    assert "fortnight" in response.json()["error"]

def test_realtime_and_summary(client):
    client.post("/api/sensor-data", json={"sensor_id": "s1", "count": 4})

    realtime = client.get("/api/analytics/realtime").json()
    assert realtime["period"] == "realtime"
    assert realtime["data"]["s1"]["data"] == [4]

    summary = client.get("/api/analytics/summary", params={"sensor_id": "s1"}).json()
    assert summary["yesterday"]["total_count"] == 0
    assert summary["change_percent"] == 0
    assert set(summary) == {"today", "yesterday", "change_percent", "sensor_details"}

def test_stale_device_reports_inactive(client, db_session):
    DeviceRegistry(db_session).touch("s1", utcnow() - timedelta(hours=2))

    device = client.get("/api/devices/s1").json()

    assert device["status"] == "active"
    assert device["is_active"] is False
    assert device["liveness"] == "inactive"

def test_device_not_found(client):
    assert client.get("/api/devices/missing").status_code == 404
    response = client.put("/api/devices/missing/status", json={"status": "inactive"})
    assert response.status_code == 404

def test_register_and_update_status(client):
    response = client.post("/api/devices", json={"sensor_id": "s1", "name": "Main Entrance"})
    assert response.status_code == 201
    last_seen = response.json()["data"]["last_seen"]

    first = client.put("/api/devices/s1/status", json={"status": "maintenance"}).json()["data"]
    second = client.put("/api/devices/s1/status", json={"status": "maintenance"}).json()["data"]

    assert first["status"] == second["status"] == "maintenance"
    assert first["last_seen"] == second["last_seen"] == last_seen
    assert second["liveness"] == "maintenance"

def test_register_requires_name(client):
    assert client.post("/api/devices", json={"sensor_id": "s1"}).status_code == 400

def test_invalid_status(client):
    client.post("/api/devices", json={"sensor_id": "s1", "name": "Door"})

    assert client.put("/api/devices/s1/status", json={"status": "sleeping"}).status_code == 400

def test_list_and_summary(client, db_session):
    registry = DeviceRegistry(db_session)
    registry.touch("fresh")
    registry.touch("stale", utcnow() - timedelta(hours=4))

    listing = client.get("/api/devices").json()
    assert listing["count"] == 2
    assert [device["sensor_id"] for device in listing["data"]] == ["fresh", "stale"]

    summary = client.get("/api/devices/status/summary").json()
    assert summary == {"total": 2, "active": 1, "inactive": 1, "by_status": {"active": 2}}

def test_websocket_receives_ingest(client):
    with client.websocket_connect("/ws") as websocket:
        client.post("/api/sensor-data", json={
            "sensor_id": "s1", "count": 6, "timestamp": "2026-10-18T10:00:00Z"
        })
        message = websocket.receive_json()

    assert message == {
        "event": "sensorDataUpdate",
        "data": {"sensor_id": "s1", "timestamp": "2026-10-18T10:00:00Z", "count": 6, "type": "new_data"},
    }

def test_store_unavailable(client):
    store_monitor.connected = False

    response = client.get("/api/sensor-data")

    assert response.status_code == 503
    assert client.get("/api/health").json()["database"] == "disconnected"

def test_store_failure_mid_request(client, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(ReadingStore, "query", broken_query)

    response = client.get("/api/sensor-data")

    assert response.status_code == 503
    assert store_monitor.connected is False

def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "OK"
    assert body["database"] == "connected"
