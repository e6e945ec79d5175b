import os
import sys
from datetime import datetime

# Tests run against an in-memory SQLite store
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from fastapi.testclient import TestClient

from src.database.connection import Base, SessionLocal, engine, init_database, store_monitor

@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test"""
    init_database()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    store_monitor.connected = True
    yield
    store_monitor.connected = True

@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client():
    from src.main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 10, 30, 0)

