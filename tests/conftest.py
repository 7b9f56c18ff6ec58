import pytest
from fastapi.testclient import TestClient

from app import app
from backend import ConnectionRegistry, registry
from connections import connection_manager


@pytest.fixture
def fresh_registry():
    return ConnectionRegistry()


@pytest.fixture(autouse=True)
def reset_state():
    registry.clear()
    connection_manager.active_connections.clear()
    yield
    registry.clear()
    connection_manager.active_connections.clear()


@pytest.fixture
def client():
    # entered so every WebSocket session shares one event loop
    with TestClient(app) as client:
        yield client
