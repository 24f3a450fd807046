import pytest
from fastapi.testclient import TestClient

from telemetry_gateway.main import app
from telemetry_gateway.registry import SignalRegistry

API_TOKEN = "test-token"


class FakeStore:
    def __init__(self, active=("1001", "1002"), fail_on=None):
        self.active = set(active)
        self.fail_on = fail_on
        self.lookups = []
        self.accepted = []
        self.rejected = []
        self.metrics = []

    def vessel_is_active(self, vessel_id):
        self.lookups.append(vessel_id)
        if self.fail_on == "lookup":
            raise ConnectionError("db down")
        return vessel_id in self.active

    def write_signals(self, accepted, rejected):
        if self.fail_on == "signals":
            raise ConnectionError("db down")
        self.accepted.extend(accepted)
        self.rejected.extend(rejected)

    def write_metrics(self, row):
        if self.fail_on == "metrics":
            raise ConnectionError("db down")
        self.metrics.append(row)


def seeded_rows():
    for i in range(1, 201):
        yield f"Signal_{i}", "digital" if i <= 50 else "analog"


@pytest.fixture
def registry():
    return SignalRegistry.from_rows(seeded_rows())


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(registry, store):
    app.state.api_token = API_TOKEN
    app.state.registry = registry
    app.state.store = store
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {API_TOKEN}"}
