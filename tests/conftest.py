import json
from datetime import datetime
from typing import List, Optional

import pytest
import requests

from airtracker.ingestion.base import ProviderAdapter, RawObservation
from airtracker.models import create_db_engine, create_session_factory, init_db
from airtracker.store import AircraftStore, UserLocationStore


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path}/airtracker.db")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory):
    return AircraftStore(session_factory)


@pytest.fixture
def location_store(session_factory):
    return UserLocationStore(session_factory)


@pytest.fixture
def make_record():
    """Build a normalized aircraft row ready for upsert_many()."""

    def _make(icao24="abc123", **overrides):
        record = {
            "icao24": icao24,
            "callsign": "TEST123",
            "origin_country": "United States",
            "latitude": 40.7128,
            "longitude": -74.006,
            "altitude": 9000.0,
            "on_ground": False,
            "velocity": 230.0,
            "true_track": 90.0,
            "last_updated": datetime(2024, 5, 3, 19, 40),
        }
        record.update(overrides)
        return record

    return _make


class FakeAdapter(ProviderAdapter):
    """Adapter returning canned observations or raising a canned error."""

    def __init__(
        self,
        name: str,
        observations: Optional[List[RawObservation]] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__()
        self.name = name
        self.observations = observations or []
        self.error = error
        self.calls = 0

    def fetch(self) -> List[RawObservation]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.observations)


@pytest.fixture
def fake_adapter():
    return FakeAdapter


def make_response(status_code: int, payload=None, text: Optional[str] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = "https://example.test"
    response.encoding = "utf-8"
    # Body is already in memory; iter_content() replays it instead of reading raw
    response._content_consumed = True
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(payload).encode()
    return response


class FakeSession:
    """Stands in for requests.Session, recording every GET."""

    def __init__(self, response=None, error: Optional[Exception] = None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, auth=None, timeout=None, stream=False):
        self.requests.append(
            {"url": url, "params": params, "auth": auth, "timeout": timeout, "stream": stream}
        )
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        pass


@pytest.fixture
def fake_session():
    def _make(status_code=200, payload=None, text=None, error=None):
        response = None if error is not None else make_response(status_code, payload, text)
        return FakeSession(response=response, error=error)

    return _make
