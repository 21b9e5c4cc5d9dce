from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from tis_intake.main import create_app
from tis_intake.services.submission_service import SubmissionService
from tis_intake.services.submission_store import InMemorySubmissionStore
from tis_intake.utils.config import Settings


VALID_PAYLOAD = {
    "name": "Jane Doe",
    "productLine": "AB-1234",
    "erCode": "ER123456",
    "description": "Replacement gasket for the outer housing",
    "modelNumber": "AB1234C",
}


class TickingClock:
    """Each call returns a time one second later than the last."""

    def __init__(self, start=datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def valid_payload():
    return dict(VALID_PAYLOAD)


@pytest.fixture
def store():
    return InMemorySubmissionStore()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(store, clock):
    return SubmissionService(store, clock=clock)


@pytest.fixture
def settings():
    return Settings(supabase_url=None, supabase_key=None)


@pytest.fixture
def app(store, clock, settings):
    application = create_app(store=store, settings=settings)
    application.state.submission_service = SubmissionService(store, clock=clock)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
