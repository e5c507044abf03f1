import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from clinic_backend.core import config
from clinic_backend.database import Database
from clinic_backend.main import create_app

ADMIN_PASSWORD = 'front-desk-secret'


@pytest.fixture
def database():
    store = Database('sqlite://', poolclass=StaticPool)
    store.open()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, 'ADMIN_PASSWORD', ADMIN_PASSWORD)
    with TestClient(create_app(database)) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    response = client.post('/admin/login', json={'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def booking_payload():
    def build(**overrides) -> dict:
        payload = {
            'patient_type': 'new',
            'first_name': 'Jane',
            'last_name': 'Doe',
            'phone': '5555550123',
            'reason': 'checkup',
            'appointment_dt': '2026-03-16T09:00:00',
        }
        payload.update(overrides)
        return payload

    return build
