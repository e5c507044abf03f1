import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect, text

from clinic_backend.core import config
from clinic_backend.database import Database
from clinic_backend.main import create_app


def test_open_creates_appointments_table_with_indexes(database) -> None:
    inspector = inspect(database.engine)

    assert 'appointments' in inspector.get_table_names()
    indexes = {index['name']: index for index in inspector.get_indexes('appointments')}
    assert indexes['idx_appointment_dt']['unique']
    assert indexes['idx_appointment_dt']['column_names'] == ['appointment_dt']
    assert indexes['idx_phone']['column_names'] == ['phone']


def test_open_adds_missing_indexes_to_existing_table(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'unindexed.db'}"
    bare_engine = create_engine(url)
    with bare_engine.begin() as connection:
        connection.execute(text(
            'CREATE TABLE appointments ('
            'id INTEGER PRIMARY KEY AUTOINCREMENT, '
            'patient_type VARCHAR NOT NULL, '
            'first_name VARCHAR NOT NULL, '
            'last_name VARCHAR NOT NULL, '
            'phone VARCHAR NOT NULL, '
            'email VARCHAR, '
            'insurance_provider VARCHAR, '
            'insurance_id VARCHAR, '
            'reason VARCHAR NOT NULL, '
            'appointment_dt DATETIME NOT NULL, '
            'created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP)'
        ))
    bare_engine.dispose()

    database = Database(url)
    database.open()
    try:
        inspector = inspect(database.engine)
        index_names = {index['name'] for index in inspector.get_indexes('appointments')}
    finally:
        database.close()

    assert {'idx_appointment_dt', 'idx_phone'} <= index_names


def test_open_creates_parent_directory_for_sqlite_file(tmp_path) -> None:
    db_path = tmp_path / 'nested' / 'data' / 'appointments.db'
    database = Database(f'sqlite:///{db_path}')

    database.open()
    database.close()

    assert db_path.exists()
    assert not database.is_open


def test_session_requires_open_database() -> None:
    database = Database('sqlite://')

    with pytest.raises(RuntimeError, match='Database is not open.'):
        database.session()


def test_app_leaves_injected_database_open(database) -> None:
    session = database.session()
    try:
        with TestClient(create_app(database)) as client:
            assert client.get('/').status_code == 200

        assert database.is_open
        assert session.execute(text('SELECT COUNT(*) FROM appointments')).scalar() == 0
    finally:
        session.close()


def test_app_opens_and_closes_database_it_builds(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'DATABASE_URL', f"sqlite:///{tmp_path / 'owned.db'}")
    app = create_app()
    store = app.state.database

    assert not store.is_open
    with TestClient(app) as client:
        assert store.is_open
        assert client.get('/timeslots', params={'date': '2026-03-16'}).status_code == 200

    assert not store.is_open
