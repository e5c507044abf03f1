import logging
from pathlib import Path
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker


logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one appointment store.

    Nothing is connected until :meth:`open` runs; :meth:`close` disposes the
    connection pool. The application creates exactly one of these and hands it
    to request handlers through ``app.state``.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs) -> None:
        self.url = make_url(url)
        self.echo = echo
        self.engine_kwargs = engine_kwargs
        self.engine: Engine | None = None
        self.session_factory: sessionmaker | None = None
        self._schema_lock = Lock()
        self._appointment_schema_checked = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == 'sqlite'

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> None:
        if self.is_open:
            return

        engine_kwargs = dict(self.engine_kwargs)
        if self.is_sqlite:
            engine_kwargs.setdefault('connect_args', {'check_same_thread': False})
            self._ensure_sqlite_directory()

        self.engine = create_engine(self.url, echo=self.echo, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine, 'connect', _configure_sqlite_connection)

        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

        # Import registers the table on Base.metadata.
        from clinic_backend.models import appointment  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        self.ensure_appointment_schema()
        logger.info('Database opened at %s', self.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._appointment_schema_checked = False
        logger.info('Database closed')

    def session(self) -> Session:
        if self.session_factory is None:
            raise RuntimeError('Database is not open.')
        return self.session_factory()

    def ensure_appointment_schema(self) -> None:
        """Create the slot and phone indexes on an appointments table that lacks them."""
        if self._appointment_schema_checked:
            return

        with self._schema_lock:
            if self._appointment_schema_checked:
                return

            inspector = inspect(self.engine)

            if 'appointments' not in inspector.get_table_names():
                self._appointment_schema_checked = True
                return

            with self.engine.begin() as connection:
                connection.execute(
                    text('CREATE UNIQUE INDEX IF NOT EXISTS idx_appointment_dt ON appointments(appointment_dt)')
                )
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_phone ON appointments(phone)')
                )

            self._appointment_schema_checked = True

    def _ensure_sqlite_directory(self) -> None:
        database = self.url.database
        if not database or database == ':memory:' or database.startswith('file:'):
            return
        Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _configure_sqlite_connection(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute('PRAGMA foreign_keys = ON')
        cursor.execute('PRAGMA journal_mode = WAL')
    finally:
        cursor.close()
