import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from clinic_backend.core import config
from clinic_backend.core.logging_config import configure_logging
from clinic_backend.database import Database
from clinic_backend.routes import admin_routes, appointment_routes

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request.'
    first = errors[0]
    if first.get('type') == 'json_invalid':
        return 'Invalid JSON.'
    location = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
    message = first.get('msg', 'invalid value')
    return f'Invalid {location}: {message}.' if location else f'Invalid request body: {message}.'


def create_app(database: Database | None = None) -> FastAPI:
    config.validate_runtime_config()
    owns_store = database is None
    store = database or Database(config.DATABASE_URL, echo=config.DATABASE_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not owns_store:
            yield
            return
        try:
            store.open()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')
            raise
        try:
            yield
        finally:
            store.close()

    app = FastAPI(title='Clinic Appointments API', lifespan=lifespan)
    app.state.database = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'detail': _describe_validation_error(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={'detail': 'Internal server error'},
        )

    @app.get('/')
    def root():
        return {'status': 'Clinic Appointments API Running'}

    app.include_router(appointment_routes.router)
    app.include_router(admin_routes.router, prefix='/admin')

    return app


configure_logging()
app = create_app()
