from collections.abc import Iterator

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from clinic_backend.auth import jwt_handler
from clinic_backend.core import config


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def is_admin_request(request: Request) -> bool:
    return jwt_handler.is_admin_session_token(request.cookies.get(config.ADMIN_COOKIE_NAME))


def require_admin(request: Request) -> None:
    if not is_admin_request(request):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
