import logging
import secrets

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from clinic_backend.auth import jwt_handler
from clinic_backend.auth.dependencies import is_admin_request
from clinic_backend.core import config
from clinic_backend.schemas import AdminLoginRequest, AdminSessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=['admin'])


def session_max_age_seconds() -> int:
    return config.ADMIN_SESSION_HOURS * 60 * 60


def validate_admin_password(password: str) -> bool:
    if not config.ADMIN_PASSWORD:
        return False
    return secrets.compare_digest(password.encode(), config.ADMIN_PASSWORD.encode())


@router.post('/login')
def admin_login(data: AdminLoginRequest):
    if not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Password required.')

    if not validate_admin_password(data.password):
        logger.warning('Rejected admin login attempt')
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid password.')

    response = JSONResponse({'success': True})
    response.set_cookie(
        key=config.ADMIN_COOKIE_NAME,
        value=jwt_handler.create_admin_session_token(),
        max_age=session_max_age_seconds(),
        httponly=True,
        secure=config.ADMIN_COOKIE_SECURE,
        samesite='lax',
        path='/',
    )
    logger.info('Admin session started')
    return response


@router.post('/logout')
def admin_logout():
    response = JSONResponse({'success': True})
    response.delete_cookie(
        key=config.ADMIN_COOKIE_NAME,
        path='/',
        httponly=True,
        secure=config.ADMIN_COOKIE_SECURE,
        samesite='lax',
    )
    return response


@router.get('/session', response_model=AdminSessionResponse)
def admin_session(request: Request):
    return AdminSessionResponse(authenticated=is_admin_request(request))
