"""
Admin Authentication Routes (not protected)

POST /admin/auth/login - Login and receive the admin session cookie
GET /admin/auth/logout - Clear the admin session cookie
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, Response

from app.core.auth import clear_session_cookie, create_admin_token, set_session_cookie
from app.core.config import get_settings
from app.services.admin_service import AdminService, get_admin_service
from app.schemas.schemas import AdminLoginRequest, MessageResponse

router = APIRouter(prefix="/admin/auth", tags=["Admin Authentication"])


@router.post("/login", response_model=MessageResponse)
def login(
    request: AdminLoginRequest,
    response: Response,
    service: AdminService = Depends(get_admin_service),
):
    """
    Login as admin.

    The session is an http-only cookie valid for ADMIN_TOKEN_EXPIRE_DAYS.
    """
    settings = get_settings()
    admin = service.authenticate(request.email, request.password)

    set_session_cookie(
        response,
        settings.admin_cookie_name,
        create_admin_token(admin),
        timedelta(days=settings.admin_token_expire_days),
    )
    return MessageResponse(message="Admin login successful")


@router.get("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_session_cookie(response, get_settings().admin_cookie_name)
    return MessageResponse(message="Admin logged out successfully")
