"""
Authentication Utility - JWT, cookies and password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- Http-only session cookies for students and admins
- FastAPI dependencies for protected routes
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta) -> str:
    """Create a signed JWT that expires after expires_delta."""
    settings = get_settings()
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token. Returns None if invalid or expired."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


# ============================================================
# SESSION COOKIES
# ============================================================

def set_session_cookie(response: Response, name: str, token: str, max_age: timedelta) -> None:
    settings = get_settings()
    response.set_cookie(
        key=name,
        value=token,
        max_age=int(max_age.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, name: str) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def create_student_token(student: dict) -> str:
    """Session token for an approved student: {id, email, rollNumber, name}."""
    settings = get_settings()
    return create_access_token(
        data={
            "id": str(student["_id"]),
            "email": student["email"],
            "rollNumber": student["rollNumber"],
            "name": student["name"],
        },
        expires_delta=timedelta(days=settings.student_token_expire_days),
    )


def create_admin_token(admin: dict) -> str:
    settings = get_settings()
    return create_access_token(
        data={"id": str(admin["_id"]), "email": admin["email"], "isAdmin": True},
        expires_delta=timedelta(days=settings.admin_token_expire_days),
    )


# ============================================================
# DEPENDENCIES
# ============================================================

async def get_current_student(request: Request) -> dict:
    """
    FastAPI dependency - student claims from the session cookie.

    Usage:
        @router.get("/protected")
        async def route(student: dict = Depends(get_current_student)):
            return student["rollNumber"]
    """
    settings = get_settings()
    token = request.cookies.get(settings.student_cookie_name)
    if not token:
        raise UnauthorizedError("Not authenticated")

    payload = decode_token(token)
    if not payload or not payload.get("id"):
        raise UnauthorizedError("Invalid or expired token")

    return {
        "id": payload["id"],
        "email": payload.get("email"),
        "rollNumber": payload.get("rollNumber"),
        "name": payload.get("name"),
    }


async def get_current_admin(request: Request) -> dict:
    """FastAPI dependency - require a valid admin session cookie."""
    settings = get_settings()
    token = request.cookies.get(settings.admin_cookie_name)
    if not token:
        raise UnauthorizedError("Not authorized")

    payload = decode_token(token)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    if not payload.get("isAdmin"):
        logger.warning("Rejected non-admin token for %s", payload.get("email"))
        raise UnauthorizedError("Not authorized")

    return {"id": payload.get("id"), "email": payload.get("email")}
