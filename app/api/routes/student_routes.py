"""
Student Routes

POST /student/register - Register (201 approved / 202 pending)
POST /student/login - Login, sets the student session cookie
POST /student/cancel-registration - Withdraw a pending registration
GET /student/me - Logged-in student's profile
GET /student/logout - Clear the session cookie
PUT /student/update-profile - Update own profile
PUT /student/change-password - Change own password
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, Response, status

from app.core.auth import (
    clear_session_cookie,
    create_student_token,
    get_current_student,
    set_session_cookie,
)
from app.core.config import get_settings
from app.models.student import StudentStatus
from app.services.student_service import StudentService, get_student_service
from app.schemas.schemas import (
    CancelRegistrationRequest, ChangePasswordRequest, MessageResponse, ProfileUpdateResponse,
    RegisterResponse, StudentLoginRequest, StudentProfileUpdate, StudentRegisterRequest, StudentResponse
)

router = APIRouter(prefix="/student", tags=["Student"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={202: {"model": RegisterResponse, "description": "Registered, pending approval"}},
)
def register(
    data: StudentRegisterRequest,
    response: Response,
    service: StudentService = Depends(get_student_service),
):
    """
    Register a student.

    Roll numbers on the approved list are approved straight away (201).
    Everyone else is stored as pending (202) until an admin approves them.
    """
    student, student_status = service.register(data)

    if student_status == StudentStatus.approved:
        return RegisterResponse(message="Registered and approved, you can now login.")

    response.status_code = status.HTTP_202_ACCEPTED
    return RegisterResponse(
        message="Registration received. Your account is pending admin approval.",
        pending=True,
        email=student["email"],
        roll_number=student["rollNumber"],
    )


@router.post("/login", response_model=MessageResponse)
def login(
    data: StudentLoginRequest,
    response: Response,
    service: StudentService = Depends(get_student_service),
):
    """
    Login with email and password.

    Unknown email or wrong password: 400. Pending approval: 403.
    Only an approved student gets the session cookie.
    """
    settings = get_settings()
    student = service.authenticate(data.email, data.password)

    token = create_student_token(student)
    set_session_cookie(
        response,
        settings.student_cookie_name,
        token,
        timedelta(days=settings.student_token_expire_days),
    )
    return MessageResponse(message="Login successful")


@router.post("/cancel-registration", response_model=MessageResponse)
def cancel_registration(
    data: CancelRegistrationRequest,
    service: StudentService = Depends(get_student_service),
):
    """Delete your own registration while it is still pending."""
    service.cancel_registration(email=data.email, roll_number=data.roll_number)
    return MessageResponse(message="Your registration has been cancelled.")


@router.get("/me", response_model=StudentResponse)
def get_me(
    student: dict = Depends(get_current_student),
    service: StudentService = Depends(get_student_service),
):
    """Get the logged-in student's profile."""
    return service.get_student(student["id"])


@router.get("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_session_cookie(response, get_settings().student_cookie_name)
    return MessageResponse(message="Logged out successfully")


@router.put("/update-profile", response_model=ProfileUpdateResponse)
def update_profile(
    data: StudentProfileUpdate,
    student: dict = Depends(get_current_student),
    service: StudentService = Depends(get_student_service),
):
    """Update name, email, course, branch, year and phone number."""
    updated = service.update_profile(student["id"], data)
    return ProfileUpdateResponse(message="Profile updated successfully", student=updated)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePasswordRequest,
    student: dict = Depends(get_current_student),
    service: StudentService = Depends(get_student_service),
):
    service.change_password(student["id"], data.old_password, data.new_password)
    return MessageResponse(message="Password changed successfully")
