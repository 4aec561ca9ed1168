"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
JSON bodies use camelCase (rollNumber, phoneNumber, ...) to match the
portal front-end; attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List, Any
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )



# Passwords are hashed and compared exactly as typed
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1)]


def _to_str(value: Any) -> Any:
    # roll numbers are often typed as numbers by spreadsheets and clients
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# ============================================================
# STUDENT AUTH SCHEMAS
# ============================================================

class StudentRegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: Password
    roll_number: str = Field(..., min_length=1, max_length=50)
    course: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=10)
    phone_number: str = Field(..., min_length=1, max_length=20)

    @field_validator("roll_number", "phone_number", mode="before")
    @classmethod
    def coerce_to_str(cls, value):
        return _to_str(value)


class StudentLoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: Password


class CancelRegistrationRequest(CamelModel):
    email: Optional[str] = None
    roll_number: Optional[str] = None

    @field_validator("roll_number", mode="before")
    @classmethod
    def coerce_roll_number(cls, value):
        return _to_str(value)


class StudentProfileUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    course: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=10)
    phone_number: Optional[str] = Field(None, max_length=20)

    @field_validator("phone_number", mode="before")
    @classmethod
    def coerce_phone_number(cls, value):
        return _to_str(value)


class ChangePasswordRequest(CamelModel):
    old_password: Password
    new_password: Password


class RegisterResponse(CamelModel):
    message: str
    pending: bool = False
    email: Optional[str] = None
    roll_number: Optional[str] = None


class StudentResponse(CamelModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    roll_number: str
    course: str
    branch: str
    year: int
    phone_number: Optional[str] = None
    approved: bool = False
    registered: bool = False
    registered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateResponse(CamelModel):
    message: str
    student: StudentResponse


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class AdminLoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: Password


class ApproveStudentRequest(CamelModel):
    roll_number: str = Field(..., min_length=1)
    approve: bool

    @field_validator("roll_number", mode="before")
    @classmethod
    def coerce_roll_number(cls, value):
        return _to_str(value)


class BulkApproveRequest(CamelModel):
    roll_numbers: List[str]
    approve: bool

    @field_validator("roll_numbers", mode="before")
    @classmethod
    def coerce_roll_numbers(cls, value):
        if isinstance(value, list):
            return [_to_str(v) for v in value]
        return value


class BulkDeleteRequest(CamelModel):
    roll_numbers: List[str]

    @field_validator("roll_numbers", mode="before")
    @classmethod
    def coerce_roll_numbers(cls, value):
        if isinstance(value, list):
            return [_to_str(v) for v in value]
        return value


class ResetPasswordRequest(CamelModel):
    new_password: Password


class BulkApproveResponse(CamelModel):
    message: str
    modified_count: int


class BulkDeleteResponse(CamelModel):
    message: str
    deleted_count: int


class StudentListResponse(CamelModel):
    students: List[StudentResponse]


class StudentStats(CamelModel):
    total: int
    verified: int
    pending: int
    total_jobs: int


class StudentStatsResponse(CamelModel):
    stats: StudentStats


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    link: str = Field(..., min_length=1)
    description: Optional[str] = ""
    type: Optional[str] = "internship"
    location: Optional[str] = ""


class JobResponse(CamelModel):
    id: str = Field(..., alias="_id")
    name: str
    link: str
    description: str = ""
    type: str = "internship"
    location: str = ""
    created_by: str = "admin"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobListResponse(CamelModel):
    jobs: List[JobResponse]


class JobDetailResponse(CamelModel):
    job: JobResponse


class JobMutationResponse(CamelModel):
    message: str
    job: JobResponse


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class JobIdRequest(CamelModel):
    job_id: str = Field(..., min_length=1)


class AppliedCountResponse(CamelModel):
    count: int


class MyApplication(CamelModel):
    id: str = Field(..., alias="_id")
    job_id: Optional[JobResponse] = None
    applied_at: datetime


class MyApplicationsResponse(CamelModel):
    applications: List[MyApplication]


class ApplicationStudentSummary(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    roll_number: Optional[str] = None
    branch: Optional[str] = None
    year: Optional[int] = None
    phone_number: Optional[str] = None


class ApplicationJobSummary(CamelModel):
    id: str
    name: str
    link: str


class ApplicationDetail(CamelModel):
    id: str = Field(..., alias="_id")
    applied_at: datetime
    student: ApplicationStudentSummary
    job: ApplicationJobSummary


class ApplicationListResponse(CamelModel):
    applications: List[ApplicationDetail]


class GroupedApplicationsResponse(CamelModel):
    data: List[dict]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
