"""
Job Routes (student side)

GET /jobs/all - List all jobs
POST /jobs/apply - Apply to a job (student only)
GET /jobs/applied-count - Number of jobs applied to (student only)
GET /jobs/my-applications - Own applications with job details (student only)
DELETE /jobs/withdraw - Withdraw an application (student only)
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_student
from app.services.job_service import JobService, get_job_service
from app.schemas.schemas import (
    AppliedCountResponse, JobIdRequest, JobListResponse, MessageResponse, MyApplicationsResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("/all", response_model=JobListResponse)
def list_jobs(service: JobService = Depends(get_job_service)):
    """All job postings, newest first."""
    return JobListResponse(jobs=service.list_jobs())


@router.post("/apply", response_model=MessageResponse)
def apply_to_job(
    data: JobIdRequest,
    student: dict = Depends(get_current_student),
    service: JobService = Depends(get_job_service),
):
    """Apply to a job. Cannot apply twice to same job."""
    service.apply(student["id"], data.job_id)
    return MessageResponse(message="Application recorded")


@router.get("/applied-count", response_model=AppliedCountResponse)
def applied_count(
    student: dict = Depends(get_current_student),
    service: JobService = Depends(get_job_service),
):
    return AppliedCountResponse(count=service.count_applications(student["id"]))


@router.get("/my-applications", response_model=MyApplicationsResponse)
def my_applications(
    student: dict = Depends(get_current_student),
    service: JobService = Depends(get_job_service),
):
    """Current student's applications, newest first."""
    return MyApplicationsResponse(applications=service.student_applications(student["id"]))


@router.delete("/withdraw", response_model=MessageResponse)
def withdraw_application(
    data: JobIdRequest,
    student: dict = Depends(get_current_student),
    service: JobService = Depends(get_job_service),
):
    service.withdraw(student["id"], data.job_id)
    return MessageResponse(message="Application withdrawn successfully")
