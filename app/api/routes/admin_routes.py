"""
Admin Routes (admin session cookie required)

Students:
GET /admin/students/pending - Students awaiting approval
GET /admin/students/all - All students
GET /admin/students/stats - Totals for the dashboard
PUT /admin/students/approve - Approve/unapprove one student by roll number
PUT /admin/students/bulk-approve - Approve/unapprove many students
POST /admin/students/bulk-delete - Delete many students and their applications
PUT /admin/students/password/{id} - Reset a student's password
DELETE /admin/students/{id} - Delete a student and their applications

Jobs:
POST /admin/jobs/create - Create job
GET /admin/jobs/all - List jobs
GET /admin/jobs/{id} - Get job
PUT /admin/jobs/{id} - Update job
DELETE /admin/jobs/{id} - Delete job and its applications

Applications:
GET /admin/applications/all - Every application with student and job
GET /admin/applications/by-job - Grouped by job
GET /admin/applications/by-student - Grouped by student
"""

from fastapi import APIRouter, Depends, status

from app.core.auth import get_current_admin
from app.services.job_service import JobService, get_job_service
from app.services.student_service import StudentService, get_student_service
from app.schemas.schemas import (
    ApplicationListResponse, ApproveStudentRequest, BulkApproveRequest, BulkApproveResponse,
    BulkDeleteRequest, BulkDeleteResponse, GroupedApplicationsResponse, JobCreate,
    JobDetailResponse, JobListResponse, JobMutationResponse, MessageResponse,
    ResetPasswordRequest, StudentListResponse, StudentStatsResponse
)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])


# ============================================================
# STUDENTS
# ============================================================

@router.get("/students/pending", response_model=StudentListResponse)
def pending_students(service: StudentService = Depends(get_student_service)):
    """Students that are neither approved nor registered, newest first."""
    return StudentListResponse(students=service.list_pending())


@router.get("/students/all", response_model=StudentListResponse)
def all_students(service: StudentService = Depends(get_student_service)):
    return StudentListResponse(students=service.list_all())


@router.get("/students/stats", response_model=StudentStatsResponse)
def student_stats(
    students: StudentService = Depends(get_student_service),
    jobs: JobService = Depends(get_job_service),
):
    stats = students.stats()
    stats["total_jobs"] = jobs.count_jobs()
    return StudentStatsResponse(stats=stats)


@router.put("/students/approve", response_model=MessageResponse)
def approve_student(
    data: ApproveStudentRequest,
    service: StudentService = Depends(get_student_service),
):
    """Approve (approve=true) or unapprove (approve=false) a student."""
    service.set_approval(data.roll_number, data.approve)
    return MessageResponse(message="Student approved" if data.approve else "Student unapproved")


@router.put("/students/bulk-approve", response_model=BulkApproveResponse)
def bulk_approve_students(
    data: BulkApproveRequest,
    service: StudentService = Depends(get_student_service),
):
    """Apply one approve/unapprove decision to many roll numbers. Unknown ones are skipped."""
    modified = service.bulk_set_approval(data.roll_numbers, data.approve)
    return BulkApproveResponse(
        message=f"{modified} students successfully updated.",
        modified_count=modified,
    )


@router.post("/students/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_students(
    data: BulkDeleteRequest,
    service: StudentService = Depends(get_student_service),
):
    deleted = service.bulk_delete(data.roll_numbers)
    return BulkDeleteResponse(
        message=f"{deleted} students and their applications deleted.",
        deleted_count=deleted,
    )


@router.put("/students/password/{student_id}", response_model=MessageResponse)
def reset_student_password(
    student_id: str,
    data: ResetPasswordRequest,
    service: StudentService = Depends(get_student_service),
):
    service.reset_password(student_id, data.new_password)
    return MessageResponse(message="Password updated successfully.")


@router.delete("/students/{student_id}", response_model=MessageResponse)
def delete_student(student_id: str, service: StudentService = Depends(get_student_service)):
    """Delete a student in any state, along with their applications."""
    service.delete_student(student_id)
    return MessageResponse(message="Student and related data deleted")


# ============================================================
# JOBS
# ============================================================

@router.post("/jobs/create", response_model=JobMutationResponse, status_code=status.HTTP_201_CREATED)
def create_job(data: JobCreate, service: JobService = Depends(get_job_service)):
    job = service.create_job(data)
    return JobMutationResponse(message="Job created successfully", job=job)


@router.get("/jobs/all", response_model=JobListResponse)
def all_jobs(service: JobService = Depends(get_job_service)):
    return JobListResponse(jobs=service.list_jobs())


@router.get("/jobs/{job_id}", response_model=JobDetailResponse)
def get_job(job_id: str, service: JobService = Depends(get_job_service)):
    return JobDetailResponse(job=service.get_job(job_id))


@router.put("/jobs/{job_id}", response_model=JobMutationResponse)
def update_job(job_id: str, data: JobCreate, service: JobService = Depends(get_job_service)):
    job = service.update_job(job_id, data)
    return JobMutationResponse(message="Job updated successfully", job=job)


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
def delete_job(job_id: str, service: JobService = Depends(get_job_service)):
    service.delete_job(job_id)
    return MessageResponse(message="Job and associated applications deleted")


# ============================================================
# APPLICATIONS
# ============================================================

@router.get("/applications/all", response_model=ApplicationListResponse)
def all_applications(service: JobService = Depends(get_job_service)):
    return ApplicationListResponse(applications=service.all_applications())


@router.get("/applications/by-job", response_model=GroupedApplicationsResponse)
def applications_by_job(service: JobService = Depends(get_job_service)):
    return GroupedApplicationsResponse(data=service.applications_by_job())


@router.get("/applications/by-student", response_model=GroupedApplicationsResponse)
def applications_by_student(service: JobService = Depends(get_job_service)):
    return GroupedApplicationsResponse(data=service.applications_by_student())
