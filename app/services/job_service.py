"""
Job Service - job postings and the applications students make to them.

Collections:
1. jobs          - postings created by admins
2. applications  - one document per (studentId, jobId); the compound unique
                   index makes a second application to the same job fail
"""

import logging
from typing import List

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import JobCreate
from app.services.mongo_service import parse_object_id, serialize_doc, serialize_docs, utcnow

logger = logging.getLogger(__name__)

DEFAULT_JOB_TYPE = "internship"


class JobService:
    """
    Handles job postings and applications.
    Job deletion cascades to the job's applications.
    """

    def __init__(
        self,
        jobs: Collection = None,
        applications: Collection = None,
        students: Collection = None,
    ):
        self.jobs: Collection = jobs if jobs is not None else get_collection(COLLECTIONS["jobs"])
        self.applications: Collection = (
            applications if applications is not None else get_collection(COLLECTIONS["applications"])
        )
        self.students: Collection = (
            students if students is not None else get_collection(COLLECTIONS["students"])
        )

    # ============================================================
    # JOBS
    # ============================================================

    def create_job(self, data: JobCreate) -> dict:
        now = utcnow()
        doc = {
            "name": data.name,
            "link": data.link,
            "description": data.description or "",
            "type": data.type or DEFAULT_JOB_TYPE,
            "location": data.location or "",
            "createdBy": "admin",
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.jobs.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Job created: %s", data.name)
        return serialize_doc(doc)

    def list_jobs(self) -> List[dict]:
        """All jobs, newest first."""
        return serialize_docs(self.jobs.find().sort("createdAt", -1))

    def get_job(self, job_id) -> dict:
        oid = parse_object_id(job_id, "Job ID")
        job = self.jobs.find_one({"_id": oid})
        if not job:
            raise NotFoundError("Job not found")
        return serialize_doc(job)

    def update_job(self, job_id, data: JobCreate) -> dict:
        oid = parse_object_id(job_id, "Job ID")
        job = self.jobs.find_one_and_update(
            {"_id": oid},
            {
                "$set": {
                    "name": data.name,
                    "link": data.link,
                    "description": data.description or "",
                    "type": data.type or DEFAULT_JOB_TYPE,
                    "location": data.location or "",
                    "updatedAt": utcnow(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if not job:
            raise NotFoundError("Job not found")
        return serialize_doc(job)

    def delete_job(self, job_id) -> int:
        """Delete a job and its applications. Returns applications removed."""
        oid = parse_object_id(job_id, "Job ID")
        job = self.jobs.find_one_and_delete({"_id": oid})
        if not job:
            raise NotFoundError("Job not found")

        removed = self.applications.delete_many({"jobId": oid}).deleted_count
        logger.info("Deleted job %s and %d applications", job.get("name"), removed)
        return removed

    def count_jobs(self) -> int:
        return self.jobs.count_documents({})

    # ============================================================
    # APPLICATIONS (student side)
    # ============================================================

    def apply(self, student_id, job_id) -> dict:
        """
        Record that a student applied to a job.

        Raises:
            ValidationError: malformed job id
            NotFoundError: job doesn't exist
            ConflictError: student already applied to this job
        """
        student_oid = parse_object_id(student_id, "Student ID")
        job_oid = parse_object_id(job_id, "Job ID")

        if not self.jobs.find_one({"_id": job_oid}, {"_id": 1}):
            raise NotFoundError("Job not found")

        now = utcnow()
        doc = {"studentId": student_oid, "jobId": job_oid, "appliedAt": now, "createdAt": now}
        try:
            result = self.applications.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError("Already applied to this job", error_code="ALREADY_APPLIED") from e

        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def withdraw(self, student_id, job_id) -> None:
        student_oid = parse_object_id(student_id, "Student ID")
        job_oid = parse_object_id(job_id, "Job ID")

        if not self.applications.find_one_and_delete({"studentId": student_oid, "jobId": job_oid}):
            raise NotFoundError("Application not found")

    def count_applications(self, student_id) -> int:
        student_oid = parse_object_id(student_id, "Student ID")
        return self.applications.count_documents({"studentId": student_oid})

    def student_applications(self, student_id) -> List[dict]:
        """A student's applications, newest first, each with its job embedded as jobId."""
        student_oid = parse_object_id(student_id, "Student ID")
        pipeline = [
            {"$match": {"studentId": student_oid}},
            {"$sort": {"appliedAt": -1}},
            {"$lookup": {"from": COLLECTIONS["jobs"], "localField": "jobId", "foreignField": "_id", "as": "job"}},
        ]
        applications = []
        for app in self.applications.aggregate(pipeline):
            jobs = app.pop("job", [])
            app["jobId"] = serialize_doc(jobs[0]) if jobs else None
            applications.append(serialize_doc(app))
        return applications

    # ============================================================
    # APPLICATIONS (admin views)
    # ============================================================

    def _joined_pipeline(self) -> list:
        # Inner join: applications whose student or job is gone drop out at $unwind
        return [
            {"$sort": {"appliedAt": -1}},
            {"$lookup": {"from": COLLECTIONS["students"], "localField": "studentId", "foreignField": "_id", "as": "studentInfo"}},
            {"$lookup": {"from": COLLECTIONS["jobs"], "localField": "jobId", "foreignField": "_id", "as": "jobInfo"}},
            {"$unwind": "$studentInfo"},
            {"$unwind": "$jobInfo"},
        ]

    def all_applications(self) -> List[dict]:
        results = []
        for app in self.applications.aggregate(self._joined_pipeline()):
            student = app["studentInfo"]
            job = app["jobInfo"]
            results.append({
                "_id": str(app["_id"]),
                "appliedAt": app.get("appliedAt"),
                "student": {
                    "name": student.get("name"),
                    "email": student.get("email"),
                    "rollNumber": student.get("rollNumber"),
                    "branch": student.get("branch"),
                    "year": student.get("year"),
                    "phoneNumber": student.get("phoneNumber"),
                },
                "job": {
                    "id": str(job["_id"]),
                    "name": job.get("name"),
                    "link": job.get("link"),
                },
            })
        return results

    def applications_by_job(self) -> List[dict]:
        pipeline = self._joined_pipeline() + [
            {
                "$group": {
                    "_id": "$jobInfo._id",
                    "jobName": {"$first": "$jobInfo.name"},
                    "jobLink": {"$first": "$jobInfo.link"},
                    "jobCreatedAt": {"$first": "$jobInfo.createdAt"},
                    "applications": {
                        "$push": {
                            "studentName": "$studentInfo.name",
                            "studentEmail": "$studentInfo.email",
                            "studentRoll": "$studentInfo.rollNumber",
                            "studentBranch": "$studentInfo.branch",
                            "studentYear": "$studentInfo.year",
                            "studentPhone": "$studentInfo.phoneNumber",
                            "appliedAt": "$appliedAt",
                        }
                    },
                }
            },
            {"$sort": {"jobCreatedAt": -1}},
        ]
        return serialize_docs(self.applications.aggregate(pipeline))

    def applications_by_student(self) -> List[dict]:
        pipeline = self._joined_pipeline() + [
            {
                "$group": {
                    "_id": "$studentInfo._id",
                    "studentName": {"$first": "$studentInfo.name"},
                    "studentEmail": {"$first": "$studentInfo.email"},
                    "studentRoll": {"$first": "$studentInfo.rollNumber"},
                    "studentBranch": {"$first": "$studentInfo.branch"},
                    "studentYear": {"$first": "$studentInfo.year"},
                    "studentPhone": {"$first": "$studentInfo.phoneNumber"},
                    "applications": {
                        "$push": {
                            "jobId": {"$toString": "$jobInfo._id"},
                            "jobName": "$jobInfo.name",
                            "jobLink": "$jobInfo.link",
                            "appliedAt": "$appliedAt",
                        }
                    },
                }
            },
            {"$sort": {"studentName": 1}},
        ]
        return serialize_docs(self.applications.aggregate(pipeline))


def get_job_service() -> JobService:
    """FastAPI dependency - JobService on the live collections."""
    return JobService()
