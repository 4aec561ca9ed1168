"""
Student Service - registration, approval and account operations.

Registration flow:
1. Reject the request if the roll number, then the email, is taken
2. Hash the password (raw passwords are never stored or logged)
3. Ask the allow-list about the roll number
   - listed: student is created approved and can log in immediately
   - not listed: student is created pending and waits for an admin

Only approved students can log in. Pending students may cancel their own
registration; admins can approve, unapprove or delete students in any
state. Deleting a student also deletes their applications.

The unique indexes on students.email and students.rollNumber are what
really prevent duplicates; the lookups before insert only exist to give
a friendlier message, and a DuplicateKeyError from a concurrent insert is
reported the same way.
"""

import logging
from typing import List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app.core.auth import hash_password, verify_password
from app.core.config import get_settings
from app.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    PendingApprovalError,
    ValidationError,
)
from app.db.mongodb import get_collection, COLLECTIONS
from app.models.student import StudentStatus, is_active, status_fields, status_of
from app.schemas.schemas import StudentProfileUpdate, StudentRegisterRequest
from app.services.allow_list import AllowList, MongoAllowList
from app.services.mongo_service import parse_object_id, serialize_doc, serialize_docs, utcnow

logger = logging.getLogger(__name__)

# Never send password hashes back to clients
PUBLIC_FIELDS = {"passwordHash": 0}

# Matches students still waiting for approval (missing flags count as false)
PENDING_FILTER = {"approved": {"$ne": True}, "registered": {"$ne": True}}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_roll_number(roll_number) -> str:
    return str(roll_number if roll_number is not None else "").strip()


def _clean_roll_numbers(roll_numbers: Optional[List]) -> List[str]:
    if not roll_numbers:
        return []
    cleaned = []
    for roll in roll_numbers:
        roll = normalize_roll_number(roll)
        if roll and roll not in cleaned:
            cleaned.append(roll)
    return cleaned


def _duplicate_message(error: DuplicateKeyError) -> str:
    key_pattern = (error.details or {}).get("keyPattern") or {}
    if "rollNumber" in key_pattern:
        return "Roll number already registered"
    return "Email already registered"


class StudentService:
    """
    Handles the students collection.

    The allow-list is injected so registration can be exercised without
    the approved_rolls import.
    """

    def __init__(
        self,
        students: Collection = None,
        applications: Collection = None,
        allow_list: AllowList = None,
    ):
        self.students: Collection = (
            students if students is not None else get_collection(COLLECTIONS["students"])
        )
        self.applications: Collection = (
            applications if applications is not None else get_collection(COLLECTIONS["applications"])
        )
        self.allow_list: AllowList = allow_list if allow_list is not None else MongoAllowList()

    # --------------------------------------------------------
    # Self-service
    # --------------------------------------------------------

    def register(self, data: StudentRegisterRequest) -> Tuple[dict, StudentStatus]:
        """
        Create a student record, approved or pending depending on the allow-list.

        Returns:
            (serialized student without password hash, resulting status)

        Raises:
            ConflictError: roll number or email already registered
        """
        email = normalize_email(data.email)
        roll_number = normalize_roll_number(data.roll_number)

        if self.students.find_one({"rollNumber": roll_number}, {"_id": 1}):
            raise ConflictError("Roll number already registered", error_code="DUPLICATE_ROLL_NUMBER")
        if self.students.find_one({"email": email}, {"_id": 1}):
            raise ConflictError("Email already registered", error_code="DUPLICATE_EMAIL")

        password_hash = hash_password(data.password)

        status = StudentStatus.approved if self.allow_list.contains(roll_number) else StudentStatus.pending
        now = utcnow()
        doc = {
            "name": data.name,
            "email": email,
            "passwordHash": password_hash,
            "rollNumber": roll_number,
            "course": data.course,
            "branch": data.branch,
            "year": data.year,
            "phoneNumber": data.phone_number,
            "registeredAt": None,
            **status_fields(status, now),
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = self.students.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(_duplicate_message(e), error_code="DUPLICATE_STUDENT") from e

        doc["_id"] = result.inserted_id
        doc.pop("passwordHash")
        logger.info("Student %s registered (%s)", roll_number, status.value)
        return serialize_doc(doc), status

    def authenticate(self, email: str, password: str) -> dict:
        """
        Check credentials and approval.

        Raises:
            InvalidCredentialsError: unknown email or wrong password (same message for both)
            PendingApprovalError: credentials are fine but the student isn't approved
        """
        email = normalize_email(email)
        student = self.students.find_one({"email": email})
        if not student or not verify_password(password, student.get("passwordHash")):
            logger.warning("Failed student login for %s", email)
            raise InvalidCredentialsError()

        if status_of(student) != StudentStatus.approved:
            logger.info("Login blocked for pending student %s", student.get("rollNumber"))
            raise PendingApprovalError()

        student.pop("passwordHash", None)
        return serialize_doc(student)

    def cancel_registration(self, email: Optional[str] = None, roll_number: Optional[str] = None) -> dict:
        """
        Delete a still-pending registration. Email wins when both are given.

        Raises:
            ValidationError: neither identifier supplied
            NotFoundError: no matching student
            ForbiddenError: the student is already approved or registered
        """
        email = normalize_email(email)
        roll_number = normalize_roll_number(roll_number)
        if email:
            query = {"email": email}
        elif roll_number:
            query = {"rollNumber": roll_number}
        else:
            raise ValidationError("Email or roll number is required")

        student = self.students.find_one(query, PUBLIC_FIELDS)
        if not student:
            raise NotFoundError("Registration not found")
        if is_active(student):
            raise ForbiddenError(
                "This registration is already active and can't be cancelled.",
                error_code="REGISTRATION_ACTIVE",
            )

        # Re-check the state in the delete itself in case an admin approved meanwhile
        result = self.students.delete_one({"_id": student["_id"], **PENDING_FILTER})
        if result.deleted_count == 0:
            raise ForbiddenError(
                "This registration is already active and can't be cancelled.",
                error_code="REGISTRATION_ACTIVE",
            )

        logger.info("Pending registration %s cancelled", student.get("rollNumber"))
        return serialize_doc(student)

    def get_student(self, student_id) -> dict:
        oid = parse_object_id(student_id, "Student ID")
        student = self.students.find_one({"_id": oid}, PUBLIC_FIELDS)
        if not student:
            raise NotFoundError("Student not found")
        return serialize_doc(student)

    def update_profile(self, student_id, data: StudentProfileUpdate) -> dict:
        oid = parse_object_id(student_id, "Student ID")
        email = normalize_email(data.email)

        if self.students.find_one({"email": email, "_id": {"$ne": oid}}, {"_id": 1}):
            raise ConflictError("Email already in use", error_code="DUPLICATE_EMAIL")

        updates = {
            "name": data.name,
            "email": email,
            "course": data.course,
            "branch": data.branch,
            "year": data.year,
            "updatedAt": utcnow(),
        }
        if data.phone_number is not None:
            updates["phoneNumber"] = data.phone_number

        try:
            student = self.students.find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                projection=PUBLIC_FIELDS,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError("Email already in use", error_code="DUPLICATE_EMAIL") from e

        if not student:
            raise NotFoundError("Student not found")
        return serialize_doc(student)

    def change_password(self, student_id, old_password: str, new_password: str) -> None:
        self._check_password_length(new_password)
        oid = parse_object_id(student_id, "Student ID")

        student = self.students.find_one({"_id": oid})
        if not student:
            raise NotFoundError("Student not found")
        if not verify_password(old_password, student.get("passwordHash")):
            raise ValidationError("Incorrect old password", error_code="INCORRECT_PASSWORD")

        self._set_password(oid, new_password)

    # --------------------------------------------------------
    # Admin
    # --------------------------------------------------------

    def list_pending(self) -> List[dict]:
        cursor = self.students.find(PENDING_FILTER, PUBLIC_FIELDS).sort("createdAt", -1)
        return serialize_docs(cursor)

    def list_all(self) -> List[dict]:
        cursor = self.students.find({}, PUBLIC_FIELDS).sort("name", 1)
        return serialize_docs(cursor)

    def stats(self) -> dict:
        return {
            "total": self.students.count_documents({}),
            "verified": self.students.count_documents({"approved": True}),
            "pending": self.students.count_documents({"approved": {"$ne": True}}),
        }

    def set_approval(self, roll_number, approve: bool) -> dict:
        """
        Approve or unapprove one student by roll number.

        Approving sets approved, registered and registeredAt; unapproving
        clears both flags.

        Raises:
            NotFoundError: no student with that roll number
        """
        roll_number = normalize_roll_number(roll_number)
        if not roll_number:
            raise ValidationError("rollNumber required")

        status = StudentStatus.approved if approve else StudentStatus.pending
        now = utcnow()
        student = self.students.find_one_and_update(
            {"rollNumber": roll_number},
            {"$set": {**status_fields(status, now), "updatedAt": now}},
            projection=PUBLIC_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        if not student:
            raise NotFoundError("Student not found")

        logger.info("Student %s set to %s", roll_number, status.value)
        return serialize_doc(student)

    def bulk_set_approval(self, roll_numbers: List, approve: bool) -> int:
        """
        Apply the approve/unapprove pair to every student in roll_numbers
        in one update_many. Unknown roll numbers are ignored.

        Returns:
            number of students modified
        """
        rolls = _clean_roll_numbers(roll_numbers)
        if not rolls:
            raise ValidationError("List of rollNumbers required")

        status = StudentStatus.approved if approve else StudentStatus.pending
        now = utcnow()
        # updatedAt changes on every match, so modified_count == matched students
        result = self.students.update_many(
            {"rollNumber": {"$in": rolls}},
            {"$set": {**status_fields(status, now), "updatedAt": now}},
        )
        logger.info("Bulk %s: %d of %d students updated", status.value, result.modified_count, len(rolls))
        return result.modified_count

    def bulk_delete(self, roll_numbers: List) -> int:
        """Delete the listed students and their applications. Returns students deleted."""
        rolls = _clean_roll_numbers(roll_numbers)
        if not rolls:
            raise ValidationError("List of rollNumbers required")

        student_ids = [doc["_id"] for doc in self.students.find({"rollNumber": {"$in": rolls}}, {"_id": 1})]
        if not student_ids:
            return 0

        result = self.students.delete_many({"_id": {"$in": student_ids}})
        self.applications.delete_many({"studentId": {"$in": student_ids}})
        logger.info("Bulk deleted %d students", result.deleted_count)
        return result.deleted_count

    def delete_student(self, student_id) -> int:
        """
        Delete a student in any state and cascade to their applications.

        Returns:
            number of applications removed
        """
        oid = parse_object_id(student_id, "Student ID")
        student = self.students.find_one_and_delete({"_id": oid}, projection={"rollNumber": 1})
        if not student:
            raise NotFoundError("Student not found")

        removed = self.applications.delete_many({"studentId": oid}).deleted_count
        logger.info("Deleted student %s and %d applications", student.get("rollNumber"), removed)
        return removed

    def reset_password(self, student_id, new_password: str) -> None:
        """Admin password reset; no old password needed."""
        self._check_password_length(new_password)
        oid = parse_object_id(student_id, "Student ID")
        if not self.students.find_one({"_id": oid}, {"_id": 1}):
            raise NotFoundError("Student not found.")
        self._set_password(oid, new_password)

    # --------------------------------------------------------

    def _check_password_length(self, password: str) -> None:
        minimum = get_settings().min_password_length
        if not password or len(password) < minimum:
            raise ValidationError(f"New password must be at least {minimum} characters.")

    def _set_password(self, oid, password: str) -> None:
        self.students.update_one(
            {"_id": oid},
            {"$set": {"passwordHash": hash_password(password), "updatedAt": utcnow()}},
        )
        logger.info("Password updated for student %s", oid)


def get_student_service() -> StudentService:
    """FastAPI dependency - StudentService on the live collections."""
    return StudentService()
