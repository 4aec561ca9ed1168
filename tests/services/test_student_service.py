"""
Tests for the student service.

These tests cover:
- Registration with and without allow-list approval
- Duplicate roll number / email handling
- The login gate (invalid credentials vs pending vs approved)
- Self-cancellation of pending registrations
- Admin approval, bulk approval, bulk delete and cascade delete
- Profile and password updates
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.auth import verify_password
from app.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    PendingApprovalError,
    ValidationError,
)
from app.models.student import StudentStatus
from app.schemas.schemas import StudentProfileUpdate
from app.services.student_service import StudentService

PASSWORD = "s3cret-pass"


class TestRegister:

    def test_allow_listed_roll_is_approved(self, student_service, make_registration, mongo_db):
        student, status = student_service.register(make_registration(roll_number="CS101"))

        assert status == StudentStatus.approved
        stored = mongo_db.students.find_one({"rollNumber": "CS101"})
        assert stored["approved"] is True
        assert stored["registered"] is True
        assert stored["registeredAt"] is not None

    def test_unlisted_roll_is_pending(self, student_service, make_registration, mongo_db):
        student, status = student_service.register(make_registration(roll_number="CS999"))

        assert status == StudentStatus.pending
        stored = mongo_db.students.find_one({"rollNumber": "CS999"})
        assert stored["approved"] is False
        assert stored["registered"] is False
        assert stored["registeredAt"] is None

    def test_normalizes_email_and_roll_number(self, student_service, make_registration, mongo_db):
        student, _ = student_service.register(
            make_registration(email="Asha@Example.COM", roll_number="  CS101 ")
        )

        assert student["email"] == "asha@example.com"
        assert student["rollNumber"] == "CS101"
        assert mongo_db.students.count_documents({"email": "asha@example.com"}) == 1

    def test_password_is_hashed_and_not_returned(self, student_service, make_registration, mongo_db):
        student, _ = student_service.register(make_registration())

        assert "passwordHash" not in student
        stored = mongo_db.students.find_one({"_id": ObjectId(student["_id"])})
        assert stored["passwordHash"] != PASSWORD
        assert verify_password(PASSWORD, stored["passwordHash"])

    def test_duplicate_roll_number_rejected(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration())

        with pytest.raises(ConflictError) as exc_info:
            student_service.register(make_registration(email="other@example.com"))

        assert exc_info.value.status_code == 409
        assert "roll number" in exc_info.value.message.lower()
        assert mongo_db.students.count_documents({}) == 1

    def test_duplicate_email_rejected(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration())

        with pytest.raises(ConflictError) as exc_info:
            student_service.register(make_registration(roll_number="CS500", email="ASHA@example.com"))

        assert "email" in exc_info.value.message.lower()
        assert mongo_db.students.count_documents({}) == 1

    def test_roll_number_checked_before_email(self, student_service, make_registration):
        student_service.register(make_registration())

        with pytest.raises(ConflictError) as exc_info:
            student_service.register(make_registration())

        assert exc_info.value.error_code == "DUPLICATE_ROLL_NUMBER"

    def test_concurrent_insert_reported_as_conflict(self, make_registration):
        """A DuplicateKeyError from the unique index still surfaces as 409."""
        students = MagicMock()
        students.find_one.return_value = None
        students.insert_one.side_effect = DuplicateKeyError(
            "E11000 duplicate key", 11000, {"keyPattern": {"rollNumber": 1}}
        )
        allow_list = MagicMock()
        allow_list.contains.return_value = False
        service = StudentService(students=students, applications=MagicMock(), allow_list=allow_list)

        with pytest.raises(ConflictError) as exc_info:
            service.register(make_registration())

        assert exc_info.value.message == "Roll number already registered"

    def test_allow_list_not_consumed(self, student_service, make_registration, allow_list):
        student_service.register(make_registration(roll_number="CS101"))

        assert allow_list.contains("CS101")


class TestAuthenticate:

    def test_approved_student_logs_in(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS101"))

        student = student_service.authenticate(" ASHA@example.com", PASSWORD)

        assert student["rollNumber"] == "CS101"
        assert "passwordHash" not in student

    def test_unknown_email(self, student_service):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            student_service.authenticate("nobody@example.com", PASSWORD)

        assert exc_info.value.status_code == 400

    def test_wrong_password_has_same_message_as_unknown_email(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS101"))

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            student_service.authenticate("asha@example.com", "not-it")
        with pytest.raises(InvalidCredentialsError) as unknown:
            student_service.authenticate("nobody@example.com", PASSWORD)

        assert wrong_password.value.message == unknown.value.message

    def test_pending_student_blocked_with_correct_password(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS999"))

        with pytest.raises(PendingApprovalError) as exc_info:
            student_service.authenticate("asha@example.com", PASSWORD)

        assert exc_info.value.status_code == 403

    def test_pending_student_with_wrong_password_gets_invalid_credentials(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS999"))

        with pytest.raises(InvalidCredentialsError):
            student_service.authenticate("asha@example.com", "not-it")

    def test_password_whitespace_is_significant(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS101", password="  pad pass  "))

        with pytest.raises(InvalidCredentialsError):
            student_service.authenticate("asha@example.com", "pad pass")

        assert student_service.authenticate("asha@example.com", "  pad pass  ")["rollNumber"] == "CS101"

    def test_login_after_admin_approval(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS999"))
        student_service.set_approval("CS999", True)

        student = student_service.authenticate("asha@example.com", PASSWORD)

        assert student["approved"] is True


class TestCancelRegistration:

    def test_cancel_pending_by_email(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS999"))

        student_service.cancel_registration(email="Asha@example.com")

        assert mongo_db.students.count_documents({}) == 0

    def test_cancel_pending_by_roll_number(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS999"))

        student_service.cancel_registration(roll_number=" CS999")

        assert mongo_db.students.count_documents({}) == 0

    def test_email_takes_precedence(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS999"))
        student_service.register(make_registration(roll_number="CS998", email="ravi@example.com"))

        student_service.cancel_registration(email="ravi@example.com", roll_number="CS999")

        remaining = [s["rollNumber"] for s in mongo_db.students.find()]
        assert remaining == ["CS999"]

    def test_cannot_cancel_approved(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS101"))

        with pytest.raises(ForbiddenError):
            student_service.cancel_registration(email="asha@example.com")

        assert mongo_db.students.count_documents({}) == 1

    def test_cannot_cancel_registered_but_unapproved(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS999"))
        mongo_db.students.update_one({"rollNumber": "CS999"}, {"$set": {"registered": True}})

        with pytest.raises(ForbiddenError):
            student_service.cancel_registration(roll_number="CS999")

    def test_not_found(self, student_service):
        with pytest.raises(NotFoundError):
            student_service.cancel_registration(email="ghost@example.com")

    def test_requires_an_identifier(self, student_service):
        with pytest.raises(ValidationError):
            student_service.cancel_registration()

    def test_can_register_again_after_cancelling(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS999"))
        student_service.cancel_registration(email="asha@example.com")

        _, status = student_service.register(make_registration(roll_number="CS999"))

        assert status == StudentStatus.pending


class TestApproval:

    def test_approve_sets_flags_and_timestamp(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS999"))

        student_service.set_approval(" CS999 ", True)

        stored = mongo_db.students.find_one({"rollNumber": "CS999"})
        assert stored["approved"] is True
        assert stored["registered"] is True
        assert stored["registeredAt"] is not None

    def test_unapprove_clears_both_flags(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS101"))

        student_service.set_approval("CS101", False)

        stored = mongo_db.students.find_one({"rollNumber": "CS101"})
        assert stored["approved"] is False
        assert stored["registered"] is False

    def test_approve_unknown_roll_number(self, student_service):
        with pytest.raises(NotFoundError):
            student_service.set_approval("NOPE", True)

    def test_bulk_approve_counts_only_matches(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS901", email="a@example.com"))
        student_service.register(make_registration(roll_number="CS902", email="b@example.com"))
        student_service.register(make_registration(roll_number="CS903", email="c@example.com"))

        modified = student_service.bulk_set_approval(["CS901", "CS902", "GHOST1", "GHOST2"], True)

        assert modified == 2
        untouched = mongo_db.students.find_one({"rollNumber": "CS903"})
        assert untouched["approved"] is False
        assert untouched["registered"] is False
        for roll in ("CS901", "CS902"):
            stored = mongo_db.students.find_one({"rollNumber": roll})
            assert stored["approved"] is True and stored["registered"] is True

    def test_bulk_unapprove(self, student_service, make_registration, mongo_db):
        student_service.register(make_registration(roll_number="CS101"))

        modified = student_service.bulk_set_approval(["CS101"], False)

        assert modified == 1
        stored = mongo_db.students.find_one({"rollNumber": "CS101"})
        assert (stored["approved"], stored["registered"]) == (False, False)

    def test_bulk_approve_requires_roll_numbers(self, student_service):
        with pytest.raises(ValidationError):
            student_service.bulk_set_approval([], True)
        with pytest.raises(ValidationError):
            student_service.bulk_set_approval(["  "], True)

    def test_list_pending_excludes_approved(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS101"))
        student_service.register(make_registration(roll_number="CS999", email="p@example.com"))

        pending = student_service.list_pending()

        assert [s["rollNumber"] for s in pending] == ["CS999"]
        assert "passwordHash" not in pending[0]

    def test_stats(self, student_service, make_registration):
        student_service.register(make_registration(roll_number="CS101"))
        student_service.register(make_registration(roll_number="CS999", email="p@example.com"))

        assert student_service.stats() == {"total": 2, "verified": 1, "pending": 1}


class TestDelete:

    def _apply(self, mongo_db, student_id, job_id=None):
        mongo_db.applications.insert_one({"studentId": ObjectId(student_id), "jobId": job_id or ObjectId()})

    def test_delete_cascades_applications(self, student_service, make_registration, mongo_db):
        student, _ = student_service.register(make_registration(roll_number="CS101"))
        other, _ = student_service.register(make_registration(roll_number="CS102", email="o@example.com"))
        self._apply(mongo_db, student["_id"])
        self._apply(mongo_db, student["_id"])
        self._apply(mongo_db, other["_id"])

        removed = student_service.delete_student(student["_id"])

        assert removed == 2
        assert mongo_db.students.count_documents({"_id": ObjectId(student["_id"])}) == 0
        assert mongo_db.applications.count_documents({"studentId": ObjectId(student["_id"])}) == 0
        assert mongo_db.applications.count_documents({"studentId": ObjectId(other["_id"])}) == 1

    def test_delete_works_in_any_state(self, student_service, make_registration, mongo_db):
        approved, _ = student_service.register(make_registration(roll_number="CS101"))

        student_service.delete_student(approved["_id"])

        assert mongo_db.students.count_documents({}) == 0

    def test_delete_unknown_student(self, student_service):
        with pytest.raises(NotFoundError):
            student_service.delete_student(str(ObjectId()))

    def test_delete_malformed_id(self, student_service):
        with pytest.raises(ValidationError) as exc_info:
            student_service.delete_student("not-an-id")

        assert exc_info.value.status_code == 400

    def test_bulk_delete_cascades(self, student_service, make_registration, mongo_db):
        a, _ = student_service.register(make_registration(roll_number="CS901", email="a@example.com"))
        b, _ = student_service.register(make_registration(roll_number="CS902", email="b@example.com"))
        self._apply(mongo_db, a["_id"])
        self._apply(mongo_db, b["_id"])

        deleted = student_service.bulk_delete(["CS901", "GHOST"])

        assert deleted == 1
        assert mongo_db.students.count_documents({}) == 1
        assert mongo_db.applications.count_documents({}) == 1


class TestProfileAndPasswords:

    def _profile(self, **overrides):
        data = {
            "name": "Asha V",
            "email": "asha.v@example.com",
            "course": "M.Tech",
            "branch": "AI",
            "year": 1,
            "phone_number": "9000000000",
        }
        data.update(overrides)
        return StudentProfileUpdate(**data)

    def test_update_profile(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))

        updated = student_service.update_profile(student["_id"], self._profile(email="ASHA.V@example.com"))

        assert updated["email"] == "asha.v@example.com"
        assert updated["course"] == "M.Tech"
        assert "passwordHash" not in updated

    def test_update_profile_email_taken(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))
        student_service.register(make_registration(roll_number="CS102", email="taken@example.com"))

        with pytest.raises(ConflictError):
            student_service.update_profile(student["_id"], self._profile(email="taken@example.com"))

    def test_change_password(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))

        student_service.change_password(student["_id"], PASSWORD, "brand-new-pass")

        assert student_service.authenticate("asha@example.com", "brand-new-pass")

    def test_change_password_wrong_old(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))

        with pytest.raises(ValidationError) as exc_info:
            student_service.change_password(student["_id"], "wrong", "brand-new-pass")

        assert exc_info.value.message == "Incorrect old password"

    def test_reset_password_enforces_minimum_length(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))

        with pytest.raises(ValidationError):
            student_service.reset_password(student["_id"], "123")

    def test_reset_password(self, student_service, make_registration):
        student, _ = student_service.register(make_registration(roll_number="CS101"))

        student_service.reset_password(student["_id"], "reset-by-admin")

        assert student_service.authenticate("asha@example.com", "reset-by-admin")
