"""
Student approval state.

Documents keep the two booleans `approved` and `registered` that the portal
front-end reads, but they are only ever written together from a
StudentStatus, so a document can't end up approved without being
registered. A student who never registered simply has no document.
"""

from datetime import datetime
from enum import Enum
from typing import Optional


class StudentStatus(str, Enum):
    pending = "pending"
    approved = "approved"


def status_fields(status: StudentStatus, now: Optional[datetime] = None) -> dict:
    """
    The $set payload for moving a student into `status`.

    Approval stamps registeredAt; going back to pending leaves the old
    timestamp alone.
    """
    if status == StudentStatus.approved:
        return {"approved": True, "registered": True, "registeredAt": now}
    return {"approved": False, "registered": False}


def status_of(doc: dict) -> StudentStatus:
    """Read the status back from a stored student document."""
    if doc.get("approved"):
        return StudentStatus.approved
    return StudentStatus.pending


def is_active(doc: dict) -> bool:
    """Approved or registered students can't withdraw their registration."""
    return bool(doc.get("approved") or doc.get("registered"))
