"""
Models module - domain state shared by services.

Request/response shapes live in app.schemas; this package holds the
stored-document rules that services apply.
"""

from app.models.student import StudentStatus, is_active, status_fields, status_of

__all__ = ["StudentStatus", "is_active", "status_fields", "status_of"]
