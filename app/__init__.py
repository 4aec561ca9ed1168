"""
Campus Job Portal
College job board with student registration and admin approval.

Architecture:
- MongoDB: students, approved roll numbers, jobs, applications, admins
- FastAPI: REST API under /api with cookie-based JWT sessions
"""

__version__ = "1.0.0"
