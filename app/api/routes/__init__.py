"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as admin_auth_router
from app.api.routes.student_routes import router as student_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
# admin auth first: it must stay reachable without the admin cookie
api_router.include_router(admin_auth_router)
api_router.include_router(student_router)
api_router.include_router(job_router)
api_router.include_router(admin_router)
