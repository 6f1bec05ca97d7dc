"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from superadmin.api.routes.auth_routes import router as auth_router
from superadmin.api.routes.faculty_routes import router as faculty_router
from superadmin.api.routes.student_routes import router as student_router
from superadmin.api.routes.internship_routes import router as internship_router
from superadmin.api.routes.skill_test_routes import router as skill_test_router
from superadmin.api.routes.analytics_routes import router as analytics_router
from superadmin.api.routes.realtime_routes import router as realtime_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(faculty_router)
api_router.include_router(student_router)
api_router.include_router(internship_router)
api_router.include_router(skill_test_router)
api_router.include_router(analytics_router)
api_router.include_router(realtime_router)
