"""
Analytics Routes

GET /analytics/active-users - Students + faculty active today
GET /analytics/overview - Document totals per collection
"""

from fastapi import APIRouter, Depends

from superadmin.core.auth import get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.admin_service import active_user_count, collection_totals
from superadmin.schemas.schemas import ActiveUsersResponse, OverviewResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/active-users", response_model=ActiveUsersResponse)
async def active_users(session: AdminSession = Depends(get_current_superadmin)):
    """Users whose lastActive falls on today (UTC) or later."""
    return ActiveUsersResponse(active_users=active_user_count())


@router.get("/overview", response_model=OverviewResponse)
async def overview(session: AdminSession = Depends(get_current_superadmin)):
    return OverviewResponse(totals=collection_totals(), active_users=active_user_count())
