"""
Faculty Routes

GET /faculty - List faculty members
POST /faculty - Create faculty member (also creates their login account)
GET /faculty/{faculty_id} - Get one faculty member
PUT /faculty/{faculty_id} - Update faculty member
DELETE /faculty/{faculty_id} - Delete faculty member (internships keep their facultyId)
POST /faculty/{faculty_id}/recount - Recompute internshipsPosted
"""

from fastapi import APIRouter, Depends

from superadmin.core.auth import get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.admin_service import FacultyService
from superadmin.services.aggregates import sync_faculty_internship_count
from superadmin.schemas.schemas import (
    FacultyCreate, FacultyUpdate, CreatedResponse, DocumentListResponse, MessageResponse
)

router = APIRouter(prefix="/faculty", tags=["Faculty"])


@router.get("", response_model=DocumentListResponse)
async def list_faculty(session: AdminSession = Depends(get_current_superadmin)):
    items = FacultyService(session).list()
    return DocumentListResponse(items=items, count=len(items))


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_faculty(data: FacultyCreate, session: AdminSession = Depends(get_current_superadmin)):
    """Create a faculty member. The password is stored on the account only."""
    faculty_id = FacultyService(session).create(data.model_dump(exclude_none=True, mode="json"))
    return CreatedResponse(id=faculty_id, message=f"{data.name} has been added as faculty")


@router.get("/{faculty_id}")
async def get_faculty(faculty_id: str, session: AdminSession = Depends(get_current_superadmin)):
    return FacultyService(session).get(faculty_id)


@router.put("/{faculty_id}")
async def update_faculty(faculty_id: str, data: FacultyUpdate, session: AdminSession = Depends(get_current_superadmin)):
    """Update a faculty member. Only provided fields are updated."""
    return FacultyService(session).update(faculty_id, data.model_dump(exclude_unset=True, mode="json"))


@router.delete("/{faculty_id}", response_model=MessageResponse)
async def delete_faculty(faculty_id: str, session: AdminSession = Depends(get_current_superadmin)):
    FacultyService(session).delete(faculty_id)
    return MessageResponse(message="Faculty member deleted")


@router.post("/{faculty_id}/recount")
async def recount_internships(faculty_id: str, session: AdminSession = Depends(get_current_superadmin)):
    """Recompute internshipsPosted from the internships collection."""
    count = sync_faculty_internship_count(faculty_id, session)
    return {"id": faculty_id, "internshipsPosted": count}
