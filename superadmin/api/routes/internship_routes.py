"""
Internship Routes

GET /internships - List internships (with facultyName)
POST /internships - Create internship
GET /internships/{internship_id} - Get internship details
PUT /internships/{internship_id} - Update internship (recounts faculty internshipsPosted)
DELETE /internships/{internship_id} - Delete internship (test assignments are kept)
GET /applications - List applications
GET /applications/{application_id} - Get one application
"""

from fastapi import APIRouter, Depends

from superadmin.core.auth import get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.admin_service import InternshipService, ApplicationService
from superadmin.schemas.schemas import (
    InternshipCreate, InternshipUpdate, CreatedResponse, DocumentListResponse, MessageResponse
)

router = APIRouter(tags=["Internships"])


@router.get("/internships", response_model=DocumentListResponse)
async def list_internships(session: AdminSession = Depends(get_current_superadmin)):
    items = InternshipService(session).list()
    return DocumentListResponse(items=items, count=len(items))


@router.post("/internships", response_model=CreatedResponse, status_code=201)
async def create_internship(data: InternshipCreate, session: AdminSession = Depends(get_current_superadmin)):
    internship_id = InternshipService(session).create(data.model_dump(exclude_none=True, mode="json"))
    return CreatedResponse(id=internship_id, message=f"{data.title} has been created")


@router.get("/internships/{internship_id}")
async def get_internship(internship_id: str, session: AdminSession = Depends(get_current_superadmin)):
    return InternshipService(session).get(internship_id)


@router.put("/internships/{internship_id}")
async def update_internship(internship_id: str, data: InternshipUpdate, session: AdminSession = Depends(get_current_superadmin)):
    """
    Update an internship. Only provided fields are updated.

    Sending facultyId moves the internship to another faculty member; both
    faculty counters are recomputed. A failed recount does not fail the update.
    """
    return InternshipService(session).update(internship_id, data.model_dump(exclude_unset=True, mode="json"))


@router.delete("/internships/{internship_id}", response_model=MessageResponse)
async def delete_internship(internship_id: str, session: AdminSession = Depends(get_current_superadmin)):
    InternshipService(session).delete(internship_id)
    return MessageResponse(message="Internship deleted")


@router.get("/applications", response_model=DocumentListResponse)
async def list_applications(session: AdminSession = Depends(get_current_superadmin)):
    items = ApplicationService(session).list()
    return DocumentListResponse(items=items, count=len(items))


@router.get("/applications/{application_id}")
async def get_application(application_id: str, session: AdminSession = Depends(get_current_superadmin)):
    return ApplicationService(session).get(application_id)
