"""
Student Routes

GET /students - List students (search / course / status filters)
GET /students/{student_id} - Get one student
PUT /students/{student_id} - Update student
PATCH /students/{student_id}/status - Toggle active <-> inactive
DELETE /students/{student_id} - Delete student
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from superadmin.core.auth import get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.admin_service import StudentService
from superadmin.schemas.schemas import StudentUpdate, DocumentListResponse, MessageResponse

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=DocumentListResponse)
async def list_students(
    search: Optional[str] = Query(None, description="Search in name or email"),
    course: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    session: AdminSession = Depends(get_current_superadmin)
):
    items = StudentService(session).search(search=search, course=course, status=status)
    return DocumentListResponse(items=items, count=len(items))


@router.get("/{student_id}")
async def get_student(student_id: str, session: AdminSession = Depends(get_current_superadmin)):
    return StudentService(session).get(student_id)


@router.put("/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, session: AdminSession = Depends(get_current_superadmin)):
    """Update student. Only provided fields are updated."""
    return StudentService(session).update(student_id, data.model_dump(exclude_unset=True, mode="json"))


@router.patch("/{student_id}/status")
async def toggle_student_status(student_id: str, session: AdminSession = Depends(get_current_superadmin)):
    return StudentService(session).toggle_status(student_id)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(student_id: str, session: AdminSession = Depends(get_current_superadmin)):
    StudentService(session).delete(student_id)
    return MessageResponse(message="Student account has been deleted successfully.")
