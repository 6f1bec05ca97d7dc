"""
Skills Test Routes

GET /tests?view=all|assigned|completed|pending - List tests
POST /tests - Create test
GET /tests/{test_id} - Get test (with question summary)
PUT /tests/{test_id} - Update test
DELETE /tests/{test_id} - Delete test
GET /test-assignments - List test assignments
POST /test-assignments - Assign a test to an applicant
PATCH /test-assignments/{assignment_id}/status - Move assignment status
"""

from fastapi import APIRouter, Depends, Query

from superadmin.core.auth import get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.admin_service import TestService, TestAssignmentService, summarize_questions
from superadmin.schemas.schemas import (
    TestCreate, TestUpdate, TestView, TestAssignmentCreate, AssignmentStatusUpdate,
    CreatedResponse, DocumentListResponse, MessageResponse
)

router = APIRouter(tags=["Tests"])


@router.get("/tests", response_model=DocumentListResponse)
async def list_tests(
    view: TestView = Query(TestView.all, description="Filter by assignment state"),
    session: AdminSession = Depends(get_current_superadmin)
):
    items = TestService(session).list_view(view.value)
    return DocumentListResponse(items=items, count=len(items))


@router.post("/tests", response_model=CreatedResponse, status_code=201)
async def create_test(data: TestCreate, session: AdminSession = Depends(get_current_superadmin)):
    test_id = TestService(session).create(data.model_dump(mode="json"))
    return CreatedResponse(id=test_id, message=f"{data.title} has been created successfully.")


@router.get("/tests/{test_id}")
async def get_test(test_id: str, session: AdminSession = Depends(get_current_superadmin)):
    test = TestService(session).get(test_id)
    test["questionSummary"] = summarize_questions(test.get("questions"))
    return test


@router.put("/tests/{test_id}")
async def update_test(test_id: str, data: TestUpdate, session: AdminSession = Depends(get_current_superadmin)):
    return TestService(session).update(test_id, data.model_dump(exclude_unset=True, mode="json"))


@router.delete("/tests/{test_id}", response_model=MessageResponse)
async def delete_test(test_id: str, session: AdminSession = Depends(get_current_superadmin)):
    TestService(session).delete(test_id)
    return MessageResponse(message="Test has been deleted successfully.")


@router.get("/test-assignments", response_model=DocumentListResponse)
async def list_test_assignments(session: AdminSession = Depends(get_current_superadmin)):
    items = TestAssignmentService(session).list()
    return DocumentListResponse(items=items, count=len(items))


@router.post("/test-assignments", response_model=CreatedResponse, status_code=201)
async def assign_test(data: TestAssignmentCreate, session: AdminSession = Depends(get_current_superadmin)):
    """
    Assign a test. Fails with 400 when the student has not applied to the
    internship.
    """
    assignment_id = TestAssignmentService(session).assign_test(
        student_id=data.studentId,
        internship_id=data.internshipId,
        test_id=data.testId,
    )
    return CreatedResponse(id=assignment_id, message="Test has been assigned successfully.")


@router.patch("/test-assignments/{assignment_id}/status")
async def update_assignment_status(
    assignment_id: str,
    data: AssignmentStatusUpdate,
    session: AdminSession = Depends(get_current_superadmin)
):
    return TestAssignmentService(session).update_assignment_status(assignment_id, data.status.value)
