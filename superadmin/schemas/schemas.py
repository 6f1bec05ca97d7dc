"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Field names follow the stored documents (camelCase), so a validated body
can be handed to the services as-is with model_dump().
"""

import json
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    superadmin = "superadmin"
    faculty = "faculty"


class RecordStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class AssignmentStatus(str, Enum):
    assigned = "assigned"
    in_progress = "in_progress"
    completed = "completed"


class TestView(str, Enum):
    all = "all"
    assigned = "assigned"
    completed = "completed"
    pending = "pending"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    displayName: Optional[str] = None
    role: UserRole = UserRole.superadmin

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ClientRecord(BaseModel):
    """What the browser caches under its single local key."""
    id: str
    email: str
    displayName: str
    role: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: ClientRecord


# ============================================================
# FACULTY SCHEMAS
# ============================================================

class FacultyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    department: Optional[str] = None
    designation: Optional[str] = None
    phone: Optional[str] = None

class FacultyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[RecordStatus] = None


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    course: Optional[str] = Field(None, min_length=1)
    status: Optional[RecordStatus] = None


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    facultyId: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = None
    stipend: Optional[float] = Field(None, ge=0)
    status: Optional[RecordStatus] = None

class InternshipUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    facultyId: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = None
    stipend: Optional[float] = Field(None, ge=0)
    status: Optional[RecordStatus] = None


# ============================================================
# TEST SCHEMAS
# ============================================================

def _check_questions(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        parsed = json.loads(value)
    except ValueError:
        raise ValueError("Questions must be valid JSON")
    if not isinstance(parsed, list):
        raise ValueError("Questions must be a JSON list")
    return value

class TestCreate(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    questions: str = Field(..., min_length=10, description="JSON list of questions")
    duration: int = Field(..., ge=1, description="Minutes")

    @field_validator("questions")
    @classmethod
    def questions_are_json_list(cls, v):
        return _check_questions(v)

class TestUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = Field(None, min_length=10)
    questions: Optional[str] = Field(None, min_length=10)
    duration: Optional[int] = Field(None, ge=1)
    status: Optional[RecordStatus] = None

    @field_validator("questions")
    @classmethod
    def questions_are_json_list(cls, v):
        return _check_questions(v)

class QuestionSummary(BaseModel):
    total: int
    mcq: int
    subjective: int


# ============================================================
# TEST ASSIGNMENT SCHEMAS
# ============================================================

class TestAssignmentCreate(BaseModel):
    studentId: str = Field(..., min_length=1)
    internshipId: str = Field(..., min_length=1)
    testId: str = Field(..., min_length=1)

class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class ActiveUsersResponse(BaseModel):
    active_users: int

class OverviewResponse(BaseModel):
    totals: Dict[str, int]
    active_users: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class CreatedResponse(BaseModel):
    id: str
    message: str = "Created successfully"

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None

class DocumentListResponse(BaseModel):
    items: List[Dict[str, Any]]
    count: int
