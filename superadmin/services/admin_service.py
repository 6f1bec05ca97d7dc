"""
Admin Services - what the super admin can do to each collection.

Collections handled here:
1. faculty          - faculty members (+ their login accounts)
2. students         - student profiles
3. internships      - postings, linked to a faculty member by facultyId
4. applications     - student applications to internships (read-only here)
5. tests            - skills tests (questions stored as a JSON string)
6. testsAssigned    - tests assigned to an applicant

Every mutation goes through ResilientWriter, so it needs a valid
AdminSession. None of these multi-step operations is atomic: e.g. a faculty
account can exist without its faculty document if the second step fails.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from superadmin.core.errors import ApplicationNotFoundError
from superadmin.models.session import AdminSession
from superadmin.services.aggregates import faculty_ids_to_resync, resync_faculty_counts
from superadmin.services.document_store import (
    DocumentStore, SnapshotCallback, SnapshotSubscription, get_store,
)
from superadmin.services.projections import FacultyNameProjection
from superadmin.services.resilient_writer import ASSIGN_FIELDS, ResilientWriter
from superadmin.services.session_service import register_account

logger = logging.getLogger(__name__)

ASSIGNMENT_STATUSES = ("assigned", "in_progress", "completed")
TEST_VIEWS = ("all", "assigned", "completed", "pending")


class CollectionService:
    """Shared read/subscribe/update/delete for one collection."""

    collection_key: str = ""

    def __init__(self, session: Optional[AdminSession] = None):
        self.session = session
        self.store: DocumentStore = get_store(self.collection_key)
        self.writer = ResilientWriter(session)

    def list(self) -> List[dict]:
        return self.store.list()

    def get(self, doc_id: str) -> dict:
        return self.store.get(doc_id)

    def subscribe(self, on_change: SnapshotCallback) -> SnapshotSubscription:
        return self.store.subscribe(on_change)

    def update(self, doc_id: str, data: Dict[str, Any]) -> dict:
        logger.debug("Updating %s %s with %s", self.store.name, doc_id, data)
        return self.writer.update(self.store, doc_id, data)

    def delete(self, doc_id: str) -> None:
        # No cascade: documents referencing this one are left as they are
        self.writer.require_session()
        self.store.delete(doc_id)
        logger.info("Deleted %s %s", self.store.name, doc_id)


# ============================================================
# FACULTY
# ============================================================

class FacultyService(CollectionService):
    collection_key = "faculty"

    def create(self, data: Dict[str, Any]) -> str:
        """
        Create the faculty member's login account, then the faculty document.

        The password only goes to the account; the document stores the
        account id as `uid`.
        """
        self.writer.require_session()
        data = dict(data)
        password = data.pop("password")
        account = register_account(
            email=data["email"],
            password=password,
            display_name=data.get("name"),
            role="faculty",
        )
        logger.info("Created authentication account for faculty: %s", data["email"])

        data["uid"] = account["id"]
        data.setdefault("internshipsPosted", 0)
        return self.writer.create(self.store, data)


# ============================================================
# STUDENTS
# ============================================================

def filter_students(
    students: List[dict],
    search: Optional[str] = None,
    course: Optional[str] = None,
    status: Optional[str] = None,
) -> List[dict]:
    """
    Search matches name or email, case-insensitively. Course and status are
    exact matches; empty or "all" means no filter.
    """
    term = (search or "").lower()

    def matches(student: dict) -> bool:
        name = (student.get("name") or "").lower()
        email = (student.get("email") or "").lower()
        if term and term not in name and term not in email:
            return False
        if course and course != "all" and student.get("course") != course:
            return False
        if status and status != "all" and student.get("status") != status:
            return False
        return True

    return [s for s in students if matches(s)]


class StudentService(CollectionService):
    collection_key = "students"

    def search(self, search: Optional[str] = None, course: Optional[str] = None,
               status: Optional[str] = None) -> List[dict]:
        return filter_students(self.list(), search, course, status)

    def toggle_status(self, doc_id: str) -> dict:
        student = self.get(doc_id)
        new_status = "inactive" if student.get("status") == "active" else "active"
        return self.update(doc_id, {"status": new_status})


# ============================================================
# INTERNSHIPS
# ============================================================

class InternshipService(CollectionService):
    """
    Internship writes keep Faculty.internshipsPosted in step (best-effort).
    Reads carry the faculty name projection.
    """

    collection_key = "internships"

    def __init__(self, session: Optional[AdminSession] = None):
        super().__init__(session)
        self.projection = FacultyNameProjection()

    def list(self) -> List[dict]:
        return self.projection(self.store.list())

    def get(self, doc_id: str) -> dict:
        return self.projection([self.store.get(doc_id)])[0]

    def subscribe(self, on_change: SnapshotCallback) -> SnapshotSubscription:
        return self.store.subscribe(on_change, projection=self.projection)

    def create(self, data: Dict[str, Any]) -> str:
        internship_id = self.writer.create(self.store, data)
        resync_faculty_counts(self.session, faculty_ids_to_resync(None, data))
        return internship_id

    def update(self, doc_id: str, data: Dict[str, Any]) -> dict:
        self.writer.require_session()
        current = self.store.get(doc_id)
        updated = super().update(doc_id, data)
        resync_faculty_counts(self.session, faculty_ids_to_resync(current.get("facultyId"), data))
        return updated

    def delete(self, doc_id: str) -> None:
        self.writer.require_session()
        current = self.store.get(doc_id)
        super().delete(doc_id)
        # Test assignments for this internship are left in place
        resync_faculty_counts(self.session, faculty_ids_to_resync(current.get("facultyId"), {}))


# ============================================================
# APPLICATIONS
# ============================================================

class ApplicationService(CollectionService):
    collection_key = "applications"

    def find_for(self, student_id: str, internship_id: str) -> Optional[dict]:
        """The application a student made to an internship, if any."""
        matches = self.store.find(studentId=student_id, internshipId=internship_id)
        return matches[0] if matches else None


# ============================================================
# TESTS
# ============================================================

def summarize_questions(questions: Any) -> Optional[Dict[str, int]]:
    """
    Count questions in a test's serialized question list.
    Returns None when the list cannot be parsed.

    Example:
        '[{"type": "mcq", ...}, {"type": "text", ...}]'
        -> {"total": 2, "mcq": 1, "subjective": 1}
    """
    try:
        parsed = json.loads(questions) if isinstance(questions, str) else questions
    except (TypeError, ValueError):
        return None
    if not isinstance(parsed, list):
        return None
    types = [q.get("type") if isinstance(q, dict) else None for q in parsed]
    return {
        "total": len(parsed),
        "mcq": types.count("mcq"),
        "subjective": types.count("text"),
    }


def filter_tests(tests: List[dict], assignments: List[dict], view: str = "all") -> List[dict]:
    """
    all       -> every test
    assigned  -> tests with any assignment
    completed -> tests with a completed assignment
    pending   -> tests with an assignment still in "assigned"
    """
    if view not in TEST_VIEWS:
        raise ValueError(f"Unknown test view: {view}")
    if view == "all":
        return tests
    if view == "assigned":
        wanted = {a.get("testId") for a in assignments}
    elif view == "completed":
        wanted = {a.get("testId") for a in assignments if a.get("status") == "completed"}
    else:
        wanted = {a.get("testId") for a in assignments if a.get("status") == "assigned"}
    return [t for t in tests if t.get("id") in wanted]


class TestService(CollectionService):
    __test__ = False
    collection_key = "tests"

    def create(self, data: Dict[str, Any]) -> str:
        return self.writer.create(self.store, data)

    def list_view(self, view: str = "all") -> List[dict]:
        assignments = get_store("test_assignments").list() if view != "all" else []
        return filter_tests(self.list(), assignments, view)


# ============================================================
# TEST ASSIGNMENTS
# ============================================================

class TestAssignmentService(CollectionService):
    __test__ = False
    collection_key = "test_assignments"

    def assign_test(self, student_id: str, internship_id: str, test_id: str) -> str:
        """
        Assign a test to a student for one internship. The student must have
        applied to that internship; the application id is stored with the
        assignment.
        """
        self.writer.require_session()
        application = ApplicationService(self.session).find_for(student_id, internship_id)
        if application is None:
            raise ApplicationNotFoundError("No application found for this student and internship")

        return self.writer.create(
            self.store,
            {
                "studentId": student_id,
                "internshipId": internship_id,
                "testId": test_id,
                "applicationId": application["id"],
            },
            fields=ASSIGN_FIELDS,
        )

    def update_assignment_status(self, doc_id: str, status: str) -> dict:
        if status not in ASSIGNMENT_STATUSES:
            raise ValueError(f"Unknown assignment status: {status}")
        return self.update(doc_id, {"status": status})


# ============================================================
# ANALYTICS
# ============================================================

def active_user_count(now: Optional[datetime] = None) -> int:
    """Students plus faculty whose lastActive is today (UTC) or later."""
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    query = {"lastActive": {"$gte": today}}
    students = get_store("students").collection.count_documents(query)
    faculty = get_store("faculty").collection.count_documents(query)
    return students + faculty


def collection_totals() -> Dict[str, int]:
    keys = ("faculty", "students", "internships", "applications", "tests", "test_assignments")
    return {key: get_store(key).count() for key in keys}


# ============================================================
# CONVENIENCE FUNCTION: Get all services
# ============================================================

def get_admin_services(session: Optional[AdminSession] = None) -> dict:
    """
    Get all admin service instances bound to one session.

    Usage:
        services = get_admin_services(session)
        services['faculty'].create({...})
    """
    return {
        "faculty": FacultyService(session),
        "students": StudentService(session),
        "internships": InternshipService(session),
        "applications": ApplicationService(session),
        "tests": TestService(session),
        "test_assignments": TestAssignmentService(session),
    }
