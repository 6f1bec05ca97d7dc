"""
Read-side projections applied to documents on their way out.

FacultyNameProjection left-joins the faculty display name onto internships:
every internship whose facultyId resolves gets a `facultyName` field.
Nothing is persisted. The faculty map is re-read on every call, so the
staleness window is one read: a list() sees current names, and a snapshot
subscription sees the names as of its latest delivery (renaming a faculty
member alone does not trigger an internship delivery).
"""

import logging
from typing import Dict, List, Optional

from pymongo.errors import PyMongoError

from superadmin.services.document_store import DocumentStore, get_store

logger = logging.getLogger(__name__)


class FacultyNameProjection:
    """Callable projection: internships -> internships with facultyName."""

    def __init__(self, faculty_store: Optional[DocumentStore] = None):
        self.faculty_store = faculty_store or get_store("faculty")

    def faculty_names(self) -> Dict[str, str]:
        return {doc["id"]: doc.get("name") for doc in self.faculty_store.list()}

    def __call__(self, internships: List[dict]) -> List[dict]:
        try:
            names = self.faculty_names()
        except PyMongoError as e:
            # Deliver internships without names rather than nothing
            logger.error("Error loading faculty names for internships: %s", e)
            return internships

        projected = []
        for internship in internships:
            faculty_id = internship.get("facultyId")
            if faculty_id and names.get(faculty_id):
                internship = {**internship, "facultyName": names[faculty_id]}
            projected.append(internship)
        return projected
