"""
Derived aggregate: Faculty.internshipsPosted

internshipsPosted is not maintained transactionally. It is recomputed by
re-querying every internship that references the faculty member, then
written back with updatedAt. The read-count-then-write sequence takes no
lock, so two concurrent recounts for the same faculty are last-writer-wins.

Callers treat the count as advisory: a failed recount is logged and never
fails the internship write that triggered it.
"""

import logging
from typing import Iterable, List, Optional

from pymongo.errors import PyMongoError

from superadmin.core.errors import AggregateSyncError, DashboardError
from superadmin.models.session import AdminSession
from superadmin.services.document_store import get_store
from superadmin.services.resilient_writer import require_session, utcnow

logger = logging.getLogger(__name__)


def sync_faculty_internship_count(faculty_id: str, session: Optional[AdminSession]) -> int:
    """
    Set Faculty.internshipsPosted to the number of internships whose
    facultyId is `faculty_id`. Returns the count.

    Raises:
        AuthorizationError: no valid session
        NotFoundError: faculty document missing
        AggregateSyncError: the store failed mid-way
    """
    require_session(session)
    logger.info("Updating internship count for faculty ID: %s", faculty_id)

    internships = get_store("internships")
    faculty = get_store("faculty")
    try:
        count = internships.count(facultyId=faculty_id)
        logger.debug("Found %s internships for faculty ID: %s", count, faculty_id)
        faculty.update(faculty_id, {"internshipsPosted": count, "updatedAt": utcnow()})
    except PyMongoError as e:
        raise AggregateSyncError(
            f"Could not update internship count for faculty {faculty_id}: {e}"
        ) from e

    logger.info("Internship count for faculty ID %s is now %s", faculty_id, count)
    return count


def faculty_ids_to_resync(current_faculty_id: Optional[str], changes: dict) -> List[str]:
    """
    Which faculty counters an internship write invalidates.

    - reference untouched or set to the same value -> the current faculty
    - reference moved A -> B                        -> A and B
    - reference cleared                             -> the old faculty
    """
    new_faculty_id = changes.get("facultyId") if "facultyId" in changes else current_faculty_id
    ids = [f for f in (current_faculty_id, new_faculty_id) if f]
    return list(dict.fromkeys(ids))


def resync_faculty_counts(session: Optional[AdminSession], faculty_ids: Iterable[str]) -> List[str]:
    """
    Recount each faculty in turn. A failure for one faculty is logged and
    swallowed and does not stop the others. Returns the ids that synced.
    """
    synced = []
    for faculty_id in faculty_ids:
        try:
            sync_faculty_internship_count(faculty_id, session)
            synced.append(faculty_id)
        except DashboardError as e:
            logger.warning("Failed to update faculty internship count for %s: %s", faculty_id, e)
    return synced
