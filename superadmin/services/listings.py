"""
list_X() / on_X_change(callback) pairs, one per dashboard collection.

    faculty = list_faculty()
    sub = on_internships_change(lambda docs: print(len(docs)))
    ...
    sub.unsubscribe()

Reads need no session. Internship reads carry facultyName.
"""

from typing import List

from superadmin.services.document_store import SnapshotCallback, SnapshotSubscription, get_store
from superadmin.services.projections import FacultyNameProjection


def list_faculty() -> List[dict]:
    return get_store("faculty").list()


def on_faculty_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("faculty").subscribe(callback)


def list_students() -> List[dict]:
    return get_store("students").list()


def on_students_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("students").subscribe(callback)


def list_internships() -> List[dict]:
    return FacultyNameProjection()(get_store("internships").list())


def on_internships_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("internships").subscribe(callback, projection=FacultyNameProjection())


def list_applications() -> List[dict]:
    return get_store("applications").list()


def on_applications_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("applications").subscribe(callback)


def list_tests() -> List[dict]:
    return get_store("tests").list()


def on_tests_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("tests").subscribe(callback)


def list_test_assignments() -> List[dict]:
    return get_store("test_assignments").list()


def on_test_assignments_change(callback: SnapshotCallback) -> SnapshotSubscription:
    return get_store("test_assignments").subscribe(callback)


# Collections a client may stream: public name -> store key
SUBSCRIBERS = {
    "faculty": "faculty",
    "students": "students",
    "internships": "internships",
    "applications": "applications",
    "tests": "tests",
    "test-assignments": "test_assignments",
}


def open_subscription(name: str, callback: SnapshotCallback) -> SnapshotSubscription:
    """
    Build a subscription by public collection name without starting it
    (KeyError if not streamable). Call start() to open the change stream.
    """
    key = SUBSCRIBERS[name]
    projection = FacultyNameProjection() if key == "internships" else None
    return SnapshotSubscription(get_store(key), callback, projection)


def subscribe_collection(name: str, callback: SnapshotCallback) -> SnapshotSubscription:
    """Subscribe by public collection name (KeyError if not streamable)."""
    return open_subscription(name, callback).start()
