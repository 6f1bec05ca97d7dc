# tests/test_api.py
import json

import pytest
from starlette.websockets import WebSocketDisconnect

import superadmin.main as main_mod
from superadmin.services.document_store import get_store
from superadmin.services.session_service import register_account, resolve_session, sign_out

from conftest import wait_for

QUESTIONS = json.dumps([
    {"id": 1, "type": "mcq", "question": "2 + 2?", "options": ["3", "4"], "correctAnswer": 1},
    {"id": 2, "type": "text", "question": "Explain a closure."},
])


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_health_reports_mongo_state(client, monkeypatch):
    monkeypatch.setattr(main_mod, "test_mongo_connection", lambda: True)
    assert client.get("/health").json()["mongodb"] == "connected"


def test_startup_creates_indexes(client, fake_db):
    assert fake_db["users"].indexes == [("email", {"unique": True})]
    assert fake_db["internships"].indexes == [("facultyId", {})]


# ============================================================
# Auth
# ============================================================

def test_login_returns_token_and_client_record(client):
    register_account("root@example.com", "secret-pass")
    resp = client.post("/api/auth/login", json={"email": "root@example.com", "password": "secret-pass"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["displayName"] == "Super Admin"
    assert body["user"]["role"] == "superadmin"
    assert set(body["user"]) == {"id", "email", "displayName", "role"}


def test_bad_login_uses_auth_message(client):
    resp = client.post("/api/auth/login", json={"email": "root@example.com", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json() == {
        "detail": "Authentication error: Invalid email or password",
        "code": "auth/invalid-credentials",
    }


def test_anonymous_registration_is_refused(client):
    resp = client.post("/api/auth/register", json={"email": "intruder@example.com", "password": "secret-pass"})

    assert resp.status_code in (401, 403)
    assert get_store("users").find(email="intruder@example.com") == []


def test_super_admin_registers_accounts(client, auth_headers):
    payload = {"email": "second@example.com", "password": "secret-pass", "role": "faculty"}
    assert client.post("/api/auth/register", headers=auth_headers, json=payload).status_code == 201
    assert get_store("users").find(email="second@example.com")[0]["role"] == "faculty"

    resp = client.post("/api/auth/register", headers=auth_headers, json=payload)
    assert resp.status_code == 400
    assert resp.json()["code"] == "auth/email-already-in-use"


def test_routes_require_a_token(client):
    assert client.get("/api/faculty").status_code in (401, 403)


@pytest.mark.parametrize("method, path", [
    ("get", "/api/faculty"),
    ("get", "/api/students"),
    ("get", "/api/internships"),
    ("get", "/api/applications"),
    ("get", "/api/tests"),
    ("get", "/api/test-assignments"),
    ("get", "/api/analytics/overview"),
])
def test_faculty_accounts_cannot_use_admin_routes(client, faculty_headers, method, path):
    resp = getattr(client, method)(path, headers=faculty_headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "permission-denied"


def test_faculty_account_cannot_delete_or_register(client, faculty_headers):
    faculty_id = get_store("faculty").find(email="rao@example.com")[0]["id"]

    assert client.delete(f"/api/faculty/{faculty_id}", headers=faculty_headers).status_code == 403
    assert get_store("faculty").exists(faculty_id)
    resp = client.post("/api/auth/register", headers=faculty_headers,
                       json={"email": "boss@example.com", "password": "secret-pass"})
    assert resp.status_code == 403


def test_faculty_account_can_see_itself_and_sign_out(client, faculty_headers):
    assert client.get("/api/auth/me", headers=faculty_headers).json()["role"] == "faculty"
    assert client.post("/api/auth/logout", headers=faculty_headers).status_code == 200


def test_me_and_logout(client, auth_headers):
    me = client.get("/api/auth/me", headers=auth_headers)
    assert me.status_code == 200
    assert me.json()["email"] == "root@example.com"

    assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200
    assert client.get("/api/auth/me", headers=auth_headers).status_code == 401


# ============================================================
# Faculty + internships
# ============================================================

def test_faculty_and_internship_flow(client, auth_headers):
    resp = client.post("/api/faculty", headers=auth_headers, json={
        "name": "Dr. Rao", "email": "rao@example.com", "password": "faculty-pass", "department": "CSE",
    })
    assert resp.status_code == 201
    faculty_id = resp.json()["id"]

    resp = client.post("/api/internships", headers=auth_headers, json={
        "title": "Backend Intern", "facultyId": faculty_id, "stipend": 10000,
    })
    assert resp.status_code == 201
    internship_id = resp.json()["id"]

    faculty = client.get(f"/api/faculty/{faculty_id}", headers=auth_headers).json()
    assert faculty["internshipsPosted"] == 1
    assert "password" not in faculty

    listing = client.get("/api/internships", headers=auth_headers).json()
    assert listing["count"] == 1
    assert listing["items"][0]["facultyName"] == "Dr. Rao"
    assert listing["items"][0]["status"] == "active"

    client.delete(f"/api/internships/{internship_id}", headers=auth_headers)
    faculty = client.get(f"/api/faculty/{faculty_id}", headers=auth_headers).json()
    assert faculty["internshipsPosted"] == 0


def test_recount_endpoint(client, auth_headers):
    faculty_id = get_store("faculty").create({"name": "Dr. Rao", "internshipsPosted": 9})
    get_store("internships").create({"title": "A", "facultyId": faculty_id})

    resp = client.post(f"/api/faculty/{faculty_id}/recount", headers=auth_headers)

    assert resp.json() == {"id": faculty_id, "internshipsPosted": 1}


def test_missing_document_is_404(client, auth_headers):
    resp = client.get("/api/faculty/64b7f0c2a1b2c3d4e5f60718", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "store/not-found"
    assert resp.json()["detail"].startswith("Database error:")


def test_failed_write_is_reported_as_database_error(client, auth_headers, fake_db):
    from pymongo.errors import AutoReconnect

    student_id = get_store("students").create({"name": "Asha", "status": "active"})
    fake_db["students"].fail_next(AutoReconnect("down"), AutoReconnect("down"))

    resp = client.patch(f"/api/students/{student_id}/status", headers=auth_headers)

    assert resp.status_code == 502
    assert resp.json()["code"] == "store/write-failed"


def test_student_filters(client, auth_headers):
    get_store("students").create({"name": "Asha", "email": "asha@uni.edu", "course": "CSE", "status": "active"})
    get_store("students").create({"name": "Ravi", "email": "ravi@uni.edu", "course": "ECE", "status": "active"})

    resp = client.get("/api/students", headers=auth_headers, params={"course": "ECE"})

    assert [s["name"] for s in resp.json()["items"]] == ["Ravi"]


# ============================================================
# Tests + assignments
# ============================================================

def test_create_and_read_test_with_summary(client, auth_headers):
    resp = client.post("/api/tests", headers=auth_headers, json={
        "title": "Python Basics",
        "description": "Screening test for backend interns",
        "questions": QUESTIONS,
        "duration": 30,
    })
    assert resp.status_code == 201

    test = client.get(f"/api/tests/{resp.json()['id']}", headers=auth_headers).json()
    assert test["questionSummary"] == {"total": 2, "mcq": 1, "subjective": 1}


def test_create_test_rejects_non_list_questions(client, auth_headers):
    resp = client.post("/api/tests", headers=auth_headers, json={
        "title": "Broken",
        "description": "Questions are not a list",
        "questions": '{"type": "mcq"}',
        "duration": 30,
    })
    assert resp.status_code == 422


def test_assignment_without_application_is_rejected(client, auth_headers):
    resp = client.post("/api/test-assignments", headers=auth_headers, json={
        "studentId": "s1", "internshipId": "i1", "testId": "t1",
    })
    assert resp.status_code == 400
    assert resp.json() == {
        "detail": "Database error: No application found for this student and internship",
        "code": "store/failed-precondition",
    }


def test_assignment_flow_and_views(client, auth_headers):
    get_store("applications").create({"studentId": "s1", "internshipId": "i1"})
    test_id = get_store("tests").create({"title": "Python Basics", "questions": QUESTIONS})

    resp = client.post("/api/test-assignments", headers=auth_headers, json={
        "studentId": "s1", "internshipId": "i1", "testId": test_id,
    })
    assert resp.status_code == 201
    assignment_id = resp.json()["id"]

    pending = client.get("/api/tests", headers=auth_headers, params={"view": "pending"}).json()
    assert [t["id"] for t in pending["items"]] == [test_id]

    resp = client.patch(
        f"/api/test-assignments/{assignment_id}/status", headers=auth_headers, json={"status": "completed"}
    )
    assert resp.json()["status"] == "completed"

    completed = client.get("/api/tests", headers=auth_headers, params={"view": "completed"}).json()
    assert completed["count"] == 1


def test_overview(client, auth_headers):
    get_store("students").create({"name": "a"})
    body = client.get("/api/analytics/overview", headers=auth_headers).json()
    assert body["totals"]["students"] == 1
    assert body["active_users"] == 0


# ============================================================
# Realtime
# ============================================================

def test_websocket_streams_snapshots(client, auth_headers):
    get_store("faculty").create({"name": "Dr. A"})

    with client.websocket_connect(f"/api/ws/faculty?token={_token(auth_headers)}") as ws:
        first = ws.receive_json()
        assert [doc["name"] for doc in first] == ["Dr. A"]

        get_store("faculty").create({"name": "Dr. B"})
        second = ws.receive_json()
        assert sorted(doc["name"] for doc in second) == ["Dr. A", "Dr. B"]


def test_websocket_closes_streams_on_disconnect(client, auth_headers, fake_db):
    with client.websocket_connect(f"/api/ws/tests?token={_token(auth_headers)}") as ws:
        assert ws.receive_json() == []
    assert wait_for(lambda: fake_db["tests"].streams == [])


@pytest.mark.parametrize("path", ["/api/ws/faculty?token=bogus", "/api/ws/companies?token={token}"])
def test_websocket_rejects_bad_token_or_collection(client, auth_headers, path):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(path.format(token=_token(auth_headers))) as ws:
            ws.receive_json()
    assert exc_info.value.code == 1008


def test_websocket_rejects_faculty_accounts(client, faculty_headers, fake_db):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(f"/api/ws/students?token={_token(faculty_headers)}") as ws:
            ws.receive_json()
    assert exc_info.value.code == 1008
    assert fake_db["students"].streams == []


def test_websocket_stops_streaming_after_sign_out(client, auth_headers, fake_db):
    token = _token(auth_headers)
    with client.websocket_connect(f"/api/ws/faculty?token={token}") as ws:
        assert ws.receive_json() == []

        sign_out(resolve_session(token))
        get_store("faculty").create({"name": "Dr. Late"})

        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
        assert exc_info.value.code == 1008
    assert wait_for(lambda: fake_db["faculty"].streams == [])
