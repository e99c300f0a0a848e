import pytest
from fastapi.testclient import TestClient

from app.errors import BackendError
from app.main import create_app
from app.services.memory_store import MemoryStudentStore


def test_create_read_update_delete_scenario(client):
    r = client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"})
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Student added"
    student_id = body["student"]["id"]
    assert body["student"]["_id"] == student_id

    r = client.get(f"/api/students/{student_id}")
    assert r.status_code == 200
    assert {k: r.json()[k] for k in ("name", "usn", "sem")} == {"name": "Asha", "usn": "U001", "sem": "3"}

    r = client.put(f"/api/students/{student_id}", json={"name": "Asha K", "usn": "U001", "sem": "4"})
    assert r.status_code == 200
    assert r.json()["message"] == "Student updated"
    assert r.json()["updated"]["sem"] == "4"
    assert r.json()["updated"]["name"] == "Asha K"

    r = client.delete(f"/api/students/{student_id}")
    assert r.status_code == 200
    assert r.json()["message"] == "Student deleted"
    assert r.json()["deleted"]["usn"] == "U001"

    r = client.get(f"/api/students/{student_id}")
    assert r.status_code == 404
    assert r.json()["detail"] == "Student not found"


@pytest.mark.parametrize("missing", ["name", "usn", "sem"])
def test_create_with_missing_field_is_rejected(client, missing):
    data = {"name": "Asha", "usn": "U001", "sem": "3"}
    del data[missing]
    r = client.post("/api/students", json=data)
    assert r.status_code == 400
    assert r.json()["detail"] == "Name, USN, and sem are required"
    assert client.get("/api/students").json() == []


def test_update_with_missing_field_is_rejected(client):
    student_id = client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"}).json()["student"]["id"]
    r = client.put(f"/api/students/{student_id}", json={"name": "Asha", "usn": "U001"})
    assert r.status_code == 400
    assert client.get(f"/api/students/{student_id}").json()["sem"] == "3"


def test_duplicate_usn_is_rejected(client):
    client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"})
    r = client.post("/api/students", json={"name": "Bob", "usn": "U001", "sem": "5"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Student with this USN already exists"


def test_update_to_taken_usn_is_rejected(client):
    client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"})
    bob_id = client.post("/api/students", json={"name": "Bob", "usn": "U002", "sem": "3"}).json()["student"]["id"]
    r = client.put(f"/api/students/{bob_id}", json={"name": "Bob", "usn": "U001", "sem": "3"})
    assert r.status_code == 400


def test_unknown_student_is_404_for_update_and_delete(client):
    assert client.put("/api/students/999", json={"name": "X", "usn": "U1", "sem": "1"}).status_code == 404
    assert client.delete("/api/students/999").status_code == 404
    assert client.get("/api/students/not-an-id").status_code == 404


def test_legacy_class_field_is_accepted_and_sem_emitted(client):
    r = client.post("/api/students", json={"name": "Asha", "usn": "U001", "class": "5"})
    assert r.status_code == 201
    assert r.json()["student"]["sem"] == "5"
    assert "class" not in r.json()["student"]


def test_numeric_semester_is_stored_as_text(client):
    r = client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": 3})
    assert r.status_code == 201
    assert r.json()["student"]["sem"] == "3"


def test_list_filters(client):
    for name, usn, sem in [("Anna", "U001", "3"), ("Sanjay", "U002", "5"), ("Bob", "U003", "3")]:
        client.post("/api/students", json={"name": name, "usn": usn, "sem": sem})

    assert {s["name"] for s in client.get("/api/students", params={"name": "an"}).json()} == {"Anna", "Sanjay"}
    assert [s["name"] for s in client.get("/api/students", params={"usn": "U003"}).json()] == ["Bob"]
    assert {s["name"] for s in client.get("/api/students", params={"sem": "3"}).json()} == {"Anna", "Bob"}
    assert len(client.get("/api/students", params={"name": ""}).json()) == 3
    assert client.get("/api/students", params={"usn": "nobody"}).json() == []


def test_malformed_body_is_400(client):
    r = client.post("/api/students", content="not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_created_at_only_under_database(client, store):
    student = client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"}).json()["student"]
    assert ("createdAt" in student) is store.durable


def test_connection_status_reports_storage_mode(client, store):
    r = client.get("/api/connection-status")
    assert r.json() == {"connected": store.durable, "usingInMemory": not store.durable}


def test_health_reports_storage_mode(memory_client):
    r = memory_client.get("/health")
    assert r.status_code == 200
    assert r.json()["storage"] == "memory"


def test_responses_carry_request_id(memory_client):
    r = memory_client.get("/api/students")
    assert r.headers["X-Request-ID"]


def test_client_view_is_served(memory_client):
    r = memory_client.get("/")
    assert r.status_code == 200
    assert "text/html" in r.headers["content-type"]
    assert memory_client.get("/script.js").status_code == 200


class BrokenStore(MemoryStudentStore):
    """Store whose backend fails on every call."""

    def list(self, filters=None):
        raise BackendError("connection reset")

    def get(self, student_id):
        raise BackendError("connection reset")

    def create(self, data):
        raise BackendError("disk full")

    def delete(self, student_id):
        raise BackendError("disk full")


def test_backend_errors_are_500_on_read_and_400_on_write():
    with TestClient(create_app(store=BrokenStore())) as c:
        assert c.get("/api/students").status_code == 500
        assert c.get("/api/students/1").status_code == 500

        r = c.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"})
        assert r.status_code == 400
        assert r.json()["detail"] == "disk full"
        assert c.delete("/api/students/1").status_code == 400


def test_collection_path_accepts_trailing_slash(memory_client):
    r = memory_client.post("/api/students/", json={"name": "Asha", "usn": "U001", "sem": "3"})
    assert r.status_code == 201
    assert len(memory_client.get("/api/students/").json()) == 1


@pytest.mark.parametrize("bad_id", ["²", "١"])
def test_non_ascii_digit_ids_are_404(memory_client, bad_id):
    memory_client.post("/api/students", json={"name": "Asha", "usn": "U001", "sem": "3"})
    assert memory_client.get(f"/api/students/{bad_id}").status_code == 404
    assert memory_client.delete(f"/api/students/{bad_id}").status_code == 404
    assert len(memory_client.get("/api/students").json()) == 1


def test_overlong_usn_is_400(client):
    r = client.post("/api/students", json={"name": "Asha", "usn": "U" * 65, "sem": "3"})
    assert r.status_code == 400
    assert r.json()["detail"] == "USN must be at most 64 characters"
