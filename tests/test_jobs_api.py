import uuid

import pytest

from app.models.job import Job
from tests.conftest import make_job


ENHANCE_PAYLOAD = {"novelId": "n1", "materialName": "Sword of Dawn"}


def test_requires_session(client):
    assert client.get("/jobs").status_code == 401
    assert client.get("/jobs/stream").status_code == 401
    res = client.post("/jobs", json={"type": "MATERIAL_ENHANCE", "payload": ENHANCE_PAYLOAD})
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}


def test_create_then_get(client, act_as, alice, queue):
    act_as(alice)

    res = client.post("/jobs", json={"type": "MATERIAL_ENHANCE", "payload": ENHANCE_PAYLOAD})
    assert res.status_code == 200
    job = res.json()["job"]
    assert job["status"] == "pending"
    assert job["type"] == "MATERIAL_ENHANCE"
    assert job["userId"] == str(alice.id)
    assert job["payload"] == ENHANCE_PAYLOAD
    assert job["result"] is None
    assert len(queue.sent) == 1

    res = client.get(f"/jobs/{job['id']}")
    assert res.status_code == 200
    assert res.json()["job"]["id"] == job["id"]


def test_create_accepts_legacy_input_key_and_lowercase_type(client, act_as, alice):
    act_as(alice)

    res = client.post(
        "/jobs",
        json={"type": "material_enhance", "input": ENHANCE_PAYLOAD, "providerConfigId": "cfg-1"},
    )

    assert res.status_code == 200
    job = res.json()["job"]
    assert job["type"] == "MATERIAL_ENHANCE"
    assert job["payload"]["providerConfigId"] == "cfg-1"


def test_create_rejects_unknown_type(client, act_as, alice, queue):
    act_as(alice)

    res = client.post("/jobs", json={"type": "MAKE_COFFEE", "payload": {}})

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Validation failed"
    assert body["fields"][0]["field"] == "type"
    assert queue.sent == []


def test_create_reports_payload_fields(client, act_as, alice, db):
    act_as(alice)

    res = client.post("/jobs", json={"type": "MATERIAL_ENHANCE", "payload": {"novelId": "n1"}})

    assert res.status_code == 400
    assert {"field": "payload.materialName", "message": "Field required"} in res.json()["fields"]
    assert db.query(Job).count() == 0


def test_create_rejects_oversized_payload(client, act_as, alice, db):
    act_as(alice)
    payload = {**ENHANCE_PAYLOAD, "currentDescription": "x" * (101 * 1024)}

    res = client.post("/jobs", json={"type": "MATERIAL_ENHANCE", "payload": payload})

    assert res.status_code == 413
    assert res.json() == {"error": "Payload too large"}
    assert db.query(Job).count() == 0


def test_create_when_queue_is_down(client, act_as, alice, queue, db):
    act_as(alice)
    queue.down = True

    res = client.post("/jobs", json={"type": "MATERIAL_ENHANCE", "payload": ENHANCE_PAYLOAD})

    assert res.status_code == 500
    assert res.json() == {"error": "Job queue unavailable, please retry", "retryable": True}
    job = db.query(Job).one()
    assert job.status == "failed"


def test_get_unknown_or_malformed_id(client, act_as, alice):
    act_as(alice)

    assert client.get(f"/jobs/{uuid.uuid4()}").status_code == 404
    res = client.get("/jobs/not-a-uuid")
    assert res.status_code == 404
    assert res.json() == {"error": "Job not found"}


def test_other_users_job_is_forbidden(client, act_as, db, alice, bob):
    job = make_job(db, alice)
    act_as(bob)

    assert client.get(f"/jobs/{job.id}").status_code == 403
    assert client.post(f"/jobs/{job.id}/cancel").status_code == 403
    db.refresh(job)
    assert job.status == "pending"


def test_admin_cannot_touch_another_users_job(client, act_as, db, alice, admin, queue):
    job = make_job(db, alice, queue_id="q-1")
    act_as(admin)

    assert client.get(f"/jobs/{job.id}").status_code == 403
    res = client.post(f"/jobs/{job.id}/cancel")
    assert res.status_code == 403
    assert res.json() == {"error": "Forbidden"}

    assert queue.revoked == []
    db.refresh(job)
    assert job.status == "pending"


def test_cancel_pending_job(client, act_as, db, alice, queue):
    job = make_job(db, alice, queue_id="q-1")
    act_as(alice)

    res = client.post(f"/jobs/{job.id}/cancel")

    assert res.status_code == 200
    assert res.json()["job"]["status"] == "cancelled"
    assert queue.revoked == ["q-1"]

    res = client.get(f"/jobs/{job.id}")
    assert res.json()["job"]["status"] == "cancelled"


@pytest.mark.parametrize("status", ["completed", "failed", "cancelled"])
def test_cancel_terminal_job_conflicts(client, act_as, db, alice, queue, status):
    job = make_job(db, alice, status=status, queue_id="q-1")
    db.query(Job).filter(Job.id == job.id).update({"result": {"text": "done"}})
    db.commit()
    act_as(alice)

    res = client.post(f"/jobs/{job.id}/cancel")

    assert res.status_code == 409
    body = res.json()
    assert body["code"] == "ALREADY_TERMINAL"
    assert body["job"]["status"] == status
    assert body["job"]["result"] == {"text": "done"}
    assert queue.revoked == []

    res = client.get(f"/jobs/{job.id}")
    assert res.json()["job"]["status"] == status


def test_list_jobs_with_cursor(client, act_as, db, alice, bob):
    for _ in range(3):
        make_job(db, alice)
    make_job(db, bob)
    act_as(alice)

    res = client.get("/jobs", params={"limit": 2})
    body = res.json()
    assert len(body["jobs"]) == 2
    assert body["hasMore"] is True

    res = client.get("/jobs", params={"limit": 2, "cursor": body["nextCursor"]})
    body = res.json()
    assert len(body["jobs"]) == 1
    assert body["hasMore"] is False
    assert body["nextCursor"] is None


def test_enhance_material_queues_a_job(client, act_as, alice, queue):
    act_as(alice)

    res = client.post(
        "/materials/enhance",
        json={**ENHANCE_PAYLOAD, "materialType": "item", "currentDescription": "An old blade."},
    )

    assert res.status_code == 200
    job = res.json()["job"]
    assert job["type"] == "MATERIAL_ENHANCE"
    assert job["payload"] == {
        "novelId": "n1",
        "materialName": "Sword of Dawn",
        "materialType": "item",
        "currentDescription": "An old blade.",
    }
    assert queue.sent[0][0] == "MATERIAL_ENHANCE"


def test_enhance_material_requires_name(client, act_as, alice):
    act_as(alice)

    res = client.post("/materials/enhance", json={"novelId": "n1"})

    assert res.status_code == 400
    assert res.json()["fields"][0]["field"] == "materialName"


def test_health(client):
    assert client.get("/").json() == {"status": "ok"}
