from sqlmodel import Session

from app.models import Submission

from .conftest import ADMIN_PASSWORD


def _status(engine, submission_id):
    with Session(engine) as db:
        record = db.get(Submission, submission_id)
        return record.status if record else None


def test_approve_pending_submission(client, engine, make_submission):
    record = make_submission()
    response = client.post("/api/approveIA", json={"id": record.id, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["submission"]["status"] == "approved"
    assert body["submission"]["imageUrls"] == record.image_urls
    assert _status(engine, record.id) == "approved"


def test_reject_pending_submission(client, engine, make_submission):
    record = make_submission()
    response = client.post("/api/rejectIA", json={"id": record.id, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    assert _status(engine, record.id) == "rejected"


def test_wrong_password_is_unauthorized(client, engine, make_submission):
    record = make_submission()
    response = client.post("/api/approveIA", json={"id": record.id, "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert _status(engine, record.id) == "pending"


def test_missing_credential_is_unauthorized(client, make_submission):
    record = make_submission()
    response = client.post("/api/rejectIA", json={"id": record.id})
    assert response.status_code == 401


def test_missing_id(client):
    response = client.post("/api/approveIA", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing submission ID"


def test_unknown_id(client):
    response = client.post("/api/approveIA", json={"id": "does-not-exist", "password": ADMIN_PASSWORD})
    assert response.status_code == 404
    assert "not found" in response.json()["error"]


def test_approve_requires_pending(client, engine, make_submission):
    record = make_submission(status="rejected")
    response = client.post("/api/approveIA", json={"id": record.id, "password": ADMIN_PASSWORD})
    assert response.status_code == 409
    assert response.json()["error"] == "Cannot approve a submission that is rejected"
    assert _status(engine, record.id) == "rejected"


def test_update_submission_writes_all_editable_fields(client, engine, make_submission):
    record = make_submission(status="approved")
    reordered = list(reversed(record.image_urls))
    response = client.post(
        "/api/updateSubmission",
        json={
            "id": record.id,
            "title": "Reading Lamp",
            "description": "Updated",
            "material": ["Glass", "Alloy"],
            "color": [],
            "function": ["Health & Wellness"],
            "imageUrls": reordered,
            "password": ADMIN_PASSWORD,
        },
    )
    assert response.status_code == 200
    submission = response.json()["submission"]
    assert submission["title"] == "Reading Lamp"
    assert submission["material"] == ["Glass", "Alloy"]
    assert submission["status"] == "approved"
    with Session(engine) as db:
        stored = db.get(Submission, record.id)
        assert stored.image_urls == reordered
        assert stored.color == []
        assert stored.first_name == "Ada"


def test_partial_update_leaves_other_fields(client, engine, make_submission):
    record = make_submission(status="approved")
    response = client.post(
        "/api/updateSubmission",
        json={"id": record.id, "title": "Renamed", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    with Session(engine) as db:
        stored = db.get(Submission, record.id)
        assert stored.title == "Renamed"
        assert stored.description == "A desk lamp"
        assert stored.image_urls == record.image_urls
        assert stored.material == ["Wood"]
        assert stored.color == ["White"]


def test_update_cannot_claim_foreign_images(client, engine, storage, dashboard, make_submission):
    victim = make_submission(status="approved", images=("victim.png",))
    claimant = make_submission(status="rejected")
    response = client.post(
        "/api/updateSubmission",
        json={
            "id": claimant.id,
            "imageUrls": [*claimant.image_urls, victim.image_urls[0]],
            "password": ADMIN_PASSWORD,
        },
    )
    assert response.status_code == 422
    assert "reordering" in response.json()["error"]
    with Session(engine) as db:
        assert db.get(Submission, claimant.id).image_urls == claimant.image_urls

    dashboard.refresh()
    assert dashboard.permanent_delete(claimant.id).ok
    assert storage.exists(storage.path_from_url(victim.image_urls[0]))


def test_update_cannot_drop_images(client, engine, make_submission):
    record = make_submission()
    response = client.post(
        "/api/updateSubmission",
        json={"id": record.id, "imageUrls": record.image_urls[:1], "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 422
    with Session(engine) as db:
        assert db.get(Submission, record.id).image_urls == record.image_urls


def test_update_rejects_unknown_tag(client, engine, make_submission):
    record = make_submission()
    response = client.post(
        "/api/updateSubmission",
        json={"id": record.id, "title": "x", "material": ["Stone"], "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 422
    assert "Unknown material tag(s): Stone" in response.json()["error"]


def test_update_rejects_duplicate_images(client, make_submission):
    record = make_submission()
    response = client.post(
        "/api/updateSubmission",
        json={
            "id": record.id,
            "title": "x",
            "imageUrls": [record.image_urls[0], record.image_urls[0]],
            "password": ADMIN_PASSWORD,
        },
    )
    assert response.status_code == 422
    assert "Duplicate image URLs" in response.json()["error"]


def test_delete_submission_image(client, engine, storage, make_submission):
    record = make_submission(images=("a.png", "b.png", "c.png"))
    target = record.image_urls[1]
    response = client.post(
        "/api/deleteSubmissionImage",
        json={"id": record.id, "imageUrl": target, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    assert response.json()["imageUrls"] == [record.image_urls[0], record.image_urls[2]]
    assert not storage.exists(storage.path_from_url(target))
    assert storage.exists(storage.path_from_url(record.image_urls[0]))


def test_delete_unknown_image(client, make_submission):
    record = make_submission()
    response = client.post(
        "/api/deleteSubmissionImage",
        json={"id": record.id, "imageUrl": "http://testserver/media/submissions/x.png", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 404
    assert response.json()["error"].startswith("Image not found")
