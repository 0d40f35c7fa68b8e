from sqlmodel import Session

from app.core.config import settings
from app.models import Submission

from .conftest import png_bytes

FORM = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "email": "grace@example.com",
    "gradeLevel": "12",
    "title": "Cable organiser",
    "description": "Keeps desk cables tidy",
    "material": ["Plastic", "Wood"],
    "color": ["Black"],
    "function": ["Organization & Storage"],
}


def _files(*names, pdf=None):
    files = [("images", (name, png_bytes(), "image/png")) for name in names]
    if pdf is not None:
        files.append(("pdf", ("report.pdf", pdf, "application/pdf")))
    return files


def test_submit_creates_pending_submission(client, engine, storage):
    response = client.post("/api/submitIA", data=FORM, files=_files("front.png", "side view.png", pdf=b"%PDF-1.7 x"))
    assert response.status_code == 201
    submission = response.json()["submission"]
    assert submission["status"] == "pending"
    assert submission["material"] == ["Plastic", "Wood"]
    assert submission["firstName"] == "Grace"
    assert len(submission["imageUrls"]) == 2
    assert submission["imageUrls"][0].endswith("/images/00_front.png")
    assert submission["imageUrls"][1].endswith("/images/01_side_view.png")
    assert submission["pdfUrl"].endswith(f"{submission['id']}/report.pdf")
    for url in [*submission["imageUrls"], submission["pdfUrl"]]:
        assert storage.exists(storage.path_from_url(url))
    with Session(engine) as db:
        assert db.get(Submission, submission["id"]).status == "pending"


def test_submit_requires_an_image(client):
    response = client.post("/api/submitIA", data=FORM)
    assert response.status_code == 422
    assert response.json()["error"] == "At least one image is required"


def test_submit_rejects_missing_fields(client):
    data = dict(FORM, title="", email="")
    response = client.post("/api/submitIA", data=data, files=_files("a.png"))
    assert response.status_code == 422
    assert response.json()["error"] == "Missing required fields: email, title"


def test_submit_rejects_non_image_bytes(client, storage):
    files = [("images", ("fake.png", b"not an image", "image/png"))]
    response = client.post("/api/submitIA", data=FORM, files=files)
    assert response.status_code == 422
    assert "Invalid image file" in response.json()["error"]
    assert not storage.bucket_dir.exists() or not any(storage.bucket_dir.iterdir())


def test_submit_rejects_unknown_tags(client):
    data = dict(FORM, color=["Purple"])
    response = client.post("/api/submitIA", data=data, files=_files("a.png"))
    assert response.status_code == 422
    assert "Unknown color tag(s): Purple" in response.json()["error"]


def test_submit_rejects_invalid_pdf(client):
    response = client.post("/api/submitIA", data=FORM, files=_files("a.png", pdf=b"hello"))
    assert response.status_code == 422
    assert "Invalid PDF" in response.json()["error"]


def test_submit_rejects_oversized_file(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)
    response = client.post("/api/submitIA", data=FORM, files=_files("a.png"))
    assert response.status_code == 413
    assert response.json()["error"].startswith("File too large")


def test_gallery_lists_only_approved_with_tag_filters(client, make_submission):
    wood = make_submission(status="approved", material=["Wood"], color=["Red"])
    glass = make_submission(status="approved", material=["Glass"], color=["Blue"])
    make_submission(status="pending", material=["Wood"])
    make_submission(status="rejected", material=["Wood"])

    everything = client.get("/api/gallery").json()["submissions"]
    assert {item["id"] for item in everything} == {wood.id, glass.id}
    assert all("email" not in item for item in everything)

    wood_only = client.get("/api/gallery", params={"material": "Wood"}).json()["submissions"]
    assert [item["id"] for item in wood_only] == [wood.id]

    either = client.get("/api/gallery", params=[("material", "Wood"), ("material", "Glass")]).json()
    assert {item["id"] for item in either["submissions"]} == {wood.id, glass.id}

    none = client.get("/api/gallery", params={"material": "Wood", "color": "Blue"}).json()
    assert none["submissions"] == []


def test_gallery_rejects_unknown_filter_value(client):
    response = client.get("/api/gallery", params={"color": "Purple"})
    assert response.status_code == 422


def test_vocabulary(client):
    body = client.get("/api/vocabulary").json()
    assert body["color"] == ["Red", "Blue", "Green", "Black", "White", "Yellow"]
    assert "Accessibility & Mobility Solutions" in body["function"]


def test_health_reports_counts(client, make_submission):
    make_submission()
    make_submission(status="approved")
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["submissions"] == {"pending": 1, "approved": 1, "rejected": 0}


def test_logs_can_be_filtered_by_submission(client, make_submission):
    from .conftest import ADMIN_PASSWORD

    record = make_submission()
    client.post("/api/approveIA", json={"id": record.id, "password": ADMIN_PASSWORD})
    logs = client.get("/api/logs", params={"submissionId": record.id}).json()["logs"]
    assert logs
    assert all(entry["submission_id"] == record.id for entry in logs)
