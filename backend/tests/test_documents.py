from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from daysheets.crud import crud_document
from daysheets.main import app
from daysheets.models import DocumentKind, NotificationEvent, TourDocument, UserRole
from daysheets.utils import storage

from factories import auth_headers, make_tour, make_user, setup_app

PDF = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF"


@pytest.fixture
def bucket(monkeypatch):
    """Replace S3 calls with an in-memory dict."""
    objects = {}

    def upload_object(key, data, content_type):
        objects[key] = (data, content_type)

    def delete_object(key):
        objects.pop(key, None)

    def presign_get(key, expires_in=None):
        return f"https://storage.test/{key}?X-Amz-Expires={expires_in}"

    monkeypatch.setattr(storage, "upload_object", upload_object)
    monkeypatch.setattr(storage, "delete_object", delete_object)
    monkeypatch.setattr(storage, "presign_get", presign_get)
    return objects


def upload(client, user, project, title="Itinerary", kind="itinerary", content=PDF, content_type="application/pdf"):
    return client.post(
        f"/api/projects/{project.id}/documents",
        files={"file": ("itinerary.pdf", content, content_type)},
        data={"kind": kind, "title": title},
        headers=auth_headers(user),
    )


def add_document(db, project, kind, title, uploaded_at):
    doc = TourDocument(
        project_id=project.id,
        kind=kind,
        title=title,
        file_path=f"project/{project.id}/{title}.pdf",
        uploaded_at=uploaded_at,
    )
    db.add(doc)
    db.commit()
    return doc


def test_upload_stores_object_and_metadata(bucket):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    res = upload(client, agent, project, title="  Tour itinerary  ")
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["title"] == "Tour itinerary"
    assert body["kind"] == "itinerary"
    assert body["is_current"] is True
    assert body["file_path"].startswith(f"project/{project.id}/")
    assert body["file_path"].endswith(".pdf")
    assert bucket[body["file_path"]] == (PDF, "application/pdf")

    event = db.query(NotificationEvent).one()
    assert event.title == "New document available"
    assert event.body == "Tour itinerary"


def test_newer_upload_supersedes_current_flag(bucket):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    first = upload(client, agent, project, title="v1").json()
    second = upload(client, agent, project, title="v2").json()
    current = {d.id: d.is_current for d in db.query(TourDocument).all()}
    assert current == {first["id"]: False, second["id"]: True}


@pytest.mark.parametrize("filename", ["report.exe", "x./../../other-project/evil", "noext"])
def test_object_key_ignores_client_filename(bucket, filename):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    res = client.post(
        f"/api/projects/{project.id}/documents",
        files={"file": (filename, PDF, "application/pdf")},
        data={"kind": "itinerary", "title": "Itinerary"},
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text
    key = res.json()["file_path"]
    prefix = f"project/{project.id}/"
    assert key.startswith(prefix)
    assert key.endswith(".pdf")
    assert "/" not in key[len(prefix):]
    assert list(bucket) == [key]


def test_client_view_shows_latest_per_kind(bucket):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    artist, project, _, _ = make_tour(db)
    customer = make_user(db, "client@test.com", UserRole.CLIENT, artists=[artist])
    add_document(db, project, DocumentKind.ITINERARY, "itin-old", datetime(2026, 10, 1))
    add_document(db, project, DocumentKind.ITINERARY, "itin-new", datetime(2026, 10, 5))
    add_document(db, project, DocumentKind.INVOICE, "invoice", datetime(2026, 10, 3))
    client = TestClient(app)
    url = f"/api/projects/{project.id}/documents"

    employee = client.get(url, headers=auth_headers(agent)).json()
    assert [d["title"] for d in employee] == ["itin-new", "invoice", "itin-old"]

    as_client = client.get(f"{url}?view=client", headers=auth_headers(agent)).json()
    assert [d["title"] for d in as_client] == ["itin-new", "invoice"]

    # clients never get the employee view
    forced = client.get(f"{url}?view=employee", headers=auth_headers(customer)).json()
    assert [d["title"] for d in forced] == ["itin-new", "invoice"]


def test_client_of_another_artist_is_denied(bucket):
    Session = setup_app()
    db = Session()
    _, project, _, _ = make_tour(db)
    outsider = make_user(db, "other@test.com", UserRole.CLIENT)
    client = TestClient(app)

    res = client.get(f"/api/projects/{project.id}/documents", headers=auth_headers(outsider))
    assert res.status_code == 403
    assert upload(client, outsider, project).status_code == 403


def test_upload_rejects_non_pdf_and_oversize(bucket, monkeypatch):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    res = upload(client, agent, project, content=b"hello", content_type="text/plain")
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Only PDF files are allowed"

    monkeypatch.setattr(storage.settings, "MAX_DOCUMENT_BYTES", 10)
    res = upload(client, agent, project)
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "File size must be less than 10MB"

    res = upload(client, agent, project, title="")
    assert res.status_code in (400, 422)
    res = upload(client, agent, project, kind="boarding-pass")
    assert res.status_code == 400
    assert bucket == {}


def test_upload_without_file():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    res = client.post(
        f"/api/projects/{project.id}/documents",
        data={"kind": "itinerary", "title": "x"},
        headers=auth_headers(agent),
    )
    assert res.status_code == 422
    assert res.json()["detail"]["message"] == "No file provided"


def test_failed_metadata_write_removes_uploaded_object(bucket, monkeypatch):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)

    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud_document, "create_document", broken)
    res = upload(client, agent, project)
    assert res.status_code == 500
    assert "disk I/O error" in res.json()["detail"]["message"]
    assert bucket == {}


def test_delete_removes_row_then_object(bucket):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)
    older = upload(client, agent, project, title="v1").json()
    newer = upload(client, agent, project, title="v2").json()

    res = client.delete(f"/api/documents/{newer['id']}", headers=auth_headers(agent))
    assert res.status_code == 204
    assert newer["file_path"] not in bucket
    db.expire_all()
    remaining = db.query(TourDocument).one()
    assert remaining.id == older["id"]
    assert remaining.is_current is True


def test_delete_survives_storage_failure(bucket, monkeypatch):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    _, project, _, _ = make_tour(db)
    client = TestClient(app)
    doc = upload(client, agent, project).json()

    def broken_delete(key):
        raise storage.StorageError("Delete failed: timeout")

    monkeypatch.setattr(storage, "delete_object", broken_delete)
    res = client.delete(f"/api/documents/{doc['id']}", headers=auth_headers(agent))
    assert res.status_code == 204
    assert db.query(TourDocument).count() == 0


def test_rename_and_download_url(bucket):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    artist, project, _, _ = make_tour(db)
    customer = make_user(db, "client@test.com", UserRole.CLIENT, artists=[artist])
    outsider = make_user(db, "other@test.com", UserRole.CLIENT)
    client = TestClient(app)
    doc = upload(client, agent, project).json()

    res = client.patch(f"/api/documents/{doc['id']}", json={"title": "Final"}, headers=auth_headers(agent))
    assert res.json()["title"] == "Final"
    res = client.patch(f"/api/documents/{doc['id']}", json={"title": "x" * 256}, headers=auth_headers(agent))
    assert res.status_code == 400

    res = client.get(f"/api/documents/{doc['id']}/download-url", headers=auth_headers(customer))
    assert res.status_code == 200
    assert res.json() == {
        "url": f"https://storage.test/{doc['file_path']}?X-Amz-Expires=600",
        "expiresIn": 600,
    }
    res = client.get(f"/api/documents/{doc['id']}/download-url", headers=auth_headers(outsider))
    assert res.status_code == 403
