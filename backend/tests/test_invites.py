from datetime import timedelta

from fastapi.testclient import TestClient

from daysheets.main import app
from daysheets.models import ArtistAssignment, Invite, User, UserRole, UserStatus
from daysheets.models.base import utcnow
from daysheets.utils.auth import verify_password

from factories import auth_headers, make_tour, make_user, setup_app


def test_only_admins_create_invites():
    Session = setup_app()
    db = Session()
    admin = make_user(db, "admin@test.com", UserRole.ADMIN)
    agent = make_user(db, "agent@test.com")
    artist, _, _, _ = make_tour(db)
    client = TestClient(app)
    payload = {"email": " New@Client.com ", "role": "client", "artist_ids": [artist.id]}

    assert client.post("/api/invites", json=payload, headers=auth_headers(agent)).status_code == 403
    assert client.post("/api/invites", json=payload).status_code == 401

    res = client.post("/api/invites", json=payload, headers=auth_headers(admin))
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["email"] == "new@client.com"
    assert len(body["token"]) == 64
    invite = db.query(Invite).one()
    assert timedelta(days=6, hours=23) < invite.expires_at - utcnow() <= timedelta(days=7)


def test_invite_validation_rules():
    Session = setup_app()
    db = Session()
    admin = make_user(db, "admin@test.com", UserRole.ADMIN)
    client = TestClient(app)
    headers = auth_headers(admin)

    res = client.post("/api/invites", json={"email": "c@test.com", "role": "client"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Client invites need at least one artist"

    res = client.post("/api/invites", json={"email": "a@test.com", "role": "admin"}, headers=headers)
    assert res.status_code == 400

    res = client.post("/api/invites", json={"email": "nobody", "role": "agent"}, headers=headers)
    assert res.status_code == 400

    res = client.post("/api/invites", json={"email": "agent2@test.com", "role": "agent"}, headers=headers)
    assert res.status_code == 201


def test_validate_and_accept_client_invite():
    Session = setup_app()
    db = Session()
    admin = make_user(db, "admin@test.com", UserRole.ADMIN)
    artist, _, _, _ = make_tour(db)
    client = TestClient(app)
    token = client.post(
        "/api/invites",
        json={"email": "fan@test.com", "role": "client", "artist_ids": [artist.id]},
        headers=auth_headers(admin),
    ).json()["token"]

    res = client.get(f"/api/invites/validate?token={token}")
    assert res.status_code == 200
    assert res.json()["isValid"] is True
    assert res.json()["email"] == "fan@test.com"

    res = client.post(
        "/api/invites/accept",
        json={"token": token, "password": "longenough", "fullName": "Fan Person"},
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["success"] is True
    assert body["role"] == "client"

    user = db.query(User).filter_by(id=body["userId"]).one()
    assert user.status == UserStatus.ACTIVE
    assert verify_password("longenough", user.hashed_password)
    assert db.query(ArtistAssignment).filter_by(user_id=user.id, artist_id=artist.id).count() == 1

    # an accepted invite cannot be reused
    res = client.get(f"/api/invites/validate?token={token}")
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Invalid or expired invite"


def test_accept_requires_all_fields_and_open_invite():
    Session = setup_app()
    db = Session()
    db.add(
        Invite(
            email="late@test.com",
            role=UserRole.AGENT,
            artist_ids=[],
            token="a" * 64,
            expires_at=utcnow() - timedelta(minutes=1),
        )
    )
    db.commit()
    client = TestClient(app)

    res = client.post("/api/invites/accept", json={"token": "a" * 64, "password": "longenough"})
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Token, password, and full name are required"

    res = client.post("/api/invites/accept", json={"token": "a" * 64, "password": "short", "fullName": "L"})
    assert res.status_code == 400

    res = client.post(
        "/api/invites/accept", json={"token": "a" * 64, "password": "longenough", "fullName": "Late"}
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Invalid or expired invite"
    assert client.get("/api/invites/validate").status_code == 400
