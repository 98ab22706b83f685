from fastapi.testclient import TestClient

from daysheets.main import app

from factories import auth_headers, make_user, setup_app


def test_missing_body_field_is_422_with_field_errors():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)

    res = client.post(
        "/api/selection-groups/00000000-0000-4000-8000-000000000000/select",
        json={},
        headers=auth_headers(agent),
    )
    assert res.status_code == 422
    detail = res.json()["detail"]
    assert detail["message"] == "Invalid request"
    assert "option_id" in detail["field_errors"]
