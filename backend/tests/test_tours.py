import uuid

import pytest
from fastapi.testclient import TestClient

from daysheets.main import app
from daysheets.models import Artist, Leg, LegPassenger, PersonnelStatus, Project, TourPersonnel, UserRole

from factories import auth_headers, make_tour, make_user, setup_app


@pytest.fixture
def env():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    artist, project, leg, people = make_tour(db)
    return db, TestClient(app), agent, artist, project, leg, people


def test_artists_are_staff_only_and_sorted(env):
    db, client, agent, artist, _, _, _ = env
    db.add_all([Artist(name="Aurora"), Artist(name="Zed", is_active=False)])
    db.commit()
    customer = make_user(db, "client@test.com", UserRole.CLIENT, artists=[artist])

    res = client.get("/api/artists", headers=auth_headers(agent))
    assert res.status_code == 200
    assert [a["name"] for a in res.json()] == ["Aurora", "The Band"]
    res = client.get("/api/artists?active=false", headers=auth_headers(agent))
    assert [a["name"] for a in res.json()] == ["Aurora", "The Band", "Zed"]

    assert client.get("/api/artists").status_code == 401
    res = client.get("/api/artists", headers=auth_headers(customer))
    assert res.status_code == 403
    assert res.json()["detail"]["message"] == "Employee access required"


def test_create_tour(env):
    db, client, agent, artist, _, _, _ = env

    res = client.post(
        "/api/projects",
        json={
            "name": "  Winter Run  ",
            "artist_id": artist.id,
            "type": "event",
            "start_date": "2026-12-01",
            "end_date": "2026-12-20",
        },
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["name"] == "Winter Run"
    assert body["type"] == "event"
    assert body["is_active"] is True
    project = db.get(Project, body["id"])
    assert project.created_by == agent.id


@pytest.mark.parametrize(
    "payload, status, message",
    [
        ({"name": "   "}, 400, "Tour name is required"),
        ({"name": "x" * 201}, 400, "Tour name too long"),
        ({"artist_id": "nope"}, 400, "Invalid artist_id"),
        ({"start_date": "2026-12-20", "end_date": "2026-12-01"}, 400, "End date must be after start date"),
        ({"artist_id": str(uuid.uuid4())}, 404, "Artist not found or access denied"),
    ],
)
def test_create_tour_rejects_bad_input(env, payload, status, message):
    db, client, agent, artist, _, _, _ = env
    body = dict({"name": "Tour", "artist_id": artist.id}, **payload)

    res = client.post("/api/projects", json=body, headers=auth_headers(agent))
    assert res.status_code == status
    assert res.json()["detail"]["message"] == message
    assert db.query(Project).count() == 1


def test_clients_cannot_manage_tours(env):
    db, client, _, artist, project, leg, people = env
    customer = make_user(db, "client@test.com", UserRole.CLIENT, artists=[artist])
    headers = auth_headers(customer)

    attempts = [
        client.post("/api/projects", json={"name": "Mine", "artist_id": artist.id}, headers=headers),
        client.post(f"/api/projects/{project.id}/legs", json={"destination_city": "Paris"}, headers=headers),
        client.post(f"/api/projects/{project.id}/personnel", json={"full_name": "Eve Doe", "party": "A Party"}, headers=headers),
        client.patch(f"/api/personnel/{people[0].id}", json={"notes": "hi"}, headers=headers),
        client.post(f"/api/legs/{leg.id}/passengers", json={"passenger_ids": [people[0].id]}, headers=headers),
        client.delete(f"/api/legs/{leg.id}/passengers/{people[0].id}", headers=headers),
    ]
    for res in attempts:
        assert res.status_code == 403
        assert res.json()["detail"]["message"] == "Only agents can manage tours"


def test_legs_are_numbered_in_creation_order(env):
    db, client, agent, _, project, _, _ = env
    # make_tour's leg carries the default order of 1
    url = f"/api/projects/{project.id}/legs"

    res = client.post(
        url,
        json={"destination_city": " Chicago ", "origin_city": "", "departure_date": "2026-11-05"},
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["leg_order"] == 2
    assert body["destination_city"] == "Chicago"
    assert body["origin_city"] is None

    res = client.post(url, json={"destination_city": "Boston"}, headers=auth_headers(agent))
    assert res.json()["leg_order"] == 3
    assert db.get(Leg, res.json()["id"]).created_by == agent.id


def test_first_leg_of_new_project_is_number_one(env):
    _, client, agent, artist, _, _, _ = env
    project = client.post("/api/projects", json={"name": "Solo", "artist_id": artist.id}, headers=auth_headers(agent)).json()

    res = client.post(f"/api/projects/{project['id']}/legs", json={"destination_city": "Rome"}, headers=auth_headers(agent))
    assert res.json()["leg_order"] == 1


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"destination_city": "X"}, "Destination must be at least 2 characters"),
        ({"destination_city": "X" * 81}, "Destination must be less than 80 characters"),
        (
            {"destination_city": "Paris", "departure_date": "2026-11-05", "arrival_date": "2026-11-04"},
            "Arrival date must be on or after departure date",
        ),
    ],
)
def test_create_leg_validation(env, payload, message):
    db, client, agent, _, project, _, _ = env

    res = client.post(f"/api/projects/{project.id}/legs", json=payload, headers=auth_headers(agent))
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == message
    assert db.query(Leg).count() == 1


def test_create_leg_unknown_project(env):
    _, client, agent, _, _, _, _ = env
    res = client.post(f"/api/projects/{uuid.uuid4()}/legs", json={"destination_city": "Paris"}, headers=auth_headers(agent))
    assert res.status_code == 404


def test_add_and_update_personnel(env):
    db, client, agent, _, project, _, _ = env

    res = client.post(
        f"/api/projects/{project.id}/personnel",
        json={
            "full_name": "  Cara   Mendez ",
            "party": "B Party",
            "email": " Cara@Example.com ",
            "phone": "",
            "seat_pref": "Aisle",
        },
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text
    person = res.json()
    assert person["full_name"] == "Cara Mendez"
    assert person["email"] == "cara@example.com"
    assert person["phone"] is None
    assert person["status"] == "active"

    res = client.patch(
        f"/api/personnel/{person['id']}",
        json={"status": "inactive", "notes": "Vegetarian"},
        headers=auth_headers(agent),
    )
    assert res.status_code == 200, res.text
    db.expire_all()
    row = db.get(TourPersonnel, person["id"])
    assert row.status == PersonnelStatus.INACTIVE
    assert row.notes == "Vegetarian"
    # untouched fields keep their values
    assert row.party == "B Party"
    assert row.seat_pref == "Aisle"


def test_personnel_validation(env):
    db, client, agent, _, project, _, people = env
    url = f"/api/projects/{project.id}/personnel"

    res = client.post(url, json={"full_name": "Cara Mendez"}, headers=auth_headers(agent))
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Party is required"

    res = client.post(
        url,
        json={"full_name": "Al", "party": "E Party", "email": "not-an-email", "phone": "1" * 41},
        headers=auth_headers(agent),
    )
    assert res.status_code == 400
    assert res.json()["detail"]["field_errors"] == {
        "full_name": "Full name must be at least 3 characters",
        "party": "Party must be one of: A Party, B Party, C Party, D Party",
        "email": "Invalid email format",
        "phone": "Phone must be less than 40 characters",
    }
    assert db.query(TourPersonnel).count() == len(people)

    res = client.patch(f"/api/personnel/{people[0].id}", json={"status": "retired"}, headers=auth_headers(agent))
    assert res.status_code == 422
    res = client.patch(f"/api/personnel/{uuid.uuid4()}", json={"notes": "x"}, headers=auth_headers(agent))
    assert res.status_code == 404


def test_assign_passengers_resets_individual_flag(env):
    db, client, agent, _, project, leg, people = env
    newcomer = TourPersonnel(project_id=project.id, full_name="Dee Fox")
    db.add(newcomer)
    db.query(LegPassenger).filter_by(passenger_id=people[0].id).update({"treat_as_individual": True})
    db.commit()

    res = client.post(
        f"/api/legs/{leg.id}/passengers",
        json={"passenger_ids": [people[0].id, newcomer.id, people[0].id]},
        headers=auth_headers(agent),
    )
    assert res.status_code == 200, res.text
    assert {r["passenger_id"] for r in res.json()} == {people[0].id, newcomer.id}

    db.expire_all()
    rows = {r.passenger_id: r.treat_as_individual for r in db.query(LegPassenger).filter_by(leg_id=leg.id)}
    assert rows == {people[0].id: False, people[1].id: False, newcomer.id: False}


def test_assign_rejects_people_from_other_projects(env):
    db, client, agent, _, _, leg, people = env
    _, _, _, strangers = make_tour(db, passengers=("Sam Stone",))

    res = client.post(
        f"/api/legs/{leg.id}/passengers",
        json={"passenger_ids": [people[0].id, strangers[0].id]},
        headers=auth_headers(agent),
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Passenger does not belong to this project"
    assert db.query(LegPassenger).filter_by(leg_id=leg.id).count() == 2

    res = client.post(f"/api/legs/{leg.id}/passengers", json={"passenger_ids": []}, headers=auth_headers(agent))
    assert res.status_code == 400


def test_flag_and_remove_passenger(env):
    db, client, agent, _, _, leg, people = env
    url = f"/api/legs/{leg.id}/passengers/{people[1].id}"

    res = client.patch(url, json={"treat_as_individual": True}, headers=auth_headers(agent))
    assert res.status_code == 200
    assert res.json() == {"leg_id": leg.id, "passenger_id": people[1].id, "treat_as_individual": True}

    res = client.delete(url, headers=auth_headers(agent))
    assert res.status_code == 204
    assert [r.passenger_id for r in db.query(LegPassenger).filter_by(leg_id=leg.id)] == [people[0].id]

    assert client.delete(url, headers=auth_headers(agent)).status_code == 404
    res = client.patch(url, json={"treat_as_individual": False}, headers=auth_headers(agent))
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "Passenger is not assigned to this leg"


def test_new_tour_through_to_selection_groups(env):
    _, client, agent, artist, _, _, _ = env
    headers = auth_headers(agent)

    project = client.post("/api/projects", json={"name": "Spring", "artist_id": artist.id}, headers=headers).json()
    leg = client.post(
        f"/api/projects/{project['id']}/legs",
        json={"origin_city": "Austin", "destination_city": "Denver"},
        headers=headers,
    ).json()
    ids = [
        client.post(
            f"/api/projects/{project['id']}/personnel",
            json={"full_name": name, "party": "A Party"},
            headers=headers,
        ).json()["id"]
        for name in ("Ann Lee", "Bob Ray", "Cy Twombly")
    ]
    client.post(f"/api/legs/{leg['id']}/passengers", json={"passenger_ids": ids}, headers=headers)
    client.patch(f"/api/legs/{leg['id']}/passengers/{ids[2]}", json={"treat_as_individual": True}, headers=headers)

    res = client.post(f"/api/legs/{leg['id']}/selection-groups", headers=headers)
    assert res.status_code == 201, res.text
    assert res.json()["details"] == {"individuals": 1, "grouped": 1, "totalPassengers": 3}
