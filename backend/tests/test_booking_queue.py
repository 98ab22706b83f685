import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from daysheets.crud import crud_selection
from daysheets.main import app
from daysheets.models import Hold, NotificationEvent, Selection, SelectionGroup, Ticketing, UserRole
from daysheets.services import booking_queue_service
from daysheets.services.booking_queue_service import group_queue_items, sort_queue_items, validate_ticket_batch
from daysheets.utils.errors import ValidationError

from factories import auth_headers, make_option, make_tour, make_user, setup_app


def selected_leg(db, client, agent, passengers=("Ann Lee", "Bob Ray"), departure=date(2026, 11, 2)):
    """Seed one pooled group on a fresh leg and select an option for it."""
    artist, project, leg, people = make_tour(db, passengers=passengers, departure=departure)
    option = make_option(db, leg)
    headers = auth_headers(agent)
    client.post(f"/api/legs/{leg.id}/selection-groups", headers=headers)
    group = db.query(SelectionGroup).filter_by(leg_id=leg.id).one()
    res = client.post(f"/api/selection-groups/{group.id}/select", json={"option_id": option.id}, headers=headers)
    assert res.status_code == 200, res.text
    return leg, people, option


def ticket(client, agent, option, leg, entries):
    return client.post(
        "/api/queue/ticket",
        json={"option_id": option.id, "leg_id": leg.id, "entries": entries},
        headers=auth_headers(agent),
    )


def test_queue_lists_items_with_progress():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, people, option = selected_leg(db, client, agent)

    res = client.get("/api/queue", headers=auth_headers(agent))
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["totalCount"] == 1
    item = body["selections"][0]
    assert item["option"]["id"] == option.id
    assert item["leg"]["id"] == leg.id
    assert item["artist"]["name"] == "The Band"
    assert item["ticketedCount"] == 0
    assert item["totalPassengers"] == 2
    assert item["holds"] == []


def test_queue_ordering_and_grouping():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    late_leg, _, _ = selected_leg(db, client, agent, departure=date(2026, 12, 20))
    early_leg, _, _ = selected_leg(db, client, agent, departure=date(2026, 11, 1))
    held_leg, held_people, held_option = selected_leg(db, client, agent, departure=date(2027, 1, 5))

    res = client.post(
        "/api/queue/holds",
        json={"option_id": held_option.id, "passenger_id": held_people[0].id, "hours": 6},
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text

    res = client.get("/api/queue?grouped=true", headers=auth_headers(agent))
    body = res.json()
    assert [i["leg"]["id"] for i in body["selections"]] == [held_leg.id, early_leg.id, late_leg.id]
    assert len(body["selections"][0]["holds"]) == 1
    assert [p["legs"][0]["leg"]["id"] for p in body["projects"]] == [held_leg.id, early_leg.id, late_leg.id]


def test_sort_and_group_helpers():
    now = datetime(2026, 10, 18, 12, 0)

    def item(leg_id, project_id, departure, selected_minutes, expiry=None):
        return {
            "leg": {"id": leg_id, "departure_date": departure},
            "project": {"id": project_id},
            "artist": {"id": "a"},
            "holds": [{"expires_at": expiry}] if expiry else [],
            "selected_at": now + timedelta(minutes=selected_minutes),
        }

    undated = item("l1", "p1", None, 0)
    later = item("l2", "p1", date(2026, 12, 1), 5)
    sooner = item("l3", "p2", date(2026, 11, 1), 10)
    held = item("l4", "p2", date(2027, 1, 1), 20, expiry=now + timedelta(hours=2))
    tie = item("l2", "p1", date(2026, 12, 1), 1)

    ordered = sort_queue_items([undated, later, sooner, held, tie])
    assert ordered == [held, sooner, tie, later, undated]

    grouped = group_queue_items(ordered)
    assert [p["project"]["id"] for p in grouped] == ["p2", "p1"]
    assert [len(leg["items"]) for leg in grouped[1]["legs"]] == [2, 1]


def test_queue_filters_by_artist_and_requires_staff():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, _, _ = selected_leg(db, client, agent)
    selected_leg(db, client, agent)
    artist_id = leg.project.artist_id

    res = client.get(f"/api/queue?artist={artist_id}", headers=auth_headers(agent))
    assert res.json()["totalCount"] == 1

    customer = make_user(db, "client@test.com", UserRole.CLIENT)
    assert client.get("/api/queue", headers=auth_headers(customer)).status_code == 403
    assert client.get("/api/queue").status_code == 401


def test_queue_degrades_to_empty_on_database_error(monkeypatch):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)

    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(crud_selection, "get_queue_selections", broken)
    res = client.get("/api/queue", headers=auth_headers(agent))
    assert res.status_code == 200
    assert res.json() == {"selections": [], "totalCount": 0}


def test_hold_validation():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, people, option = selected_leg(db, client, agent)
    _, strangers, _ = selected_leg(db, client, agent, passengers=("Zed Zee",))
    headers = auth_headers(agent)

    res = client.post(
        "/api/queue/holds",
        json={"option_id": option.id, "passenger_id": people[0].id, "hours": 73},
        headers=headers,
    )
    assert res.status_code == 400
    res = client.post(
        "/api/queue/holds",
        json={"option_id": option.id, "passenger_id": strangers[0].id},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Passenger is not assigned to this leg"

    res = client.post(
        "/api/queue/holds",
        json={"option_id": option.id, "passenger_id": people[1].id},
        headers=headers,
    )
    assert res.status_code == 201
    hold = db.query(Hold).one()
    assert timedelta(hours=23) < hold.expires_at - hold.created_at <= timedelta(hours=24, minutes=1)
    assert db.query(NotificationEvent).filter_by(title="Flight hold placed").count() == 1


def test_ticketing_rejects_bad_batches_before_writing():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, people, option = selected_leg(db, client, agent)
    ann, bob = people

    res = ticket(client, agent, option, leg, [{"passengerId": ann.id, "pnr": "ABC12", "pricePaid": "100"}])
    assert res.status_code == 400
    assert res.json()["detail"]["field_errors"] == {"entries.0.pnr": "PNR must be exactly 6 characters"}

    res = ticket(
        client,
        agent,
        option,
        leg,
        [
            {"passengerId": ann.id, "pnr": "abc123", "pricePaid": "100"},
            {"passengerId": bob.id, "pnr": "ABC123", "pricePaid": "0"},
        ],
    )
    assert res.status_code == 400
    errors = res.json()["detail"]["field_errors"]
    assert errors["entries.1.pnr"] == "PNR must be unique per passenger"
    assert errors["entries.1.pricePaid"] == "Price must be greater than 0"

    res = ticket(client, agent, option, leg, [])
    assert res.status_code == 400
    assert db.query(Ticketing).count() == 0


def test_ticketing_full_group_leaves_the_queue():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, people, option = selected_leg(db, client, agent)
    ann, bob = people

    res = ticket(client, agent, option, leg, [{"passengerId": ann.id, "pnr": "abc123", "pricePaid": "420.50"}])
    assert res.json() == {"success": True, "ticketed": 1}
    assert db.query(Ticketing).one().pnr == "ABC123"
    queue = client.get("/api/queue", headers=auth_headers(agent)).json()
    assert queue["selections"][0]["ticketedCount"] == 1

    res = ticket(client, agent, option, leg, [{"passengerId": ann.id, "pnr": "XYZ789", "pricePaid": "1"}])
    assert res.status_code == 409
    assert res.json()["detail"]["message"] == "Passenger is already ticketed for this leg"

    res = ticket(client, agent, option, leg, [{"passengerId": bob.id, "pnr": "XYZ789", "pricePaid": "420.50"}])
    assert res.status_code == 200
    db.expire_all()
    assert db.query(Selection).filter_by(is_active=True).count() == 0
    assert client.get("/api/queue", headers=auth_headers(agent)).json()["totalCount"] == 0


def test_ticketing_passenger_not_on_leg():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, _, option = selected_leg(db, client, agent)
    _, strangers, _ = selected_leg(db, client, agent, passengers=("Zed Zee",))

    res = ticket(client, agent, option, leg, [{"passengerId": strangers[0].id, "pnr": "QWE123", "pricePaid": "5"}])
    assert res.status_code == 400


def test_hold_without_hours_uses_configured_default(monkeypatch):
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    _, people, option = selected_leg(db, client, agent)
    monkeypatch.setattr(booking_queue_service.settings, "HOLD_DEFAULT_HOURS", 6)

    res = client.post(
        "/api/queue/holds",
        json={"option_id": option.id, "passenger_id": people[0].id},
        headers=auth_headers(agent),
    )
    assert res.status_code == 201, res.text
    hold = db.query(Hold).one()
    assert timedelta(hours=5) < hold.expires_at - hold.created_at <= timedelta(hours=6, minutes=1)


def test_ticket_prices_are_rounded_to_cents_before_checking():
    passenger = str(uuid.uuid4())
    with pytest.raises(ValidationError) as exc:
        validate_ticket_batch([{"passengerId": passenger, "pnr": "ABC123", "pricePaid": "0.004"}])
    assert exc.value.field_errors == {"entries.0.pricePaid": "Price must be greater than 0"}

    cleaned = validate_ticket_batch([{"passengerId": passenger, "pnr": "abc123", "pricePaid": "19.999"}])
    assert cleaned[0]["price_paid"] == Decimal("20.00")
    assert cleaned[0]["pnr"] == "ABC123"


def test_remove_hold_releases_the_passenger():
    Session = setup_app()
    db = Session()
    agent = make_user(db, "agent@test.com")
    client = TestClient(app)
    leg, people, option = selected_leg(db, client, agent)
    customer = make_user(db, "client@test.com", UserRole.CLIENT, artists=[leg.project.artist])
    for person in people:
        client.post(
            "/api/queue/holds",
            json={"option_id": option.id, "passenger_id": person.id},
            headers=auth_headers(agent),
        )
    url = f"/api/options/{option.id}/holds/{people[0].id}"

    res = client.delete(url, headers=auth_headers(customer))
    assert res.status_code == 403
    assert res.json()["detail"]["message"] == "Only agents can place holds"

    assert client.delete(url, headers=auth_headers(agent)).status_code == 204
    assert [h.passenger_id for h in db.query(Hold).all()] == [people[1].id]
    item = client.get("/api/queue", headers=auth_headers(agent)).json()["selections"][0]
    assert [h["passenger_id"] for h in item["holds"]] == [people[1].id]

    res = client.delete(url, headers=auth_headers(agent))
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "Hold not found"
