import httpx
import pytest
from fastapi.testclient import TestClient

import daysheets.services.flight_service as flight_service
from daysheets.main import app

AVS_FLIGHT = {
    "flight_status": "active",
    "flight": {"number": "2689", "iata": "AA2689"},
    "airline": {"name": "American Airlines", "iata": "AA"},
    "departure": {
        "iata": "PHX",
        "terminal": "4",
        "gate": "B12",
        "scheduled": "2026-10-18T10:15:00+00:00",
        "estimated": "2026-10-18T10:20:00+00:00",
        "actual": None,
        "delay": 5,
    },
    "arrival": {
        "iata": "LAX",
        "terminal": "0",
        "gate": "41A",
        "baggage": "3",
        "scheduled": "2026-10-18T11:43:00+00:00",
        "estimated": None,
        "actual": None,
        "delay": None,
    },
    "aircraft": {"registration": "N123AA", "iata": "A321"},
    "live": {"latitude": 33.9, "longitude": -118.4, "altitude": 9000, "speed_horizontal": 780},
}


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(flight_service.settings, "AVSTACK_BASE_URL", "https://avs.test/v1/")
    monkeypatch.setattr(flight_service.settings, "AVSTACK_ACCESS_KEY", "key")


def fake_response(payload, status_code=200):
    return httpx.Response(status_code, json=payload, request=httpx.Request("GET", "https://avs.test/v1/flights"))


def test_map_avs_item():
    data = flight_service.map_avs_item(AVS_FLIGHT)
    assert data["flight_iata"] == "AA2689"
    assert data["airline_name"] == "American Airlines"
    assert data["departure"]["gate"] == "B12"
    assert data["arrival"]["baggage"] == "3"
    assert data["aircraft"] == {"registration": "N123AA", "type": "A321"}
    assert data["live"]["speed"] == 780

    sparse = flight_service.map_avs_item({"flight": {"number": "12"}, "airline": {"iata": "DL"}})
    assert sparse["flight_iata"] == "DL12"
    assert sparse["aircraft"] is None
    assert sparse["live"] is None


def test_build_query_prefers_flight_iata():
    assert flight_service.build_query({"flight_iata": "AA2689", "dep_iata": "PHX"}) == {
        "flight_iata": "AA2689",
        "limit": 1,
    }
    assert flight_service.build_query({"airline_iata": "AA", "flight_number": "2689", "dep_iata": None}) == {
        "airline_iata": "AA",
        "flight_number": "2689",
        "limit": 1,
    }


def test_unconfigured_answers_503_even_without_params(monkeypatch):
    monkeypatch.setattr(flight_service.settings, "AVSTACK_ACCESS_KEY", "")
    client = TestClient(app)
    assert client.get("/api/flight").status_code == 503
    assert client.get("/api/flight?flight_iata=AA2689").status_code == 503


def test_missing_params(configured):
    client = TestClient(app)
    res = client.get("/api/flight")
    assert res.status_code == 400
    assert res.json()["detail"]["message"].startswith("Missing required query parameters")


def test_lookup_success_is_cached(configured, monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=10):
        calls.append((url, params))
        return fake_response({"data": [AVS_FLIGHT]})

    monkeypatch.setattr(flight_service.httpx, "get", fake_get)
    client = TestClient(app)

    res = client.get("/api/flight?flight_iata=AA2689")
    assert res.status_code == 200
    assert res.headers["Cache-Control"] == "public, max-age=300, s-maxage=300"
    assert res.json()["data"]["status"] == "active"
    assert calls == [
        ("https://avs.test/v1/flights", {"flight_iata": "AA2689", "limit": 1, "access_key": "key"})
    ]

    res = client.get("/api/flight?flight_iata=AA2689")
    assert res.json()["data"]["flight_iata"] == "AA2689"
    assert len(calls) == 1


def test_upstream_failure_is_502(configured, monkeypatch):
    def fake_get(*a, **k):
        raise httpx.ConnectError("boom")

    monkeypatch.setattr(flight_service.httpx, "get", fake_get)
    res = TestClient(app).get("/api/flight?airline_iata=AA&flight_number=1")
    assert res.status_code == 502

    monkeypatch.setattr(flight_service.httpx, "get", lambda *a, **k: fake_response({}, 500))
    with pytest.raises(flight_service.FlightAPIError):
        flight_service.lookup_flight({"flight_iata": "AA1"})


def test_empty_data_is_404(configured, monkeypatch):
    monkeypatch.setattr(flight_service.httpx, "get", lambda *a, **k: fake_response({"data": []}))
    res = TestClient(app).get("/api/flight?flight_iata=ZZ999")
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "No flight data found for the provided parameters"
