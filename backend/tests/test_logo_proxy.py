import httpx
import pytest
from fastapi.testclient import TestClient

from daysheets.main import app
from daysheets.services import logo_service

PNG = b"\x89PNG\r\n\x1a\nlogo"


@pytest.fixture
def logo_key(monkeypatch):
    monkeypatch.setattr(logo_service.settings, "LOGO_DEV_API_KEY", "pk_test")


@pytest.fixture
def upstream(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=5):
        calls.append(url)
        return httpx.Response(200, content=PNG, headers={"Content-Type": "image/png"})

    monkeypatch.setattr(logo_service.httpx, "get", fake_get)
    return calls


def test_no_api_key_means_no_content(upstream):
    res = TestClient(app).get("/api/logo/airline?iata=AA")
    assert res.status_code == 204
    assert res.content == b""
    assert upstream == []


def test_known_airline_uses_its_domain(logo_key, upstream):
    client = TestClient(app)
    res = client.get("/api/logo/airline?iata=aa&size=500")
    assert res.status_code == 200
    assert res.content == PNG
    assert res.headers["content-type"] == "image/png"
    assert res.headers["Cache-Control"] == "public, s-maxage=604800, stale-while-revalidate=86400"
    assert "Accept" in [v.strip() for v in res.headers["Vary"].split(",")]
    assert res.headers["X-Logo-Source"] == "logo.dev"
    assert upstream == ["https://img.logo.dev/aa.com?token=pk_test&size=128&retina=true&format=png"]

    # served from cache on the second request
    res = client.get("/api/logo/airline?iata=AA&size=500")
    assert res.content == PNG
    assert len(upstream) == 1


def test_head_returns_headers_only(logo_key, upstream):
    res = TestClient(app).head("/api/logo/airline?domain=example.com")
    assert res.status_code == 200
    assert res.content == b""
    assert res.headers["Content-Length"] == str(len(PNG))


def test_nothing_to_look_up_or_upstream_miss(logo_key, monkeypatch):
    client = TestClient(app)
    assert client.get("/api/logo/airline").status_code == 204

    monkeypatch.setattr(logo_service.httpx, "get", lambda *a, **k: httpx.Response(404))
    assert client.get("/api/logo/airline?name=Tiny%20Air").status_code == 204

    def boom(*a, **k):
        raise httpx.ReadTimeout("slow")

    monkeypatch.setattr(logo_service.httpx, "get", boom)
    assert client.get("/api/logo/airline?domain=slow.example").status_code == 204


def test_rate_limit_after_ten_requests(logo_key, upstream):
    client = TestClient(app)
    for _ in range(10):
        assert client.get("/api/logo/airline?iata=BA").status_code == 200
    res = client.get("/api/logo/airline?iata=BA")
    assert res.status_code == 429
    assert res.text == "Rate limit exceeded"


def test_token_bucket_refills_after_window(monkeypatch):
    now = [100.0]
    monkeypatch.setattr(logo_service.time, "monotonic", lambda: now[0])
    bucket = logo_service.TokenBucket(2, 60)
    assert bucket.acquire() and bucket.acquire()
    assert not bucket.acquire()
    now[0] += 60
    assert bucket.acquire()


@pytest.mark.parametrize("raw,expected", [(None, 64), ("16", 32), ("96", 96), ("900", 128), ("big", 64)])
def test_clamp_size(raw, expected):
    assert logo_service.clamp_size(raw) == expected


def test_build_logo_url_fallbacks():
    assert logo_service.build_logo_url(None, None, None, 64, "t") is None
    url = logo_service.build_logo_url(None, None, "Tiny Air", 64, "t")
    assert url == "https://img.logo.dev/logo?name=Tiny%20Air&token=t&size=64&retina=true&format=png"
    delta = logo_service.find_airline(icao="dal")
    assert delta.iata == "DL"
    # a known airline's domain wins over the caller's
    assert logo_service.build_logo_url(delta, "other.com", None, 32, "t").startswith(
        f"https://img.logo.dev/{delta.domain}?"
    )
