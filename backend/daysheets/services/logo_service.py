"""Airline logo proxy backed by logo.dev.

Every failure mode other than rate limiting degrades to "no logo" so the
frontend can fall back to initials.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, urlencode

import httpx

from ..core.config import settings
from ..utils import redis_cache

logger = logging.getLogger(__name__)

LOGO_BASE_URL = "https://img.logo.dev"
USER_AGENT = "Daysheets/1.0"
DEFAULT_SIZE = 64
MIN_SIZE = 32
MAX_SIZE = 128


@dataclass(frozen=True)
class Airline:
    iata: str
    icao: str
    name: str
    domain: Optional[str] = None


AIRLINES = [
    Airline("AA", "AAL", "American Airlines", "aa.com"),
    Airline("AC", "ACA", "Air Canada", "aircanada.com"),
    Airline("AF", "AFR", "Air France", "airfrance.com"),
    Airline("AS", "ASA", "Alaska Airlines", "alaskaair.com"),
    Airline("AY", "FIN", "Finnair", "finnair.com"),
    Airline("AZ", "ITY", "ITA Airways", "ita-airways.com"),
    Airline("B6", "JBU", "JetBlue", "jetblue.com"),
    Airline("BA", "BAW", "British Airways", "britishairways.com"),
    Airline("CX", "CPA", "Cathay Pacific", "cathaypacific.com"),
    Airline("DL", "DAL", "Delta Air Lines", "delta.com"),
    Airline("EI", "EIN", "Aer Lingus", "aerlingus.com"),
    Airline("EK", "UAE", "Emirates", "emirates.com"),
    Airline("EY", "ETD", "Etihad Airways", "etihad.com"),
    Airline("F9", "FFT", "Frontier Airlines", "flyfrontier.com"),
    Airline("FR", "RYR", "Ryanair", "ryanair.com"),
    Airline("HA", "HAL", "Hawaiian Airlines", "hawaiianairlines.com"),
    Airline("IB", "IBE", "Iberia", "iberia.com"),
    Airline("JL", "JAL", "Japan Airlines", "jal.co.jp"),
    Airline("KL", "KLM", "KLM Royal Dutch Airlines", "klm.com"),
    Airline("LH", "DLH", "Lufthansa", "lufthansa.com"),
    Airline("LX", "SWR", "Swiss International Air Lines", "swiss.com"),
    Airline("NH", "ANA", "All Nippon Airways", "ana.co.jp"),
    Airline("NK", "NKS", "Spirit Airlines", "spirit.com"),
    Airline("OS", "AUA", "Austrian Airlines", "austrian.com"),
    Airline("QF", "QFA", "Qantas", "qantas.com"),
    Airline("QR", "QTR", "Qatar Airways", "qatarairways.com"),
    Airline("SA", "SAA", "South African Airways", "flysaa.com"),
    Airline("SK", "SAS", "Scandinavian Airlines", "flysas.com"),
    Airline("SQ", "SIA", "Singapore Airlines", "singaporeair.com"),
    Airline("TK", "THY", "Turkish Airlines", "turkishairlines.com"),
    Airline("TP", "TAP", "TAP Air Portugal", "flytap.com"),
    Airline("U2", "EZY", "easyJet", "easyjet.com"),
    Airline("UA", "UAL", "United Airlines", "united.com"),
    Airline("VS", "VIR", "Virgin Atlantic", "virginatlantic.com"),
    Airline("WN", "SWA", "Southwest Airlines", "southwest.com"),
    Airline("WS", "WJA", "WestJet", "westjet.com"),
]

_BY_IATA = {a.iata: a for a in AIRLINES}
_BY_ICAO = {a.icao: a for a in AIRLINES}


def find_airline(iata: Optional[str] = None, icao: Optional[str] = None) -> Optional[Airline]:
    if iata and iata.strip().upper() in _BY_IATA:
        return _BY_IATA[iata.strip().upper()]
    if icao and icao.strip().upper() in _BY_ICAO:
        return _BY_ICAO[icao.strip().upper()]
    return None


class TokenBucket:
    """Fixed-capacity bucket refilled in full once per window."""

    def __init__(self, capacity: int, window: float):
        self.capacity = capacity
        self.window = window
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self.tokens = self.capacity
        self.last_refill = time.monotonic()

    def acquire(self) -> bool:
        with self._lock:
            now = time.monotonic()
            if now - self.last_refill >= self.window:
                self.tokens = self.capacity
                self.last_refill = now
            if self.tokens > 0:
                self.tokens -= 1
                return True
            return False


_bucket = TokenBucket(settings.LOGO_RATE_LIMIT, settings.LOGO_RATE_WINDOW)


def reset_rate_limiter() -> None:
    _bucket.reset()


def clamp_size(raw: Optional[str]) -> int:
    try:
        size = int(raw) if raw is not None else DEFAULT_SIZE
    except (TypeError, ValueError):
        return DEFAULT_SIZE
    return min(MAX_SIZE, max(MIN_SIZE, size))


def build_logo_url(
    airline: Optional[Airline],
    domain: Optional[str],
    name: Optional[str],
    size: int,
    token: str,
) -> Optional[str]:
    """logo.dev URL by domain when known, else by display name; None when neither."""
    params = urlencode({"token": token, "size": size, "retina": "true", "format": "png"})
    target_domain = (airline.domain if airline else None) or domain
    if target_domain:
        return f"{LOGO_BASE_URL}/{quote(target_domain, safe='')}?{params}"
    target_name = (airline.name if airline else None) or name
    if target_name:
        return f"{LOGO_BASE_URL}/logo?name={quote(target_name, safe='')}&{params}"
    return None


@dataclass
class LogoResult:
    status: int
    content: bytes = b""
    content_type: Optional[str] = None


def fetch_airline_logo(
    iata: Optional[str] = None,
    icao: Optional[str] = None,
    domain: Optional[str] = None,
    name: Optional[str] = None,
    size: Optional[str] = None,
) -> LogoResult:
    token = settings.LOGO_DEV_API_KEY
    if not token:
        logger.error("LOGO_DEV_API_KEY not configured")
        return LogoResult(204)
    if not _bucket.acquire():
        return LogoResult(429, b"Rate limit exceeded", "text/plain")

    px = clamp_size(size)
    airline = find_airline(iata, icao) if (iata or icao) else None
    url = build_logo_url(airline, domain, name, px, token)
    if url is None:
        return LogoResult(204)

    target = (airline.iata if airline else None) or domain or name
    cache_key = redis_cache.logo_key(target, px)
    cached = redis_cache.get_cached_bytes(cache_key)
    if cached:
        return LogoResult(200, cached, "image/png")

    try:
        resp = httpx.get(url, headers={"User-Agent": USER_AGENT}, timeout=5)
    except httpx.HTTPError as exc:
        logger.warning("logo.dev fetch failed for %s: %s", target, exc)
        return LogoResult(204)
    if resp.status_code != 200 or not resp.content:
        return LogoResult(204)

    content_type = resp.headers.get("Content-Type") or "image/png"
    redis_cache.cache_bytes(cache_key, resp.content, settings.LOGO_CACHE_TTL)
    return LogoResult(200, resp.content, content_type)
