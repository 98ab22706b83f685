import logging

import httpx

from ..core.config import settings
from ..utils import redis_cache

logger = logging.getLogger(__name__)

QUERY_FIELDS = ("flight_iata", "airline_iata", "dep_iata", "arr_iata", "flight_number")


class FlightConfigError(Exception):
    """Flight data provider credentials are missing."""


class FlightAPIError(Exception):
    """General flight service failure."""


class FlightNotFoundError(Exception):
    """Provider returned no flights for the query."""


def build_query(params: dict) -> dict:
    """Provider query: ``flight_iata`` alone when given, else the composite fields."""
    query = {}
    if params.get("flight_iata"):
        query["flight_iata"] = params["flight_iata"]
    else:
        for field in QUERY_FIELDS[1:]:
            if params.get(field):
                query[field] = params[field]
    query["limit"] = 1
    return query


def map_avs_item(flight: dict) -> dict:
    """Map one aviationstack flight record to the enriched flight shape."""
    info = flight.get("flight") or {}
    airline = flight.get("airline") or {}
    dep = flight.get("departure") or {}
    arr = flight.get("arrival") or {}
    aircraft = flight.get("aircraft")
    live = flight.get("live")
    return {
        "flight_iata": info.get("iata") or f"{airline.get('iata') or ''}{info.get('number') or ''}",
        "flight_number": info.get("number"),
        "airline_name": airline.get("name"),
        "airline_iata": airline.get("iata"),
        "status": flight.get("flight_status"),
        "departure": {
            "airport_iata": dep.get("iata"),
            "terminal": dep.get("terminal"),
            "gate": dep.get("gate"),
            "scheduled": dep.get("scheduled"),
            "estimated": dep.get("estimated"),
            "actual": dep.get("actual"),
            "delay": dep.get("delay"),
        },
        "arrival": {
            "airport_iata": arr.get("iata"),
            "terminal": arr.get("terminal"),
            "gate": arr.get("gate"),
            "baggage": arr.get("baggage"),
            "scheduled": arr.get("scheduled"),
            "estimated": arr.get("estimated"),
            "actual": arr.get("actual"),
            "delay": arr.get("delay"),
        },
        "aircraft": (
            {"registration": aircraft.get("registration"), "type": aircraft.get("iata")}
            if aircraft
            else None
        ),
        "live": (
            {
                "latitude": live.get("latitude"),
                "longitude": live.get("longitude"),
                "altitude": live.get("altitude"),
                "speed": live.get("speed_horizontal"),
            }
            if live
            else None
        ),
    }


def lookup_flight(params: dict) -> dict:
    """Return the enriched first match for ``params``.

    Callers must reject an empty parameter set before calling. Results are
    cached in Redis for ``FLIGHT_CACHE_TTL`` seconds.
    """
    if not settings.flight_configured:
        logger.error("AVSTACK_BASE_URL or AVSTACK_ACCESS_KEY not set")
        raise FlightConfigError("Flight data service not configured")

    query = build_query(params)
    cached = redis_cache.get_cached_flight(query)
    if cached is not None:
        return cached

    url = f"{settings.AVSTACK_BASE_URL.rstrip('/')}/flights"
    try:
        resp = httpx.get(
            url,
            params={**query, "access_key": settings.AVSTACK_ACCESS_KEY},
            headers={"Accept": "application/json"},
            timeout=10,
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("Flight API request failed for %s: %s", query, exc)
        raise FlightAPIError("Flight data service unavailable") from exc

    try:
        payload = resp.json()
    except ValueError as exc:
        logger.error("Flight API returned invalid JSON: %s", exc)
        raise FlightAPIError("Flight data service unavailable") from exc

    flights = payload.get("data") if isinstance(payload, dict) else None
    if not flights:
        raise FlightNotFoundError("No flight data found for the provided parameters")

    data = map_avs_item(flights[0])
    redis_cache.cache_flight(data, query, expire=settings.FLIGHT_CACHE_TTL)
    return data
