import logging
from typing import Optional

from fastapi import APIRouter, Query, Response, status

from ..core.config import settings
from ..services import flight_service
from ..utils.errors import error_response

router = APIRouter(tags=["flights"])
logger = logging.getLogger(__name__)

FLIGHT_CACHE_CONTROL = "public, max-age=300, s-maxage=300"
MISSING_PARAMS_MESSAGE = (
    "Missing required query parameters. Provide flight_iata or composite query "
    "(airline_iata, dep_iata, arr_iata, flight_number)"
)


@router.get("/flight")
def lookup_flight(
    response: Response,
    flight_iata: Optional[str] = Query(None),
    airline_iata: Optional[str] = Query(None),
    dep_iata: Optional[str] = Query(None),
    arr_iata: Optional[str] = Query(None),
    flight_number: Optional[str] = Query(None),
):
    """Live status for one flight, by flight IATA code or a composite query."""
    params = {
        "flight_iata": flight_iata,
        "airline_iata": airline_iata,
        "dep_iata": dep_iata,
        "arr_iata": arr_iata,
        "flight_number": flight_number,
    }
    try:
        if not any(params.values()):
            # 503 takes precedence over 400
            if not settings.flight_configured:
                raise flight_service.FlightConfigError("Flight data service not configured")
            raise error_response(MISSING_PARAMS_MESSAGE, {}, status.HTTP_400_BAD_REQUEST)
        data = flight_service.lookup_flight(params)
    except flight_service.FlightConfigError as exc:
        raise error_response(str(exc), {}, status.HTTP_503_SERVICE_UNAVAILABLE)
    except flight_service.FlightAPIError as exc:
        logger.error("Flight API error for %s: %s", params, exc)
        raise error_response(str(exc), {}, status.HTTP_502_BAD_GATEWAY)
    except flight_service.FlightNotFoundError as exc:
        raise error_response(str(exc), {}, status.HTTP_404_NOT_FOUND)
    response.headers["Cache-Control"] = FLIGHT_CACHE_CONTROL
    return {"data": data}
