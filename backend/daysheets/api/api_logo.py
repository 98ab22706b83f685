from typing import Optional

from fastapi import APIRouter, Query, Request, Response, status

from ..services import logo_service

router = APIRouter(tags=["logos"])

LOGO_CACHE_CONTROL = "public, s-maxage=604800, stale-while-revalidate=86400"


@router.api_route("/logo/airline", methods=["GET", "HEAD"])
def airline_logo(
    request: Request,
    iata: Optional[str] = Query(None),
    icao: Optional[str] = Query(None),
    domain: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
):
    """Proxy an airline logo from logo.dev; 204 tells the client to fall back."""
    result = logo_service.fetch_airline_logo(iata=iata, icao=icao, domain=domain, name=name, size=size)
    if result.status == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if result.status == status.HTTP_429_TOO_MANY_REQUESTS:
        return Response(content=result.content, status_code=result.status, media_type=result.content_type)

    headers = {
        "Cache-Control": LOGO_CACHE_CONTROL,
        "Vary": "Accept",
        "X-Logo-Source": "logo.dev",
    }
    body = b"" if request.method == "HEAD" else result.content
    if request.method == "HEAD":
        headers["Content-Length"] = str(len(result.content))
    return Response(content=body, status_code=status.HTTP_200_OK, media_type=result.content_type, headers=headers)
