import time

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Liveness probe; never touches the database."""
    return ORJSONResponse(
        content={"ok": True, "timestamp": int(time.time() * 1000), "status": "healthy"},
        headers={"Cache-Control": "no-store"},
    )
