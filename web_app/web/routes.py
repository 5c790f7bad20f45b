"""Redirect routes implementation."""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import RedirectResponse

from ..errors import to_http_exception
from shortlink.errors import LinkNotFoundError

router = APIRouter()


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service unhealthy",
    )


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL."""
    service = request.app.state.service

    try:
        original_url = await service.resolve(short_code)
    except LinkNotFoundError as e:
        raise to_http_exception(e)

    # 302 rather than 301: codes can be renamed or deleted, browsers must not cache
    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
