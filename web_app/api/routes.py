"""API routes implementation."""

from typing import Optional

from fastapi import APIRouter, Query, Request, status
from datetime import datetime, timezone

from .schemas import (
    CreateLinkRequest,
    RenameLinkRequest,
    LinkResponse,
    LinkListResponse,
    DeleteLinkResponse,
    ResolveResponse,
    HealthResponse,
    AliasAvailabilityResponse,
    ErrorResponse,
    StatisticsResponse,
)
from ..errors import to_http_exception
from shortlink.common.headers import build_short_url
from shortlink.database.models import LinkRecord
from shortlink.errors import ShortenerError

router = APIRouter()


def _link_response(request: Request, record: LinkRecord) -> LinkResponse:
    """Render a record with the short URL as seen by this client."""
    config = request.app.state.config

    short_url = build_short_url(
        record.short_code,
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        configured_prefix=config.path_prefix,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )

    return LinkResponse(
        id=record.id,
        short_code=record.short_code,
        short_url=short_url,
        original_url=record.original_url,
        created_at=record.created_at,
        owner=record.owner,
    )


@router.post(
    "/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or alias"},
        409: {"model": ErrorResponse, "description": "Alias already in use"},
        503: {"model": ErrorResponse, "description": "No free short code, retry later"},
    },
    summary="Create short link",
    description="Create a shortened URL. Optionally provide a custom alias.",
)
async def create_link(request: Request, body: CreateLinkRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    try:
        record = await service.create_link(
            original_url=body.url,
            custom_alias=body.custom_alias.strip() if body.custom_alias else None,
            owner=body.owner,
        )
    except ShortenerError as e:
        raise to_http_exception(e)

    return _link_response(request, record)


@router.get(
    "/links",
    response_model=LinkListResponse,
    summary="List short links",
    description="List live links, newest first, optionally only those of one owner.",
)
async def list_links(
    request: Request,
    owner: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
):
    """List short links."""
    service = request.app.state.service

    records = await service.list_links(owner=owner, limit=limit)
    links = [_link_response(request, record) for record in records]

    return LinkListResponse(count=len(links), links=links)


@router.get(
    "/links/by-code/{short_code}",
    response_model=LinkResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get short link by code",
    description="Look up the full link record behind a short code.",
)
async def get_link_by_code(request: Request, short_code: str):
    """Get a link by its current short code."""
    service = request.app.state.service

    try:
        record = await service.get_link_by_code(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)

    return _link_response(request, record)


@router.get(
    "/links/{link_id}",
    response_model=LinkResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Get short link",
)
async def get_link(request: Request, link_id: str, owner: Optional[str] = None):
    """Get a link by id."""
    service = request.app.state.service

    try:
        record = await service.get_link(link_id, owner=owner)
    except ShortenerError as e:
        raise to_http_exception(e)

    return _link_response(request, record)


@router.patch(
    "/links/{link_id}",
    response_model=LinkResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid alias"},
        404: {"model": ErrorResponse, "description": "Link not found"},
        409: {"model": ErrorResponse, "description": "Alias already in use"},
    },
    summary="Rename short link",
    description="Give an existing link a new short code.",
)
async def rename_link(
    request: Request,
    link_id: str,
    body: RenameLinkRequest,
    owner: Optional[str] = None,
):
    """Change the short code of a link."""
    service = request.app.state.service

    try:
        record = await service.rename_link(link_id, body.short_code.strip(), owner=owner)
    except ShortenerError as e:
        raise to_http_exception(e)

    return _link_response(request, record)


@router.delete(
    "/links/{link_id}",
    response_model=DeleteLinkResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Delete short link",
)
async def delete_link(request: Request, link_id: str, owner: Optional[str] = None):
    """Delete a link."""
    service = request.app.state.service

    try:
        record = await service.delete_link(link_id, owner=owner)
    except ShortenerError as e:
        raise to_http_exception(e)

    return DeleteLinkResponse(deleted=True, id=record.id, short_code=record.short_code)


@router.get(
    "/resolve/{short_code}",
    response_model=ResolveResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Resolve short code",
    description="Return the destination of a short code without redirecting.",
)
async def resolve_short_code(request: Request, short_code: str):
    """Resolve a short code."""
    service = request.app.state.service

    try:
        original_url = await service.resolve(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)

    return ResolveResponse(short_code=short_code, original_url=original_url)


@router.get(
    "/aliases/{short_code}",
    response_model=AliasAvailabilityResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid alias"}},
    summary="Check alias availability",
    description="Report whether a custom alias is currently free. Advisory: a create can still lose a race.",
)
async def check_alias(request: Request, short_code: str):
    """Check whether a custom alias is free."""
    service = request.app.state.service

    try:
        available = await service.is_alias_available(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)

    return AliasAvailabilityResponse(short_code=short_code, available=available)


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Get service-wide statistics.",
)
async def get_statistics(request: Request):
    """Get service statistics."""
    service = request.app.state.service

    stats = await service.get_statistics()

    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
