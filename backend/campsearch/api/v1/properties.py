"""Public property search and listing routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.api.deps import get_db, get_search_criteria
from campsearch.schemas.search import PropertyListResponse, PropertySearchResponse, SearchCriteria
from campsearch.services.property_service import (
    PropertyNotFoundError,
    get_featured_properties,
    get_nearby_properties,
    get_popular_properties,
)
from campsearch.services.search import search_properties

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get(
    "/search",
    response_model=PropertySearchResponse,
    summary="Search bookable properties",
)
async def search(
    criteria: SearchCriteria = Depends(get_search_criteria),
    db: AsyncSession = Depends(get_db),
) -> PropertySearchResponse:
    """Filter, rank and paginate properties.

    When ``checkIn``/``checkOut`` are given only properties with at least one
    free, large enough site for the whole stay are returned.
    """
    return await search_properties(db, criteria)


@router.get(
    "/featured",
    response_model=PropertyListResponse,
    summary="Featured properties",
)
async def featured(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    items = await get_featured_properties(db, limit=limit)
    return PropertyListResponse(items=items, total=len(items))


@router.get(
    "/popular",
    response_model=PropertyListResponse,
    summary="Most reviewed properties",
)
async def popular(
    limit: int = Query(8, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    items = await get_popular_properties(db, limit=limit)
    return PropertyListResponse(items=items, total=len(items))


@router.get(
    "/{property_id}/nearby",
    response_model=PropertyListResponse,
    summary="Properties near another property",
)
async def nearby(
    property_id: uuid.UUID,
    radius: float = Query(50, gt=0, le=500, description="Kilometers"),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return active properties within ``radius`` km, nearest first. 404 if the property is unknown."""
    try:
        items = await get_nearby_properties(db, property_id, radius=radius, limit=limit)
    except PropertyNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return PropertyListResponse(items=items, total=len(items))
