"""
Kavin's Catalog Backend — Catalog Route Handlers
==================================================

What:  The public catalog and single product cards.
How:   Anonymous visitors are allowed; a bearer token, when present, decides
       which prices each card carries.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_optional_user
from app.schemas.common import ErrorResponse
from app.schemas.product import CatalogResponse, ProductCard
from app.schemas.user import SessionUser
from app.services.catalog_service import ALL_CATEGORIES, catalog_service
from app.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Catalog"])

# Cards differ per role, so shared caches must not keep them
CACHE_CONTROL = "private, no-cache"


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Browse the catalog",
    description=(
        "Products filtered by search text (name or reference) and category. "
        "Use category 'all' for everything and 'highlights' for featured products. "
        "Prices are included according to the caller's role."
    ),
)
async def get_catalog(
    response: Response,
    search: str = Query(default="", max_length=100, description="Case-insensitive name/reference filter"),
    category: str = Query(default=ALL_CATEGORIES, max_length=100),
    db: AsyncSession = Depends(get_db_session),
    user: Optional[SessionUser] = Depends(get_optional_user),
) -> CatalogResponse:
    products = await product_service.list_products(db)
    result = catalog_service.build_catalog(products, user, search=search, category=category)

    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = CACHE_CONTROL
    return result


@router.get(
    "/products/{product_id}",
    response_model=ProductCard,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get one product card",
)
async def get_product(
    product_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[SessionUser] = Depends(get_optional_user),
) -> ProductCard:
    product = await product_service.get_product(db, product_id)
    response.headers["Cache-Control"] = CACHE_CONTROL
    return catalog_service.build_card(product, user)
