"""
Kavin's Catalog Backend — Product Service (Data Provider)
===========================================================

What:  CRUD over the `products` table plus grouping of variant rows.
How:   Receives an AsyncSession per call, converts ORM rows into
       `Product` schemas, and translates unexpected failures into DatabaseError.
Who:   Called by the catalog routes, the admin product form and the admin routes.

Read fallback:
    Listing never fails the catalog page. When the table cannot be read the
    service answers with the last list it loaded successfully, or with the
    demo catalog when nothing has been loaded since startup.
"""

import logging
import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.product import Product as ProductRow
from app.schemas.product import ColorVariant, Product, ProductData, ProductGroup
from app.seed import INITIAL_PRODUCTS

logger = logging.getLogger(__name__)

# Group ids this short are leftovers of client-side temporary ids
MIN_GROUP_ID_LENGTH = 11


def normalize_group_id(group_id: Optional[str]) -> Optional[str]:
    """Returns the group id when it looks like a real shared id, else None."""
    if group_id and len(group_id) >= MIN_GROUP_ID_LENGTH:
        return group_id
    return None


def _parse_uuid(product_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(product_id))
    except ValueError:
        return None


def _to_schema(row: ProductRow) -> Product:
    return Product(
        id=str(row.id),
        group_id=row.group_id,
        reference=row.reference,
        name=row.name,
        description=row.description or "",
        sizes=list(row.sizes or []),
        colors=[ColorVariant(**c) for c in (row.colors or [])],
        price_representative=float(row.price_representative or 0),
        price_sacoleira=float(row.price_sacoleira or 0),
        images=list(row.images or []),
        category=row.category,
        fabric=row.fabric,
        is_highlight=bool(row.is_highlight),
    )


def _apply(row: ProductRow, data: ProductData) -> None:
    row.group_id = data.group_id
    row.reference = data.reference
    row.name = data.name
    row.description = data.description
    row.sizes = list(data.sizes)
    row.colors = [c.model_dump() for c in data.colors]
    row.price_representative = Decimal(str(data.price_representative))
    row.price_sacoleira = Decimal(str(data.price_sacoleira))
    row.images = list(data.images)
    row.category = data.category
    row.fabric = data.fabric
    row.is_highlight = data.is_highlight


def group_products(products: List[Product]) -> List[ProductGroup]:
    """
    Group flat product rows into variant groups.

    How:
        Products sharing a group id end up in the same group; a product
        without one is its own group keyed by its id. Groups come out in the
        order in which their first member appears in `products`, and members
        keep their relative order.
    """
    groups: Dict[str, ProductGroup] = {}
    for product in products:
        key = product.group_id or product.id
        if key not in groups:
            groups[key] = ProductGroup(key=key, products=[])
        groups[key].products.append(product)
    return list(groups.values())


async def rollback_quietly(db: AsyncSession) -> None:
    """Leaves the session usable after a failed read that was handled."""
    try:
        await db.rollback()
    except Exception as e:
        logger.warning("Rollback after failed read also failed: %s", str(e))


class ProductService:
    """
    Data access layer for product variants.

    Responsibilities:
        - list_products(): newest-first listing with fallback
        - get_product() / list_group(): single row and group lookups
        - add_product() / update_product(): writes
        - delete_product() / delete_group(): removals
    """

    def __init__(self) -> None:
        # Last list read successfully, served when the table is unreachable
        self._last_loaded: List[Product] = []

    async def list_products(self, db: AsyncSession) -> List[Product]:
        try:
            result = await db.execute(
                select(ProductRow).order_by(desc(ProductRow.created_at))
            )
            products = [_to_schema(row) for row in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching products: %s", str(e))
            await rollback_quietly(db)
            if self._last_loaded:
                logger.warning("Serving %d previously loaded products", len(self._last_loaded))
                return list(self._last_loaded)
            logger.warning("Serving demo catalog (%d products)", len(INITIAL_PRODUCTS))
            return list(INITIAL_PRODUCTS)

        self._last_loaded = products
        return products

    async def get_product(self, db: AsyncSession, product_id: str) -> Product:
        row = await self._get_row(db, product_id)
        return _to_schema(row)

    async def list_group(self, db: AsyncSession, group_id: str) -> List[Product]:
        try:
            result = await db.execute(
                select(ProductRow)
                .where(ProductRow.group_id == group_id)
                .order_by(ProductRow.created_at)
            )
            return [_to_schema(row) for row in result.scalars().all()]
        except Exception as e:
            logger.error("Database error loading group %s: %s", group_id, str(e))
            raise DatabaseError(
                message="Could not load the product variations. Please try again.",
                context={"group_id": group_id},
            )

    async def add_product(self, db: AsyncSession, data: ProductData) -> Product:
        row = ProductRow(id=uuid.uuid4())
        _apply(row, data)
        row.group_id = normalize_group_id(data.group_id)
        try:
            db.add(row)
            await db.flush()
        except Exception as e:
            logger.error("Insert error for reference %s: %s", data.reference, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error saving product {data.reference} to the database.",
                context={"reference": data.reference, "error_type": type(e).__name__},
            )
        logger.info("Product created: %s (%s)", row.id, row.reference)
        return _to_schema(row)

    async def update_product(
        self, db: AsyncSession, product_id: str, data: ProductData
    ) -> Product:
        row = await self._get_row(db, product_id)
        _apply(row, data)
        try:
            await db.flush()
        except Exception as e:
            logger.error("Update error for product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error updating product {data.reference}.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            )
        logger.info("Product updated: %s (%s)", row.id, row.reference)
        return _to_schema(row)

    async def delete_product(self, db: AsyncSession, product_id: str) -> None:
        row = await self._get_row(db, product_id)
        try:
            await db.delete(row)
            await db.flush()
        except Exception as e:
            logger.error("Delete error for product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Error deleting the product.",
                context={"product_id": product_id},
            )
        logger.info("Product deleted: %s", product_id)

    async def delete_group(self, db: AsyncSession, group_id: str) -> int:
        try:
            result = await db.execute(
                delete(ProductRow).where(ProductRow.group_id == group_id)
            )
            await db.flush()
        except Exception as e:
            logger.error("Delete error for group %s: %s", group_id, str(e))
            raise DatabaseError(
                message="Error deleting the product group.",
                context={"group_id": group_id},
            )
        count = result.rowcount or 0
        logger.info("Product group %s deleted (%d variants)", group_id, count)
        return count

    async def _get_row(self, db: AsyncSession, product_id: str) -> ProductRow:
        pk = _parse_uuid(product_id)
        if pk is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        try:
            result = await db.execute(select(ProductRow).where(ProductRow.id == pk))
            row = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": product_id},
            )
        if row is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return row


# ── Singleton Instance ────────────────────────────────────────────────────
# Holds the last-loaded list, so it is shared by every request
product_service = ProductService()
