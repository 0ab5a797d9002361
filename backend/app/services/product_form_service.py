"""
Kavin's Catalog Backend — Admin Product Form Service
======================================================

What:  Loads and saves the admin editor's view of a product: data shared by
       every variant (name, description, category, fabric, highlight, photos)
       plus one variation per variant row (reference, sizes, colors, prices).
How:   Saving fans the form out into one `products` row per variation, all
       sharing one group id. The request's database session wraps the whole
       save, so a failure part-way leaves the group untouched.
Who:   Admin product routes.

Save workflow:
    1. Normalize + validate the form (photos, name, references, sizes)
    2. Resolve photos: keep URLs, upload data: URLs to the bucket
    3. Pick the group id (reuse when editing a grouped product, else new UUID)
    4. Update variations that carry an id, insert the others
    5. Delete group members that were removed from the form
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ValidationError
from app.schemas.product import (
    DescriptionRequest,
    DescriptionResponse,
    Product,
    ProductData,
    ProductForm,
    ProductFormGeneral,
    ProductFormResponse,
    ProductVariation,
    SaveFormResponse,
)
from app.services.gemini_service import gemini_service
from app.services.image_service import ImageService, image_service
from app.services.llm_base import LLMService
from app.services.product_service import ProductService, product_service
from app.services.variant_editor import normalize_form

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Geral"


def validate_form(form: ProductForm) -> None:
    """Raises ValidationError for the first rule the form breaks."""
    if not form.general.images:
        raise ValidationError(message="Add at least one photo.", field="images")
    if not form.general.name.strip():
        raise ValidationError(message="Add a product name.", field="name")
    if not form.variations:
        raise ValidationError(message="A product needs at least one variation.", field="variations")

    for position, variation in enumerate(form.variations, start=1):
        if not variation.reference:
            raise ValidationError(
                message=f"Reference missing in variation #{position}.",
                field="reference",
                context={"variation": position},
            )
        if not variation.sizes:
            raise ValidationError(
                message=f"Sizes missing in variation {variation.reference}.",
                field="sizes",
                context={"variation": position, "reference": variation.reference},
            )


class ProductFormService:

    def __init__(
        self,
        products: ProductService = product_service,
        images: ImageService = image_service,
        llm_service: LLMService = gemini_service,
    ):
        self.products = products
        self.images = images
        self.llm_service = llm_service

    async def load_form(self, db: AsyncSession, product_id: str) -> ProductFormResponse:
        """The form pre-filled with the product and every sibling of its group."""
        product = await self.products.get_product(db, product_id)

        siblings: List[Product] = []
        if product.group_id:
            siblings = await self.products.list_group(db, product.group_id)
        if not siblings:
            siblings = [product]

        return ProductFormResponse(
            product_id=product.id,
            group_id=product.group_id,
            general=ProductFormGeneral(
                name=product.name,
                description=product.description,
                category=product.category or DEFAULT_CATEGORY,
                fabric=product.fabric or "",
                is_highlight=product.is_highlight,
                images=list(product.images),
            ),
            variations=[
                ProductVariation(
                    id=p.id,
                    reference=p.reference,
                    sizes=list(p.sizes),
                    colors=list(p.colors),
                    price_representative=p.price_representative,
                    price_sacoleira=p.price_sacoleira,
                )
                for p in siblings
            ],
        )

    async def save_form(
        self,
        db: AsyncSession,
        form: ProductForm,
        product_id: Optional[str] = None,
    ) -> SaveFormResponse:
        form = normalize_form(form)
        validate_form(form)

        existing: Optional[Product] = None
        members: List[Product] = []
        if product_id:
            existing = await self.products.get_product(db, product_id)
            if existing.group_id:
                members = await self.products.list_group(db, existing.group_id)
            else:
                members = [existing]
        self._check_variation_ids(form, members)

        images = await self.images.resolve_images(form.general.images)
        if not images:
            raise ValidationError(
                message="None of the photos could be uploaded. Please try again.",
                field="images",
            )

        group_id = existing.group_id if existing and existing.group_id else str(uuid.uuid4())
        general = form.general

        saved: List[Product] = []
        for variation in form.variations:
            data = ProductData(
                group_id=group_id,
                name=general.name.strip(),
                description=general.description,
                category=general.category or DEFAULT_CATEGORY,
                fabric=general.fabric,
                is_highlight=general.is_highlight,
                images=images,
                reference=variation.reference,
                sizes=variation.sizes,
                colors=variation.colors,
                price_representative=variation.price_representative,
                price_sacoleira=variation.price_sacoleira,
            )
            if variation.id:
                saved.append(await self.products.update_product(db, variation.id, data))
            else:
                saved.append(await self.products.add_product(db, data))

        deleted_ids: List[str] = []
        if existing and existing.group_id:
            kept = {v.id for v in form.variations if v.id}
            for member in members:
                if member.id not in kept:
                    await self.products.delete_product(db, member.id)
                    deleted_ids.append(member.id)

        logger.info(
            "Product form saved: group=%s, %d variations, %d removed, %d photos",
            group_id,
            len(saved),
            len(deleted_ids),
            len(images),
        )
        return SaveFormResponse(
            group_id=group_id,
            products=saved,
            deleted_ids=deleted_ids,
        )

    def _check_variation_ids(self, form: ProductForm, members: List[Product]) -> None:
        """A variation id must belong to the product being edited."""
        allowed = {m.id for m in members}
        for variation in form.variations:
            if variation.id and variation.id not in allowed:
                raise ValidationError(
                    message=f"Variation {variation.reference or variation.id} does not belong to this product.",
                    field="variations",
                    context={"variation_id": variation.id},
                )

    async def generate_description(self, request: DescriptionRequest) -> DescriptionResponse:
        if not request.name.strip():
            raise ValidationError(message="Fill in the product name first.", field="name")
        text = await self.llm_service.generate_product_description(request)
        return DescriptionResponse(description=text)


product_form_service = ProductFormService()
