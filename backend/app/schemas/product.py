"""
Kavin's Catalog Backend — Product Request/Response Schemas
============================================================

What:  Pydantic models defining the product, catalog and admin-form contracts.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.

Design Decision:
    Schemas are separate from SQLAlchemy models:
    - `Product` is the flat record as stored (one row per variant)
    - `ProductCard` is what a given role may see of it (prices filtered)
    - `ProductForm` is the admin editor's shape: shared data + variations
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Records
# ══════════════════════════════════════════════════════════════════════════


class ColorVariant(BaseModel):
    hex: str = Field(description="CSS hex color, e.g. #2C3E50")
    name: str = Field(description="Commercial color name, e.g. Azul Marinho")


class ProductData(BaseModel):
    """
    What:  All fields of a product row except its identity.
    Who:   Passed to ProductService.add_product / update_product.
    """
    group_id: Optional[str] = None
    reference: str
    name: str
    description: str = ""
    sizes: List[str] = Field(default_factory=list)
    colors: List[ColorVariant] = Field(default_factory=list)
    price_representative: float = 0.0
    price_sacoleira: float = 0.0
    images: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    fabric: Optional[str] = None
    is_highlight: bool = False


class Product(ProductData):
    """A stored product variant."""
    id: str

    model_config = {"from_attributes": True}


class ProductGroup(BaseModel):
    """
    What:  Variants that share a group id, in listing order.
    How:   `key` is the group id, or the product id for ungrouped products.
    """
    key: str
    products: List[Product]

    @property
    def references(self) -> List[str]:
        return [p.reference for p in self.products]


# ══════════════════════════════════════════════════════════════════════════
# Catalog views
# ══════════════════════════════════════════════════════════════════════════


class ProductCard(BaseModel):
    """
    What:  A product as displayed to one viewer.
    How:   Price fields are None when the viewer's role may not see them.
    """
    id: str
    group_id: Optional[str] = None
    reference: str
    name: str
    description: str
    sizes: List[str]
    colors: List[ColorVariant]
    images: List[str]
    category: Optional[str] = None
    fabric: Optional[str] = None
    is_highlight: bool = False

    show_price: bool = False
    price_representative: Optional[float] = None
    price_representative_display: Optional[str] = None
    price_sacoleira: Optional[float] = None
    price_sacoleira_display: Optional[str] = None
    can_edit: bool = False


class CatalogGroup(BaseModel):
    key: str
    references: List[str]
    product_ids: List[str]


class CatalogResponse(BaseModel):
    """
    What:  One catalog page: title, category pills, cards, variant groups.
    Who:   Returned by GET /api/catalog.
    """
    title: str
    search: str = ""
    category: str = "all"
    categories: List[str] = Field(description="Category pills, in order of first appearance")
    products: List[ProductCard]
    groups: List[CatalogGroup]
    total_count: int


# ══════════════════════════════════════════════════════════════════════════
# Admin product form
# ══════════════════════════════════════════════════════════════════════════


class ProductVariation(BaseModel):
    """
    What:  One variant tab of the admin form.
    How:   `id` is set for variants that already exist; omitted for new ones.
    """
    id: Optional[str] = None
    reference: str = ""
    sizes: List[str] = Field(default_factory=list)
    colors: List[ColorVariant] = Field(default_factory=list)
    price_representative: float = Field(default=0.0, ge=0)
    price_sacoleira: float = Field(default=0.0, ge=0)

    @field_validator("reference")
    @classmethod
    def strip_reference(cls, v: str) -> str:
        return v.strip()


class ProductFormGeneral(BaseModel):
    """Data shared by every variation of the product."""
    name: str = ""
    description: str = ""
    category: str = "Geral"
    fabric: str = ""
    is_highlight: bool = False
    images: List[str] = Field(
        default_factory=list,
        description="Public URLs or data: URLs (base64) of freshly picked photos; first one is the cover",
    )


class ProductForm(BaseModel):
    general: ProductFormGeneral = Field(default_factory=ProductFormGeneral)
    variations: List[ProductVariation] = Field(
        default_factory=lambda: [ProductVariation()]
    )


class ProductFormResponse(ProductForm):
    """The admin form pre-filled for editing."""
    product_id: str
    group_id: Optional[str] = None


class SaveFormResponse(BaseModel):
    message: str = "Product saved successfully"
    group_id: str
    products: List[Product]
    deleted_ids: List[str] = Field(default_factory=list)


class GroupDeleteResponse(BaseModel):
    group_id: str
    deleted_count: int


# ══════════════════════════════════════════════════════════════════════════
# AI description & images
# ══════════════════════════════════════════════════════════════════════════


class DescriptionRequest(BaseModel):
    name: str = ""
    reference: str = ""
    colors: List[str] = Field(default_factory=list, description="Color names")
    category: str = "Geral"
    fabric: str = ""


class DescriptionResponse(BaseModel):
    description: str


class ImageUploadResponse(BaseModel):
    url: str
    width: int
    height: int
    size_bytes: int


# ══════════════════════════════════════════════════════════════════════════
# Variant editor actions
# ══════════════════════════════════════════════════════════════════════════


class FormEditAction(str, Enum):
    TOGGLE_SIZE_GROUP = "toggle_size_group"
    ADD_SIZE = "add_size"
    REMOVE_SIZE = "remove_size"
    ADD_COLOR = "add_color"
    REMOVE_COLOR = "remove_color"
    MOVE_IMAGE_TO_FRONT = "move_image_to_front"
    REMOVE_IMAGE = "remove_image"
    ADD_VARIATION = "add_variation"
    REMOVE_VARIATION = "remove_variation"


class FormEditRequest(BaseModel):
    """
    What:  One editor action applied to an unsaved form.
    How:   Variation-level actions target `variation_index`; image, color and
           variation removals use `index`.
    """
    form: ProductForm
    action: FormEditAction
    variation_index: int = Field(default=0, ge=0)
    index: Optional[int] = Field(default=None, ge=0)
    size_group: Optional[str] = Field(default=None, description="STANDARD or PLUS")
    size: str = ""
    color: Optional[ColorVariant] = None
