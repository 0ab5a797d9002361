"""
Kavin's Catalog Backend — Admin Product Route Handlers
========================================================

What:  The admin product editor: load/save a variant group, editor actions,
       deletions, photo uploads and AI descriptions.
How:   Reads are open to any ADMIN session; writes need an online ADMIN
       session (offline mode is view only).
"""

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_admin, require_online_admin
from app.schemas.common import ErrorResponse
from app.schemas.product import (
    DescriptionRequest,
    DescriptionResponse,
    FormEditRequest,
    GroupDeleteResponse,
    ImageUploadResponse,
    ProductForm,
    ProductFormResponse,
    SaveFormResponse,
)
from app.schemas.user import SessionUser
from app.services.image_service import image_service
from app.services.product_form_service import product_form_service
from app.services.product_service import product_service
from app.services.variant_editor import apply_edit

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin products"],
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        403: {"description": "Not an administrator, or offline session", "model": ErrorResponse},
    },
)


@router.get(
    "/products/{product_id}/form",
    response_model=ProductFormResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Load the editor form for a product and its variations",
)
async def load_product_form(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
    _admin: SessionUser = Depends(require_admin),
) -> ProductFormResponse:
    return await product_form_service.load_form(db, product_id)


@router.post(
    "/products/form",
    response_model=SaveFormResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid form", "model": ErrorResponse}},
    summary="Create a product with one or more variations",
)
async def create_product(
    form: ProductForm,
    db: AsyncSession = Depends(get_db_session),
    admin: SessionUser = Depends(require_online_admin),
) -> SaveFormResponse:
    result = await product_form_service.save_form(db, form)
    logger.info("Admin %s created product group %s", admin.email, result.group_id)
    return result


@router.put(
    "/products/{product_id}/form",
    response_model=SaveFormResponse,
    responses={
        400: {"description": "Invalid form", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
    },
    summary="Save the editor form of an existing product",
)
async def update_product(
    product_id: str,
    form: ProductForm,
    db: AsyncSession = Depends(get_db_session),
    admin: SessionUser = Depends(require_online_admin),
) -> SaveFormResponse:
    result = await product_form_service.save_form(db, form, product_id=product_id)
    logger.info("Admin %s updated product group %s", admin.email, result.group_id)
    return result


@router.post(
    "/products/form/edit",
    response_model=ProductForm,
    responses={400: {"description": "Invalid action", "model": ErrorResponse}},
    summary="Apply an editor action (sizes, colors, photos, variations) to an unsaved form",
)
async def edit_product_form(
    body: FormEditRequest,
    _admin: SessionUser = Depends(require_admin),
) -> ProductForm:
    return apply_edit(body)


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete one product variation",
)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
    _admin: SessionUser = Depends(require_online_admin),
) -> Response:
    await product_service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/product-groups/{group_id}",
    response_model=GroupDeleteResponse,
    summary="Delete every variation of a product group",
)
async def delete_product_group(
    group_id: str,
    db: AsyncSession = Depends(get_db_session),
    _admin: SessionUser = Depends(require_online_admin),
) -> GroupDeleteResponse:
    count = await product_service.delete_group(db, group_id)
    return GroupDeleteResponse(group_id=group_id, deleted_count=count)


@router.post(
    "/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid image", "model": ErrorResponse}},
    summary="Upload a product photo",
    description="The photo is resized to at most 1200x1600 and stored as JPEG.",
)
async def upload_image(
    file: UploadFile = File(..., description="PNG, JPEG or WEBP photo"),
    _admin: SessionUser = Depends(require_online_admin),
) -> ImageUploadResponse:
    content = await file.read()
    return await image_service.store_upload(file.filename or "", content)


@router.post(
    "/products/description",
    response_model=DescriptionResponse,
    responses={
        400: {"description": "Product name missing", "model": ErrorResponse},
        503: {"description": "AI service unavailable", "model": ErrorResponse},
    },
    summary="Generate a sales description with AI",
)
async def generate_description(
    body: DescriptionRequest,
    _admin: SessionUser = Depends(require_online_admin),
) -> DescriptionResponse:
    return await product_form_service.generate_description(body)
