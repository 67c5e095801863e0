import math
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner, get_hooks
from shared.config.database import get_db
from shared.errors import ValidationError
from shared.media import ObjectStore, get_object_store, read_image_uploads
from shared.schemas import Pagination
from shared.security import CurrentUser, Role, get_current_user, require_roles
from .schemas import (
    MAX_HERO_IMAGES,
    MAX_IMAGES,
    ProductActionResponse,
    ProductActiveRequest,
    ProductDetail,
    ProductEnvelope,
    ProductListResponse,
    ProductOptionsResponse,
    ProductQuery,
    ProductSearchResponse,
    ProductUpdateRequest,
)
from .service import ProductService

router = APIRouter()

admin_only = require_roles(Role.ADMIN)
admin_or_merchant = require_roles(Role.ADMIN, Role.MERCHANT)


def _id_list(raw: str | None, field: str) -> list[int] | None:
    """``"1,2,3"`` -> ``[1, 2, 3]``"""
    if not raw:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError(f"{field} must be a comma-separated list of ids.")


def product_query(
    category_id: str | None = Query(default=None),
    product_id: str | None = Query(default=None),
    name: str | None = Query(default=None),
    featured: bool | None = Query(default=None),
    in_stock: bool | None = Query(default=None, alias="inStock"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: str | None = Query(default=None, alias="sortBy"),
) -> ProductQuery:
    return ProductQuery(
        category_id=_id_list(category_id, "category_id"),
        product_id=_id_list(product_id, "product_id"),
        name=name,
        featured=featured,
        in_stock=in_stock,
        page=page,
        limit=limit,
        sort_by=sort_by,
    )


async def _paginated(db: AsyncSession, query: ProductQuery, active_only: bool):
    products, total = await ProductService.list_products(db, query, active_only=active_only)
    return ProductListResponse(
        products=products,
        pagination=Pagination(
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(total / query.limit),
        ),
    )


@router.post("/add", response_model=ProductEnvelope, status_code=status.HTTP_201_CREATED)
async def add_product(
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    price: float | None = Form(default=None),
    discount: float = Form(default=0),
    category_id: int | None = Form(default=None, alias="categoryId"),
    color: str | None = Form(default=None),
    material: str | None = Form(default=None),
    weight: str | None = Form(default=None),
    in_stock: bool | None = Form(default=None, alias="inStock"),
    is_active: bool | None = Form(default=None, alias="isActive"),
    featured: bool | None = Form(default=None),
    hero_image: list[UploadFile] | None = File(default=None, alias="heroImage"),
    images: list[UploadFile] | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    hero_raw = await read_image_uploads(hero_image, MAX_HERO_IMAGES, "heroImage")
    images_raw = await read_image_uploads(images, MAX_IMAGES, "images")

    product = await ProductService.create_product(
        db,
        store,
        hooks,
        name=name,
        description=description,
        price=price,
        discount=discount,
        category_id=category_id,
        color=color,
        material=material,
        weight=weight,
        in_stock=in_stock,
        is_active=is_active,
        featured=featured,
        hero_images=hero_raw,
        images=images_raw,
    )
    return ProductEnvelope(message="Product has been added successfully!", product=product)


@router.get("/list", response_model=ProductListResponse)
async def list_store_products(
    query: ProductQuery = Depends(product_query),
    db: AsyncSession = Depends(get_db),
):
    return await _paginated(db, query, active_only=True)


@router.get("/list/search/{name}", response_model=ProductSearchResponse)
async def search_products(name: str, db: AsyncSession = Depends(get_db)):
    products = await ProductService.search_products(db, name)
    return ProductSearchResponse(products=products)


@router.get("/list/select", response_model=ProductOptionsResponse)
async def list_product_options(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    rows = await ProductService.list_product_options(db)
    return {"products": [{"id": row.id, "name": row.name} for row in rows]}


@router.get("/single/{slug}", response_model=ProductDetail)
async def get_product_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    product = await ProductService.get_product_by_slug(db, slug, active_only=True)
    return ProductDetail(product=product)


@router.get("/", response_model=ProductListResponse)
async def list_all_products(
    query: ProductQuery = Depends(product_query),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_only),
):
    return await _paginated(db, query, active_only=False)


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_or_merchant),
):
    product = await ProductService.get_product(db, product_id)
    return ProductDetail(product=product)


@router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product(
    product_id: int,
    payload: ProductUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_or_merchant),
):
    product = await ProductService.update_product(db, product_id, payload.product)
    return ProductEnvelope(message="Product has been updated successfully!", product=product)


@router.put("/{product_id}/active", response_model=ProductEnvelope)
async def set_product_active(
    product_id: int,
    payload: ProductActiveRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_or_merchant),
):
    product = await ProductService.set_active(db, product_id, payload.product.is_active)
    return ProductEnvelope(message="Product has been updated successfully!", product=product)


@router.delete("/delete/{product_id}", response_model=ProductActionResponse)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    await ProductService.delete_product(db, product_id, store, hooks)
    return ProductActionResponse(message="Product has been deleted successfully!")
