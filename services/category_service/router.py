import math
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner, get_hooks
from shared.config.database import get_db
from shared.media import ObjectStore, get_object_store, read_image_upload
from shared.schemas import Pagination
from shared.security import CurrentUser, Role, require_roles
from .schemas import (
    CategoryActionResponse,
    CategoryActiveRequest,
    CategoryDetail,
    CategoryEnvelope,
    CategoryListResponse,
)
from .service import CategoryService

router = APIRouter()

admin_only = require_roles(Role.ADMIN)


@router.post("/add", response_model=CategoryEnvelope, status_code=status.HTTP_201_CREATED)
async def add_category(
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    is_active: bool | None = Form(default=None, alias="isActive"),
    image: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    raw = await read_image_upload(image)
    category = await CategoryService.create_category(
        db, store, hooks, name=name, description=description, is_active=is_active, image=raw
    )
    return CategoryEnvelope(message="Category has been added successfully!", category=category)


@router.get("/list", response_model=CategoryListResponse)
async def list_store_categories(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    categories, total = await CategoryService.list_categories(db, active_only=True, page=page, limit=limit)
    return CategoryListResponse(
        categories=categories,
        pagination=Pagination(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)),
    )


@router.get("/", response_model=CategoryListResponse)
async def list_all_categories(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_only),
):
    categories, _ = await CategoryService.list_categories(db, active_only=False)
    return CategoryListResponse(categories=categories)


@router.get("/{category_id}", response_model=CategoryDetail)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await CategoryService.get_category(db, category_id)
    return CategoryDetail(category=category)


@router.put("/{category_id}", response_model=CategoryEnvelope)
async def update_category(
    category_id: int,
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    slug: str | None = Form(default=None),
    is_active: bool | None = Form(default=None, alias="isActive"),
    image: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    raw = await read_image_upload(image)
    category = await CategoryService.update_category(
        db,
        category_id,
        store,
        hooks,
        name=name,
        description=description,
        slug=slug,
        is_active=is_active,
        image=raw,
    )
    return CategoryEnvelope(message="Category has been updated successfully!", category=category)


@router.put("/{category_id}/active", response_model=CategoryEnvelope)
async def set_category_active(
    category_id: int,
    payload: CategoryActiveRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_only),
):
    category = await CategoryService.set_active(db, category_id, payload.category.is_active)
    return CategoryEnvelope(message="Category has been updated successfully!", category=category)


@router.delete("/delete/{category_id}", response_model=CategoryActionResponse)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    await CategoryService.delete_category(db, category_id, store, hooks)
    return CategoryActionResponse(message="Category has been deleted successfully!")
