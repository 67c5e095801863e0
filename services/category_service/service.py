import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner
from shared.errors import ConflictError, NotFoundError, ValidationError
from shared.media import ObjectStore, RawImage, compress_image, discard_uploads
from shared.slug import derive_slug
from services.product_service.repository import ProductRepository
from .models import Category
from .repository import CategoryRepository

logger = structlog.get_logger(__name__)


class CategoryService:

    @staticmethod
    async def create_category(
        db: AsyncSession,
        store: ObjectStore,
        hooks: BestEffortRunner,
        *,
        name: str | None,
        description: str | None,
        is_active: bool | None = None,
        image: RawImage | None = None,
    ) -> Category:
        if not description or not name:
            raise ValidationError("You must enter description & name.")

        if await CategoryRepository.get_category_by_name(db, name):
            raise ConflictError("Category already exists.")

        slug = derive_slug(name)
        if await CategoryRepository.get_category_by_slug(db, slug):
            raise ConflictError("Slug is already in use.")

        image_key = None
        if image is not None:
            compressed = await compress_image(image)
            image_key = await store.upload(f"category/{name}", compressed)

        category = Category(
            name=name,
            slug=slug,
            description=description,
            is_active=True if is_active is None else is_active,
            image_key=image_key,
        )
        try:
            category = await CategoryRepository.create_category(db, category)
        except Exception as exc:
            await db.rollback()
            discard_uploads(hooks, store, [image_key])
            if isinstance(exc, IntegrityError):
                raise ConflictError("Category already exists.") from exc
            raise
        logger.info("category_created", category_id=category.id, slug=category.slug)
        return category

    @staticmethod
    async def list_categories(db: AsyncSession, active_only: bool, page: int = 1, limit: int | None = None):
        return await CategoryRepository.list_categories(db, active_only=active_only, page=page, limit=limit)

    @staticmethod
    async def get_category(db: AsyncSession, category_id: int) -> Category:
        category = await CategoryRepository.get_category_with_products(db, category_id)
        if not category:
            raise NotFoundError("No Category found.")
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession,
        category_id: int,
        store: ObjectStore,
        hooks: BestEffortRunner,
        *,
        name: str | None = None,
        description: str | None = None,
        slug: str | None = None,
        is_active: bool | None = None,
        image: RawImage | None = None,
    ) -> Category:
        if slug:
            taken = await CategoryRepository.get_category_by_slug(db, slug)
            if taken and taken.id != category_id:
                raise ConflictError("Slug is already in use.")

        category = await CategoryRepository.get_category(db, category_id)
        if not category:
            raise NotFoundError("Category not found.")

        if name and name != category.name:
            if await CategoryRepository.get_category_by_name(db, name):
                raise ConflictError("Category already exists.")
            category.name = name
        if description is not None:
            category.description = description
        if slug:
            category.slug = slug
        if is_active is not None:
            category.is_active = is_active

        if image is not None:
            compressed = await compress_image(image)
            new_key = await store.upload(f"category/{category.name}", compressed)
            if category.image_key:
                hooks.submit("image_discard", store.discard, category.image_key)
            category.image_key = new_key

        return await CategoryRepository.update_category(db, category)

    @staticmethod
    async def set_active(db: AsyncSession, category_id: int, is_active: bool) -> Category:
        category = await CategoryRepository.get_category(db, category_id)
        if not category:
            raise NotFoundError("Category not found.")

        # Deactivating a category takes its products off the storefront too
        if not is_active:
            await ProductRepository.set_active_for_category(db, category_id, False)
        category.is_active = is_active
        return await CategoryRepository.update_category(db, category)

    @staticmethod
    async def delete_category(
        db: AsyncSession,
        category_id: int,
        store: ObjectStore,
        hooks: BestEffortRunner,
    ) -> Category:
        category = await CategoryRepository.get_category(db, category_id)
        if not category:
            raise NotFoundError("Category not found.")

        await ProductRepository.detach_category(db, category_id)
        await CategoryRepository.delete_category(db, category)

        if category.image_key:
            hooks.submit("image_discard", store.discard, category.image_key)
        return category
