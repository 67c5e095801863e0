import asyncio
import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner
from shared.config import settings
from shared.errors import ConflictError, NotFoundError, ValidationError
from shared.media import ObjectStore, RawImage, compress_batch, discard_uploads
from shared.slug import derive_slug
from services.category_service.repository import CategoryRepository
from .models import Product
from .repository import ProductRepository
from .schemas import MAX_HERO_IMAGES, MAX_IMAGES, ProductQuery, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(
        db: AsyncSession,
        store: ObjectStore,
        hooks: BestEffortRunner,
        *,
        name: str | None,
        description: str | None,
        price: float | None,
        discount: float = 0,
        category_id: int | None = None,
        color: str | None = None,
        material: str | None = None,
        weight: str | None = None,
        in_stock: bool | None = None,
        is_active: bool | None = None,
        featured: bool | None = None,
        hero_images: list[RawImage] = (),
        images: list[RawImage] = (),
    ) -> Product:
        if not name or not description or price is None:
            raise ValidationError("Name, description, and price are required.")

        if await ProductRepository.get_product_by_name(db, name):
            raise ConflictError("Product already exists.")

        if category_id is None or not await CategoryRepository.get_category(db, category_id):
            raise ValidationError("Category does not exists.")

        slug = derive_slug(name)
        if await ProductRepository.get_product_by_slug(db, slug):
            raise ConflictError("Slug is already in use.")

        compressed = await compress_batch(list(hero_images), list(images))
        hero_keys, image_keys = await asyncio.gather(
            asyncio.gather(*(
                store.upload(f"product/{name}/hero-{index}", image)
                for index, image in enumerate(compressed.hero_images)
            )),
            asyncio.gather(*(
                store.upload(f"product/{name}/images-{index}", image)
                for index, image in enumerate(compressed.other_images)
            )),
        )

        product = Product(
            name=name,
            slug=slug,
            description=description,
            price=price,
            discount=discount or 0,
            category_id=category_id,
            color=color,
            material=material,
            weight=weight,
            in_stock=True if in_stock is None else in_stock,
            is_active=True if is_active is None else is_active,
            featured=False if featured is None else featured,
            hero_image=list(hero_keys),
            images=list(image_keys),
        )
        try:
            product = await ProductRepository.create_product(db, product)
        except Exception as exc:
            await db.rollback()
            discard_uploads(hooks, store, [*hero_keys, *image_keys])
            if isinstance(exc, IntegrityError):
                raise ConflictError("Product already exists.") from exc
            raise
        logger.info("product_created", product_id=product.id, slug=product.slug)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, query: ProductQuery, active_only: bool):
        return await ProductRepository.list_products(
            db,
            active_only=active_only,
            category_ids=query.category_id,
            product_ids=query.product_id,
            name=query.name,
            featured=query.featured,
            in_stock=query.in_stock,
            sort_by=query.sort_by,
            page=query.page,
            limit=query.limit,
        )

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError("No product found.")
        return product

    @staticmethod
    async def search_products(db: AsyncSession, name: str):
        return await ProductRepository.search_products_by_name(db, name)

    @staticmethod
    async def list_product_options(db: AsyncSession):
        return await ProductRepository.list_product_names(db)

    @staticmethod
    async def get_product_by_slug(db: AsyncSession, slug: str, active_only: bool = False) -> Product:
        product = await ProductRepository.get_product_by_slug(db, slug, active_only=active_only)
        if not product:
            raise NotFoundError("No product found.")
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        changes = data.model_dump(exclude_unset=True)

        hero_image = changes.get("hero_image")
        if hero_image and len(hero_image) != MAX_HERO_IMAGES:
            raise ValidationError("Please provide 2 hero images.")
        images = changes.get("images")
        if images and len(images) > MAX_IMAGES:
            raise ValidationError("Please provide maximum 5 image.")

        product = await ProductService.get_product(db, product_id)

        if changes.get("name") and changes["name"] != product.name:
            if await ProductRepository.get_product_by_name(db, changes["name"]):
                raise ConflictError("Product already exists.")
        if changes.get("category_id") is not None:
            if not await CategoryRepository.get_category(db, changes["category_id"]):
                raise ValidationError("Category does not exists.")

        for field, value in changes.items():
            if value is None and field in ("hero_image", "images"):
                continue
            setattr(product, field, value)
        return await ProductRepository.update_product(db, product)

    @staticmethod
    async def set_active(db: AsyncSession, product_id: int, is_active: bool) -> Product:
        product = await ProductService.get_product(db, product_id)
        product.is_active = is_active
        return await ProductRepository.update_product(db, product)

    @staticmethod
    async def delete_product(
        db: AsyncSession,
        product_id: int,
        store: ObjectStore,
        hooks: BestEffortRunner,
    ) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError("Product not found.")
        await ProductRepository.delete_product(db, product)

        for image_key in [*(product.images or []), *(product.hero_image or [])]:
            hooks.submit("image_discard", store.discard, image_key)
        return product

    # --- sales counters (best-effort hooks, run on their own session) ---

    @staticmethod
    async def record_sale(db: AsyncSession, product_id: int, quantity: int):
        product = await ProductRepository.adjust_sales_count(db, product_id, quantity)
        if product is None:
            logger.warning("sales_count_target_missing", product_id=product_id)

    @staticmethod
    async def release_sale(db: AsyncSession, product_id: int, quantity: int):
        product = await ProductRepository.adjust_sales_count(db, product_id, -quantity)
        if product is None:
            logger.warning("sales_count_target_missing", product_id=product_id)
            return
        if product.best_seller and product.sales_count < settings.BEST_SELLER_THRESHOLD:
            product.best_seller = False
            await ProductRepository.update_product(db, product)
