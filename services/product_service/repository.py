from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from .models import Product

SORT_OPTIONS = {
    "price_high_to_low": Product.price.desc(),
    "price_low_to_high": Product.price.asc(),
    "sales_count": Product.sales_count.desc(),
    "sales_high_to_low": Product.sales_count.desc(),
    "sales_low_to_high": Product.sales_count.asc(),
}


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def get_products_by_ids(db: AsyncSession, product_ids: list[int]) -> dict[int, Product]:
        """Catalog lookup for a whole cart in one round trip, keyed by id."""
        if not product_ids:
            return {}
        result = await db.execute(select(Product).where(Product.id.in_(set(product_ids))))
        return {product.id: product for product in result.scalars().all()}

    @staticmethod
    async def get_product_by_name(db: AsyncSession, name: str):
        result = await db.execute(select(Product).where(Product.name == name))
        return result.scalars().first()

    @staticmethod
    async def get_product_by_slug(db: AsyncSession, slug: str, active_only: bool = False):
        query = select(Product).where(Product.slug == slug)
        if active_only:
            query = query.where(Product.is_active.is_(True))
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def list_products(
        db: AsyncSession,
        *,
        active_only: bool,
        category_ids: list[int] | None = None,
        product_ids: list[int] | None = None,
        name: str | None = None,
        featured: bool | None = None,
        in_stock: bool | None = None,
        sort_by: str | None = None,
        page: int = 1,
        limit: int = 10,
    ):
        conditions = []
        if active_only:
            conditions.append(Product.is_active.is_(True))
        if category_ids:
            conditions.append(Product.category_id.in_(category_ids))
        if product_ids:
            conditions.append(Product.id.in_(product_ids))
        if name:
            conditions.append(Product.name.ilike(f"%{name}%"))
        if featured is not None:
            conditions.append(Product.featured.is_(featured))
        if in_stock is not None:
            conditions.append(Product.in_stock.is_(in_stock))

        order_by = SORT_OPTIONS.get(sort_by, Product.created_at.desc())
        result = await db.execute(
            select(Product)
            .where(*conditions)
            .order_by(order_by, Product.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total = await db.scalar(select(func.count(Product.id)).where(*conditions))
        return result.scalars().all(), total or 0

    @staticmethod
    async def search_products_by_name(db: AsyncSession, name: str):
        result = await db.execute(
            select(Product)
            .where(Product.is_active.is_(True), Product.name.ilike(f"%{name}%"))
            .order_by(Product.name)
        )
        return result.scalars().all()

    @staticmethod
    async def list_product_names(db: AsyncSession):
        result = await db.execute(select(Product.id, Product.name).order_by(Product.name))
        return result.all()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def set_active_for_category(db: AsyncSession, category_id: int, is_active: bool):
        await db.execute(
            update(Product)
            .where(Product.category_id == category_id)
            .values(is_active=is_active)
        )

    @staticmethod
    async def detach_category(db: AsyncSession, category_id: int):
        await db.execute(
            update(Product)
            .where(Product.category_id == category_id)
            .values(category_id=None)
        )

    @staticmethod
    async def adjust_sales_count(db: AsyncSession, product_id: int, delta: int):
        """Atomic ``sales_count += delta``. Returns the updated row, or None if it is gone."""
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(sales_count=Product.sales_count + delta)
        )
        await db.commit()
        if result.rowcount == 0:
            return None
        return await ProductRepository.get_product_by_id(db, product_id)

    @staticmethod
    async def delete_product(db: AsyncSession, product: Product):
        await db.execute(delete(Product).where(Product.id == product.id))
        await db.commit()
