from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload
from .models import Category


class CategoryRepository:

    @staticmethod
    async def create_category(db: AsyncSession, category: Category):
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def get_category(db: AsyncSession, category_id: int):
        result = await db.execute(select(Category).where(Category.id == category_id))
        return result.scalars().first()

    @staticmethod
    async def get_category_with_products(db: AsyncSession, category_id: int):
        result = await db.execute(
            select(Category)
            .where(Category.id == category_id)
            .options(selectinload(Category.products))
        )
        return result.scalars().first()

    @staticmethod
    async def get_category_by_name(db: AsyncSession, name: str):
        result = await db.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    @staticmethod
    async def get_category_by_slug(db: AsyncSession, slug: str):
        result = await db.execute(select(Category).where(Category.slug == slug))
        return result.scalars().first()

    @staticmethod
    async def list_categories(db: AsyncSession, *, active_only: bool, page: int = 1, limit: int | None = None):
        conditions = [Category.is_active.is_(True)] if active_only else []
        query = select(Category).where(*conditions).order_by(Category.created_at.desc(), Category.id.desc())
        if limit is not None:
            query = query.offset((page - 1) * limit).limit(limit)
        result = await db.execute(query)
        total = await db.scalar(select(func.count(Category.id)).where(*conditions))
        return result.scalars().all(), total or 0

    @staticmethod
    async def update_category(db: AsyncSession, category: Category):
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, category: Category):
        await db.execute(delete(Category).where(Category.id == category.id))
        await db.commit()
