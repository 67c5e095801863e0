from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from .models import Testimony


class TestimonyRepository:

    @staticmethod
    async def create_testimony(db: AsyncSession, testimony: Testimony):
        db.add(testimony)
        await db.commit()
        await db.refresh(testimony)
        return testimony

    @staticmethod
    async def get_testimony(db: AsyncSession, testimony_id: int):
        result = await db.execute(select(Testimony).where(Testimony.id == testimony_id))
        return result.scalars().first()

    @staticmethod
    async def count_testimonies(db: AsyncSession) -> int:
        return await db.scalar(select(func.count(Testimony.id))) or 0

    @staticmethod
    async def list_testimonies(db: AsyncSession):
        result = await db.execute(select(Testimony).order_by(Testimony.created_at.desc(), Testimony.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def delete_testimony(db: AsyncSession, testimony: Testimony):
        await db.execute(delete(Testimony).where(Testimony.id == testimony.id))
        await db.commit()
