from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from .models import Order


class OrderRepository:

    @staticmethod
    async def create_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, owner_id: str | None = None):
        """``owner_id`` restricts the lookup to that user's orders."""
        query = select(Order).where(Order.id == order_id)
        if owner_id is not None:
            query = query.where(Order.user_id == owner_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession, owner_id: str | None, page: int, limit: int):
        conditions = [Order.user_id == owner_id] if owner_id is not None else []
        result = await db.execute(
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        count = await db.scalar(select(func.count(Order.id)).where(*conditions))
        return result.scalars().all(), count or 0

    @staticmethod
    async def update_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order
