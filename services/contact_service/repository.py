from sqlalchemy.ext.asyncio import AsyncSession
from .models import Contact


class ContactRepository:

    @staticmethod
    async def create_contact(db: AsyncSession, contact: Contact):
        db.add(contact)
        await db.commit()
        await db.refresh(contact)
        return contact
