import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import ValidationError
from .models import Contact
from .repository import ContactRepository
from .schemas import ContactCreate

logger = structlog.get_logger(__name__)


class ContactService:

    @staticmethod
    async def submit(db: AsyncSession, data: ContactCreate) -> Contact:
        if not data.phone_number:
            raise ValidationError("You must enter a phone number.")
        if not data.name:
            raise ValidationError("You must enter your name.")
        if not data.message:
            raise ValidationError("You must enter a message.")

        contact = await ContactRepository.create_contact(
            db,
            Contact(
                name=data.name,
                email=data.email,
                phone_number=data.phone_number,
                message=data.message,
            ),
        )
        logger.info("contact_message_received", contact_id=contact.id)
        return contact
