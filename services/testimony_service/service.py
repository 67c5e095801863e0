import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner
from shared.config import settings
from shared.errors import NotFoundError, ValidationError
from shared.media import ObjectStore, RawImage, compress_image
from .models import Testimony
from .repository import TestimonyRepository

logger = structlog.get_logger(__name__)

# Testimony cards are tall, so they get the portrait frame
TESTIMONY_VARIANT = "testimony"


class TestimonyService:

    @staticmethod
    async def list_testimonies(db: AsyncSession):
        return await TestimonyRepository.list_testimonies(db)

    @staticmethod
    async def add_testimony(db: AsyncSession, store: ObjectStore, image: RawImage | None) -> Testimony:
        if image is None:
            raise ValidationError("You must upload an image.")

        # Checked before any compression work is spent on the upload
        if await TestimonyRepository.count_testimonies(db) >= settings.MAX_TESTIMONIES:
            raise ValidationError(f"Maximum {settings.MAX_TESTIMONIES} testimony images allowed.")

        compressed = await compress_image(image, TESTIMONY_VARIANT)
        image_key = await store.upload("testimony", compressed)

        testimony = await TestimonyRepository.create_testimony(db, Testimony(image_key=image_key))
        logger.info("testimony_added", testimony_id=testimony.id)
        return testimony

    @staticmethod
    async def delete_testimony(
        db: AsyncSession,
        testimony_id: int,
        store: ObjectStore,
        hooks: BestEffortRunner,
    ):
        testimony = await TestimonyRepository.get_testimony(db, testimony_id)
        if not testimony:
            raise NotFoundError("Testimony not found.")
        await TestimonyRepository.delete_testimony(db, testimony)
        hooks.submit("image_discard", store.discard, testimony.image_key)
        return testimony
