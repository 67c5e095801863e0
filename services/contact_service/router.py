from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.config.database import get_db
from shared.security import limiter
from .schemas import ContactCreate, ContactEnvelope
from .service import ContactService

router = APIRouter()


@router.post("/add", response_model=ContactEnvelope)
@limiter.limit(settings.CONTACT_RATE_LIMIT)
async def add_contact(
    request: Request,  # slowapi reads the caller key from it
    payload: ContactCreate,
    db: AsyncSession = Depends(get_db),
):
    contact = await ContactService.submit(db, payload)
    return ContactEnvelope(message="We will reach you soon!", contact=contact)
