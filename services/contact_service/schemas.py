from datetime import datetime
from typing import Optional

from shared.schemas import ApiModel


class ContactCreate(ApiModel):
    # Required fields are checked by the service so each gets its own message
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    message: Optional[str] = None


class ContactResponse(ApiModel):
    id: int
    name: str
    email: Optional[str] = None
    phone_number: str
    message: str
    created_at: datetime


class ContactEnvelope(ApiModel):
    success: bool = True
    message: str
    contact: ContactResponse
