from datetime import datetime
from typing import Optional

from shared.schemas import ApiModel


class TestimonyResponse(ApiModel):
    id: int
    image_key: str
    created_at: datetime


class TestimonyEnvelope(ApiModel):
    success: bool = True
    message: str
    testimony: Optional[TestimonyResponse] = None
