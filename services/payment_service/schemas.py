from datetime import datetime
from typing import Optional

from shared.schemas import ApiModel


class PaymentDetailsIn(ApiModel):
    """Payment fields a client may send when placing an order."""

    payment_method: Optional[str] = None
    transaction_date: Optional[datetime] = None
    transaction_reference: Optional[str] = None


class PaymentDetailsOut(ApiModel):
    order_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    transaction_date: Optional[datetime] = None
    transaction_reference: Optional[str] = None
