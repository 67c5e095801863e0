from datetime import datetime
from typing import Any, List, Optional
from pydantic import Field

from shared.schemas import ApiModel
from services.payment_service.schemas import PaymentDetailsIn, PaymentDetailsOut


class OrderItemIn(ApiModel):
    # Presence and range are checked by the service so each failure gets its own message
    product_id: Optional[int] = None
    quantity: Optional[int] = None


class ShippingDetails(ApiModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    shipment_date: Optional[datetime] = None
    expected_delivery: Optional[datetime] = None
    shipping_method: Optional[str] = None
    shipping_cost: Optional[float] = None

    def is_complete(self) -> bool:
        return all((self.address_line1, self.city, self.state, self.zip_code, self.country))


class OrderCreate(ApiModel):
    order_items: Optional[List[OrderItemIn]] = None
    personalized_message: Optional[str] = None
    shipping_details: Optional[ShippingDetails] = None
    payment_details: Optional[PaymentDetailsIn] = None
    total: Optional[float] = None


class OrderItemResponse(ApiModel):
    product_id: int
    name: str
    quantity: int
    unit_price: float
    discount: float
    total_price: float


class OrderResponse(ApiModel):
    id: int
    user_id: str
    status: str
    order_date: datetime
    items: List[OrderItemResponse] = Field(default_factory=list, serialization_alias="orderItems")
    personalized_message: Optional[str] = None
    shipping_details: dict[str, Any]
    payment_details: PaymentDetailsOut
    total: float
    created_at: datetime
    updated_at: datetime


class OrderCreated(ApiModel):
    message: str
    order: OrderResponse


class OrderDetail(ApiModel):
    order: OrderResponse


class OrderPage(ApiModel):
    orders: List[OrderResponse]
    total_pages: int
    current_page: int
    count: int


class PaymentStatusUpdate(ApiModel):
    payment_status: Optional[str] = None


class OrderStatusUpdate(ApiModel):
    status: Optional[str] = None


class OrderActionResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
