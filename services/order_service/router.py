import math
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner, get_hooks
from shared.config.database import get_db
from shared.security import CurrentUser, Role, get_current_user, require_roles
from services.payment_service.gateway import RazorpayGateway, get_payment_gateway
from .schemas import (
    OrderActionResponse,
    OrderCreate,
    OrderCreated,
    OrderDetail,
    OrderPage,
    OrderStatusUpdate,
    PaymentStatusUpdate,
)
from .service import OrderService

router = APIRouter()

member_only = require_roles(Role.MEMBER)
admin_only = require_roles(Role.ADMIN)


@router.post("/add", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: OrderCreate,
    db: AsyncSession = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(member_only),
):
    order = await OrderService.place_order(db, user.id, payload, gateway, hooks)
    return OrderCreated(message="Order created successfully", order=order)


@router.get("/", response_model=OrderPage)
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    orders, count = await OrderService.list_orders(db, user, page, limit)
    return OrderPage(
        orders=orders,
        total_pages=math.ceil(count / limit),
        current_page=page,
        count=count,
    )


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    order = await OrderService.get_order(db, user, order_id)
    return OrderDetail(order=order)


@router.post("/cancel/{order_id}", response_model=OrderActionResponse, response_model_exclude_none=True)
async def cancel_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(get_current_user),
):
    await OrderService.cancel_order(db, user, order_id, hooks)
    return OrderActionResponse()


@router.put("/paymentStatus/{order_id}", response_model=OrderActionResponse)
async def set_payment_status(
    order_id: int,
    payload: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(member_only),
):
    await OrderService.set_payment_status(db, user, order_id, payload.payment_status)
    return OrderActionResponse(message="Order status has been updated successfully!")


@router.put("/status/{order_id}", response_model=OrderActionResponse)
async def set_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(admin_only),
):
    await OrderService.set_order_status(db, order_id, payload.status)
    return OrderActionResponse(message="Item status has been updated successfully!")
