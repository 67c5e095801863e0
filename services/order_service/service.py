import uuid
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner
from shared.config import settings
from shared.errors import (
    AlreadyCancelledError,
    ConflictError,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from shared.observability import (
    ecomm_order_placement_duration_seconds,
    ecomm_orders_cancelled_total,
    ecomm_orders_placed_total,
)
from shared.security import CurrentUser
from services.payment_service.gateway import PaymentGatewayError, RazorpayGateway
from services.product_service.repository import ProductRepository
from services.product_service.service import ProductService
from .models import Order, OrderItem, OrderStatus, PaymentStatus
from .repository import OrderRepository
from .schemas import OrderCreate
from .transitions import can_change_order_status, can_change_payment_status

logger = structlog.get_logger(__name__)


def line_total(unit_price: float, discount: float, quantity: int) -> float:
    """Discounted price of one line. Plain float arithmetic, no rounding."""
    return unit_price * (100 - discount) / 100 * quantity


def new_receipt() -> str:
    # Gateway receipts are capped at 40 characters
    return f"rcpt_{uuid.uuid4().hex}"


def _owner_scope(user: CurrentUser) -> str | None:
    """Admins reach every order; everyone else only their own."""
    return None if user.is_admin else user.id


class OrderService:

    @staticmethod
    def validate_order(data: OrderCreate):
        if not data.order_items:
            raise ValidationError("At least one order item is required")
        for item in data.order_items:
            if item.product_id is None:
                raise ValidationError("Product ID is required for all items")
            if not item.quantity or item.quantity < 1:
                raise ValidationError("Quantity must be at least 1")
        if data.shipping_details is None or not data.shipping_details.is_complete():
            raise ValidationError("Complete shipping details are required")

    @staticmethod
    async def place_order(
        db: AsyncSession,
        owner_id: str,
        data: OrderCreate,
        gateway: RazorpayGateway,
        hooks: BestEffortRunner,
    ) -> Order:
        with ecomm_order_placement_duration_seconds.time():
            try:
                OrderService.validate_order(data)

                products = await ProductRepository.get_products_by_ids(
                    db, [item.product_id for item in data.order_items]
                )
                items = []
                for item in data.order_items:
                    product = products.get(item.product_id)
                    if product is None:
                        raise ValidationError(f"Product {item.product_id} does not exist")
                    items.append(OrderItem(
                        product_id=product.id,
                        name=product.name,
                        quantity=item.quantity,
                        unit_price=product.price,
                        discount=product.discount,
                        total_price=line_total(product.price, product.discount, item.quantity),
                    ))

                # A caller-supplied non-zero total wins over the computed sum
                # TODO: cross-check data.total against the computed sum once clients send matching totals
                calculated_total = data.total or sum(item.total_price for item in items)
                payment = data.payment_details

                gateway_order = await gateway.create_order(
                    amount_minor_units=int(round(calculated_total * 100)),
                    currency=settings.PAYMENT_CURRENCY,
                    receipt=new_receipt(),
                )
                order = await OrderRepository.create_order(db, Order(
                    user_id=owner_id,
                    status=OrderStatus.PROCESSING.value,
                    personalized_message=data.personalized_message or None,
                    shipping_details=data.shipping_details.model_dump(
                        mode="json", by_alias=True, exclude_none=True
                    ),
                    payment_order_id=gateway_order.id,
                    payment_method=payment.payment_method if payment else None,
                    payment_status=PaymentStatus.PENDING.value,
                    transaction_date=payment.transaction_date if payment else None,
                    transaction_reference=payment.transaction_reference if payment else None,
                    total=calculated_total,
                    items=items,
                ))
            except ValidationError:
                ecomm_orders_placed_total.labels(status="rejected").inc()
                raise
            except PaymentGatewayError as exc:
                ecomm_orders_placed_total.labels(status="failed").inc()
                logger.error("order_gateway_failed", user_id=owner_id, error=str(exc))
                raise ProcessingError(status_code=400) from exc
            except Exception as exc:
                await db.rollback()
                ecomm_orders_placed_total.labels(status="failed").inc()
                logger.exception("order_placement_failed", user_id=owner_id)
                raise ProcessingError(status_code=400) from exc

        ecomm_orders_placed_total.labels(status="success").inc()
        logger.info(
            "order_placed",
            order_id=order.id,
            user_id=owner_id,
            total=calculated_total,
            gateway_order_id=order.payment_order_id,
        )

        for item in order.items:
            hooks.submit_db("sales_count", ProductService.record_sale, item.product_id, item.quantity)
        return order

    @staticmethod
    async def list_orders(db: AsyncSession, user: CurrentUser, page: int = 1, limit: int = 10):
        return await OrderRepository.list_orders(db, _owner_scope(user), page, limit)

    @staticmethod
    async def get_order(db: AsyncSession, user: CurrentUser, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id, _owner_scope(user))
        if not order:
            raise NotFoundError(f"Cannot find order with the id: {order_id}.")
        return order

    @staticmethod
    async def cancel_order(
        db: AsyncSession,
        user: CurrentUser,
        order_id: int,
        hooks: BestEffortRunner,
    ) -> Order:
        order = await OrderRepository.get_order(db, order_id, _owner_scope(user))
        if not order:
            raise NotFoundError("Order not found.")
        if order.status == OrderStatus.CANCELLED.value:
            raise AlreadyCancelledError()

        order.status = OrderStatus.CANCELLED.value
        order = await OrderRepository.update_order(db, order)
        ecomm_orders_cancelled_total.inc()
        logger.info("order_cancelled", order_id=order.id, user_id=user.id)

        for item in order.items:
            hooks.submit_db("sales_count", ProductService.release_sale, item.product_id, item.quantity)
        return order

    @staticmethod
    async def set_payment_status(
        db: AsyncSession,
        user: CurrentUser,
        order_id: int,
        status: str | None,
    ) -> Order | None:
        """``Pending`` (or nothing) leaves the order untouched and returns None."""
        if not status or status == PaymentStatus.PENDING.value:
            return None
        try:
            new_status = PaymentStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown payment status: {status}")

        order = await OrderRepository.get_order(db, order_id, _owner_scope(user))
        if not order:
            raise NotFoundError(f"Cannot find order with the id: {order_id}.")
        if order.status == OrderStatus.CANCELLED.value:
            raise AlreadyCancelledError()
        if settings.STRICT_ORDER_TRANSITIONS and not can_change_payment_status(order.payment_status, new_status):
            raise ConflictError(
                f"Cannot change payment status from {order.payment_status} to {new_status.value}."
            )

        order.payment_status = new_status.value
        order = await OrderRepository.update_order(db, order)
        logger.info("payment_status_changed", order_id=order.id, payment_status=order.payment_status)
        return order

    @staticmethod
    async def set_order_status(db: AsyncSession, order_id: int, status: str | None) -> Order | None:
        """``Cancelled`` (or nothing) leaves the order untouched and returns None."""
        if not status or status == OrderStatus.CANCELLED.value:
            return None
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {status}")

        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFoundError(f"Cannot find order with the id: {order_id}.")
        if order.status == OrderStatus.CANCELLED.value:
            raise AlreadyCancelledError()
        if settings.STRICT_ORDER_TRANSITIONS and not can_change_order_status(order.status, new_status):
            raise ConflictError(f"Cannot change order status from {order.status} to {new_status.value}.")

        order.status = new_status.value
        order = await OrderRepository.update_order(db, order)
        logger.info("order_status_changed", order_id=order.id, status=order.status)
        return order
