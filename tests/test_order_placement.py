import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from services.order_service.models import Order, OrderStatus, PaymentStatus
from services.order_service.schemas import OrderCreate
from services.order_service.service import OrderService, line_total
from services.product_service.models import Product
from shared.errors import ProcessingError, ValidationError
from tests.conftest import MEMBER_ID

SHIPPING = {
    "addressLine1": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "zipCode": "560001",
    "country": "IN",
}


def order_payload(items, **extra):
    return OrderCreate.model_validate({"orderItems": items, "shippingDetails": SHIPPING, **extra})


async def count_orders(session_factory):
    async with session_factory() as session:
        return await session.scalar(select(func.count(Order.id)))


async def sales_count(session_factory, product_id):
    async with session_factory() as session:
        return await session.scalar(select(Product.sales_count).where(Product.id == product_id))


def test_line_total_applies_percent_discount():
    assert line_total(100, 10, 1) == 90
    assert line_total(45, 0, 2) == 90
    assert line_total(19.99, 0, 3) == pytest.approx(59.97)


async def test_place_order_computes_total_and_opens_gateway_order(db, session_factory, hooks, gateway, make_product):
    mug = await make_product("Mug", 100, discount=10)
    plate = await make_product("Plate", 45)

    order = await OrderService.place_order(
        db,
        MEMBER_ID,
        order_payload([{"productId": mug.id, "quantity": 1}, {"productId": plate.id, "quantity": 2}]),
        gateway,
        hooks,
    )

    assert order.total == 180
    assert [item.total_price for item in order.items] == [90, 90]
    assert [item.name for item in order.items] == ["Mug", "Plate"]
    assert order.items[0].unit_price == 100
    assert order.items[0].discount == 10
    assert order.status == OrderStatus.PROCESSING.value
    assert order.payment_status == PaymentStatus.PENDING.value
    assert order.payment_order_id == "order_fake_1"
    assert order.user_id == MEMBER_ID

    assert len(gateway.calls) == 1
    assert gateway.calls[0]["amount"] == 18000
    assert gateway.calls[0]["currency"] == "INR"
    assert gateway.calls[0]["receipt"].startswith("rcpt_")

    await hooks.drain()
    assert await sales_count(session_factory, mug.id) == 1
    assert await sales_count(session_factory, plate.id) == 2


async def test_two_units_at_ten_percent_off(db, hooks, gateway, make_product):
    mug = await make_product("Mug", 100, discount=10)

    order = await OrderService.place_order(
        db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 2}]), gateway, hooks
    )

    assert order.total == 180
    assert gateway.calls[0]["amount"] == 18000


async def test_caller_total_overrides_computed_sum(db, hooks, gateway, make_product):
    mug = await make_product("Mug", 100, discount=10)

    order = await OrderService.place_order(
        db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 1}], total=500), gateway, hooks
    )

    assert order.total == 500
    assert gateway.calls[0]["amount"] == 50000


async def test_zero_total_falls_back_to_computed_sum(db, hooks, gateway, make_product):
    mug = await make_product("Mug", 100, discount=10)

    order = await OrderService.place_order(
        db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 2}], total=0), gateway, hooks
    )

    assert order.total == 180


async def test_unknown_product_aborts_whole_order(db, session_factory, hooks, gateway, make_product):
    mug = await make_product("Mug", 100)

    with pytest.raises(ValidationError, match="Product 9999 does not exist"):
        await OrderService.place_order(
            db,
            MEMBER_ID,
            order_payload([{"productId": mug.id, "quantity": 1}, {"productId": 9999, "quantity": 1}]),
            gateway,
            hooks,
        )

    assert gateway.calls == []
    assert await count_orders(session_factory) == 0
    await hooks.drain()
    assert await sales_count(session_factory, mug.id) == 0


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"orderItems": [], "shippingDetails": SHIPPING}, "At least one order item is required"),
        ({"shippingDetails": SHIPPING}, "At least one order item is required"),
        ({"orderItems": [{"quantity": 1}], "shippingDetails": SHIPPING}, "Product ID is required for all items"),
        ({"orderItems": [{"productId": 1, "quantity": 0}], "shippingDetails": SHIPPING}, "Quantity must be at least 1"),
        ({"orderItems": [{"productId": 1}], "shippingDetails": SHIPPING}, "Quantity must be at least 1"),
        ({"orderItems": [{"productId": 1, "quantity": 1}]}, "Complete shipping details are required"),
        (
            {"orderItems": [{"productId": 1, "quantity": 1}], "shippingDetails": {**SHIPPING, "city": ""}},
            "Complete shipping details are required",
        ),
    ],
)
async def test_invalid_orders_are_rejected_before_any_side_effect(db, session_factory, hooks, gateway, payload, message):
    with pytest.raises(ValidationError) as excinfo:
        await OrderService.place_order(db, MEMBER_ID, OrderCreate.model_validate(payload), gateway, hooks)

    assert excinfo.value.message == message
    assert excinfo.value.status_code == 400
    assert gateway.calls == []
    assert await count_orders(session_factory) == 0


async def test_item_checks_run_before_shipping_checks(db, hooks, gateway):
    payload = OrderCreate.model_validate({"orderItems": [{"productId": 1, "quantity": 0}]})

    with pytest.raises(ValidationError, match="Quantity must be at least 1"):
        await OrderService.place_order(db, MEMBER_ID, payload, gateway, hooks)


async def test_gateway_failure_creates_no_order(db, session_factory, hooks, gateway, make_product):
    mug = await make_product("Mug", 100)
    gateway.fail = True

    with pytest.raises(ProcessingError) as excinfo:
        await OrderService.place_order(
            db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 1}]), gateway, hooks
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Your request could not be processed. Please try again."
    assert await count_orders(session_factory) == 0
    await hooks.drain()
    assert await sales_count(session_factory, mug.id) == 0


async def test_sales_count_failure_does_not_fail_the_order(db, session_factory, hooks, gateway, make_product, monkeypatch):
    mug = await make_product("Mug", 100)

    async def broken_record_sale(db, product_id, quantity):
        raise RuntimeError("counter store unavailable")

    monkeypatch.setattr("services.order_service.service.ProductService.record_sale", broken_record_sale)

    order = await OrderService.place_order(
        db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 3}]), gateway, hooks
    )
    await hooks.drain()

    assert order.id is not None
    assert await count_orders(session_factory) == 1
    assert await sales_count(session_factory, mug.id) == 0


async def test_payment_details_from_caller_are_kept(db, hooks, gateway, make_product):
    mug = await make_product("Mug", 100)

    order = await OrderService.place_order(
        db,
        MEMBER_ID,
        order_payload(
            [{"productId": mug.id, "quantity": 1}],
            paymentDetails={"paymentMethod": "UPI", "transactionReference": "txn-42"},
            personalizedMessage="Happy birthday",
        ),
        gateway,
        hooks,
    )

    assert order.payment_details["payment_method"] == "UPI"
    assert order.payment_details["transaction_reference"] == "txn-42"
    assert order.payment_details["payment_status"] == "Pending"
    assert order.personalized_message == "Happy birthday"
    assert order.shipping_details["addressLine1"] == "12 MG Road"


async def test_unexpected_gateway_error_becomes_processing_error(db, session_factory, hooks, gateway, make_product):
    mug = await make_product("Mug", 100)
    gateway.error = RuntimeError("sdk blew up")

    with pytest.raises(ProcessingError) as excinfo:
        await OrderService.place_order(
            db, MEMBER_ID, order_payload([{"productId": mug.id, "quantity": 1}]), gateway, hooks
        )

    assert excinfo.value.status_code == 400
    assert await count_orders(session_factory) == 0


async def test_catalog_lookup_failure_becomes_processing_error(db, session_factory, hooks, gateway, monkeypatch):
    async def broken_lookup(db, product_ids):
        raise OperationalError("SELECT products", {}, Exception("connection reset"))

    monkeypatch.setattr(
        "services.order_service.service.ProductRepository.get_products_by_ids", broken_lookup
    )

    with pytest.raises(ProcessingError) as excinfo:
        await OrderService.place_order(
            db, MEMBER_ID, order_payload([{"productId": 1, "quantity": 1}]), gateway, hooks
        )

    assert excinfo.value.status_code == 400
    assert gateway.calls == []
    assert await count_orders(session_factory) == 0
