"""
Shared fixtures: a per-test SQLite database, fakes for the payment gateway and the
S3/CloudFront clients, and an HTTP client bound to the app.
"""
import io
import os
from datetime import datetime, timedelta, timezone

# Must be in place before the app modules read their settings
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient
from jose import jwt
from PIL import Image
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from main import app
from services.category_service.models import Category
from services.payment_service.gateway import GatewayOrder, PaymentGatewayError, get_payment_gateway
from services.product_service.models import Product
from shared.background import BestEffortRunner, get_hooks
from shared.config import settings
from shared.config.database import Base, get_db
from shared.media import ObjectStore, get_object_store
from shared.security import Role, limiter

ADMIN_ID = "admin-1"
MEMBER_ID = "member-1"
OTHER_MEMBER_ID = "member-2"


def make_image(size=(64, 48), color=(200, 30, 30), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_token(claims: dict, expires_in: timedelta = timedelta(minutes=60)) -> str:
    """Signs a token the way the account service does."""
    payload = {**claims, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def bearer(user_id: str, role: Role) -> dict:
    token = make_token({"sub": user_id, "role": role.value})
    return {"Authorization": f"Bearer {token}"}


class FakeGateway:
    """Stands in for RazorpayGateway. Set ``fail`` (or ``error``) to make the next calls raise."""

    def __init__(self):
        self.calls = []
        self.fail = False
        self.error: Exception | None = None

    async def create_order(self, amount_minor_units: int, currency: str, receipt: str) -> GatewayOrder:
        self.calls.append({"amount": amount_minor_units, "currency": currency, "receipt": receipt})
        if self.error is not None:
            raise self.error
        if self.fail:
            raise PaymentGatewayError("gateway down")
        return GatewayOrder(
            id=f"order_fake_{len(self.calls)}",
            amount=amount_minor_units,
            currency=currency,
            receipt=receipt,
            status="created",
        )


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, operation)


class StubS3:
    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_put = False
        self.fail_delete = False

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.fail_put:
            raise _client_error("PutObject")
        self.objects[Key] = {"body": Body, "content_type": ContentType}

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise _client_error("DeleteObject")
        self.deleted.append(Key)
        self.objects.pop(Key, None)


class StubCloudFront:
    def __init__(self):
        self.invalidated = []
        self.fail = False

    def create_invalidation(self, DistributionId, InvalidationBatch):
        if self.fail:
            raise _client_error("CreateInvalidation")
        self.invalidated.extend(InvalidationBatch["Paths"]["Items"])


@pytest.fixture
async def engine(tmp_path):
    # One file per test so request sessions and hook sessions get their own connections
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hooks(session_factory):
    return BestEffortRunner(session_factory)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def s3():
    return StubS3()


@pytest.fixture
def cloudfront():
    return StubCloudFront()


@pytest.fixture
def store(s3, cloudfront):
    return ObjectStore("test-bucket", "test-distribution", s3, cloudfront)


@pytest.fixture
async def client(session_factory, hooks, gateway, store):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_hooks] = lambda: hooks
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    await hooks.drain()
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return bearer(ADMIN_ID, Role.ADMIN)


@pytest.fixture
def member_headers():
    return bearer(MEMBER_ID, Role.MEMBER)


@pytest.fixture
def other_member_headers():
    return bearer(OTHER_MEMBER_ID, Role.MEMBER)


@pytest.fixture
def merchant_headers():
    return bearer("merchant-1", Role.MERCHANT)


@pytest.fixture
async def category(db):
    category = Category(name="Mugs", slug="mugs", description="Ceramic mugs")
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@pytest.fixture
def make_product(db, category):
    async def _make_product(name, price, discount=0, **fields):
        values = {
            "slug": name.lower().replace(" ", "-"),
            "description": f"{name} description",
            "category_id": category.id,
            "hero_image": [],
            "images": [],
            **fields,
        }
        product = Product(name=name, price=price, discount=discount, **values)
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    return _make_product
