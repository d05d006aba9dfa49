import os

# settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("ENV", "test")

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.config import settings
from app.constants.order_status import ActorRole
from app.database import engine, get_session
from app.main import app
from app.models.address import Address
from app.models.charges import ChargeType, DeliveryFeeRule, DeliveryTimeRule, GstTax, HandlingCharge
from app.models.general_settings import PaymentMethod
from app.models.offer import DiscountType, Offer
from app.models.product import Product
from app.models.user import User


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(session):
    def override_get_session():
        with Session(engine) as request_session:
            yield request_session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def issue_token(claims: dict, expires_in: timedelta = timedelta(minutes=30)) -> str:
    return jwt.encode(
        {**claims, "exp": datetime.utcnow() + expires_in},
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def auth_headers(user: User) -> dict:
    token = issue_token({"user_id": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def add(session: Session, record):
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def make_user(session: Session, role: ActorRole, name: str) -> User:
    return add(session, User(name=name, email=f"{name.lower()}@example.com", role=role))


def make_offer(session: Session, code: str, **overrides) -> Offer:
    now = datetime.utcnow()
    data = dict(
        code=code,
        title=code,
        discount_type=DiscountType.flat,
        discount_value=Decimal("100"),
        min_order_value=Decimal("0"),
        valid_from=now - timedelta(days=1),
        valid_to=now + timedelta(days=30),
        per_customer_limit=1,
    )
    data.update(overrides)
    return add(session, Offer(**data))


@pytest.fixture
def customer(session):
    return make_user(session, ActorRole.customer, "Asha")


@pytest.fixture
def other_customer(session):
    return make_user(session, ActorRole.customer, "Ravi")


@pytest.fixture
def restaurant(session):
    return make_user(session, ActorRole.restaurant, "SpiceHub")


@pytest.fixture
def rider(session):
    return make_user(session, ActorRole.delivery, "Kiran")


@pytest.fixture
def admin(session):
    return make_user(session, ActorRole.admin, "Meera")


@pytest.fixture
def address(session, customer):
    return add(session, Address(
        user_id=customer.id,
        full_address="12 MG Road",
        city="Bengaluru",
        pincode="560001",
        distance_km=3.2,
        is_default=True,
    ))


@pytest.fixture
def biryani(session, restaurant):
    return add(session, Product(
        restaurant_id=restaurant.id,
        name="Paneer Biryani",
        price=Decimal("290.00"),
    ))


@pytest.fixture
def pricing_rules(session):
    """Fee band 500..999 = 40, handling 10, GST 5%, 0..5 km delivers in 25-35 min."""
    add(session, DeliveryFeeRule(amount=Decimal("40"), min_subtotal=Decimal("500"), max_subtotal=Decimal("999")))
    add(session, HandlingCharge(amount=Decimal("10")))
    add(session, GstTax(name="GST", charge_type=ChargeType.percentage, value=Decimal("5")))
    add(session, DeliveryTimeRule(title="Nearby", min_distance=0, max_distance=5, min_time=25, max_time=35))


@pytest.fixture
def payment_methods(session):
    add(session, PaymentMethod(code="cash", name="Cash on Delivery", instructions="Pay the rider in cash"))
    add(session, PaymentMethod(code="upi", name="UPI", instructions="Scan the rider's QR code"))
    add(session, PaymentMethod(code="online", name="Card", instructions="", is_active=False))


@pytest.fixture
def checkout_ready(pricing_rules, payment_methods, address, biryani):
    return {"address": address, "product": biryani}
