import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["SKIP_DB_CHECK"] = "true"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["STRIPE_SECRET_KEY_US"] = "sk_test_us"
os.environ["STRIPE_SECRET_KEY_UK"] = "sk_test_uk"
os.environ.pop("STRIPE_SECRET_KEY_EU", None)

import pytest
import stripe
from fastapi.testclient import TestClient

from expense_app.database import Base, engine, SessionLocal
from expense_app.main import app
from expense_app.models.platform import Platform
from expense_app.models.user import User
from expense_app.utils.security import get_password_hash

PASSWORD = "Secret123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user(db):
    user = User(
        email="jane@example.com",
        password=get_password_hash(PASSWORD),
        country="US",
        platform=Platform.US,
        stripe_account_id="acct_123",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(client, user):
    response = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def stripe_list(items, has_more=False):
    """A stripe.ListObject as the SDK returns it"""
    return stripe.ListObject.construct_from(
        {"object": "list", "url": "/v1/test", "has_more": has_more, "data": items},
        "sk_test_us",
    )


def stripe_object(values):
    return stripe.StripeObject.construct_from(values, "sk_test_us")
