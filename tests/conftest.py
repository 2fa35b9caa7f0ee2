"""Pytest fixtures for the filament store tests."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point the app at a throwaway database and upload folder before any app module is imported
_TMP_DIR = tempfile.mkdtemp(prefix="filament-store-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SECRET_KEY"] = "test-secret"
for _var in ("MAIL_API_URL", "MAIL_API_KEY", "MAIL_FROM", "MAIL_ADMIN", "FRONTEND_URL"):
    os.environ[_var] = ""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from database import Base, SessionLocal, engine, init_db
from config import settings
from models.product import Product, FilamentType


@pytest.fixture(autouse=True)
def fresh_tables():
    """Recreate every table so each test starts from an empty store."""
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_product(db_session):
    """Factory inserting a committed product."""

    def _make(name="PLA Black", price=5.0, stock=10, type=FilamentType.PLA, **extra):
        product = Product(
            name=name, price=price, stock=stock, type=type,
            color=extra.pop("color", "Black"), hex=extra.pop("hex", "#000000"),
            weight=extra.pop("weight", "1kg"), **extra,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def client():
    from main import app

    return TestClient(app)


@pytest.fixture
def sign_token():
    """Sign claims the way the identity provider does for its access tokens."""

    def _sign(claims, expires_in=timedelta(minutes=60)):
        payload = dict(claims, exp=datetime.now(timezone.utc) + expires_in)
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    return _sign


@pytest.fixture
def make_token(sign_token):
    def _make(email="arta@example.com", groups=None, name=None):
        claims = {"sub": email, "email": email}
        if groups is not None:
            claims["groups"] = groups
        if name:
            claims["name"] = name
        return sign_token(claims)

    return _make


@pytest.fixture
def user_headers(make_token):
    return {"Authorization": f"Bearer {make_token('arta@example.com', name='Arta Krasniqi')}"}


@pytest.fixture
def admin_headers(make_token):
    return {"Authorization": f"Bearer {make_token('admin@example.com', groups=['ADMINS'], name='Admin')}"}
