"""
Pytest fixtures for the salon POS tests.

Every test gets its own SQLite database file, seeded admin and seller users,
a product factory and an API client whose ``get_db`` points at that database.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from salon_pos.database import get_db, init_db
from salon_pos.main import app
from salon_pos.models.user import UserRole
from salon_pos.schemas.product import ProductCreate
from salon_pos.services import auth_service, product_service


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'salon_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin(db):
    return auth_service.create_user(db, "admin", "admin123", "Admin", UserRole.ADMIN)


@pytest.fixture
def seller(db):
    return auth_service.create_user(db, "seller", "seller123", "Seller One", UserRole.SELLER)


@pytest.fixture
def other_seller(db):
    return auth_service.create_user(db, "seller2", "seller234", "Seller Two", UserRole.SELLER)


@pytest.fixture
def make_product(db, admin):
    def _make(**overrides):
        fields = {
            "name": "Argan Oil Shampoo",
            "category": "Hair care",
            "brand": "Moroccan Gold",
            "buy_price": 6.0,
            "sell_price": 12.5,
            "stock": 10,
            "min_stock": 2,
        }
        fields.update(overrides)
        return product_service.create_product(db, ProductCreate(**fields), user_id=admin.id)

    return _make


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {auth_service.create_access_token(user)}"}

    return _headers
