"""
Pytest configuration and fixtures for backend tests.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.infrastructure.db import get_db
from shared.security.auth import sign_jwt
from shared.security.rate_limit import limiter
from rest_api.models import Base, Restaurant, Branch, MenuItem, Table
from rest_api.services.permissions import CallerContext


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Rate limits are exercised separately; keep them out of functional tests
limiter.enabled = False


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    # Create all tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_restaurant(db_session):
    """Create a test restaurant."""
    restaurant = Restaurant(name="Test Restaurant")
    db_session.add(restaurant)
    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture
def seed_branch(db_session, seed_restaurant):
    """Create a test branch."""
    branch = Branch(
        restaurant_id=seed_restaurant.id,
        name="Test Branch",
        address="123 Test St",
        phone="+1234567890",
    )
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def seed_other_branch(db_session, seed_restaurant):
    """A second branch of the same restaurant."""
    branch = Branch(restaurant_id=seed_restaurant.id, name="Other Branch")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def seed_tables(db_session, seed_branch):
    """Tables 1-3 of the test branch, all available."""
    tables = [
        Table(
            restaurant_id=seed_branch.restaurant_id,
            branch_id=seed_branch.id,
            number=number,
            capacity=4,
            section=section,
            status="available",
        )
        for number, section in ((1, "Indoor"), (2, "Indoor"), (3, "Outdoor"))
    ]
    db_session.add_all(tables)
    db_session.commit()
    for table in tables:
        db_session.refresh(table)
    return tables


@pytest.fixture
def seed_table(seed_tables):
    """Table 1 of the test branch."""
    return seed_tables[0]


@pytest.fixture
def seed_other_table(db_session, seed_other_branch):
    """A table in the second branch."""
    table = Table(
        restaurant_id=seed_other_branch.restaurant_id,
        branch_id=seed_other_branch.id,
        number=1,
        capacity=2,
        section="Indoor",
        status="available",
    )
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def seed_menu(db_session, seed_branch):
    """
    Menu of the test restaurant, keyed by short name.

    salad 8.99 and salmon 16.99 are sellable everywhere; soup is inactive.
    """
    items = {
        "salad": MenuItem(
            restaurant_id=seed_branch.restaurant_id,
            title="Caesar Salad",
            price_cents=899,
            category="Starters",
            status="active",
        ),
        "salmon": MenuItem(
            restaurant_id=seed_branch.restaurant_id,
            title="Grilled Salmon",
            price_cents=1699,
            category="Mains",
            status="featured",
        ),
        "soup": MenuItem(
            restaurant_id=seed_branch.restaurant_id,
            title="Seasonal Soup",
            price_cents=550,
            category="Starters",
            status="inactive",
        ),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items


# =============================================================================
# Callers and tokens
# =============================================================================


def make_claims(
    restaurant_id: int,
    role: str,
    branch_ids: list[int] | None = None,
    permissions: list[str] | None = None,
    user_id: int = 1,
) -> dict:
    return {
        "sub": str(user_id),
        "restaurant_id": restaurant_id,
        "role": role,
        "branch_ids": branch_ids or [],
        "permissions": permissions if permissions is not None else ["access_pos"],
        "email": f"user{user_id}@test.com",
    }


def auth_header(claims: dict) -> dict:
    return {"Authorization": f"Bearer {sign_jwt(claims)}"}


@pytest.fixture
def make_caller(seed_restaurant):
    """Factory for CallerContext objects of the test restaurant."""
    def _make(role="waiter", branch_ids=None, permissions=None, user_id=9):
        return CallerContext.from_claims(
            make_claims(seed_restaurant.id, role, branch_ids, permissions, user_id)
        )
    return _make


@pytest.fixture
def make_headers(seed_restaurant):
    """Factory for bearer headers of the test restaurant."""
    def _make(role="waiter", branch_ids=None, permissions=None, user_id=9):
        return auth_header(
            make_claims(seed_restaurant.id, role, branch_ids, permissions, user_id)
        )
    return _make


@pytest.fixture
def owner_claims(seed_restaurant):
    return make_claims(seed_restaurant.id, "owner", user_id=1)


@pytest.fixture
def manager_claims(seed_restaurant, seed_branch):
    return make_claims(seed_restaurant.id, "manager", [seed_branch.id], user_id=2)


@pytest.fixture
def waiter_claims(seed_restaurant, seed_branch):
    return make_claims(seed_restaurant.id, "waiter", [seed_branch.id], user_id=3)


@pytest.fixture
def owner_caller(owner_claims):
    return CallerContext.from_claims(owner_claims)


@pytest.fixture
def manager_caller(manager_claims):
    return CallerContext.from_claims(manager_claims)


@pytest.fixture
def waiter_caller(waiter_claims):
    return CallerContext.from_claims(waiter_claims)


@pytest.fixture
def auth_headers(owner_claims):
    """Authorization headers for the restaurant owner."""
    return auth_header(owner_claims)


@pytest.fixture
def manager_auth_headers(manager_claims):
    return auth_header(manager_claims)


@pytest.fixture
def waiter_auth_headers(waiter_claims):
    """Authorization headers for a waiter of the test branch."""
    return auth_header(waiter_claims)
