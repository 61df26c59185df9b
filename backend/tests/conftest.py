"""
Pytest fixtures for posadmin backend tests.

Provides test database setup, admin/business/product fixtures, and helpers
for obtaining bearer tokens through the real login endpoints.
"""

import pytest

from posadmin import create_app
from posadmin.extensions import db
from posadmin.models import PosBusiness, Product
from posadmin.services import receipt_service
from posadmin.services.auth_service import create_admin, hash_password
from posadmin.time_utils import utcnow

PASSWORD = "Password123!"
ADMIN_PASSWORD = "adminsuperaccess"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'REPORT_TIMEZONE': 'UTC',
    'CORS_ALLOWED_ORIGINS': ['http://localhost:5173'],
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_business(
    session,
    *,
    username: str,
    business_name: str,
    status: str = "approved",
    tax_rate: str = "8.5",
    password: str = PASSWORD,
    approved_by_admin_id: int | None = None,
) -> PosBusiness:
    business = PosBusiness(
        business_name=business_name,
        contact_email=f"{username}@example.com",
        username=username,
        password_hash=hash_password(password),
        status=status,
        currency_symbol="$",
        tax_rate=tax_rate,
        business_address="1 Test Street",
        business_phone="(555) 000-0000",
        receipt_footer="Thanks!",
        created_at=utcnow(),
        approved_at=utcnow() if status == "approved" else None,
        approved_by_admin_id=approved_by_admin_id if status == "approved" else None,
    )
    session.add(business)
    session.flush()
    receipt_service.ensure_sequence(business.id)
    session.commit()
    return business


def make_product(session, business, *, name: str, price_cents: int, stock: int, **extra) -> Product:
    product = Product(
        pos_id=business.id,
        name=name,
        price_cents=price_cents,
        stock=stock,
        category=extra.pop("category", "general"),
        **extra,
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def admin(db_session):
    """The bootstrap platform admin."""
    return create_admin("superadmin", ADMIN_PASSWORD)


@pytest.fixture(scope='function')
def cafe(db_session):
    """Approved business "Cafe A" with an 8.5% tax rate."""
    return make_business(db_session, username="cafe_a", business_name="Cafe A", tax_rate="8.5")


@pytest.fixture(scope='function')
def bakery(db_session):
    """Second approved business, used for cross-tenant checks."""
    return make_business(db_session, username="bakery_b", business_name="Bakery B", tax_rate="5")


@pytest.fixture(scope='function')
def pending_business(db_session):
    return make_business(db_session, username="newshop", business_name="New Shop", status="pending")


@pytest.fixture(scope='function')
def latte(db_session, cafe):
    """Latte at 4.00 with a single unit in stock."""
    return make_product(db_session, cafe, name="Latte", price_cents=400, stock=1, category="drinks")


@pytest.fixture(scope='function')
def muffin(db_session, cafe):
    return make_product(db_session, cafe, name="Muffin", price_cents=275, stock=10, category="food")


@pytest.fixture(scope='function')
def baguette(db_session, bakery):
    return make_product(db_session, bakery, name="Baguette", price_cents=350, stock=5)


def get_auth_token(client, kind: str, username: str, password: str) -> str | None:
    """Helper to get a bearer token; kind is "admin" or "pos"."""
    response = client.post(f'/api/sessions/{kind}', json={
        'username': username,
        'password': password,
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_auth_token(client, "admin", "superadmin", ADMIN_PASSWORD))


@pytest.fixture(scope='function')
def cafe_headers(client, cafe):
    return auth_headers(get_auth_token(client, "pos", "cafe_a", PASSWORD))


@pytest.fixture(scope='function')
def bakery_headers(client, bakery):
    return auth_headers(get_auth_token(client, "pos", "bakery_b", PASSWORD))
