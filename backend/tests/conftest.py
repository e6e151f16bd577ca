"""
Pytest fixtures for OrderDesk backend tests.

Provides a fresh in-memory database per test, seeded users, catalog and
shop fixtures, and auth header helpers.
"""

import pytest
from orderdesk import create_app
from orderdesk.config import Config
from orderdesk.extensions import db
from orderdesk.models import Category, Item, Shop
from orderdesk.permissions import Role
from orderdesk.services.auth_service import create_user
from orderdesk.services.token_service import AuthContext


ADMIN_EMAIL = "admin@orderdesk.test"
SALESMAN_EMAIL = "sales@orderdesk.test"
PASSWORD = "Passw0rd!"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BCRYPT_ROUNDS = 4
    SMTP_USER = None
    SMTP_PASSWORD = None


@pytest.fixture(scope='function')
def app():
    """Create application with an empty schema for each test."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def admin(app):
    return create_user(
        name="Admin One",
        phone="03001234567",
        address="Head Office",
        email=ADMIN_EMAIL,
        password=PASSWORD,
        role=Role.ADMIN,
    )


@pytest.fixture(scope='function')
def salesman(app):
    return create_user(
        name="Sales One",
        phone="03007654321",
        address="Field",
        email=SALESMAN_EMAIL,
        password=PASSWORD,
        role=Role.SALESMAN,
        id_card_number="35202-1234567-1",
    )


@pytest.fixture(scope='function')
def admin_ctx(admin):
    return AuthContext(user_id=admin.id, role=admin.role)


@pytest.fixture(scope='function')
def salesman_ctx(salesman):
    return AuthContext(user_id=salesman.id, role=salesman.role)


@pytest.fixture(scope='function')
def shop(app):
    shop = Shop(
        shop_name="Corner Store",
        owner_name="Ali Khan",
        cnic="35202-0000000-1",
        phone_number="03110000000",
        address="12 Mall Road",
        city="Lahore",
    )
    db.session.add(shop)
    db.session.commit()
    return shop


@pytest.fixture(scope='function')
def category(app):
    category = Category(name="Beverages")
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture(scope='function')
def item(category):
    """P1: price 100.00, 10 in stock."""
    item = Item(name="Cola 1L", category_id=category.id, price_cents=10000, quantity=10)
    db.session.add(item)
    db.session.commit()
    return item


@pytest.fixture(scope='function')
def second_item(category):
    item = Item(name="Water 500ml", category_id=category.id, price_cents=5050, quantity=4)
    db.session.add(item)
    db.session.commit()
    return item


def get_tokens(client, email: str, password: str = PASSWORD) -> dict:
    """Helper to log in through the API."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    assert response.status_code == 200, response.get_json()
    return response.get_json()


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_tokens(client, ADMIN_EMAIL)["accessToken"])


@pytest.fixture(scope='function')
def salesman_headers(client, salesman):
    return auth_headers(get_tokens(client, SALESMAN_EMAIL)["accessToken"])
