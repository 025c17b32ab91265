"""
Pytest fixtures for warehouse backend tests.

Provides an in-memory database, test client, verified owners with items,
and bearer-token helpers. Mail is suppressed; sent messages land in
mailer.outbox, which is cleared before each test.
"""

import pytest
from warehouse import create_app
from warehouse.extensions import db, mailer
from warehouse.models import User, Item
from warehouse.services.auth_service import hash_password
from warehouse.services.token_service import create_access_token


TEST_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET': 'test-jwt-secret',
        'FRONTEND_URL': 'http://frontend.test',
        'API_BASE_URL': 'http://api.test',
        'CORS_ORIGINS': ['http://frontend.test'],
        'MAIL_SUPPRESS_SEND': True,
    })

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
        mailer.outbox.clear()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_user(db_session, email: str, *, verified: bool = True, warehouse_name: str = "Main") -> User:
    user = User(
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        name=email.split("@")[0],
        warehouse_name=warehouse_name,
        is_verified=verified,
    )
    db_session.add(user)
    db_session.commit()
    return user


def make_item(db_session, user: User, name: str = "Widget", quantity: int = 10, price: float = 2.0) -> Item:
    item = Item(user_id=user.id, name=name, quantity=quantity, price=price)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def user_a(db_session):
    """Verified owner A."""
    return make_user(db_session, "owner_a@example.com", warehouse_name="North Depot")


@pytest.fixture(scope='function')
def user_b(db_session):
    """Verified owner B."""
    return make_user(db_session, "owner_b@example.com", warehouse_name="South Depot")


@pytest.fixture(scope='function')
def item_a(db_session, user_a):
    """Owner A's item: 10 units at 2.0."""
    return make_item(db_session, user_a)


@pytest.fixture(scope='function')
def item_b(db_session, user_b):
    """Owner B's item: 10 units at 5.0."""
    return make_item(db_session, user_b, name="Gadget", price=5.0)


@pytest.fixture(scope='function')
def headers_a(user_a):
    return auth_headers(create_access_token(user_a))


@pytest.fixture(scope='function')
def headers_b(user_b):
    return auth_headers(create_access_token(user_b))


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
