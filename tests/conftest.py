"""
Pytest configuration and fixtures for testing the marketplace API.
"""

import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from faker import Faker
from sqlalchemy.exc import OperationalError

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tekasomba import create_app, db
from tekasomba.models import Category, Product, Profile

fake = Faker()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def _create_profile(password='testpassword123', **overrides):
    """Helper to create a profile with sensible defaults."""
    data = {
        'email': fake.unique.email(),
        'full_name': fake.name(),
        'account_type': 'particulier',
    }
    data.update(overrides)
    profile = Profile(**data)
    profile.set_password(password)
    db.session.add(profile)
    db.session.commit()
    return {
        'id': profile.id,
        'email': profile.email,
        'full_name': profile.full_name,
        'password': password,
    }


def make_product(seller_id, category_id, **overrides):
    """Insert a product directly, bypassing validation and uploads."""
    data = {
        'seller_id': seller_id,
        'category_id': category_id,
        'title': fake.sentence(nb_words=4),
        'description': fake.paragraph(),
        'price': Decimal('25000.00'),
        'currency': 'CDF',
        'location_city': 'Kinshasa',
        'condition': 'bon état',
        'photo_urls': [],
    }
    data.update(overrides)
    product = Product(**data)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def test_user(app, db_session):
    """Create a test user; owns test_product."""
    return _create_profile(phone_number='0812345678')


@pytest.fixture
def second_user(app, db_session):
    """Create a second test user for interaction tests."""
    return _create_profile(password='testpassword456')


def _get_token(client, email, password):
    """Login and return the session token."""
    resp = client.post('/api/auth/login', json={
        'email': email,
        'password': password,
    })
    data = resp.get_json()
    if data is None or 'token' not in data:
        raise RuntimeError(f"Login failed: status={resp.status_code}, body={resp.data[:200]}")
    return data['token']


@pytest.fixture
def auth_headers(client, test_user):
    """Get authentication headers for test user."""
    token = _get_token(client, test_user['email'], test_user['password'])
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def second_auth_headers(client, second_user):
    """Get authentication headers for second user."""
    token = _get_token(client, second_user['email'], second_user['password'])
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def test_category(app, db_session):
    category = Category(name='Téléphones', slug='telephones')
    db.session.add(category)
    db.session.commit()
    return {'id': category.id, 'name': category.name}


@pytest.fixture
def other_category(app, db_session):
    category = Category(name='Véhicules', slug='vehicules')
    db.session.add(category)
    db.session.commit()
    return {'id': category.id, 'name': category.name}


@pytest.fixture
def test_product(app, db_session, test_user, test_category):
    """An active listing owned by test_user."""
    product = make_product(
        test_user['id'],
        test_category['id'],
        title='iPhone 13 Pro en excellent état',
        description='Téléphone débloqué, batterie neuve, vendu avec chargeur.',
        price=Decimal('850.00'),
        currency='USD',
    )
    return {
        'id': product.id,
        'title': product.title,
        'seller_id': product.seller_id,
    }


@pytest.fixture
def timestamps():
    """Strictly increasing creation times, oldest first."""
    base = datetime(2025, 1, 1, 12, 0, 0)
    return [base + timedelta(minutes=i) for i in range(10)]


def db_error(statement='SELECT 1'):
    """A driver-level failure as SQLAlchemy reports it."""
    return OperationalError(statement, {'secret': 'bound-value'}, Exception('connection lost'))


class BrokenQuery:
    """Stands in for Model.query; any use fails like a dropped connection."""

    def __getattr__(self, name):
        raise db_error()


@pytest.fixture
def broken_get(monkeypatch):
    """Make db.session.get fail with a database error."""
    def get(*args, **kwargs):
        raise db_error()

    monkeypatch.setattr(db.session, 'get', get)
