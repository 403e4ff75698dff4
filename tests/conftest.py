import os
import sys
import itertools
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from models import db
from models.user import UserProfile
from models.catalog import Collection, Category, Product
from models.order import Order

_order_numbers = itertools.count(1)


@pytest.fixture(scope='session')
def app_instance():
    os.environ.setdefault('APP_ENV', 'testing')
    os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
    from app import create_app
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI='sqlite:///:memory:',
        SQLALCHEMY_TRACK_MODIFICATIONS=False
    )
    return app


@pytest.fixture(scope='function')
def app(app_instance):
    with app_instance.app_context():
        db.drop_all()
        db.create_all()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture()
def make_principal(app):
    def _make(identity, role="user", **kwargs):
        user = UserProfile(identity=identity, role=role, **kwargs)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def make_collection(app):
    """Collection with one category and one product under it."""
    def _make(owner, name="C", visible=False):
        collection = Collection(
            name=name,
            slug=f"{name.lower()}-{owner.id[:8]}",
            owner_id=owner.id,
            created_by=owner.id,
            visible=visible,
        )
        db.session.add(collection)
        db.session.flush()
        category = Category(collection_id=collection.id, name=f"{name} category")
        db.session.add(category)
        db.session.flush()
        product = Product(collection_id=collection.id, category_id=category.id, name=f"{name} product")
        db.session.add(product)
        db.session.commit()
        return collection, category, product
    return _make


@pytest.fixture()
def make_order(app):
    def _make(product, wallet_address, status="confirmed"):
        order = Order(
            order_number=f"ORD-{next(_order_numbers):06d}",
            product_id=product.id,
            collection_id=product.collection_id,
            wallet_address=wallet_address,
            status=status,
            amount_sol=1.5,
        )
        db.session.add(order)
        db.session.commit()
        return order
    return _make


@pytest.fixture()
def auth_header(app):
    from app.utils.jwt import create_access_token

    def _header(identity):
        return {"Authorization": f"Bearer {create_access_token(identity)}"}
    return _header
