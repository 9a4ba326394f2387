import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopsense import models
from shopsense.database import Base, get_db, make_engine
from shopsense.main import create_app
from shopsense.utils.item_matcher import CatalogItem, load_catalog


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_inventory(db, shop_id, item_name, unit, quantity, cost_price, selling_price):
    item = models.InventoryItem(
        shop_id=shop_id,
        item_name=item_name,
        unit=unit,
        quantity_on_hand=quantity,
        cost_price=cost_price,
        selling_price=selling_price,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def make_item(db):
    def _make(shop_id, item_name, unit, quantity, cost_price, selling_price):
        return add_inventory(db, shop_id, item_name, unit, quantity, cost_price, selling_price)
    return _make


@pytest.fixture
def shop(db):
    shop = models.Shop(name="Lakshmi Kirana", owner_name="Ravi", phone="9000000000")
    db.add(shop)
    db.commit()
    db.refresh(shop)
    return shop


@pytest.fixture
def stocked_shop(db, shop):
    add_inventory(db, shop.id, "Rice", "kg", 5, 40, 50)
    add_inventory(db, shop.id, "Sugar", "kg", 10, 38, 45)
    add_inventory(db, shop.id, "Milk", "litre", 20, 25, 30)
    add_inventory(db, shop.id, "Toor Dal", "kg", 0, 90, 110)
    return shop


@pytest.fixture
def catalog(db, stocked_shop):
    return load_catalog(db, stocked_shop.id)


@pytest.fixture
def static_catalog():
    """Catalog snapshot without a database, for the pure parsing tests."""
    return [
        CatalogItem(id=1, item_name="Rice", unit="kg", quantity_on_hand=5, cost_price=40, selling_price=50),
        CatalogItem(id=2, item_name="Sugar", unit="kg", quantity_on_hand=10, cost_price=38, selling_price=45),
        CatalogItem(id=3, item_name="Milk", unit="litre", quantity_on_hand=20, cost_price=25, selling_price=30),
        CatalogItem(id=4, item_name="Toor Dal", unit="kg", quantity_on_hand=0, cost_price=90, selling_price=110),
    ]


@pytest.fixture
def app(session_factory):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    # no context manager: the lifespan would create tables on the real database
    return TestClient(app)
