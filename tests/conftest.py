import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import mfgops.models  # noqa: F401
from mfgops.core.database import Base
from mfgops.core.dependencies import get_db
from mfgops.core.store import Store
from mfgops.main import app
from mfgops.services.catalog_service import (
    create_label,
    create_packaging,
    create_supplier_label,
    create_supplier_packaging,
)
from mfgops.services.material_service import create_supplier_material
from mfgops.services.product_service import create_product, create_product_variant
from mfgops.services.recipe_service import create_recipe
from mfgops.services.supplier_service import create_supplier


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
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
def store(db):
    return Store(db)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def supplier(store):
    return create_supplier(store, {"name": "Acme Chemicals", "lead_time": 7})


@pytest.fixture
def other_supplier(store):
    return create_supplier(store, {"name": "Bharat Oils", "lead_time": 3})


@pytest.fixture
def catalogue(store, supplier):
    """
    Two materials priced per kg, one bottle and a front/back label pair, all from one supplier.
    Material A: 20/kg + 5% tax. Material B: 30/kg, no tax. Bottle: 2/pc. Labels: 0.5/pc each.
    """
    material_a = create_supplier_material(
        store, supplier_id=supplier.id, material_name="Coconut Oil", category="Oils",
        bulk_price=200, quantity_for_bulk_price=10, capacity_unit="kg", tax=5,
    )
    material_b = create_supplier_material(
        store, supplier_id=supplier.id, material_name="Glycerin", category="Humectants",
        bulk_price=30, quantity_for_bulk_price=1, capacity_unit="kg", tax=0,
    )
    bottle = create_packaging(store, {"name": "PET Bottle 1L", "type": "bottle", "capacity": 1, "capacity_unit": "L"})
    bottle_offer = create_supplier_packaging(store, {
        "supplier_id": supplier.id, "packaging_id": bottle.id, "bulk_price": 200, "quantity_for_bulk_price": 100,
    })
    front = create_label(store, {"name": "Front Label", "type": "front"})
    back = create_label(store, {"name": "Back Label", "type": "back"})
    front_offer = create_supplier_label(store, {
        "supplier_id": supplier.id, "label_id": front.id, "bulk_price": 50, "quantity_for_bulk_price": 100,
    })
    back_offer = create_supplier_label(store, {
        "supplier_id": supplier.id, "label_id": back.id, "bulk_price": 50, "quantity_for_bulk_price": 100,
    })
    return {
        "material_a": material_a,
        "material_b": material_b,
        "bottle": bottle_offer,
        "front_label": front_offer,
        "back_label": back_offer,
    }


@pytest.fixture
def recipe(store, catalogue):
    """500 gm of each material: 25/kg before tax, 25.5/kg with tax."""
    return create_recipe(
        store,
        name="Body Lotion",
        ingredients=[
            {"supplier_material_id": catalogue["material_a"].id, "quantity": 500, "unit": "gm"},
            {"supplier_material_id": catalogue["material_b"].id, "quantity": 500, "unit": "gm"},
        ],
        target_cost_per_kg=30,
        status="active",
    )


@pytest.fixture
def product(store, recipe):
    return create_product(store, name="Body Lotion", recipe_ref={"kind": "recipe", "id": recipe.id}, status="active")


@pytest.fixture
def litre_variant(store, product, catalogue):
    return create_product_variant(store, product.id, {
        "name": "1 L bottle",
        "sku": "LOTION-1L",
        "fill_quantity": 1000,
        "fill_unit": "gm",
        "packaging_selection_id": catalogue["bottle"].id,
        "front_label_selection_id": catalogue["front_label"].id,
        "back_label_selection_id": catalogue["back_label"].id,
        "labels_per_unit": 1,
        "selling_price_per_unit": 60,
        "minimum_profit_margin": 20,
    })
