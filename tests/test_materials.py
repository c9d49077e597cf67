import pytest

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.services.catalog_service import (
    create_label,
    create_packaging,
    create_supplier_packaging,
    delete_packaging,
    delete_supplier_packaging,
)
from mfgops.services.material_service import (
    compare_supplier_prices,
    create_category,
    create_material,
    create_supplier_material,
    delete_category,
    delete_material,
    find_category_by_name,
    find_similar_materials,
    list_categories,
    update_category,
    update_supplier_material,
)
from mfgops.services.supplier_service import create_supplier, delete_supplier, get_all_suppliers
from mfgops.utils.text_utils import are_strings_similar, levenshtein_distance


def test_levenshtein_ignores_case_and_separators():
    assert levenshtein_distance("Coconut-Oil", "coconut oil") == 0
    assert levenshtein_distance("glycerin", "glycerine") == 1
    assert are_strings_similar("Shea Butter", "Shea Buter")
    assert not are_strings_similar("Shea Butter", "Cocoa Butter")


def test_supplier_material_creates_category_and_material(store, supplier):
    offer = create_supplier_material(
        store, supplier_id=supplier.id, material_name="  Jojoba Oil ", category="Oils",
        bulk_price=1200, quantity_for_bulk_price=5, capacity_unit="L", tax=18,
    )
    assert offer.unit_price == pytest.approx(240)
    assert offer.material.name == "Jojoba Oil"
    assert [c.name for c in list_categories(store)] == ["Oils"]


def test_same_material_name_reuses_material(store, supplier, other_supplier):
    first = create_supplier_material(store, supplier_id=supplier.id, material_name="Glycerin", category="Humectants", bulk_price=100)
    second = create_supplier_material(store, supplier_id=other_supplier.id, material_name="GLYCERIN ", category="humectants", bulk_price=90)
    assert first.material_id == second.material_id
    assert len(store.get_all("materials")) == 1
    assert len(store.get_all("categories")) == 1


def test_identical_offer_is_rejected(store, supplier):
    create_supplier_material(store, supplier_id=supplier.id, material_name="Glycerin", category="Humectants", bulk_price=100)
    with pytest.raises(ValidationError):
        create_supplier_material(store, supplier_id=supplier.id, material_name="glycerin", category="Humectants", bulk_price=100)
    create_supplier_material(
        store, supplier_id=supplier.id, material_name="glycerin", category="Humectants",
        bulk_price=450, quantity_for_bulk_price=5,
    )
    assert len(store.get_all("supplier_materials")) == 2


def test_supplier_material_input_validation(store, supplier):
    with pytest.raises(NotFoundError):
        create_supplier_material(store, supplier_id="SUP-NOPE", material_name="X", category="Y", bulk_price=1)
    with pytest.raises(ValidationError):
        create_supplier_material(store, supplier_id=supplier.id, material_name="X", category="Y", bulk_price=0)
    assert store.get_all("materials") == []


def test_failed_transaction_leaves_nothing_behind(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.add("categories", {"name": "Temporary"})
            with store.transaction():
                store.add("materials", {"name": "Half written", "category": "Temporary"})
            raise RuntimeError("abort")
    assert find_category_by_name(store, "Temporary") is None
    assert store.get_all("materials") == []
    assert store.in_transaction is False


def test_similar_material_names(store):
    create_material(store, "Shea Butter", "Butters")
    create_material(store, "Cocoa Butter", "Butters")
    assert [m.name for m in find_similar_materials(store, "shea-buter")] == ["Shea Butter"]
    with pytest.raises(ValidationError):
        create_material(store, "shea butter", "Butters")


def test_price_update_recomputes_unit_price(store, catalogue):
    updated = update_supplier_material(store, catalogue["material_a"].id, {"quantity_for_bulk_price": 20})
    assert updated.unit_price == pytest.approx(10)


def test_price_comparison_cheapest_first(store, catalogue, other_supplier):
    create_supplier_material(
        store, supplier_id=other_supplier.id, material_name="Coconut Oil", category="Oils",
        bulk_price=18, quantity_for_bulk_price=1, tax=0,
    )
    comparison = compare_supplier_prices(store, catalogue["material_a"].material_id)
    assert [o.unit_price for o in comparison.offers] == pytest.approx([18, 20])


def test_category_rename_cascades_and_delete_guard(store, catalogue):
    category = find_category_by_name(store, "Oils")
    update_category(store, category.id, {"name": "Carrier Oils"})
    assert store.get("materials", catalogue["material_a"].material_id).category == "Carrier Oils"
    with pytest.raises(ReferenceInUseError):
        delete_category(store, category.id)

    spare = create_category(store, "Unused")
    delete_category(store, spare.id)
    with pytest.raises(ValidationError):
        create_category(store, "carrier oils")


def test_reference_guards(store, supplier, catalogue, litre_variant):
    with pytest.raises(ReferenceInUseError):
        delete_material(store, catalogue["material_a"].material_id)
    with pytest.raises(ReferenceInUseError):
        delete_supplier(store, supplier.id)
    with pytest.raises(ReferenceInUseError):
        delete_packaging(store, catalogue["bottle"].packaging_id)
    with pytest.raises(ReferenceInUseError):
        delete_supplier_packaging(store, catalogue["bottle"].id)


def test_packaging_and_label_catalogue(store, supplier):
    jar = create_packaging(store, {"name": "Amber Jar"})
    with pytest.raises(ValidationError):
        create_packaging(store, {"name": "amber jar"})
    offer = create_supplier_packaging(store, {
        "supplier_id": supplier.id, "packaging_id": jar.id, "bulk_price": 500, "quantity_for_bulk_price": 250, "tax": 12,
    })
    assert offer.unit_price == pytest.approx(2)
    with pytest.raises(ValidationError):
        create_supplier_packaging(store, {
            "supplier_id": supplier.id, "packaging_id": jar.id, "bulk_price": 500, "quantity_for_bulk_price": 250,
        })
    with pytest.raises(NotFoundError):
        create_supplier_packaging(store, {"supplier_id": supplier.id, "packaging_id": "PKG-NOPE", "bulk_price": 1})
    assert create_label(store, {"name": "Neck Tag"}).name == "Neck Tag"


def test_supplier_search_and_duplicates(store, supplier, other_supplier):
    suppliers, total = get_all_suppliers(store, search="bharat")
    assert total == 1
    assert suppliers[0].id == other_supplier.id
    with pytest.raises(ValidationError):
        create_supplier(store, {"name": "acme chemicals"})
    delete_supplier(store, other_supplier.id)
    assert get_all_suppliers(store)[1] == 1
