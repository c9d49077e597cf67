from datetime import date

import pytest

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.services.batch_calculations import (
    calculate_batch_cost_analysis,
    calculate_batch_variant_metrics,
    process_batch_variants,
)
from mfgops.services.batch_service import create_batch, update_batch, update_batch_status
from mfgops.services.catalog_service import create_packaging, create_supplier_packaging
from mfgops.services.material_service import create_supplier_material
from mfgops.services.product_service import (
    create_product,
    create_product_variant,
    delete_product,
    delete_product_variant,
)
from mfgops.services.recipe_service import create_recipe


def _batch(store, product, *lines):
    return create_batch(store, {
        "batch_name": "Run 1",
        "items": [{
            "product_id": product.id,
            "variants": [
                {"variant_id": variant.id, "total_fill_quantity": quantity, "fill_unit": "kg"}
                for variant, quantity in lines
            ],
        }],
    })


def test_variant_metrics_for_five_kilos_of_one_kilo_units():
    metrics = calculate_batch_variant_metrics(1000, "gm", 5000, "gm")
    assert metrics.fill_in_kg == pytest.approx(5)
    assert metrics.units == 5
    assert metrics.display_quantity == "5.00 kg"


def test_materials_cost_uses_fill_of_one_unit(store, supplier):
    aloe = create_supplier_material(
        store, supplier_id=supplier.id, material_name="Aloe Gel", category="Extracts",
        bulk_price=25, quantity_for_bulk_price=1, capacity_unit="kg", tax=0,
    )
    jar = create_packaging(store, {"name": "Jar 1kg"})
    jar_offer = create_supplier_packaging(store, {
        "supplier_id": supplier.id, "packaging_id": jar.id, "bulk_price": 2, "quantity_for_bulk_price": 1,
    })
    recipe = create_recipe(store, name="Aloe Base", ingredients=[
        {"supplier_material_id": aloe.id, "quantity": 1, "unit": "kg"},
    ])
    product = create_product(store, name="Aloe Gel", recipe_ref={"kind": "recipe", "id": recipe.id})
    variant = create_product_variant(store, product.id, {
        "name": "1 kg jar", "fill_quantity": 1000, "fill_unit": "gm",
        "packaging_selection_id": jar_offer.id, "labels_per_unit": 0,
    })

    analysis = calculate_batch_cost_analysis(store, _batch(store, product, (variant, 5)))

    cost = analysis.variant_costs[0]
    assert cost.units == 5
    assert cost.fill_in_kg == pytest.approx(5)
    assert cost.materials_cost == pytest.approx(125)
    assert cost.packaging_cost == pytest.approx(10)
    assert cost.labels_cost == 0
    assert analysis.total_cost == pytest.approx(135)


def test_batch_cost_analysis_with_tax_labels_and_revenue(store, product, litre_variant):
    analysis = calculate_batch_cost_analysis(store, _batch(store, product, (litre_variant, 5)))

    # (25 + 0.5) per kg, 1 kg per unit, 5 units
    assert analysis.materials_cost == pytest.approx(127.5)
    assert analysis.packaging_cost == pytest.approx(10)
    assert analysis.labels_cost == pytest.approx(5)
    assert analysis.total_cost == pytest.approx(142.5)
    assert analysis.total_revenue == pytest.approx(300)
    assert analysis.total_profit == pytest.approx(157.5)
    assert analysis.profit_margin == pytest.approx(52.5)
    assert analysis.total_units == 5
    assert analysis.materials_percentage + analysis.packaging_percentage + analysis.labels_percentage == pytest.approx(100)


def test_zero_unit_lines_are_dropped(store, product, litre_variant):
    half_litre = create_product_variant(store, product.id, {
        "name": "500 ml", "sku": "LOTION-500", "fill_quantity": 500, "fill_unit": "ml",
        "selling_price_per_unit": 35,
    })
    batch = _batch(store, product, (litre_variant, 0.5), (half_litre, 2))

    processed = process_batch_variants(store, batch)
    assert [p.variant_id for p in processed] == [half_litre.id]
    assert processed[0].units == 4

    analysis = calculate_batch_cost_analysis(store, batch)
    assert [c.variant_id for c in analysis.variant_costs] == [half_litre.id]


def test_lines_for_deleted_variants_are_skipped(store, product, litre_variant):
    batch = _batch(store, product, (litre_variant, 5))
    batch_items = [dict(batch.items[0], variants=[{"variant_id": "PVR-GONE", "total_fill_quantity": 5, "fill_unit": "kg"}])]
    store.update("production_batches", batch.id, {"items": batch_items})
    assert process_batch_variants(store, store.get("production_batches", batch.id)) == []


def test_batch_validation(store, product, litre_variant, recipe):
    with pytest.raises(NotFoundError):
        create_batch(store, {"batch_name": "Bad", "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": "PVR-MISSING", "total_fill_quantity": 1, "fill_unit": "kg"}],
        }]})

    other = create_product(store, name="Other", recipe_ref={"kind": "recipe", "id": recipe.id})
    with pytest.raises(ValidationError):
        create_batch(store, {"batch_name": "Mismatch", "items": [{
            "product_id": other.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 1, "fill_unit": "kg"}],
        }]})
    assert store.get_all("production_batches") == []


def test_batch_status_and_dates(store, product, litre_variant):
    batch = _batch(store, product, (litre_variant, 5))
    assert update_batch_status(store, batch.id, "in-progress").status.value == "in-progress"

    with pytest.raises(ValidationError):
        update_batch(store, batch.id, {"start_date": date(2026, 3, 10), "end_date": date(2026, 3, 1)})


def test_products_used_by_batches_cannot_be_deleted(store, product, litre_variant):
    _batch(store, product, (litre_variant, 5))
    with pytest.raises(ReferenceInUseError):
        delete_product_variant(store, litre_variant.id)
    with pytest.raises(ReferenceInUseError):
        delete_product(store, product.id)
