"""
Batch calculations: resolves batch lines into processed variants (fill in kg, unit count)
and computes per-variant and per-batch costs.
"""

from typing import Dict, List, Optional, Tuple

from mfgops.logger_config import logger
from mfgops.models.batch import ProductionBatch
from mfgops.schemas.costing import (
    BatchCostAnalysis,
    BatchVariantMetrics,
    ProcessedVariant,
    RecipeCostPerKg,
    VariantCost,
)
from mfgops.services.recipe_cost import get_recipe_cost_per_kg
from mfgops.utils.unit_conversion import (
    calculate_price_with_tax,
    calculate_units,
    format_quantity,
    normalize_to_kg,
)


def calculate_batch_variant_metrics(
    variant_fill_quantity: float,
    variant_fill_unit: str,
    total_fill_quantity: float,
    fill_unit: str,
) -> BatchVariantMetrics:
    """Fill in kg, whole units and display string for one batch line."""
    return BatchVariantMetrics(
        fill_in_kg=normalize_to_kg(total_fill_quantity, fill_unit),
        units=calculate_units(variant_fill_quantity, variant_fill_unit, total_fill_quantity, fill_unit),
        display_quantity=format_quantity(total_fill_quantity, fill_unit),
    )


def process_batch_variants(store, batch: ProductionBatch) -> List[ProcessedVariant]:
    """
    Resolve every batch line in item order. Lines whose product or variant no longer exists,
    or that yield zero units, are left out; everything downstream relies on units > 0.
    """
    processed = []
    for item in batch.items or []:
        product = store.get("products", item.get("product_id"))
        if product is None:
            logger.warning(f"Batch {batch.id}: product not found {item.get('product_id')}")
            continue
        recipe_ref = product.recipe_ref if product.recipe_id else None

        for line in item.get("variants") or []:
            variant = store.get("product_variants", line.get("variant_id"))
            if variant is None:
                logger.warning(f"Batch {batch.id}: variant not found {line.get('variant_id')}")
                continue

            metrics = calculate_batch_variant_metrics(
                variant.fill_quantity,
                variant.fill_unit,
                line.get("total_fill_quantity") or 0,
                line.get("fill_unit") or "kg",
            )
            if metrics.units == 0:
                logger.debug(f"Batch {batch.id}: variant {variant.id} yields 0 units, skipped")
                continue

            processed.append(ProcessedVariant(
                product_id=product.id,
                product_name=product.name,
                variant_id=variant.id,
                variant_name=variant.name,
                sku=variant.sku,
                recipe_ref=recipe_ref,
                total_fill_quantity=line.get("total_fill_quantity") or 0,
                fill_unit=line.get("fill_unit") or "kg",
                fill_in_kg=metrics.fill_in_kg,
                units=metrics.units,
                display_quantity=metrics.display_quantity,
                unit_fill_kg=normalize_to_kg(variant.fill_quantity, variant.fill_unit),
                selling_price_per_unit=variant.selling_price_per_unit or 0,
                packaging_selection_id=variant.packaging_selection_id,
                front_label_selection_id=variant.front_label_selection_id,
                back_label_selection_id=variant.back_label_selection_id,
                labels_per_unit=variant.labels_per_unit if variant.labels_per_unit is not None else 1,
            ))
    return processed


def taxed_unit_price(supplier_item) -> float:
    """unit_price * (1 + tax/100) for a supplier packaging/label row; 0 when missing."""
    if supplier_item is None:
        return 0.0
    return calculate_price_with_tax(supplier_item.unit_price, supplier_item.tax)


def _cost_per_kg_cached(store, processed: ProcessedVariant, cache: Dict[Tuple[str, str], RecipeCostPerKg]) -> RecipeCostPerKg:
    if processed.recipe_ref is None:
        return RecipeCostPerKg()
    key = (processed.recipe_ref.kind, processed.recipe_ref.id)
    if key not in cache:
        cache[key] = get_recipe_cost_per_kg(store, processed.recipe_ref)
    return cache[key]


def calculate_variant_cost(
    store,
    processed: ProcessedVariant,
    cost_cache: Optional[Dict[Tuple[str, str], RecipeCostPerKg]] = None,
) -> VariantCost:
    """
    Cost, revenue and margin of one processed batch line.
    Materials are priced on the fill of one unit: (cost_per_kg + tax_per_kg) * unit_fill_kg * units.
    Missing packaging or labels cost 0.
    """
    cost_cache = {} if cost_cache is None else cost_cache
    recipe_cost = _cost_per_kg_cached(store, processed, cost_cache)
    units = processed.units

    materials_cost = (recipe_cost.cost_per_kg + recipe_cost.tax_per_kg) * processed.unit_fill_kg * units

    packaging = store.get("supplier_packaging", processed.packaging_selection_id)
    packaging_cost = taxed_unit_price(packaging) * units

    front_label = store.get("supplier_labels", processed.front_label_selection_id)
    back_label = store.get("supplier_labels", processed.back_label_selection_id)
    labels_cost = (taxed_unit_price(front_label) + taxed_unit_price(back_label)) * units

    total_cost = materials_cost + packaging_cost + labels_cost
    total_revenue = processed.selling_price_per_unit * units
    profit = total_revenue - total_cost

    return VariantCost(
        product_id=processed.product_id,
        product_name=processed.product_name,
        variant_id=processed.variant_id,
        variant_name=processed.variant_name,
        units=units,
        fill_in_kg=processed.fill_in_kg,
        cost_per_kg=recipe_cost.cost_per_kg,
        tax_per_kg=recipe_cost.tax_per_kg,
        materials_cost=materials_cost,
        packaging_cost=packaging_cost,
        labels_cost=labels_cost,
        total_cost=total_cost,
        total_revenue=total_revenue,
        profit=profit,
        margin=profit / total_revenue * 100 if total_revenue > 0 else 0,
        cost_per_unit=total_cost / units,
        revenue_per_unit=total_revenue / units,
    )


def _percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0


def calculate_batch_cost_analysis(store, batch: ProductionBatch) -> BatchCostAnalysis:
    """Per-variant costs for a batch plus totals and the materials/packaging/labels split."""
    cache: Dict[Tuple[str, str], RecipeCostPerKg] = {}
    variant_costs = [calculate_variant_cost(store, p, cache) for p in process_batch_variants(store, batch)]

    materials_cost = sum(v.materials_cost for v in variant_costs)
    packaging_cost = sum(v.packaging_cost for v in variant_costs)
    labels_cost = sum(v.labels_cost for v in variant_costs)
    total_cost = materials_cost + packaging_cost + labels_cost
    total_revenue = sum(v.total_revenue for v in variant_costs)
    total_profit = total_revenue - total_cost

    logger.debug(
        f"Batch {batch.id} cost analysis: {len(variant_costs)} variants, "
        f"total_cost={total_cost:.2f}, revenue={total_revenue:.2f}"
    )
    return BatchCostAnalysis(
        batch_id=batch.id,
        batch_name=batch.batch_name,
        total_units=sum(v.units for v in variant_costs),
        total_fill_kg=sum(v.fill_in_kg for v in variant_costs),
        materials_cost=materials_cost,
        packaging_cost=packaging_cost,
        labels_cost=labels_cost,
        total_cost=total_cost,
        total_revenue=total_revenue,
        total_profit=total_profit,
        profit_margin=_percentage(total_profit, total_revenue),
        materials_percentage=_percentage(materials_cost, total_cost),
        packaging_percentage=_percentage(packaging_cost, total_cost),
        labels_percentage=_percentage(labels_cost, total_cost),
        variant_costs=variant_costs,
    )
