"""
Batch requirements aggregator.
For every processed batch line: material needs scaled from the recipe, one packaging per unit,
front/back labels per unit. Lines for the same (item, supplier) merge into one; shortages are
measured against tracked inventory only.
"""

from typing import Dict, List, Optional, Tuple

from mfgops.logger_config import logger
from mfgops.models.batch import ProductionBatch
from mfgops.models.inventory import InventoryItemType
from mfgops.schemas.costing import ProcessedVariant, ResolvedPrice
from mfgops.schemas.requirements import (
    BatchRequirementsAnalysis,
    LabelSide,
    ProductRequirements,
    RequirementItem,
    RequirementItemType,
    RequirementsOverview,
    SupplierRequirement,
    VariantRequirements,
)
from mfgops.services.batch_calculations import process_batch_variants
from mfgops.services.pricing import resolve_ingredient_price
from mfgops.services.recipe_cost import recipe_weight_kg, resolve_recipe_source
from mfgops.utils.unit_conversion import base_unit, is_convertible, normalize_to_kg

INVENTORY_TYPES = {
    RequirementItemType.MATERIAL: InventoryItemType.SUPPLIER_MATERIAL,
    RequirementItemType.PACKAGING: InventoryItemType.SUPPLIER_PACKAGING,
    RequirementItemType.LABEL: InventoryItemType.SUPPLIER_LABEL,
}


def calculate_shortage(required: float, available: Optional[float]) -> float:
    """max(0, required - available); unknown availability is not a shortage."""
    if available is None:
        return 0.0
    return max(0.0, required - available)


def _line(
    item_type: RequirementItemType,
    supplier_item,
    item_name: str,
    required: float,
    unit: str,
    processed: ProcessedVariant,
    label_type: Optional[LabelSide] = None,
    price: Optional[ResolvedPrice] = None,
) -> RequirementItem:
    if price is None:
        price = ResolvedPrice(unit_price=supplier_item.unit_price or 0, tax=supplier_item.tax or 0, is_locked=False)
    unit_price = price.unit_price
    tax = price.tax
    cost = required * unit_price
    return RequirementItem(
        item_type=item_type,
        item_id=supplier_item.id,
        item_name=item_name,
        supplier_id=supplier_item.supplier_id,
        supplier_name=supplier_item.supplier.name if supplier_item.supplier else "Unknown supplier",
        required_quantity=required,
        unit=unit,
        unit_price=unit_price,
        tax=tax,
        cost=cost,
        total_cost=cost * (1 + tax / 100),
        is_locked=price.is_locked,
        label_type=label_type,
        product_id=processed.product_id,
        variant_id=processed.variant_id,
    )


def material_requirements(store, processed: ProcessedVariant) -> List[RequirementItem]:
    """
    Each resolvable ingredient scaled by fill_in_kg / weight of the resolvable ingredients,
    priced like recipe costing (a locked price wins over the live one).
    """
    _, ingredients = resolve_recipe_source(store, processed.recipe_ref)
    resolved = []
    for ingredient in ingredients:
        supplier_material = store.get("supplier_materials", ingredient.supplier_material_id)
        if supplier_material is None:
            logger.warning(
                f"Variant {processed.variant_id}: supplier material {ingredient.supplier_material_id} missing, skipped"
            )
            continue
        resolved.append((ingredient, supplier_material))

    weight_kg = recipe_weight_kg(ingredient for ingredient, _ in resolved)
    if weight_kg <= 0:
        logger.warning(f"Variant {processed.variant_id}: recipe has no weight, no material requirements")
        return []

    scale = processed.fill_in_kg / weight_kg
    lines = []
    for ingredient, supplier_material in resolved:
        required = normalize_to_kg(ingredient.quantity, ingredient.unit) * scale
        unit = base_unit(supplier_material.capacity_unit) if is_convertible(supplier_material.capacity_unit) else "kg"
        name = supplier_material.material.name if supplier_material.material else supplier_material.material_id
        lines.append(_line(
            RequirementItemType.MATERIAL,
            supplier_material,
            name,
            required,
            unit,
            processed,
            price=resolve_ingredient_price(ingredient, supplier_material),
        ))
    return lines


def packaging_requirements(store, processed: ProcessedVariant) -> List[RequirementItem]:
    supplier_packaging = store.get("supplier_packaging", processed.packaging_selection_id)
    if supplier_packaging is None:
        return []
    name = supplier_packaging.packaging.name if supplier_packaging.packaging else supplier_packaging.packaging_id
    return [_line(RequirementItemType.PACKAGING, supplier_packaging, name, float(processed.units), "pcs", processed)]


def label_requirements(store, processed: ProcessedVariant) -> List[RequirementItem]:
    """labels_per_unit x units for each of the front and back label."""
    lines = []
    required = float(processed.labels_per_unit * processed.units)
    if required <= 0:
        return lines
    for side, selection_id in (
        (LabelSide.FRONT, processed.front_label_selection_id),
        (LabelSide.BACK, processed.back_label_selection_id),
    ):
        supplier_label = store.get("supplier_labels", selection_id)
        if supplier_label is None:
            continue
        name = supplier_label.label.name if supplier_label.label else supplier_label.label_id
        lines.append(_line(RequirementItemType.LABEL, supplier_label, name, required, supplier_label.unit or "pcs", processed, side))
    return lines


def aggregate_requirements(items: List[RequirementItem]) -> List[RequirementItem]:
    """
    Merge lines sharing (item_type, item_id, supplier_id) by summing quantity and cost.
    Output keeps first-seen order. Merged lines drop their product/variant origin
    and count as locked only when every merged line was.
    """
    merged: Dict[Tuple, RequirementItem] = {}
    for item in items:
        existing = merged.get(item.key)
        if existing is None:
            merged[item.key] = item.model_copy(update={"product_id": None, "variant_id": None})
            continue
        existing.required_quantity += item.required_quantity
        existing.cost += item.cost
        existing.total_cost += item.total_cost
        if existing.label_type != item.label_type:
            existing.label_type = None
        existing.is_locked = existing.is_locked and item.is_locked
    return list(merged.values())


def apply_inventory(store, items: List[RequirementItem]) -> None:
    """Fill available_stock / has_inventory / shortage from tracked inventory items."""
    stock_cache: Dict[Tuple, Optional[float]] = {}
    for item in items:
        key = (item.item_type, item.item_id)
        if key not in stock_cache:
            inventory_type = INVENTORY_TYPES[item.item_type]
            tracked = [
                inv for inv in store.query("inventory_items", "item_id", item.item_id)
                if inv.item_type == inventory_type
            ]
            stock_cache[key] = tracked[0].current_stock if tracked else None
        available = stock_cache[key]
        item.available_stock = available
        item.has_inventory = available is not None
        item.shortage = calculate_shortage(item.required_quantity, available)


def group_by_supplier(
    materials: List[RequirementItem],
    packaging: List[RequirementItem],
    labels: List[RequirementItem],
) -> List[SupplierRequirement]:
    groups: Dict[str, SupplierRequirement] = {}
    for bucket, items in (("materials", materials), ("packaging", packaging), ("labels", labels)):
        for item in items:
            group = groups.get(item.supplier_id)
            if group is None:
                group = SupplierRequirement(supplier_id=item.supplier_id, supplier_name=item.supplier_name)
                groups[item.supplier_id] = group
            getattr(group, bucket).append(item)
            group.total_cost += item.total_cost
            group.item_count += 1
            if item.shortage > 0:
                group.shortage_count += 1
    return list(groups.values())


def group_by_product(variant_requirements: List[Tuple[ProcessedVariant, VariantRequirements]]) -> List[ProductRequirements]:
    """Per-product groups keeping each batch line's unmerged requirements."""
    groups: Dict[str, ProductRequirements] = {}
    for processed, requirements in variant_requirements:
        group = groups.get(processed.product_id)
        if group is None:
            group = ProductRequirements(product_id=processed.product_id, product_name=processed.product_name)
            groups[processed.product_id] = group
        group.variants.append(requirements)
        group.total_units += requirements.units
        group.total_cost += requirements.total_cost
    return list(groups.values())


def calculate_batch_requirements(store, batch: ProductionBatch) -> BatchRequirementsAnalysis:
    all_materials: List[RequirementItem] = []
    all_packaging: List[RequirementItem] = []
    all_labels: List[RequirementItem] = []
    per_variant: List[Tuple[ProcessedVariant, VariantRequirements]] = []

    for processed in process_batch_variants(store, batch):
        materials = material_requirements(store, processed)
        packaging = packaging_requirements(store, processed)
        labels = label_requirements(store, processed)
        apply_inventory(store, materials + packaging + labels)

        per_variant.append((processed, VariantRequirements(
            variant_id=processed.variant_id,
            variant_name=processed.variant_name,
            units=processed.units,
            fill_in_kg=processed.fill_in_kg,
            materials=materials,
            packaging=packaging,
            labels=labels,
            total_cost=sum(i.total_cost for i in materials + packaging + labels),
        )))
        all_materials.extend(materials)
        all_packaging.extend(packaging)
        all_labels.extend(labels)

    materials = aggregate_requirements(all_materials)
    packaging = aggregate_requirements(all_packaging)
    labels = aggregate_requirements(all_labels)
    merged = materials + packaging + labels
    apply_inventory(store, merged)

    critical_shortages = [i for i in merged if i.shortage > 0]
    items_without_inventory = [i for i in merged if not i.has_inventory]

    materials_cost = sum(i.total_cost for i in materials)
    packaging_cost = sum(i.total_cost for i in packaging)
    labels_cost = sum(i.total_cost for i in labels)

    overview = RequirementsOverview(
        total_items=len(merged),
        total_cost=materials_cost + packaging_cost + labels_cost,
        supplier_count=len({i.supplier_id for i in merged}),
        shortage_count=len(critical_shortages),
        material_count=len(materials),
        packaging_count=len(packaging),
        label_count=len(labels),
        materials_cost=materials_cost,
        packaging_cost=packaging_cost,
        labels_cost=labels_cost,
    )
    logger.info(
        f"Batch {batch.id} requirements: {overview.total_items} items from {overview.supplier_count} suppliers, "
        f"{overview.shortage_count} shortages"
    )
    return BatchRequirementsAnalysis(
        batch_id=batch.id,
        batch_name=batch.batch_name,
        overview=overview,
        materials=materials,
        packaging=packaging,
        labels=labels,
        by_supplier=group_by_supplier(materials, packaging, labels),
        by_product=group_by_product(per_variant),
        critical_shortages=critical_shortages,
        items_without_inventory=items_without_inventory,
    )
