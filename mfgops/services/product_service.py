"""
Product service: products (bound to a recipe or a recipe variant through RecipeRef)
and their packaged variants, plus the single-unit cost view of a variant.
"""

from typing import List, Optional, Tuple

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.product import Product, ProductVariant
from mfgops.schemas.product import VariantCostAnalysis
from mfgops.schemas.recipe_ref import RecipeRef
from mfgops.services.recipe_cost import get_recipe_cost_per_kg
from mfgops.utils.text_utils import normalize_text
from mfgops.utils.unit_conversion import MASS_VOLUME_UNITS, normalize_to_kg

RECIPE_REF_COLLECTIONS = {
    "recipe": "recipes",
    "variant": "recipe_variants",
}


def validate_recipe_ref(store, ref: RecipeRef) -> None:
    """The ref must point at an existing recipe or recipe variant of the stated kind."""
    collection = RECIPE_REF_COLLECTIONS[ref.kind]
    if store.get(collection, ref.id) is None:
        raise NotFoundError(store.entity_name(collection), ref.id)


def _ref_columns(ref: RecipeRef) -> dict:
    return {"recipe_id": ref.id, "is_recipe_variant": ref.kind == "variant"}


# ============================================================================
# Products
# ============================================================================

def get_product_by_id(store, product_id: str) -> Optional[Product]:
    return store.get("products", product_id)


def get_all_products(
    store,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> Tuple[List[Product], int]:
    products = store.get_all("products")
    if status:
        products = [p for p in products if p.status == status]
    if search:
        term = normalize_text(search)
        products = [p for p in products if term in normalize_text(p.name)]
    total = len(products)
    return products[skip:skip + limit], total


def create_product(
    store,
    name: str,
    recipe_ref: RecipeRef,
    description: Optional[str] = None,
    status: Optional[str] = None,
    notes: Optional[str] = None,
) -> Product:
    if not (name or "").strip():
        raise ValidationError("Product name is required")
    recipe_ref = RecipeRef.model_validate(recipe_ref)
    validate_recipe_ref(store, recipe_ref)

    record = {"name": name.strip(), "description": description, "notes": notes, **_ref_columns(recipe_ref)}
    if status is not None:
        record["status"] = status
    product_id = store.add("products", record)
    logger.info(f"Product created: {product_id} ({recipe_ref.kind} {recipe_ref.id})")
    return store.get("products", product_id)


def update_product(store, product_id: str, data: dict) -> Product:
    store.require("products", product_id)
    data = dict(data)
    if "name" in data:
        if not (data["name"] or "").strip():
            raise ValidationError("Product name is required")
        data["name"] = data["name"].strip()
    if data.get("recipe_ref") is not None:
        ref = RecipeRef.model_validate(data.pop("recipe_ref"))
        validate_recipe_ref(store, ref)
        data.update(_ref_columns(ref))
    else:
        data.pop("recipe_ref", None)

    product = store.update("products", product_id, data)
    logger.info(f"Product updated: {product_id}")
    return product


def _batches_using(store, product_id: str, variant_id: Optional[str] = None) -> list:
    batches = []
    for batch in store.get_all("production_batches"):
        for item in batch.items or []:
            if item.get("product_id") != product_id:
                continue
            if variant_id is None or any(v.get("variant_id") == variant_id for v in item.get("variants") or []):
                batches.append(batch)
                break
    return batches


def delete_product(store, product_id: str) -> None:
    """Deletes the product and its variants; rejected while a production batch uses it."""
    product = store.require("products", product_id)
    batches = _batches_using(store, product_id)
    if batches:
        raise ReferenceInUseError(
            f'Cannot delete product "{product.name}": used by batch(es) {", ".join(b.batch_name for b in batches)}'
        )
    store.delete("products", product_id)
    logger.info(f"Product deleted: {product_id}")


# ============================================================================
# Product variants
# ============================================================================

def get_product_variants(store, product_id: str) -> List[ProductVariant]:
    store.require("products", product_id)
    return store.query("product_variants", "product_id", product_id)


def _validate_variant(store, data: dict, variant_id: Optional[str] = None) -> None:
    if "fill_quantity" in data and (data["fill_quantity"] is None or data["fill_quantity"] <= 0):
        raise ValidationError("Fill quantity must be greater than 0")
    if "fill_unit" in data and data["fill_unit"] not in MASS_VOLUME_UNITS:
        raise ValidationError(f"Fill unit must be one of {', '.join(MASS_VOLUME_UNITS)}")
    if (data.get("selling_price_per_unit") or 0) < 0:
        raise ValidationError("Selling price cannot be negative")
    if (data.get("labels_per_unit") or 0) < 0:
        raise ValidationError("Labels per unit cannot be negative")

    if data.get("sku"):
        for existing in store.query("product_variants", "sku", data["sku"]):
            if existing.id != variant_id:
                raise ValidationError(f'SKU "{data["sku"]}" is already used by variant {existing.name}')

    if data.get("packaging_selection_id"):
        store.require("supplier_packaging", data["packaging_selection_id"])
    for field in ("front_label_selection_id", "back_label_selection_id"):
        if data.get(field):
            store.require("supplier_labels", data[field])


def create_product_variant(store, product_id: str, data: dict) -> ProductVariant:
    store.require("products", product_id)
    if not (data.get("name") or "").strip():
        raise ValidationError("Variant name is required")
    for required in ("fill_quantity", "fill_unit"):
        if data.get(required) is None:
            raise ValidationError(f"{required.replace('_', ' ').capitalize()} is required")
    _validate_variant(store, data)

    variant_id = store.add("product_variants", {**data, "product_id": product_id, "name": data["name"].strip()})
    logger.info(f"Product variant created: {variant_id} for {product_id}")
    return store.get("product_variants", variant_id)


def update_product_variant(store, variant_id: str, data: dict) -> ProductVariant:
    store.require("product_variants", variant_id)
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Variant name is required")
    _validate_variant(store, data, variant_id=variant_id)
    variant = store.update("product_variants", variant_id, data)
    logger.info(f"Product variant updated: {variant_id}")
    return variant


def delete_product_variant(store, variant_id: str) -> None:
    variant = store.require("product_variants", variant_id)
    batches = _batches_using(store, variant.product_id, variant_id)
    if batches:
        raise ReferenceInUseError(
            f'Cannot delete variant "{variant.name}": used by batch(es) {", ".join(b.batch_name for b in batches)}'
        )
    store.delete("product_variants", variant_id)
    logger.info(f"Product variant deleted: {variant_id}")


def _price_and_tax(row) -> Tuple[float, float]:
    if row is None:
        return 0.0, 0.0
    price = row.unit_price or 0
    return price, price * (row.tax or 0) / 100


def analyze_variant_cost(store, variant_id: str) -> VariantCostAnalysis:
    """
    Cost of one unit: recipe cost for the fill plus one packaging item and one front and one back label.
    Missing references cost 0 and produce a warning instead of an error.
    """
    variant = store.require("product_variants", variant_id)
    product = store.require("products", variant.product_id)
    warnings = []

    fill_kg = normalize_to_kg(variant.fill_quantity, variant.fill_unit)
    recipe_cost = get_recipe_cost_per_kg(store, product.recipe_ref)
    if recipe_cost.cost_per_kg == 0:
        warnings.append("Recipe cost is zero: check the recipe ingredients and supplier prices")

    packaging = store.get("supplier_packaging", variant.packaging_selection_id)
    if packaging is None:
        warnings.append("No packaging selected for this variant")
    packaging_cost, packaging_tax = _price_and_tax(packaging)
    front_cost, front_tax = _price_and_tax(store.get("supplier_labels", variant.front_label_selection_id))
    back_cost, back_tax = _price_and_tax(store.get("supplier_labels", variant.back_label_selection_id))

    base = recipe_cost.cost_per_kg * fill_kg
    base_tax = recipe_cost.tax_per_kg * fill_kg
    without_tax = base + packaging_cost + front_cost + back_cost
    tax = base_tax + packaging_tax + front_tax + back_tax
    with_tax = without_tax + tax

    price = variant.selling_price_per_unit or 0
    gross_profit = price - with_tax
    gross_margin = gross_profit / price * 100 if price > 0 else 0
    if price < with_tax:
        warnings.append(f"Selling price {price:.2f} is below cost {with_tax:.2f}")
    elif variant.minimum_profit_margin is not None and gross_margin < variant.minimum_profit_margin:
        warnings.append(
            f"Margin {gross_margin:.1f}% is below the minimum of {variant.minimum_profit_margin:.1f}%"
        )

    return VariantCostAnalysis(
        variant_id=variant.id,
        product_id=product.id,
        fill_quantity=variant.fill_quantity,
        fill_unit=variant.fill_unit,
        fill_kg=fill_kg,
        recipe_cost=base,
        recipe_tax=base_tax,
        packaging_cost=packaging_cost,
        packaging_tax=packaging_tax,
        front_label_cost=front_cost,
        front_label_tax=front_tax,
        back_label_cost=back_cost,
        back_label_tax=back_tax,
        total_cost_without_tax=without_tax,
        total_tax=tax,
        total_cost_with_tax=with_tax,
        cost_per_kg=with_tax / fill_kg if fill_kg > 0 else 0,
        selling_price_per_unit=price,
        gross_profit=gross_profit,
        gross_margin=gross_margin,
        warnings=warnings,
    )
