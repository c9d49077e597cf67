"""
Material service: categories, materials and supplier materials.
Names and categories are matched normalized (trim + lowercase) for duplicate detection.
Creating a supplier material gets-or-creates its category and material in one transaction.
"""

from typing import List, Optional

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.material import Category, Material, SupplierMaterial
from mfgops.schemas.material import MaterialPriceComparison, SupplierPriceComparison
from mfgops.utils.text_utils import find_similar_items, normalize_text
from mfgops.utils.unit_conversion import calculate_price_with_tax, calculate_unit_price

CATEGORY_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6",
    "#ec4899", "#14b8a6", "#f97316", "#6366f1", "#84cc16",
]


def category_color(name: str) -> str:
    """Stable palette color for a category name."""
    return CATEGORY_COLORS[sum(ord(c) for c in normalize_text(name)) % len(CATEGORY_COLORS)]


# ============================================================================
# Categories
# ============================================================================

def find_category_by_name(store, name: str) -> Optional[Category]:
    target = normalize_text(name)
    for category in store.get_all("categories"):
        if normalize_text(category.name) == target:
            return category
    return None


def get_or_create_category(store, name: str) -> Category:
    category = find_category_by_name(store, name)
    if category is not None:
        return category
    category_id = store.add("categories", {"name": name.strip(), "color": category_color(name)})
    logger.info(f"Category auto-created: {category_id} ({name.strip()})")
    return store.get("categories", category_id)


def list_categories(store) -> List[Category]:
    return sorted(store.get_all("categories"), key=lambda c: normalize_text(c.name))


def create_category(store, name: str, description: Optional[str] = None, color: Optional[str] = None) -> Category:
    if not (name or "").strip():
        raise ValidationError("Category name is required")
    if find_category_by_name(store, name) is not None:
        raise ValidationError(f'Category "{name}" already exists')
    category_id = store.add("categories", {
        "name": name.strip(),
        "description": description,
        "color": color or category_color(name),
    })
    logger.info(f"Category created: {category_id}")
    return store.get("categories", category_id)


def update_category(store, category_id: str, data: dict) -> Category:
    """Renaming a category renames it on every material that uses it."""
    category = store.require("categories", category_id)
    old_name = category.name
    with store.transaction():
        if data.get("name") is not None:
            new_name = data["name"].strip()
            existing = find_category_by_name(store, new_name)
            if existing is not None and existing.id != category_id:
                raise ValidationError(f'Category "{new_name}" already exists')
            data = {**data, "name": new_name}
            for material in store.get_all("materials"):
                if normalize_text(material.category) == normalize_text(old_name):
                    store.update("materials", material.id, {"category": new_name})
        category = store.update("categories", category_id, data)
    logger.info(f"Category updated: {category_id}")
    return category


def delete_category(store, category_id: str) -> None:
    category = store.require("categories", category_id)
    used = [m for m in store.get_all("materials") if normalize_text(m.category) == normalize_text(category.name)]
    if used:
        raise ReferenceInUseError(
            f'Cannot delete category "{category.name}": it is used by {len(used)} material(s)'
        )
    store.delete("categories", category_id)
    logger.info(f"Category deleted: {category_id}")


# ============================================================================
# Materials
# ============================================================================

def get_material_by_id(store, material_id: str) -> Optional[Material]:
    return store.get("materials", material_id)


def find_material_by_name(store, name: str) -> Optional[Material]:
    target = normalize_text(name)
    for material in store.get_all("materials"):
        if normalize_text(material.name) == target:
            return material
    return None


def find_similar_materials(store, name: str, exclude_id: Optional[str] = None) -> List[Material]:
    """Near-duplicate names (edit distance <= 2, separators ignored) for the duplicate warning."""
    return find_similar_items(name, store.get_all("materials"), exclude_id=exclude_id)


def get_all_materials(
    store,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Material]:
    materials = store.get_all("materials")
    if category:
        materials = [m for m in materials if normalize_text(m.category) == normalize_text(category)]
    if search:
        term = normalize_text(search)
        materials = [m for m in materials if term in normalize_text(m.name)]
    return sorted(materials, key=lambda m: normalize_text(m.name))


def create_material(store, name: str, category: str, notes: Optional[str] = None) -> Material:
    if not (name or "").strip():
        raise ValidationError("Material name is required")
    if not (category or "").strip():
        raise ValidationError("Material category is required")
    if find_material_by_name(store, name) is not None:
        raise ValidationError(f'Material "{name.strip()}" already exists')

    with store.transaction():
        category_row = get_or_create_category(store, category)
        material_id = store.add("materials", {
            "name": name.strip(),
            "category": category_row.name,
            "notes": notes,
        })
    logger.info(f"Material created: {material_id} ({name.strip()})")
    return store.get("materials", material_id)


def update_material(store, material_id: str, data: dict) -> Material:
    store.require("materials", material_id)
    with store.transaction():
        if data.get("name") is not None:
            existing = find_material_by_name(store, data["name"])
            if existing is not None and existing.id != material_id:
                raise ValidationError(f'Material "{data["name"].strip()}" already exists')
            data = {**data, "name": data["name"].strip()}
        if data.get("category") is not None:
            data = {**data, "category": get_or_create_category(store, data["category"]).name}
        material = store.update("materials", material_id, data)
    logger.info(f"Material updated: {material_id}")
    return material


def delete_material(store, material_id: str) -> None:
    store.require("materials", material_id)
    if store.query("supplier_materials", "material_id", material_id):
        raise ReferenceInUseError("Cannot delete material that is used by suppliers")
    store.delete("materials", material_id)
    logger.info(f"Material deleted: {material_id}")


# ============================================================================
# Supplier materials
# ============================================================================

def get_supplier_material_by_id(store, supplier_material_id: str) -> Optional[SupplierMaterial]:
    return store.get("supplier_materials", supplier_material_id)


def get_all_supplier_materials(
    store,
    material_id: Optional[str] = None,
    supplier_id: Optional[str] = None,
) -> List[SupplierMaterial]:
    if material_id:
        rows = store.query("supplier_materials", "material_id", material_id)
    elif supplier_id:
        rows = store.query("supplier_materials", "supplier_id", supplier_id)
    else:
        rows = store.get_all("supplier_materials")
    if supplier_id:
        rows = [r for r in rows if r.supplier_id == supplier_id]
    return rows


def _is_same_offer(row: SupplierMaterial, capacity_unit: str, bulk_price: float, quantity_for_bulk_price: float) -> bool:
    return (
        row.capacity_unit == capacity_unit
        and abs(row.bulk_price - bulk_price) < 1e-9
        and abs(row.quantity_for_bulk_price - quantity_for_bulk_price) < 1e-9
    )


def create_supplier_material(
    store,
    supplier_id: str,
    material_name: str,
    category: str,
    bulk_price: float,
    quantity_for_bulk_price: Optional[float] = None,
    capacity_unit: str = "kg",
    tax: float = 0,
    moq: Optional[float] = None,
    lead_time: Optional[int] = None,
    transportation_cost: Optional[float] = None,
    notes: Optional[str] = None,
) -> SupplierMaterial:
    """
    Atomic: ensure category, get-or-create material by normalized name, then insert the offer.
    An identical offer (same supplier, material, unit, bulk price and bulk quantity) is rejected.
    """
    if store.get("suppliers", supplier_id) is None:
        raise NotFoundError("Supplier", supplier_id)
    if not (material_name or "").strip():
        raise ValidationError("Material name is required")
    if bulk_price is None or bulk_price <= 0:
        raise ValidationError("Bulk price must be greater than 0")
    if tax is not None and tax < 0:
        raise ValidationError("Tax cannot be negative")
    quantity = quantity_for_bulk_price or 1
    if quantity <= 0:
        raise ValidationError("Quantity for bulk price must be greater than 0")

    with store.transaction():
        material = find_material_by_name(store, material_name)
        if material is None:
            material = create_material(store, material_name, category)
        else:
            get_or_create_category(store, category)

        for row in store.query("supplier_materials", "material_id", material.id):
            if row.supplier_id == supplier_id and _is_same_offer(row, capacity_unit, bulk_price, quantity):
                raise ValidationError(
                    f'This supplier already offers "{material.name}" with the same specification'
                )

        supplier_material_id = store.add("supplier_materials", {
            "supplier_id": supplier_id,
            "material_id": material.id,
            "bulk_price": bulk_price,
            "quantity_for_bulk_price": quantity,
            "unit_price": calculate_unit_price(bulk_price, quantity),
            "capacity_unit": capacity_unit,
            "tax": tax or 0,
            "moq": moq,
            "lead_time": lead_time,
            "transportation_cost": transportation_cost,
            "notes": notes,
        })

    logger.info(f"Supplier material created: {supplier_material_id} ({material.name} from {supplier_id})")
    return store.get("supplier_materials", supplier_material_id)


def update_supplier_material(store, supplier_material_id: str, data: dict) -> SupplierMaterial:
    """Bulk price or quantity changes recompute unit_price."""
    row = store.require("supplier_materials", supplier_material_id)
    data = dict(data)
    if "bulk_price" in data or "quantity_for_bulk_price" in data:
        bulk_price = data.get("bulk_price", row.bulk_price)
        quantity = data.get("quantity_for_bulk_price", row.quantity_for_bulk_price) or 1
        if bulk_price is None or bulk_price <= 0:
            raise ValidationError("Bulk price must be greater than 0")
        data["unit_price"] = calculate_unit_price(bulk_price, quantity)
    row = store.update("supplier_materials", supplier_material_id, data)
    logger.info(f"Supplier material updated: {supplier_material_id} (unit_price={row.unit_price})")
    return row


def delete_supplier_material(store, supplier_material_id: str) -> None:
    """Recipes that still use the offer keep their ingredient lines; those lines then cost 0."""
    store.require("supplier_materials", supplier_material_id)
    referencing = store.query("recipe_ingredients", "supplier_material_id", supplier_material_id)
    if referencing:
        logger.warning(
            f"Deleting supplier material {supplier_material_id} still used by {len(referencing)} recipe ingredient(s)"
        )
    store.delete("supplier_materials", supplier_material_id)
    logger.info(f"Supplier material deleted: {supplier_material_id}")


def compare_supplier_prices(store, material_id: str) -> MaterialPriceComparison:
    """All supplier offers for a material, cheapest unit price first."""
    material = store.require("materials", material_id)
    offers = []
    for row in store.query("supplier_materials", "material_id", material_id):
        offers.append(SupplierPriceComparison(
            supplier_material_id=row.id,
            supplier_id=row.supplier_id,
            supplier_name=row.supplier.name if row.supplier else "Unknown supplier",
            unit_price=row.unit_price,
            tax=row.tax,
            price_with_tax=calculate_price_with_tax(row.unit_price, row.tax),
            capacity_unit=row.capacity_unit,
            moq=row.moq,
            lead_time=row.lead_time,
        ))
    offers.sort(key=lambda o: o.unit_price)
    if offers:
        offers[0].is_cheapest = True
    return MaterialPriceComparison(
        material_id=material.id,
        material_name=material.name,
        offers=offers,
        price_spread=offers[-1].unit_price - offers[0].unit_price if offers else 0,
    )
