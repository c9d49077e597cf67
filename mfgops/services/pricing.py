from mfgops.schemas.costing import ResolvedPrice


def resolve_ingredient_price(ingredient, supplier_material) -> ResolvedPrice:
    """
    Effective unit price and tax for an ingredient.
    A locked price snapshot always wins over the live supplier price.
    """
    locked = getattr(ingredient, "locked_pricing", None)
    if locked is not None:
        return ResolvedPrice(unit_price=locked.unit_price, tax=locked.tax, is_locked=True)
    return ResolvedPrice(
        unit_price=supplier_material.unit_price or 0,
        tax=supplier_material.tax or 0,
        is_locked=False,
    )


def price_changed_since_lock(ingredient, supplier_material) -> bool:
    """True when a locked ingredient's live supplier price or tax has drifted from the snapshot."""
    locked = getattr(ingredient, "locked_pricing", None)
    if locked is None or supplier_material is None:
        return False
    return (
        abs((supplier_material.unit_price or 0) - locked.unit_price) > 1e-9
        or abs((supplier_material.tax or 0) - locked.tax) > 1e-9
    )
