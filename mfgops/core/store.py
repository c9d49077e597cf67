"""
Store: the persistence collaborator handed to every service and calculator.
Wraps a SQLAlchemy Session behind a small collection-oriented API
(get / get_all / query / add / update / delete / transaction).
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mfgops.common.exceptions import NotFoundError, ValidationError
from mfgops.logger_config import logger
from mfgops.models import (
    Category,
    InventoryAlert,
    InventoryItem,
    InventoryTransaction,
    Label,
    Material,
    Packaging,
    Product,
    ProductionBatch,
    ProductVariant,
    PurchaseOrder,
    Recipe,
    RecipeIngredient,
    RecipeVariant,
    Supplier,
    SupplierLabel,
    SupplierMaterial,
    SupplierPackaging,
)

COLLECTIONS = {
    "materials": Material,
    "supplier_materials": SupplierMaterial,
    "categories": Category,
    "packaging": Packaging,
    "supplier_packaging": SupplierPackaging,
    "labels": Label,
    "supplier_labels": SupplierLabel,
    "recipes": Recipe,
    "recipe_ingredients": RecipeIngredient,
    "recipe_variants": RecipeVariant,
    "products": Product,
    "product_variants": ProductVariant,
    "production_batches": ProductionBatch,
    "inventory_items": InventoryItem,
    "inventory_transactions": InventoryTransaction,
    "inventory_alerts": InventoryAlert,
    "purchase_orders": PurchaseOrder,
    "suppliers": Supplier,
}

# Human-readable entity names for error messages
ENTITY_NAMES = {
    "materials": "Material",
    "supplier_materials": "Supplier material",
    "categories": "Category",
    "packaging": "Packaging",
    "supplier_packaging": "Supplier packaging",
    "labels": "Label",
    "supplier_labels": "Supplier label",
    "recipes": "Recipe",
    "recipe_ingredients": "Recipe ingredient",
    "recipe_variants": "Recipe variant",
    "products": "Product",
    "product_variants": "Product variant",
    "production_batches": "Production batch",
    "inventory_items": "Inventory item",
    "inventory_transactions": "Inventory transaction",
    "inventory_alerts": "Inventory alert",
    "purchase_orders": "Purchase order",
    "suppliers": "Supplier",
}


class Store:
    """
    Collection-oriented access to the database.

    Writes outside a transaction commit immediately. Inside `transaction()` they are only flushed,
    and the outermost block commits on success or rolls back on any exception.
    """

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def model_for(collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise ValidationError(f"Unknown collection: {collection}")
        return model

    @staticmethod
    def entity_name(collection: str) -> str:
        return ENTITY_NAMES.get(collection, collection)

    def _check_fields(self, collection: str, fields) -> None:
        columns = {attr.key for attr in inspect(self.model_for(collection)).column_attrs}
        unknown = [f for f in fields if f not in columns]
        if unknown:
            raise ValidationError(f"Unknown field(s) for {collection}: {', '.join(sorted(unknown))}")

    def _finish_write(self) -> None:
        if self._depth > 0:
            self.db.flush()
            return
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Store integrity error: {e}")
            raise ValidationError("Write rejected by a database constraint (duplicate or missing reference).")

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, record_id: Optional[str]):
        """Return the record or None."""
        if not record_id:
            return None
        return self.db.get(self.model_for(collection), record_id)

    def require(self, collection: str, record_id: Optional[str]):
        """Like get() but raises NotFoundError when the record is missing."""
        record = self.get(collection, record_id)
        if record is None:
            raise NotFoundError(self.entity_name(collection), record_id)
        return record

    def get_all(self, collection: str) -> List[Any]:
        model = self.model_for(collection)
        query = self.db.query(model)
        if hasattr(model, "created_at"):
            query = query.order_by(model.created_at, model.id)
        return query.all()

    def query(self, collection: str, field: str, value) -> List[Any]:
        """Equality filter on a single column."""
        self._check_fields(collection, [field])
        model = self.model_for(collection)
        query = self.db.query(model).filter(getattr(model, field) == value)
        if hasattr(model, "created_at"):
            query = query.order_by(model.created_at, model.id)
        return query.all()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, collection: str, record: Dict[str, Any]) -> str:
        """Insert a record (dict of column values) and return its id."""
        self._check_fields(collection, record.keys())
        model = self.model_for(collection)
        instance = model(**record)
        self.db.add(instance)
        try:
            self.db.flush()
        except IntegrityError as e:
            if self._depth == 0:
                self.db.rollback()
            logger.error(f"Store add integrity error on {collection}: {e}")
            raise ValidationError(f"Failed to create {self.entity_name(collection).lower()} (duplicate or constraint).")
        record_id = instance.id
        self._finish_write()
        logger.debug(f"Added {collection} record {record_id}")
        return record_id

    def update(self, collection: str, record_id: str, partial: Dict[str, Any]):
        """Apply a partial update and return the updated record."""
        self._check_fields(collection, partial.keys())
        instance = self.require(collection, record_id)
        for key, value in partial.items():
            setattr(instance, key, value)
        self._finish_write()
        logger.debug(f"Updated {collection} record {record_id}: {sorted(partial.keys())}")
        return instance

    def delete(self, collection: str, record_id: str) -> None:
        instance = self.require(collection, record_id)
        self.db.delete(instance)
        self._finish_write()
        logger.debug(f"Deleted {collection} record {record_id}")

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """
        Atomic block for compound writes. Nested blocks join the outermost one.
        """
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
                logger.debug("Transaction rolled back")
            raise
        self._depth -= 1
        if self._depth == 0:
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.error(f"Transaction integrity error: {e}")
                raise ValidationError("Write rejected by a database constraint (duplicate or missing reference).")
