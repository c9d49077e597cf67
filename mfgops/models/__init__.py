# mfgops/models/__init__.py
from .supplier import Supplier
from .material import Category, Material, SupplierMaterial
from .packaging import Packaging, SupplierPackaging
from .label import Label, SupplierLabel
from .recipe import Recipe, RecipeIngredient, RecipeVariant, RecipeStatus
from .product import Product, ProductVariant, ProductStatus
from .batch import ProductionBatch, BatchStatus
from .inventory import (
    AlertSeverity,
    InventoryAlert,
    InventoryItem,
    InventoryItemType,
    InventoryStatus,
    InventoryTransaction,
    TransactionType,
)
from .purchase_order import PurchaseOrder, PurchaseOrderItemType, PurchaseOrderStatus
