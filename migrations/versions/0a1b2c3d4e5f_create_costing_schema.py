"""create suppliers, catalogue, recipes, products, batches, inventory and purchase orders

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def _offer_columns():
    return [
        sa.Column("bulk_price", sa.Float(), nullable=False),
        sa.Column("quantity_for_bulk_price", sa.Float(), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("tax", sa.Float(), nullable=False),
        sa.Column("moq", sa.Float(), nullable=True),
        sa.Column("lead_time", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    ]


recipe_status = sa.Enum("draft", "testing", "active", "archived", "discontinued", name="recipestatus")
product_status = sa.Enum("draft", "active", "discontinued", name="productstatus")
batch_status = sa.Enum("draft", "scheduled", "in-progress", "completed", "cancelled", name="batchstatus")
inventory_item_type = sa.Enum("supplier_material", "supplier_packaging", "supplier_label", name="inventoryitemtype")
inventory_status = sa.Enum("in-stock", "low-stock", "out-of-stock", "overstock", name="inventorystatus")
transaction_type = sa.Enum("in", "out", "adjustment", name="transactiontype")
alert_severity = sa.Enum("critical", "warning", "info", name="alertseverity")
purchase_order_status = sa.Enum(
    "draft", "submitted", "confirmed", "in-transit", "partially-delivered", "delivered", "cancelled",
    name="purchaseorderstatus",
)


def upgrade() -> None:
    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("contact_persons", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("payment_terms", sa.String(length=200), nullable=True),
        sa.Column("lead_time", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "materials",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "supplier_materials",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("supplier_id", sa.String(length=20), nullable=False),
        sa.Column("material_id", sa.String(length=20), nullable=False),
        sa.Column("capacity_unit", sa.String(length=10), nullable=False),
        sa.Column("transportation_cost", sa.Float(), nullable=True),
        *_offer_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["material_id"], ["materials.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_supplier_materials_supplier_id", "supplier_materials", ["supplier_id"])
    op.create_index("ix_supplier_materials_material_id", "supplier_materials", ["material_id"])

    op.create_table(
        "packaging",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=True),
        sa.Column("capacity", sa.Float(), nullable=True),
        sa.Column("capacity_unit", sa.String(length=10), nullable=True),
        sa.Column("build_material", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "supplier_packaging",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("supplier_id", sa.String(length=20), nullable=False),
        sa.Column("packaging_id", sa.String(length=20), nullable=False),
        sa.Column("capacity_unit", sa.String(length=10), nullable=False),
        *_offer_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["packaging_id"], ["packaging.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_supplier_packaging_supplier_id", "supplier_packaging", ["supplier_id"])
    op.create_index("ix_supplier_packaging_packaging_id", "supplier_packaging", ["packaging_id"])

    op.create_table(
        "labels",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=True),
        sa.Column("printing_type", sa.String(length=50), nullable=True),
        sa.Column("material", sa.String(length=100), nullable=True),
        sa.Column("shape", sa.String(length=50), nullable=True),
        sa.Column("size", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "supplier_labels",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("supplier_id", sa.String(length=20), nullable=False),
        sa.Column("label_id", sa.String(length=20), nullable=False),
        sa.Column("unit", sa.String(length=10), nullable=False),
        *_offer_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["label_id"], ["labels.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_supplier_labels_supplier_id", "supplier_labels", ["supplier_id"])
    op.create_index("ix_supplier_labels_label_id", "supplier_labels", ["label_id"])

    op.create_table(
        "recipes",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_cost_per_kg", sa.Float(), nullable=True),
        sa.Column("status", recipe_status, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("recipe_id", sa.String(length=20), nullable=False),
        sa.Column("supplier_material_id", sa.String(length=20), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=10), nullable=False),
        sa.Column("locked_pricing", sa.JSON(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_recipe_ingredients_recipe_id", "recipe_ingredients", ["recipe_id"])
    op.create_index("ix_recipe_ingredients_supplier_material_id", "recipe_ingredients", ["supplier_material_id"])
    op.create_table(
        "recipe_variants",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("original_recipe_id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ingredients_snapshot", sa.JSON(), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("optimization_goal", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["original_recipe_id"], ["recipes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_recipe_variants_original_recipe_id", "recipe_variants", ["original_recipe_id"])

    op.create_table(
        "products",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("recipe_id", sa.String(length=20), nullable=False),
        sa.Column("is_recipe_variant", sa.Boolean(), nullable=False),
        sa.Column("status", product_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_recipe_id", "products", ["recipe_id"])
    op.create_table(
        "product_variants",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=True),
        sa.Column("fill_quantity", sa.Float(), nullable=False),
        sa.Column("fill_unit", sa.String(length=10), nullable=False),
        sa.Column("packaging_selection_id", sa.String(length=20), nullable=True),
        sa.Column("front_label_selection_id", sa.String(length=20), nullable=True),
        sa.Column("back_label_selection_id", sa.String(length=20), nullable=True),
        sa.Column("labels_per_unit", sa.Integer(), nullable=False),
        sa.Column("selling_price_per_unit", sa.Float(), nullable=False),
        sa.Column("minimum_profit_margin", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sku"),
    )
    op.create_index("ix_product_variants_product_id", "product_variants", ["product_id"])

    op.create_table(
        "production_batches",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("batch_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", batch_status, nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("item_type", inventory_item_type, nullable=False),
        sa.Column("item_id", sa.String(length=20), nullable=False),
        sa.Column("item_name", sa.String(length=200), nullable=True),
        sa.Column("supplier_id", sa.String(length=20), nullable=True),
        sa.Column("current_stock", sa.Float(), nullable=False),
        sa.Column("min_stock_level", sa.Float(), nullable=False),
        sa.Column("max_stock_level", sa.Float(), nullable=True),
        sa.Column("unit", sa.String(length=10), nullable=False),
        sa.Column("status", inventory_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_type", "item_id", name="uq_inventory_item_ref"),
    )
    op.create_index("ix_inventory_items_item_id", "inventory_items", ["item_id"])
    op.create_index("ix_inventory_items_supplier_id", "inventory_items", ["supplier_id"])
    op.create_table(
        "inventory_transactions",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("inventory_item_id", sa.String(length=20), nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("reason", sa.String(length=200), nullable=False),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("stock_before", sa.Float(), nullable=False),
        sa.Column("stock_after", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inventory_transactions_inventory_item_id", "inventory_transactions", ["inventory_item_id"])
    op.create_table(
        "inventory_alerts",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("inventory_item_id", sa.String(length=20), nullable=False),
        sa.Column("alert_type", inventory_status, nullable=False),
        sa.Column("severity", alert_severity, nullable=False),
        sa.Column("message", sa.String(length=500), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("is_resolved", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inventory_alerts_inventory_item_id", "inventory_alerts", ["inventory_item_id"])

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("order_id", sa.String(length=30), nullable=False),
        sa.Column("supplier_id", sa.String(length=20), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("status", purchase_order_status, nullable=False),
        sa.Column("total_cost", sa.Float(), nullable=False),
        sa.Column("batch_id", sa.String(length=20), nullable=True),
        sa.Column("date_submitted", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("actual_delivery_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id"),
    )
    op.create_index("ix_purchase_orders_supplier_id", "purchase_orders", ["supplier_id"])


def downgrade() -> None:
    op.drop_table("purchase_orders")
    op.drop_table("inventory_alerts")
    op.drop_table("inventory_transactions")
    op.drop_table("inventory_items")
    op.drop_table("production_batches")
    op.drop_table("product_variants")
    op.drop_table("products")
    op.drop_table("recipe_variants")
    op.drop_table("recipe_ingredients")
    op.drop_table("recipes")
    op.drop_table("supplier_labels")
    op.drop_table("labels")
    op.drop_table("supplier_packaging")
    op.drop_table("packaging")
    op.drop_table("supplier_materials")
    op.drop_table("materials")
    op.drop_table("categories")
    op.drop_table("suppliers")

    bind = op.get_bind()
    for enum_type in (
        purchase_order_status, alert_severity, transaction_type, inventory_status,
        inventory_item_type, batch_status, product_status, recipe_status,
    ):
        enum_type.drop(bind, checkfirst=True)
