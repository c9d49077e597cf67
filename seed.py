from mfgops.core.database import Base, SessionLocal, engine
from mfgops.core.store import Store
from mfgops.models.inventory import InventoryItemType
from mfgops.services.batch_requirements import calculate_batch_requirements
from mfgops.services.batch_service import create_batch
from mfgops.services.catalog_service import (
    create_label,
    create_packaging,
    create_supplier_label,
    create_supplier_packaging,
)
from mfgops.services.inventory_service import create_inventory_item
from mfgops.services.material_service import create_supplier_material
from mfgops.services.product_service import create_product, create_product_variant
from mfgops.services.recipe_service import create_recipe
from mfgops.services.supplier_service import create_supplier

from faker import Faker
import random

fake = Faker("en_IN")

MATERIALS = [
    ("Coconut Oil", "Oils"),
    ("Olive Oil", "Oils"),
    ("Glycerin", "Humectants"),
    ("Aloe Vera Gel", "Extracts"),
    ("Shea Butter", "Butters"),
    ("Vitamin E", "Actives"),
    ("Lavender Oil", "Fragrance"),
    ("Distilled Water", "Base"),
]

Base.metadata.create_all(bind=engine)
db = SessionLocal()
store = Store(db)

try:
    print("🔄 Clearing existing data...")
    for table in reversed(Base.metadata.sorted_tables):
        db.execute(table.delete())
    db.commit()
    print("✅ Data cleared.")

    print("🔄 Creating suppliers...")
    suppliers = []
    for _ in range(random.randint(4, 6)):
        suppliers.append(create_supplier(store, {
            "name": fake.unique.company(),
            "contact_persons": [{
                "name": fake.name(),
                "role": "Sales",
                "phone": ''.join(filter(str.isdigit, fake.phone_number()))[:20],
                "email": fake.company_email(),
            }],
            "address": fake.address().replace('\n', ', '),
            "rating": round(random.uniform(2.5, 5), 1),
            "payment_terms": random.choice(["Advance", "Net 15", "Net 30"]),
            "lead_time": random.randint(2, 21),
        }))
    print(f"✅ Seeded {len(suppliers)} suppliers")

    print("🔄 Creating supplier materials...")
    supplier_materials = {}
    for name, category in MATERIALS:
        offers = []
        for supplier in random.sample(suppliers, k=random.randint(1, 3)):
            quantity = random.choice([1, 5, 25])
            offers.append(create_supplier_material(
                store,
                supplier_id=supplier.id,
                material_name=name,
                category=category,
                bulk_price=round(random.uniform(40, 900) * quantity, 2),
                quantity_for_bulk_price=quantity,
                capacity_unit=random.choice(["kg", "L"]),
                tax=random.choice([0, 5, 12, 18]),
                moq=quantity,
                lead_time=supplier.lead_time,
            ))
        supplier_materials[name] = offers
    print(f"✅ Seeded {sum(len(o) for o in supplier_materials.values())} supplier materials")

    print("🔄 Creating packaging and labels...")
    bottle = create_packaging(store, {
        "name": "PET Bottle 500ml", "type": "bottle", "capacity": 500, "capacity_unit": "ml",
        "build_material": "PET",
    })
    jar = create_packaging(store, {
        "name": "Glass Jar 100gm", "type": "jar", "capacity": 100, "capacity_unit": "gm",
        "build_material": "Glass",
    })
    front = create_label(store, {"name": "Front Label", "type": "front", "printing_type": "digital", "size": "8x5cm"})
    back = create_label(store, {"name": "Back Label", "type": "back", "printing_type": "digital", "size": "8x10cm"})

    packaging_offers = []
    label_offers = []
    for supplier in random.sample(suppliers, k=2):
        for packaging in (bottle, jar):
            packaging_offers.append(create_supplier_packaging(store, {
                "supplier_id": supplier.id,
                "packaging_id": packaging.id,
                "bulk_price": round(random.uniform(800, 2500), 2),
                "quantity_for_bulk_price": 100,
                "tax": 18,
            }))
        for label in (front, back):
            label_offers.append(create_supplier_label(store, {
                "supplier_id": supplier.id,
                "label_id": label.id,
                "bulk_price": round(random.uniform(150, 600), 2),
                "quantity_for_bulk_price": 100,
                "tax": 12,
            }))
    print(f"✅ Seeded {len(packaging_offers)} packaging and {len(label_offers)} label offers")

    print("🔄 Creating recipes and products...")
    recipes = []
    for i in range(3):
        chosen = random.sample(MATERIALS, k=random.randint(3, 5))
        recipes.append(create_recipe(
            store,
            name=f"{fake.word().capitalize()} {random.choice(['Lotion', 'Serum', 'Balm'])} #{i + 1}",
            ingredients=[{
                "supplier_material_id": random.choice(supplier_materials[name]).id,
                "quantity": random.choice([50, 100, 150, 250]),
                "unit": "gm",
            } for name, _ in chosen],
            target_cost_per_kg=round(random.uniform(150, 400), 2),
            status="active",
        ))

    variants = []
    products = []
    for recipe in recipes:
        product = create_product(store, name=recipe.name, recipe_ref={"kind": "recipe", "id": recipe.id}, status="active")
        products.append(product)
        for fill_quantity, fill_unit, packaging in ((500, "ml", packaging_offers[0]), (100, "gm", packaging_offers[1])):
            variants.append(create_product_variant(store, product.id, {
                "name": f"{fill_quantity}{fill_unit}",
                "sku": f"{product.id[-4:]}-{fill_quantity}{fill_unit}".upper(),
                "fill_quantity": fill_quantity,
                "fill_unit": fill_unit,
                "packaging_selection_id": packaging.id,
                "front_label_selection_id": label_offers[0].id,
                "back_label_selection_id": label_offers[1].id,
                "selling_price_per_unit": round(random.uniform(120, 450), 2),
                "minimum_profit_margin": 30,
            }))
    print(f"✅ Seeded {len(recipes)} recipes, {len(products)} products, {len(variants)} variants")

    print("🔄 Tracking inventory...")
    tracked = 0
    for offers in supplier_materials.values():
        for offer in offers:
            if random.choice([True, False]):
                create_inventory_item(
                    store,
                    InventoryItemType.SUPPLIER_MATERIAL,
                    offer.id,
                    current_stock=random.choice([0, 5, 20, 80, 150]),
                    min_stock_level=25,
                    max_stock_level=120,
                )
                tracked += 1
    print(f"✅ Seeded {tracked} inventory items")

    print("🔄 Creating a production batch...")
    batch = create_batch(store, {
        "batch_name": f"Batch {fake.date_this_month().isoformat()}",
        "status": "scheduled",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": v.id, "total_fill_quantity": random.choice([10, 25, 50]), "fill_unit": "kg"}
                         for v in variants if v.product_id == product.id],
        } for product in products],
    })
    requirements = calculate_batch_requirements(store, batch)
    print(f"✅ Batch {batch.batch_name}: {requirements.overview.total_items} items, "
          f"{requirements.overview.shortage_count} shortages, total {requirements.overview.total_cost:.2f}")
    print("🎉 All data seeded successfully!")

except Exception as e:
    db.rollback()
    print(f"❌ SEEDING FAILED: {e}")
finally:
    db.close()
