from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mfgops import __version__
from mfgops.api.v1 import batch, inventory, label, material, packaging, product, purchase_order, recipe, supplier
from mfgops.common.error_handlers import register_error_handlers
from mfgops.core.config import settings

app = FastAPI(title="MfgOps", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(
    supplier.router, prefix="/api/v1/suppliers", tags=["suppliers"])
app.include_router(
    material.router, prefix="/api/v1/materials", tags=["materials"])
app.include_router(
    packaging.router, prefix="/api/v1/packaging", tags=["packaging"])
app.include_router(label.router, prefix="/api/v1/labels", tags=["labels"])
app.include_router(recipe.router, prefix="/api/v1/recipes", tags=["recipes"])
app.include_router(
    product.router, prefix="/api/v1/products", tags=["products"])
app.include_router(batch.router, prefix="/api/v1/batches", tags=["batches"])
app.include_router(
    inventory.router, prefix="/api/v1/inventory", tags=["inventory"])
app.include_router(
    purchase_order.router, prefix="/api/v1/purchase-orders", tags=["purchase-orders"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the MfgOps APIs!", "currency": settings.CURRENCY}
