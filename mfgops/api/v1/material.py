"""
Material catalogue API: categories, materials, supplier materials and price comparison.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.material import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MaterialCreate,
    MaterialPriceComparison,
    MaterialResponse,
    MaterialUpdate,
    SimilarMaterialResponse,
    SupplierMaterialCreate,
    SupplierMaterialResponse,
    SupplierMaterialUpdate,
)
from mfgops.services.material_service import (
    compare_supplier_prices,
    create_category,
    create_material,
    create_supplier_material,
    delete_category,
    delete_material,
    delete_supplier_material,
    find_similar_materials,
    get_all_materials,
    get_all_supplier_materials,
    get_material_by_id,
    get_supplier_material_by_id,
    list_categories,
    update_category,
    update_material,
    update_supplier_material,
)

router = APIRouter()


# ============================================================================
# Categories
# ============================================================================

@router.get("/categories", response_model=List[CategoryResponse])
def get_categories(store: Store = Depends(get_store)):
    return list_categories(store)


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category_route(data: CategoryCreate, store: Store = Depends(get_store)):
    return create_category(store, data.name, description=data.description, color=data.color)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category_route(category_id: str, data: CategoryUpdate, store: Store = Depends(get_store)):
    return update_category(store, category_id, data.model_dump(exclude_unset=True))


@router.delete("/categories/{category_id}", response_model=DeleteResponse)
def delete_category_route(category_id: str, store: Store = Depends(get_store)):
    delete_category(store, category_id)
    return DeleteResponse(message=f"Category {category_id} deleted")


# ============================================================================
# Supplier materials
# ============================================================================

@router.get("/supplier-materials", response_model=List[SupplierMaterialResponse])
def get_supplier_materials(
    material_id: Optional[str] = Query(None),
    supplier_id: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    return get_all_supplier_materials(store, material_id=material_id, supplier_id=supplier_id)


@router.get("/supplier-materials/{supplier_material_id}", response_model=SupplierMaterialResponse)
def get_supplier_material(supplier_material_id: str, store: Store = Depends(get_store)):
    row = get_supplier_material_by_id(store, supplier_material_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier material not found")
    return row


@router.post("/supplier-materials", response_model=SupplierMaterialResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_material_route(data: SupplierMaterialCreate, store: Store = Depends(get_store)):
    """Creates the material (and its category) on the fly when the name is new."""
    return create_supplier_material(store, **data.model_dump())


@router.put("/supplier-materials/{supplier_material_id}", response_model=SupplierMaterialResponse)
def update_supplier_material_route(
    supplier_material_id: str,
    data: SupplierMaterialUpdate,
    store: Store = Depends(get_store),
):
    return update_supplier_material(store, supplier_material_id, data.model_dump(exclude_unset=True))


@router.delete("/supplier-materials/{supplier_material_id}", response_model=DeleteResponse)
def delete_supplier_material_route(supplier_material_id: str, store: Store = Depends(get_store)):
    delete_supplier_material(store, supplier_material_id)
    return DeleteResponse(message=f"Supplier material {supplier_material_id} deleted")


# ============================================================================
# Materials
# ============================================================================

@router.get("", response_model=List[MaterialResponse])
def get_materials(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    return get_all_materials(store, search=search, category=category)


@router.get("/similar", response_model=SimilarMaterialResponse)
def get_similar_materials(
    name: str = Query(..., min_length=1),
    exclude_id: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    """Near-duplicate material names, for warning before a new material is created."""
    return SimilarMaterialResponse(query=name, matches=find_similar_materials(store, name, exclude_id=exclude_id))


@router.get("/{material_id}", response_model=MaterialResponse)
def get_material(material_id: str, store: Store = Depends(get_store)):
    material = get_material_by_id(store, material_id)
    if not material:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Material not found")
    return material


@router.get("/{material_id}/price-comparison", response_model=MaterialPriceComparison)
def get_price_comparison(material_id: str, store: Store = Depends(get_store)):
    return compare_supplier_prices(store, material_id)


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def create_material_route(data: MaterialCreate, store: Store = Depends(get_store)):
    return create_material(store, data.name, data.category, notes=data.notes)


@router.put("/{material_id}", response_model=MaterialResponse)
def update_material_route(material_id: str, data: MaterialUpdate, store: Store = Depends(get_store)):
    return update_material(store, material_id, data.model_dump(exclude_unset=True))


@router.delete("/{material_id}", response_model=DeleteResponse)
def delete_material_route(material_id: str, store: Store = Depends(get_store)):
    delete_material(store, material_id)
    return DeleteResponse(message=f"Material {material_id} deleted")
