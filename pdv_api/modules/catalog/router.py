from fastapi import APIRouter, Path, Query
from typing import Optional
from uuid import UUID

from pdv_api.core.config import settings
from pdv_api.dependencies.dbDependecies import db_dependency
from pdv_api.modules.catalog.schemas import ProductOut, ProductList
from pdv_api.modules.catalog.service import ProductCatalog

catalog_router = APIRouter(prefix="/products", tags=["Catalog"])


@catalog_router.get("/", response_model=ProductList)
async def list_products(
    db: db_dependency,
    search: Optional[str] = Query(None, description="Busca por nombre, código, código de barras o categoría"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    """Listar productos activos del catálogo"""
    result = ProductCatalog(db).search(query=search, limit=limit, offset=offset)
    return ProductList(**result)


@catalog_router.get("/{product_id}", response_model=ProductOut)
async def get_product(
    db: db_dependency,
    product_id: UUID = Path(..., description="ID del producto")
):
    return ProductCatalog(db).get_product(product_id)
