"""
Lectura del catálogo de productos (solo lectura)
"""

from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Dict, Any, Iterable, List, Optional
from uuid import UUID

from pdv_api.core.exceptions import NotFoundError, ValidationError
from pdv_api.modules.catalog.models import Product


class ProductCatalog:
    """Consulta de productos activos para valorizar carritos"""

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: UUID) -> Product:
        product = self.db.query(Product).filter(
            Product.id == product_id,
            Product.is_active == True
        ).first()

        if not product:
            raise NotFoundError(f"Producto {product_id} no encontrado o inactivo")

        return product

    def get_products(self, product_ids: Iterable[UUID]) -> Dict[UUID, Product]:
        """Carga varios productos en una sola consulta; falla si alguno no existe"""
        wanted = set(product_ids)
        if not wanted:
            return {}

        products = self.db.query(Product).filter(
            Product.id.in_(wanted),
            Product.is_active == True
        ).all()
        found = {product.id: product for product in products}

        missing = wanted - set(found)
        if missing:
            raise NotFoundError(
                f"Productos no encontrados o inactivos: {', '.join(sorted(str(m) for m in missing))}"
            )
        return found

    def search(self, query: Optional[str] = None, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        if limit <= 0:
            raise ValidationError("El límite debe ser mayor a cero")

        base = self.db.query(Product).filter(Product.is_active == True)

        if query and query.strip():
            term = f"%{query.strip()}%"
            base = base.filter(or_(
                Product.name.ilike(term),
                Product.code.ilike(term),
                Product.barcode.ilike(term),
                Product.category.ilike(term)
            ))

        total = base.count()
        products: List[Product] = base.order_by(Product.name).offset(offset).limit(limit).all()

        return {
            "products": products,
            "total": total,
            "limit": limit,
            "offset": offset
        }
