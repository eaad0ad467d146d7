"""
Tests para la lectura del catálogo
"""

import pytest
from uuid import uuid4

from pdv_api.core.exceptions import NotFoundError
from pdv_api.modules.catalog.service import ProductCatalog


class TestProductCatalog:
    """Tests para ProductCatalog"""

    def test_get_product(self, db_session, copo_500):
        assert ProductCatalog(db_session).get_product(copo_500.id).code == "COPO-500"

    def test_inactive_product_hidden(self, db_session, inactive_product):
        with pytest.raises(NotFoundError):
            ProductCatalog(db_session).get_product(inactive_product.id)

    def test_get_products_fails_on_missing(self, db_session, copo_500):
        with pytest.raises(NotFoundError):
            ProductCatalog(db_session).get_products([copo_500.id, uuid4()])

    def test_search(self, db_session, acai_kg, copo_500, milkshake, inactive_product):
        catalog = ProductCatalog(db_session)

        assert catalog.search()["total"] == 3
        assert [p.id for p in catalog.search("shake")["products"]] == [milkshake.id]
        assert catalog.search("bebidas")["total"] == 1


class TestCatalogAPI:

    def test_list_products(self, client, acai_kg, copo_500):
        response = client.get("/api/v1/products/", params={"search": "açaí"})

        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_product_not_found(self, client):
        response = client.get(f"/api/v1/products/{uuid4()}")

        assert response.status_code == 404
