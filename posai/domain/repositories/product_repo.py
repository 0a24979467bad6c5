# posai/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Optional, List, Iterable, Protocol
from motor.motor_asyncio import AsyncIOMotorDatabase
from posai.domain.models.product import Product

class ProductCatalog(Protocol):
    """Read-only product source consumed by the domain services."""

    async def get(self, product_id: str) -> Optional[Product]: ...

    async def list_products(self, limit: Optional[int] = None) -> List[Product]: ...

    async def first_in_category(self, category: str) -> Optional[Product]: ...


class ProductRepo:
    """
    Product repository backed by the 'products' collection.
    Documents may use snake_case or camelCase field names.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get(self, product_id: str) -> Optional[Product]:
        doc = await self.col.find_one(
            {"$or": [{"product_id": product_id}, {"productId": product_id}]},
            {"_id": 0},
        )
        return Product.model_validate(doc) if doc else None

    async def list_products(self, limit: Optional[int] = None) -> List[Product]:
        cursor = self.col.find({}, {"_id": 0})
        if limit:
            cursor = cursor.limit(limit)
        return [Product.model_validate(doc) async for doc in cursor]

    async def first_in_category(self, category: str) -> Optional[Product]:
        doc = await self.col.find_one({"category": category}, {"_id": 0})
        return Product.model_validate(doc) if doc else None


class InMemoryProductRepo:
    """
    Catalog held in process memory, preserving insertion order.
    Used in local-computation mode and by tests.
    """

    def __init__(self, products: Iterable[Product | dict] = ()):
        self._products: dict[str, Product] = {}
        for p in products:
            product = p if isinstance(p, Product) else Product.model_validate(p)
            self._products[product.product_id] = product

    async def get(self, product_id: str) -> Optional[Product]:
        return self._products.get(str(product_id))

    async def list_products(self, limit: Optional[int] = None) -> List[Product]:
        items = list(self._products.values())
        return items[:limit] if limit else items

    async def first_in_category(self, category: str) -> Optional[Product]:
        return next((p for p in self._products.values() if p.category == category), None)
