from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from apps.api.exceptions import ApplicationError
from apps.common import get_logger
from .commands import ProductCreateCommand, ProductUpdateCommand
from .dtos import ProductDTO
from .errors import ProductNotFoundError
from .mappers import ProductMapper
from .models import Product
from .protocols import CacheBackendProtocol, ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")


class ProductListCache:
    """Versioned namespace for cached product listings.

    Entries are never deleted one by one; a write bumps the version counter and
    every key built afterwards misses. Old entries age out through the backend TTL.
    """

    prefix = "products:list"

    def __init__(self, backend: CacheBackendProtocol):
        self.backend = backend
        self.version_key = f"{self.prefix}:version"

    def version(self) -> int:
        return self.backend.get(self.version_key) or 1

    def key_for(self, category: Optional[str]) -> str:
        scope = (category or "all").strip().lower()
        return f"{self.prefix}:v{self.version()}:{scope}"

    def invalidate(self) -> int:
        new_version = self.version() + 1
        self.backend.set(self.version_key, new_version, timeout=None)
        return new_version


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        cache_backend: CacheBackendProtocol,
        disable_cache: bool = False,
    ):
        self.products = products
        self.listings = ProductListCache(cache_backend)
        self.disable_cache = disable_cache
        self.logger = logger.bind(service="ProductService")

    def _fetch(self, category: Optional[str]) -> List[ProductDTO]:
        rows = self.products.list_by_category(category) if category else self.products.list()
        return ProductMapper.many_to_dto(rows)

    def _catalog_changed(self) -> None:
        if self.disable_cache:
            return
        version = self.listings.invalidate()
        self.logger.debug("Product listings invalidated", version=version)

    def _find(self, product_id: int, action: str) -> Optional[Product]:
        product = self.products.get(id=product_id)
        if not product:
            self.logger.info("Product not found", product_id=product_id, action=action)
        return product

    def list_products(self, category: Optional[str] = None) -> List[ProductDTO]:
        if self.disable_cache:
            return self._fetch(category)
        key = self.listings.key_for(category)
        cached = self.listings.backend.get(key)
        self.logger.debug("Listing products", cache_key=key, hit=cached is not None)
        if cached is not None:
            return cached
        data = self._fetch(category)
        self.listings.backend.set(key, data)
        return data

    def get_product(
        self, product_id: int
    ) -> Tuple[Optional[ProductDTO], Optional[ApplicationError]]:
        product = self._find(product_id, "get")
        if not product:
            return None, ProductNotFoundError(product_id)
        return ProductMapper.to_dto(product), None

    def create_product(
        self, data: Union[Dict[str, Any], ProductCreateCommand]
    ) -> ProductDTO:
        if not isinstance(data, ProductCreateCommand):
            data = ProductCreateCommand.from_raw(data)
        product: Product = self.products.create(
            name=data.name,
            price=data.price,
            description=data.description,
            category=data.category,
        )
        self._catalog_changed()
        self.logger.info("Product created", product_id=product.id, category=data.category)
        return ProductMapper.to_dto(product)

    def update_product(
        self,
        product_id: int,
        data: Union[Dict[str, Any], ProductUpdateCommand],
    ) -> Tuple[Optional[ProductDTO], Optional[ApplicationError]]:
        if not isinstance(data, ProductUpdateCommand):
            data = ProductUpdateCommand.from_raw(product_id, data)
        product = self._find(product_id, "update")
        if not product:
            return None, ProductNotFoundError(product_id)
        self.products.update_scalar(product, **data.changes())
        self._catalog_changed()
        self.logger.info("Product updated", product_id=product_id)
        return ProductMapper.to_dto(product), None

    def delete_product(
        self, product_id: int
    ) -> Tuple[bool, Optional[ApplicationError]]:
        """Delete a product row.

        Cart lines that still reference it are left in place; checkout reports
        them as dangling instead of silently dropping them.
        """
        product = self._find(product_id, "delete")
        if not product:
            return False, ProductNotFoundError(product_id)
        self.products.delete(product)
        self._catalog_changed()
        self.logger.info("Product deleted", product_id=product_id)
        return True, None
