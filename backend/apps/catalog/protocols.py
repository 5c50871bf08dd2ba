from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Protocol

from .models import Product


class ProductRepositoryProtocol(Protocol):
    def list(self, **filters) -> Iterable[Product]:
        ...

    def list_by_category(self, category: str) -> Iterable[Product]:
        ...

    def get(self, **filters) -> Optional[Product]:
        ...

    def in_bulk(self, ids: Iterable[int]) -> Dict[int, Product]:
        ...

    def create(self, **data) -> Product:
        ...

    def update_scalar(self, product: Product, **fields) -> Product:
        ...

    def delete(self, product: Product) -> None:
        ...


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> Any:
        ...
