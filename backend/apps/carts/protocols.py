from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Tuple, TYPE_CHECKING

from .models import Cart, CartItem

if TYPE_CHECKING:
    from apps.carts.dtos import CartDTO, CartItemDTO
    from apps.catalog.models import Product


class CartRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Cart]:
        ...

    def create(self, **data) -> Cart:
        ...

    def transition(self, cart_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        ...

    def delete_where(self, cart_id: int, statuses: Iterable[str]) -> int:
        ...


class CartItemRepositoryProtocol(Protocol):
    def list_for_cart(self, cart_id: int) -> List[CartItem]:
        ...

    def get_for_cart_product(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        ...

    def add_quantity(self, cart_id: int, product_id: int, quantity: int) -> Tuple[CartItem, bool]:
        ...

    def subtract_quantity(self, cart_id: int, product_id: int, quantity: int) -> int:
        ...

    def delete_product(self, cart_id: int, product_id: int) -> int:
        ...

    def delete_for_cart(self, cart_id: int) -> int:
        ...


class ProductLookupProtocol(Protocol):
    def get(self, **filters) -> Optional["Product"]:
        ...

    def in_bulk(self, ids: Iterable[int]) -> Dict[int, "Product"]:
        ...


class CartMapperProtocol(Protocol):
    def item_to_dto(self, item: CartItem, product: Optional["Product"] = None) -> "CartItemDTO":
        ...

    def to_dto(
        self, cart: Cart, items: Iterable[CartItem], products: Dict[int, "Product"]
    ) -> "CartDTO":
        ...
