from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set, Tuple, TYPE_CHECKING

from .models import Order, OrderItem

if TYPE_CHECKING:
    from apps.carts.models import Cart, CartItem
    from apps.catalog.models import Product
    from .dtos import OrderDTO, PricedLine


class OrderRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Order]:
        ...

    def get_for_cart(self, cart_id: int) -> Optional[Order]:
        ...

    def create_pending(
        self,
        *,
        user_id: int,
        cart_id: int,
        total_cost: Decimal,
        lines: List[Dict[str, Any]],
    ) -> Order:
        ...

    def transition(self, order_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        ...

    def list_for_user(self, user_id: int) -> List[Order]:
        ...

    def list_incomplete(self, updated_before: datetime) -> List[Order]:
        ...


class OrderItemRepositoryProtocol(Protocol):
    def list_for_order(self, order_id: int) -> List[OrderItem]:
        ...

    def written_product_ids(self, order_id: int) -> Set[int]:
        ...

    def create_line(self, order_id: int, line: "PricedLine") -> Tuple[OrderItem, bool]:
        ...


class CheckoutCartRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Cart"]:
        ...

    def transition(self, cart_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        ...

    def list_stale_locks(self, updated_before: datetime) -> List["Cart"]:
        ...


class CheckoutCartItemRepositoryProtocol(Protocol):
    def list_for_cart(self, cart_id: int) -> List["CartItem"]:
        ...

    def delete_for_cart(self, cart_id: int) -> int:
        ...


class ProductLookupProtocol(Protocol):
    def in_bulk(self, ids: Iterable[int]) -> Dict[int, "Product"]:
        ...


class OrderMapperProtocol(Protocol):
    def to_dto(
        self, order: Order, items: Iterable[OrderItem], live_products: Dict[int, "Product"]
    ) -> "OrderDTO":
        ...
