from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.common.money import line_total, to_money


@dataclass(frozen=True)
class PricedLine:
    """One cart line priced at checkout time."""

    product_id: int
    quantity: int
    unit_price: Decimal
    name: str = ""
    description: str = ""
    category: str = ""

    @property
    def line_total(self) -> Decimal:
        return line_total(self.unit_price, self.quantity)

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "name": self.name,
            "description": self.description,
            "category": self.category,
        }

    @staticmethod
    def from_snapshot(raw: Dict[str, Any]) -> "PricedLine":
        return PricedLine(
            product_id=int(raw["product_id"]),
            quantity=int(raw["quantity"]),
            unit_price=to_money(raw["unit_price"]),
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            category=raw.get("category") or "",
        )


@dataclass
class CheckoutResultDTO:
    order_id: int
    # True only for the call that committed the order header.
    created: bool
    status: str
    total_cost: str


@dataclass
class OrderProductDTO:
    id: int
    name: str
    description: str
    category: str
    price: str


@dataclass
class OrderItemDTO:
    id: int
    product_id: int
    quantity: int
    unit_price: str
    line_total: str
    product: OrderProductDTO


@dataclass
class OrderDTO:
    id: int
    user_id: int
    cart_id: Optional[int]
    status: str
    total_cost: str
    created_at: str
    items: List[OrderItemDTO] = field(default_factory=list)


@dataclass
class IncompleteOrderDTO:
    order_id: int
    cart_id: Optional[int]
    status: str
    updated_at: str
