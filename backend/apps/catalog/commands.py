from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from apps.common.money import to_money


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


@dataclass
class ProductCreateCommand:
    name: str
    price: Decimal
    description: str = ""
    category: str = ""

    @staticmethod
    def from_raw(payload: Dict[str, Any]):
        data = dict(payload or {})
        # ignore id if present
        data.pop("id", None)
        return ProductCreateCommand(
            name=_clean(data.get("name")) or "",
            price=to_money(data.get("price", "0")),
            description=_clean(data.get("description")) or "",
            category=_clean(data.get("category")) or "",
        )


@dataclass
class ProductUpdateCommand:
    product_id: int
    name: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    category: Optional[str] = None

    @staticmethod
    def from_raw(product_id: int, payload: Dict[str, Any]):
        data = dict(payload or {})
        price = data.get("price")
        return ProductUpdateCommand(
            product_id=product_id,
            name=_clean(data.get("name")),
            price=to_money(price) if price is not None else None,
            description=_clean(data.get("description")),
            category=_clean(data.get("category")),
        )

    def changes(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "category": self.category,
        }
