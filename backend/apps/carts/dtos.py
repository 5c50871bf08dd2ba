from dataclasses import dataclass
from typing import List, Optional

from apps.catalog.dtos import ProductDTO


@dataclass
class CartItemDTO:
    id: int
    cart_id: int
    product_id: int
    quantity: int
    # None when the referenced product no longer exists in the catalog.
    product: Optional[ProductDTO] = None
    line_total: Optional[str] = None


@dataclass
class CartDTO:
    id: int
    user_id: int
    status: str
    created_at: str
    items: List[CartItemDTO]
    subtotal: str
