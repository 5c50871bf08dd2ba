from typing import Dict, Iterable, List, Optional

from apps.catalog.mappers import ProductMapper
from apps.catalog.models import Product
from apps.common.money import line_total, to_money

from .dtos import CartDTO, CartItemDTO
from .models import Cart, CartItem


class CartItemMapper:
    def __init__(self, product_mapper: Optional[ProductMapper] = None) -> None:
        self.product_mapper = product_mapper or ProductMapper()

    def to_dto(self, item: CartItem, product: Optional[Product] = None) -> CartItemDTO:
        product_dto = self.product_mapper.to_dto(product) if product is not None else None
        total = str(line_total(product.price, item.quantity)) if product is not None else None
        return CartItemDTO(
            id=item.id,
            cart_id=item.cart_id,
            product_id=item.product_id,
            quantity=item.quantity,
            product=product_dto,
            line_total=total,
        )


class CartMapper:
    def __init__(self, item_mapper: Optional[CartItemMapper] = None) -> None:
        self.item_mapper = item_mapper or CartItemMapper()

    def item_to_dto(self, item: CartItem, product: Optional[Product] = None) -> CartItemDTO:
        return self.item_mapper.to_dto(item, product)

    def to_dto(
        self, cart: Cart, items: Iterable[CartItem], products: Dict[int, Product]
    ) -> CartDTO:
        dtos: List[CartItemDTO] = [
            self.item_mapper.to_dto(item, products.get(item.product_id)) for item in items
        ]
        subtotal = sum((to_money(d.line_total) for d in dtos if d.line_total), to_money(0))
        created_at = getattr(cart, "created_at", None)
        return CartDTO(
            id=cart.id,
            user_id=cart.user_id,
            status=str(cart.status),
            created_at=created_at.isoformat() if created_at else "",
            items=dtos,
            subtotal=str(to_money(subtotal)),
        )
