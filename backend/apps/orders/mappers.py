from typing import Dict, Iterable, Optional

from apps.catalog.models import Product
from apps.common.money import line_total, to_money

from .dtos import CheckoutResultDTO, OrderDTO, OrderItemDTO, OrderProductDTO
from .models import Order, OrderItem


class OrderItemMapper:
    @staticmethod
    def to_dto(item: OrderItem, live_product: Optional[Product] = None) -> OrderItemDTO:
        # Rows written without a snapshot fall back to the live catalog row.
        use_live = not item.product_name and live_product is not None
        source_name = live_product.name if use_live else item.product_name
        source_description = live_product.description if use_live else item.product_description
        source_category = live_product.category if use_live else item.product_category
        unit_price = to_money(item.unit_price)
        return OrderItemDTO(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=str(unit_price),
            line_total=str(line_total(unit_price, item.quantity)),
            product=OrderProductDTO(
                id=item.product_id,
                name=source_name or "",
                description=source_description or "",
                category=source_category or "",
                price=str(unit_price),
            ),
        )


class OrderMapper:
    def __init__(self, item_mapper: Optional[OrderItemMapper] = None) -> None:
        self.item_mapper = item_mapper or OrderItemMapper()

    def to_dto(
        self,
        order: Order,
        items: Iterable[OrderItem],
        live_products: Optional[Dict[int, Product]] = None,
    ) -> OrderDTO:
        live_products = live_products or {}
        created_at = getattr(order, "created_at", None)
        return OrderDTO(
            id=order.id,
            user_id=order.user_id,
            cart_id=order.cart_id,
            status=str(order.status),
            total_cost=str(to_money(order.total_cost)),
            created_at=created_at.isoformat() if created_at else "",
            items=[
                self.item_mapper.to_dto(item, live_products.get(item.product_id))
                for item in items
            ],
        )

    @staticmethod
    def to_checkout_result(order: Order, created: bool) -> CheckoutResultDTO:
        return CheckoutResultDTO(
            order_id=order.id,
            created=created,
            status=str(order.status),
            total_cost=str(to_money(order.total_cost)),
        )
