from __future__ import annotations

from apps.carts.repositories import CartItemRepository, CartRepository
from apps.catalog.repositories import ProductRepository

from .mappers import OrderItemMapper, OrderMapper
from .repositories import OrderItemRepository, OrderRepository
from .services import CheckoutService, OrderService


def build_checkout_service() -> CheckoutService:
    return CheckoutService(
        carts=CartRepository(),
        cart_items=CartItemRepository(),
        products=ProductRepository(),
        orders=OrderRepository(),
        order_items=OrderItemRepository(),
    )


def build_order_service() -> OrderService:
    return OrderService(
        orders=OrderRepository(),
        order_items=OrderItemRepository(),
        products=ProductRepository(),
        order_mapper=OrderMapper(OrderItemMapper()),
    )
