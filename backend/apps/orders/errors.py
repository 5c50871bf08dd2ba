from typing import Iterable, Optional

from apps.api.exceptions import BadRequestError, ConflictError, NotFoundError


class EmptyCartError(BadRequestError):
    default_message = "Cart is empty"

    def __init__(self, cart_id: int):
        super().__init__(details={"cartId": str(cart_id)})
        self.cart_id = cart_id


class DanglingReferenceError(NotFoundError):
    """The cart references products that no longer exist in the catalog."""

    default_message = "Cart references products that no longer exist"

    def __init__(self, cart_id: int, product_ids: Iterable[int]):
        self.product_ids = sorted(product_ids)
        super().__init__(
            details={
                "cartId": str(cart_id),
                "productIds": [str(pid) for pid in self.product_ids],
            },
            hint="Remove the missing products from the cart and retry.",
        )
        self.cart_id = cart_id


class AlreadyCheckedOutError(ConflictError):
    default_message = "Cart has already been checked out"

    def __init__(self, cart_id: int, order_id: Optional[int] = None):
        details = {"cartId": str(cart_id)}
        if order_id is not None:
            details["orderId"] = str(order_id)
        super().__init__(details=details)
        self.cart_id = cart_id
        self.order_id = order_id


class OrderNotFoundError(NotFoundError):
    default_message = "Order not found"

    def __init__(self, order_id: int):
        super().__init__(details={"orderId": str(order_id)})
        self.order_id = order_id
