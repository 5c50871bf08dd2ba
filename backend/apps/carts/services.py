from __future__ import annotations

from typing import Optional, Tuple

from apps.api.exceptions import ApplicationError, BadRequestError
from apps.common import get_logger
from .dtos import CartDTO, CartItemDTO
from .errors import (
    CartAccessDeniedError,
    CartItemNotFoundError,
    CartNotFoundError,
    CartNotOpenError,
    UnknownProductError,
)
from .models import Cart, CartStatus
from .protocols import (
    CartItemRepositoryProtocol,
    CartMapperProtocol,
    CartRepositoryProtocol,
    ProductLookupProtocol,
)

logger = get_logger(__name__).bind(component="carts", layer="service")


class CartService:
    def __init__(
        self,
        carts: CartRepositoryProtocol,
        cart_items: CartItemRepositoryProtocol,
        products: ProductLookupProtocol,
        cart_mapper: CartMapperProtocol,
    ):
        self.carts = carts
        self.cart_items = cart_items
        self.products = products
        self.cart_mapper = cart_mapper
        self.logger = logger.bind(service="CartService")

    def _resolve_cart(
        self, cart_id: int, actor_id: int, is_privileged: bool = False
    ) -> Tuple[Optional[Cart], Optional[ApplicationError]]:
        cart = self.carts.get(id=cart_id)
        if not cart:
            self.logger.info("Cart not found", cart_id=cart_id)
            return None, CartNotFoundError(cart_id)
        if not is_privileged and cart.user_id != actor_id:
            self.logger.warning(
                "Cart access forbidden",
                cart_id=cart_id,
                actor_id=actor_id,
                owner_id=cart.user_id,
            )
            return None, CartAccessDeniedError(cart_id)
        return cart, None

    def _require_open(self, cart: Cart) -> Optional[ApplicationError]:
        if cart.status != CartStatus.OPEN:
            self.logger.info(
                "Cart mutation rejected: cart not open",
                cart_id=cart.id,
                status=cart.status,
            )
            return CartNotOpenError(cart.id, cart.status)
        return None

    def _to_dto(self, cart: Cart) -> CartDTO:
        items = self.cart_items.list_for_cart(cart.id)
        products = self.products.in_bulk({item.product_id for item in items})
        return self.cart_mapper.to_dto(cart, items, products)

    def create_cart(self, user_id: int) -> Tuple[CartDTO, None]:
        cart = self.carts.create(user_id=user_id, status=CartStatus.OPEN)
        self.logger.info("Cart created", cart_id=cart.id, user_id=user_id)
        return self._to_dto(cart), None

    def get_cart(
        self, cart_id: int, actor_id: int, is_privileged: bool = False
    ) -> Tuple[Optional[CartDTO], Optional[ApplicationError]]:
        """Cart with each line joined to the live catalog row and a live subtotal."""
        self.logger.debug("Fetching cart", cart_id=cart_id, actor_id=actor_id)
        cart, error = self._resolve_cart(cart_id, actor_id, is_privileged)
        if error:
            return None, error
        return self._to_dto(cart), None

    def add_item(
        self,
        cart_id: int,
        actor_id: int,
        product_id: int,
        quantity: int,
        is_privileged: bool = False,
    ) -> Tuple[Optional[CartItemDTO], Optional[ApplicationError]]:
        """Add ``quantity`` of a product, merging into an existing line."""
        if quantity is None or int(quantity) < 1:
            return None, BadRequestError(
                "Quantity must be a positive integer", details={"quantity": quantity}
            )
        cart, error = self._resolve_cart(cart_id, actor_id, is_privileged)
        if error:
            return None, error
        error = self._require_open(cart)
        if error:
            return None, error
        product = self.products.get(id=product_id)
        if not product:
            self.logger.info(
                "Cart add rejected: unknown product",
                cart_id=cart_id,
                product_id=product_id,
            )
            return None, UnknownProductError(product_id)
        item, created = self.cart_items.add_quantity(cart.id, product.id, int(quantity))
        # Re-read after the write; a cart locked meanwhile must not keep the line.
        current = self.carts.get(id=cart.id)
        if current is None or current.status != CartStatus.OPEN:
            self._undo_add(cart.id, product.id, int(quantity), created)
            if current is None:
                return None, CartNotFoundError(cart_id)
            self.logger.warning(
                "Cart add reverted: checkout started meanwhile",
                cart_id=cart_id,
                product_id=product_id,
                status=current.status,
            )
            return None, CartNotOpenError(cart.id, current.status)
        self.logger.info(
            "Cart line upserted",
            cart_id=cart_id,
            product_id=product_id,
            quantity=item.quantity,
            created=created,
        )
        return self.cart_mapper.item_to_dto(item, product), None

    def remove_item(
        self,
        cart_id: int,
        actor_id: int,
        product_id: int,
        is_privileged: bool = False,
    ) -> Tuple[bool, Optional[ApplicationError]]:
        cart, error = self._resolve_cart(cart_id, actor_id, is_privileged)
        if error:
            return False, error
        error = self._require_open(cart)
        if error:
            return False, error
        if not self.cart_items.delete_product(cart.id, product_id):
            return False, CartItemNotFoundError(cart_id, product_id)
        self.logger.info("Cart line removed", cart_id=cart_id, product_id=product_id)
        return True, None

    def delete_cart(
        self, cart_id: int, actor_id: int, is_privileged: bool = False
    ) -> Tuple[bool, Optional[ApplicationError]]:
        """Remove a cart and its lines.

        A cart whose checkout is in flight cannot be deleted. An order placed from a
        checked-out cart survives the deletion with its cart reference cleared.
        """
        cart, error = self._resolve_cart(cart_id, actor_id, is_privileged)
        if error:
            return False, error
        if cart.status == CartStatus.CHECKING_OUT:
            self.logger.warning("Cart delete rejected: checkout in flight", cart_id=cart_id)
            return False, CartNotOpenError(cart.id, cart.status)
        # Conditional delete so a checkout that locked the cart meanwhile wins.
        if not self.carts.delete_where(
            cart.id, (CartStatus.OPEN, CartStatus.CHECKED_OUT)
        ):
            self.logger.warning("Cart delete lost race with checkout", cart_id=cart_id)
            return False, CartNotOpenError(cart.id, CartStatus.CHECKING_OUT)
        self.logger.info("Cart deleted", cart_id=cart_id)
        return True, None

    def _undo_add(self, cart_id: int, product_id: int, quantity: int, created: bool) -> None:
        if created:
            self.cart_items.delete_product(cart_id, product_id)
        else:
            self.cart_items.subtract_quantity(cart_id, product_id, quantity)
