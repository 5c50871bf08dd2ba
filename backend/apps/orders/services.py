from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.db import DatabaseError, IntegrityError
from django.utils import timezone

from apps.api.exceptions import (
    ApplicationError,
    ConflictError,
    DependencyError,
    InternalInvariantError,
)
from apps.carts.errors import CartAccessDeniedError, CartNotFoundError
from apps.carts.models import CartStatus
from apps.common import get_logger
from apps.common.money import sum_lines, to_money
from .dtos import CheckoutResultDTO, IncompleteOrderDTO, OrderDTO, PricedLine
from .errors import (
    AlreadyCheckedOutError,
    DanglingReferenceError,
    EmptyCartError,
    OrderNotFoundError,
)
from .mappers import OrderMapper
from .models import Order, OrderItem, OrderStatus
from .protocols import (
    CheckoutCartItemRepositoryProtocol,
    CheckoutCartRepositoryProtocol,
    OrderItemRepositoryProtocol,
    OrderMapperProtocol,
    OrderRepositoryProtocol,
    ProductLookupProtocol,
)

logger = get_logger(__name__).bind(component="orders", layer="service")


@dataclass
class CheckoutProgress:
    """Last durable step reached by one checkout call."""

    cart_id: Optional[int] = None
    stage: str = "load_cart"
    order_id: Optional[int] = None
    order_status: Optional[str] = None
    # True once the order header is committed.
    persisted: bool = False

    def reached(self, order: Order) -> None:
        self.order_id = order.id
        self.order_status = str(order.status)
        self.persisted = True

    def as_details(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {"stage": self.stage, "persisted": self.persisted}
        if self.cart_id is not None:
            details["cartId"] = str(self.cart_id)
        if self.order_id is not None:
            details["orderId"] = str(self.order_id)
            details["orderStatus"] = self.order_status
        return details


class CheckoutService:
    """Turns an open cart into one order without a cross-table transaction.

    Every store call commits on its own. Progress is carried by two status
    columns: the cart moves ``open -> checking_out -> checked_out`` and the order
    moves ``pending -> items_written -> finalized``. The unique ``orders.cart``
    column decides the winner when two callers check out the same cart. Any
    caller that finds a non-finalized order for its cart drives it forward from
    the persisted status.
    """

    def __init__(
        self,
        carts: CheckoutCartRepositoryProtocol,
        cart_items: CheckoutCartItemRepositoryProtocol,
        products: ProductLookupProtocol,
        orders: OrderRepositoryProtocol,
        order_items: OrderItemRepositoryProtocol,
    ):
        self.carts = carts
        self.cart_items = cart_items
        self.products = products
        self.orders = orders
        self.order_items = order_items
        self.logger = logger.bind(service="CheckoutService")

    def place_order(
        self, cart_id: int, user_id: int
    ) -> Tuple[Optional[CheckoutResultDTO], Optional[ApplicationError]]:
        progress = CheckoutProgress(cart_id=cart_id)
        return self._run(progress, lambda: self._place_order(cart_id, user_id, progress))

    def resume_order(
        self, order_id: int
    ) -> Tuple[Optional[CheckoutResultDTO], Optional[ApplicationError]]:
        """Drive a non-finalized order to ``finalized`` from its persisted status."""
        progress = CheckoutProgress(stage="load_order")
        return self._run(progress, lambda: self._resume_order(order_id, progress))

    def list_incomplete(self, older_than: timedelta) -> List[IncompleteOrderDTO]:
        cutoff = timezone.now() - older_than
        return [
            IncompleteOrderDTO(
                order_id=order.id,
                cart_id=order.cart_id,
                status=str(order.status),
                updated_at=order.updated_at.isoformat() if order.updated_at else "",
            )
            for order in self.orders.list_incomplete(cutoff)
        ]

    def release_stale_locks(self, older_than: timedelta, dry_run: bool = False) -> List[int]:
        """Reopen carts left in ``checking_out`` by a call that never committed an order."""
        cutoff = timezone.now() - older_than
        released: List[int] = []
        for cart in self.carts.list_stale_locks(cutoff):
            if dry_run or self.carts.transition(
                cart.id, (CartStatus.CHECKING_OUT,), CartStatus.OPEN
            ):
                released.append(cart.id)
        if released and not dry_run:
            self.logger.warning("Released stale checkout locks", cart_ids=released)
        return released

    def _run(
        self, progress: CheckoutProgress, step: Callable[[], CheckoutResultDTO]
    ) -> Tuple[Optional[CheckoutResultDTO], Optional[ApplicationError]]:
        try:
            return step(), None
        except ApplicationError as exc:
            return None, exc
        except DatabaseError as exc:
            return None, self._dependency_error(exc, progress)

    def _dependency_error(
        self, exc: DatabaseError, progress: CheckoutProgress
    ) -> DependencyError:
        self.logger.exception(
            "Checkout store failure",
            error_type=exc.__class__.__name__,
            **progress.as_details(),
        )
        if progress.persisted:
            return DependencyError(
                "Order was placed but checkout did not complete",
                details=progress.as_details(),
                hint="Retry the same request to resume the order.",
            )
        return DependencyError(
            "Checkout failed before the order was placed",
            details=progress.as_details(),
            hint="Nothing was persisted; the request is safe to retry.",
        )

    def _place_order(
        self, cart_id: int, user_id: int, progress: CheckoutProgress
    ) -> CheckoutResultDTO:
        self.logger.info("Checkout requested", cart_id=cart_id, user_id=user_id)
        cart = self.carts.get(id=cart_id)
        if cart is None:
            raise CartNotFoundError(cart_id)
        if cart.user_id != user_id:
            self.logger.warning(
                "Checkout forbidden", cart_id=cart_id, user_id=user_id, owner_id=cart.user_id
            )
            raise CartAccessDeniedError(cart_id)

        existing = self.orders.get_for_cart(cart_id)
        if existing is not None:
            return self._replay(existing, progress)
        if cart.status == CartStatus.CHECKED_OUT:
            raise AlreadyCheckedOutError(cart_id)

        progress.stage = "cart_lock"
        self._acquire_lock(cart_id)

        progress.stage = "price_snapshot"
        lines = self._snapshot(cart_id)
        total = sum_lines((line.unit_price, line.quantity) for line in lines)

        progress.stage = "order_header"
        try:
            order = self.orders.create_pending(
                user_id=cart.user_id,
                cart_id=cart_id,
                total_cost=total,
                lines=[line.to_snapshot() for line in lines],
            )
        except IntegrityError:
            winner = self.orders.get_for_cart(cart_id)
            self.logger.info(
                "Checkout lost the race for this cart",
                cart_id=cart_id,
                winner_order_id=winner.id if winner else None,
            )
            raise AlreadyCheckedOutError(cart_id, winner.id if winner else None)
        progress.reached(order)
        self.logger.info(
            "Order header committed", cart_id=cart_id, order_id=order.id, total_cost=total
        )

        order = self._complete(order, progress)
        return OrderMapper.to_checkout_result(order, created=True)

    def _resume_order(self, order_id: int, progress: CheckoutProgress) -> CheckoutResultDTO:
        order = self.orders.get(id=order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        progress.cart_id = order.cart_id
        return self._replay(order, progress)

    def _replay(self, order: Order, progress: CheckoutProgress) -> CheckoutResultDTO:
        progress.reached(order)
        if order.status != OrderStatus.FINALIZED:
            self.logger.info(
                "Resuming incomplete order", order_id=order.id, status=order.status
            )
            order = self._complete(order, progress)
        else:
            self.logger.info("Checkout replay for finalized order", order_id=order.id)
        return OrderMapper.to_checkout_result(order, created=False)

    def _acquire_lock(self, cart_id: int) -> None:
        # A second pass covers a lock released by a failed concurrent attempt.
        for _attempt in range(2):
            if self.carts.transition(cart_id, (CartStatus.OPEN,), CartStatus.CHECKING_OUT):
                self.logger.debug("Cart locked for checkout", cart_id=cart_id)
                return
            current = self.carts.get(id=cart_id)
            if current is None:
                raise CartNotFoundError(cart_id)
            if current.status == CartStatus.CHECKING_OUT:
                self.logger.info("Joining in-flight checkout lock", cart_id=cart_id)
                return
            if current.status == CartStatus.CHECKED_OUT:
                winner = self.orders.get_for_cart(cart_id)
                raise AlreadyCheckedOutError(cart_id, winner.id if winner else None)
        raise ConflictError(
            "Cart changed while checkout was starting",
            details={"cartId": str(cart_id)},
            hint="Retry the request.",
        )

    def _snapshot(self, cart_id: int) -> List[PricedLine]:
        items = self.cart_items.list_for_cart(cart_id)
        if not items:
            self._abort_before_commit(cart_id, EmptyCartError(cart_id))
        products = self.products.in_bulk({item.product_id for item in items})
        missing = [item.product_id for item in items if item.product_id not in products]
        if missing:
            self._abort_before_commit(cart_id, DanglingReferenceError(cart_id, missing))
        lines = []
        for item in items:
            product = products[item.product_id]
            lines.append(
                PricedLine(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=to_money(product.price),
                    name=product.name,
                    description=product.description or "",
                    category=product.category or "",
                )
            )
        return lines

    def _abort_before_commit(self, cart_id: int, error: ApplicationError) -> None:
        # A concurrent winner may have cleared the cart under us.
        winner = self.orders.get_for_cart(cart_id)
        if winner is not None:
            raise AlreadyCheckedOutError(cart_id, winner.id)
        self.carts.transition(cart_id, (CartStatus.CHECKING_OUT,), CartStatus.OPEN)
        self.logger.info(
            "Checkout rejected before commit; lock released",
            cart_id=cart_id,
            code=error.code,
        )
        raise error

    def _complete(self, order: Order, progress: CheckoutProgress) -> Order:
        lines = [PricedLine.from_snapshot(raw) for raw in order.lines or []]

        if order.status == OrderStatus.PENDING:
            progress.stage = "order_items"
            written = self.order_items.written_product_ids(order.id)
            for line in lines:
                if line.product_id not in written:
                    self.order_items.create_line(order.id, line)
            order = self._advance(order, OrderStatus.PENDING, OrderStatus.ITEMS_WRITTEN)
            progress.reached(order)

        if order.status == OrderStatus.ITEMS_WRITTEN:
            progress.stage = "verify"
            self._verify(order, lines, self.order_items.list_for_order(order.id))

            progress.stage = "cart_clear"
            if order.cart_id is not None:
                self.cart_items.delete_for_cart(order.cart_id)
                self.carts.transition(
                    order.cart_id,
                    (CartStatus.OPEN, CartStatus.CHECKING_OUT),
                    CartStatus.CHECKED_OUT,
                )

            progress.stage = "finalize"
            order = self._advance(order, OrderStatus.ITEMS_WRITTEN, OrderStatus.FINALIZED)
            progress.reached(order)
            self.logger.info("Order finalized", order_id=order.id, cart_id=order.cart_id)
        return order

    def _advance(self, order: Order, from_status: str, to_status: str) -> Order:
        if self.orders.transition(order.id, (from_status,), to_status):
            order.status = to_status
            return order
        # Another caller moved the order first; continue from what it persisted.
        current = self.orders.get(id=order.id)
        if current is None:
            raise OrderNotFoundError(order.id)
        return current

    def _verify(self, order: Order, lines: List[PricedLine], items: List[OrderItem]) -> None:
        expected_total = to_money(order.total_cost)
        written_total = sum_lines((item.unit_price, item.quantity) for item in items)
        snapshot_total = sum_lines((line.unit_price, line.quantity) for line in lines)
        if (
            len(items) == len(lines)
            and written_total == expected_total
            and snapshot_total == expected_total
        ):
            return
        details = {
            "orderId": str(order.id),
            "expectedItems": len(lines),
            "writtenItems": len(items),
            "expectedTotal": str(expected_total),
            "writtenTotal": str(written_total),
        }
        self.logger.error("Order failed reconciliation", **details)
        raise InternalInvariantError(
            "Order items do not match the order total", details=details
        )


class OrderService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        order_items: OrderItemRepositoryProtocol,
        products: ProductLookupProtocol,
        order_mapper: OrderMapperProtocol,
    ):
        self.orders = orders
        self.order_items = order_items
        self.products = products
        self.order_mapper = order_mapper
        self.logger = logger.bind(service="OrderService")

    def _to_dto(self, order: Order) -> OrderDTO:
        items = self.order_items.list_for_order(order.id)
        unsnapshotted = {item.product_id for item in items if not item.product_name}
        live = self.products.in_bulk(unsnapshotted) if unsnapshotted else {}
        return self.order_mapper.to_dto(order, items, live)

    def get_order(
        self, order_id: int, actor_id: int, is_privileged: bool = False
    ) -> Tuple[Optional[OrderDTO], Optional[ApplicationError]]:
        """Order with its line items and the product data recorded at order time."""
        self.logger.debug("Fetching order", order_id=order_id, actor_id=actor_id)
        order = self.orders.get(id=order_id)
        if order is None:
            self.logger.info("Order not found", order_id=order_id)
            return None, OrderNotFoundError(order_id)
        if not is_privileged and order.user_id != actor_id:
            # Reported as absent so order ids of other users are not disclosed.
            self.logger.warning(
                "Order access denied", order_id=order_id, actor_id=actor_id
            )
            return None, OrderNotFoundError(order_id)
        return self._to_dto(order), None

    def list_orders(self, user_id: int) -> List[OrderDTO]:
        orders = self.orders.list_for_user(user_id)
        self.logger.debug("Listing orders", user_id=user_id, count=len(orders))
        return [self._to_dto(order) for order in orders]
