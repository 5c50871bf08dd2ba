from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.common.repository import GenericRepository
from .dtos import PricedLine
from .models import INCOMPLETE_ORDER_STATUSES, Order, OrderItem, OrderStatus


class OrderRepository(GenericRepository[Order]):
    def __init__(self):
        super().__init__(Order)

    def get_for_cart(self, cart_id: int) -> Optional[Order]:
        return self.model.objects.filter(cart_id=cart_id).first()

    def create_pending(
        self,
        *,
        user_id: int,
        cart_id: int,
        total_cost: Decimal,
        lines: List[Dict[str, Any]],
    ) -> Order:
        """Insert the order header. Raises IntegrityError when the cart already has one."""
        # Savepoint around the single INSERT keeps an outer atomic block usable
        # after a unique violation.
        with transaction.atomic():
            return self.model.objects.create(
                user_id=user_id,
                cart_id=cart_id,
                total_cost=total_cost,
                lines=lines,
                status=OrderStatus.PENDING,
            )

    def transition(self, order_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        matched = self.update_where(
            {"id": order_id, "status__in": list(from_statuses)},
            status=to_status,
            updated_at=timezone.now(),
        )
        return matched == 1

    def list_for_user(self, user_id: int) -> List[Order]:
        return list(self.model.objects.filter(user_id=user_id).order_by("-created_at", "-id"))

    def list_incomplete(self, updated_before: datetime) -> List[Order]:
        return list(
            self.model.objects.filter(
                status__in=list(INCOMPLETE_ORDER_STATUSES),
                updated_at__lt=updated_before,
            ).order_by("updated_at", "id")
        )


class OrderItemRepository(GenericRepository[OrderItem]):
    def __init__(self):
        super().__init__(OrderItem)

    def list_for_order(self, order_id: int) -> List[OrderItem]:
        return list(self.model.objects.filter(order_id=order_id).order_by("id"))

    def written_product_ids(self, order_id: int) -> Set[int]:
        return set(
            self.model.objects.filter(order_id=order_id).values_list("product_id", flat=True)
        )

    def create_line(self, order_id: int, line: PricedLine) -> Tuple[OrderItem, bool]:
        """Insert one order item keyed by (order, product); an existing row is kept as is."""
        try:
            with transaction.atomic():
                item = self.model.objects.create(
                    order_id=order_id,
                    product_id=line.product_id,
                    product_name=line.name,
                    product_description=line.description,
                    product_category=line.category,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
            return item, True
        except IntegrityError:
            existing = self.model.objects.get(order_id=order_id, product_id=line.product_id)
            return existing, False
