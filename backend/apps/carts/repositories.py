from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.common.repository import GenericRepository
from .models import Cart, CartItem, CartStatus


class CartRepository(GenericRepository[Cart]):
    def __init__(self):
        super().__init__(Cart)

    def transition(self, cart_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        """Compare-and-set the cart status; False when the row was not in ``from_statuses``."""
        matched = self.update_where(
            {"id": cart_id, "status__in": list(from_statuses)},
            status=to_status,
            updated_at=timezone.now(),
        )
        return matched == 1

    def delete_where(self, cart_id: int, statuses: Iterable[str]) -> int:
        """Delete the cart (and, by cascade, its lines) only while in one of ``statuses``."""
        deleted, per_model = self.model.objects.filter(
            id=cart_id, status__in=list(statuses)
        ).delete()
        return per_model.get(self.model._meta.label, 0)

    def list_stale_locks(self, updated_before: datetime) -> List[Cart]:
        """Carts stuck in ``checking_out`` that never reached the order commit point."""
        return list(
            self.model.objects.filter(
                status=CartStatus.CHECKING_OUT,
                order__isnull=True,
                updated_at__lt=updated_before,
            ).order_by("updated_at", "id")
        )


class CartItemRepository(GenericRepository[CartItem]):
    def __init__(self):
        super().__init__(CartItem)

    def list_for_cart(self, cart_id: int) -> List[CartItem]:
        return list(self.model.objects.filter(cart_id=cart_id).order_by("id"))

    def get_for_cart_product(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        return self.model.objects.filter(cart_id=cart_id, product_id=product_id).first()

    def add_quantity(self, cart_id: int, product_id: int, quantity: int) -> Tuple[CartItem, bool]:
        """Upsert a line: increments an existing row or inserts a new one.

        Returns ``(item, created)``.
        """
        filters = {"cart_id": cart_id, "product_id": product_id}
        if self.update_where(filters, quantity=F("quantity") + quantity):
            return self.get_for_cart_product(cart_id, product_id), False
        try:
            # Savepoint so a lost insert race does not poison an outer atomic block.
            with transaction.atomic():
                return self.model.objects.create(quantity=quantity, **filters), True
        except IntegrityError:
            self.update_where(filters, quantity=F("quantity") + quantity)
            return self.get_for_cart_product(cart_id, product_id), False

    def subtract_quantity(self, cart_id: int, product_id: int, quantity: int) -> int:
        """Take back an earlier increment; never drops a line to zero."""
        return self.update_where(
            {"cart_id": cart_id, "product_id": product_id, "quantity__gt": quantity},
            quantity=F("quantity") - quantity,
        )

    def delete_product(self, cart_id: int, product_id: int) -> int:
        deleted, _ = self.model.objects.filter(cart_id=cart_id, product_id=product_id).delete()
        return deleted

    def delete_for_cart(self, cart_id: int) -> int:
        deleted, _ = self.model.objects.filter(cart_id=cart_id).delete()
        return deleted
