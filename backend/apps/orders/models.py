from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class OrderStatus(models.TextChoices):
    # Header committed with its priced line snapshot; items may be missing.
    PENDING = "pending", "Pending"
    ITEMS_WRITTEN = "items_written", "Items written"
    FINALIZED = "finalized", "Finalized"


INCOMPLETE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.ITEMS_WRITTEN)


class Order(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders"
    )
    # Unique: at most one order per cart. This is the checkout idempotency marker.
    cart = models.OneToOneField(
        "carts.Cart",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="order",
    )
    total_cost = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(0)]
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    # Priced lines frozen at the commit point; order items are materialised from it.
    lines = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="order_user_created_idx"),
            models.Index(fields=["status", "updated_at"], name="order_status_updated_idx"),
        ]

    def __str__(self):
        return f"Order {self.id} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    # Plain reference: the row keeps its product id after the product is deleted.
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    product_name = models.CharField(max_length=255, blank=True, default="")
    product_description = models.TextField(blank=True, default="")
    product_category = models.CharField(max_length=100, blank=True, default="")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "product"], name="order_item_unique_product"
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_id} @ {self.unit_price}"
