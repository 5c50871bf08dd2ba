from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class CartStatus(models.TextChoices):
    OPEN = "open", "Open"
    # Taken by checkout before the order header is written; blocks item edits.
    CHECKING_OUT = "checking_out", "Checking out"
    CHECKED_OUT = "checked_out", "Checked out"


class Cart(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="carts"
    )
    status = models.CharField(
        max_length=20, choices=CartStatus.choices, default=CartStatus.OPEN
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "carts"
        indexes = [
            models.Index(fields=["user", "status"], name="cart_user_status_idx"),
        ]

    def __str__(self):
        return f"Cart {self.id} for {self.user_id} ({self.status})"


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    # No database constraint: a product deleted from the catalog leaves the line
    # behind so checkout can report it instead of losing it silently.
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        db_table = "cart_items"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"], name="cart_item_unique_product"
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_id} in cart {self.cart_id}"
