from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from apps.carts.container import build_cart_service
from apps.carts.errors import CartNotOpenError
from apps.carts.models import Cart, CartItem, CartStatus
from apps.carts.repositories import CartItemRepository, CartRepository
from apps.catalog.models import Product
from apps.orders.container import build_checkout_service
from apps.orders.models import Order, OrderItem


class CartStoreTestBase(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(
            username="shopper", email="shopper@example.com", password="pass12345"
        )
        self.cart = Cart.objects.create(user=self.user)
        self.mug = Product.objects.create(name="Mug", price=Decimal("4.50"))
        self.spoon = Product.objects.create(name="Spoon", price=Decimal("1.25"))
        self.carts = CartRepository()
        self.items = CartItemRepository()


class CartRepositoryTests(CartStoreTestBase):
    def test_transition_fails_once_status_moved(self):
        locked = self.carts.transition(self.cart.id, (CartStatus.OPEN,), CartStatus.CHECKING_OUT)
        relocked = self.carts.transition(self.cart.id, (CartStatus.OPEN,), CartStatus.CHECKING_OUT)

        self.assertTrue(locked)
        self.assertFalse(relocked)
        self.assertEqual(Cart.objects.get(id=self.cart.id).status, CartStatus.CHECKING_OUT)

    def test_delete_where_spares_locked_cart(self):
        CartItem.objects.create(cart=self.cart, product=self.mug, quantity=1)
        self.carts.transition(self.cart.id, (CartStatus.OPEN,), CartStatus.CHECKING_OUT)

        self.assertEqual(self.carts.delete_where(self.cart.id, (CartStatus.OPEN,)), 0)
        self.assertTrue(Cart.objects.filter(id=self.cart.id).exists())

        self.assertEqual(self.carts.delete_where(self.cart.id, (CartStatus.CHECKING_OUT,)), 1)
        self.assertFalse(CartItem.objects.filter(cart_id=self.cart.id).exists())

    def test_stale_locks_exclude_carts_with_an_order(self):
        ordered = Cart.objects.create(user=self.user)
        for cart in (self.cart, ordered):
            self.carts.transition(cart.id, (CartStatus.OPEN,), CartStatus.CHECKING_OUT)
        Order.objects.create(user=self.user, cart=ordered, total_cost=Decimal("0.00"))

        stale = self.carts.list_stale_locks(timezone.now() + timedelta(seconds=1))
        fresh = self.carts.list_stale_locks(timezone.now() - timedelta(hours=1))

        self.assertEqual([c.id for c in stale], [self.cart.id])
        self.assertEqual(fresh, [])


class CartItemRepositoryTests(CartStoreTestBase):
    def test_add_quantity_inserts_then_increments(self):
        item, created = self.items.add_quantity(self.cart.id, self.mug.id, 2)
        again, created_again = self.items.add_quantity(self.cart.id, self.mug.id, 3)

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(again.id, item.id)
        self.assertEqual(again.quantity, 5)
        self.assertEqual(CartItem.objects.filter(cart=self.cart).count(), 1)

    def test_subtract_quantity_never_empties_a_line(self):
        self.items.add_quantity(self.cart.id, self.mug.id, 5)

        self.assertEqual(self.items.subtract_quantity(self.cart.id, self.mug.id, 3), 1)
        self.assertEqual(self.items.subtract_quantity(self.cart.id, self.mug.id, 2), 0)
        self.assertEqual(self.items.get_for_cart_product(self.cart.id, self.mug.id).quantity, 2)


class AddItemDuringCheckoutTests(CartStoreTestBase):
    def test_line_added_while_checkout_completes_is_rejected(self):
        CartItem.objects.create(cart=self.cart, product=self.mug, quantity=2)
        cart_service = build_cart_service()
        checkout = build_checkout_service()
        lookup = cart_service.products.get
        outcome = {}

        def lookup_while_checking_out(**filters):
            product = lookup(**filters)
            outcome["checkout"] = checkout.place_order(self.cart.id, self.user.id)
            return product

        cart_service.products.get = lookup_while_checking_out

        dto, error = cart_service.add_item(self.cart.id, self.user.id, self.spoon.id, 3)

        result, checkout_error = outcome["checkout"]
        self.assertIsNone(checkout_error)
        self.assertIsNone(dto)
        self.assertIsInstance(error, CartNotOpenError)
        self.assertEqual(Cart.objects.get(id=self.cart.id).status, CartStatus.CHECKED_OUT)
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())
        self.assertEqual(
            list(OrderItem.objects.filter(order_id=result.order_id).values_list("product_id", flat=True)),
            [self.mug.id],
        )
