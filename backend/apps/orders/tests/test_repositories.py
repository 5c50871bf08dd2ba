from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, OperationalError
from django.test import TestCase
from django.utils import timezone

from apps.carts.models import Cart, CartItem, CartStatus
from apps.carts.repositories import CartItemRepository, CartRepository
from apps.catalog.models import Product
from apps.catalog.repositories import ProductRepository
from apps.orders.dtos import PricedLine
from apps.orders.models import Order, OrderItem, OrderStatus
from apps.orders.repositories import OrderItemRepository, OrderRepository
from apps.orders.services import CheckoutService


class FlakyOrderItemRepository(OrderItemRepository):
    """Lets ``fail_after`` inserts through, then loses the connection."""

    def __init__(self, fail_after=None):
        super().__init__()
        self.fail_after = fail_after
        self.inserts = 0

    def create_line(self, order_id, line):
        if self.fail_after is not None and self.inserts >= self.fail_after:
            raise OperationalError("connection lost during order item insert")
        item, created = super().create_line(order_id, line)
        self.inserts += int(created)
        return item, created


class OrderStoreTestBase(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(
            username="buyer", email="buyer@example.com", password="pass12345"
        )
        self.cart = Cart.objects.create(user=self.user)
        self.mug = Product.objects.create(name="Mug", price=Decimal("4.50"), category="kitchen")
        self.orders = OrderRepository()
        self.order_items = OrderItemRepository()

    def header(self, cart=None):
        return self.orders.create_pending(
            user_id=self.user.id,
            cart_id=(cart or self.cart).id,
            total_cost=Decimal("9.00"),
            lines=[],
        )

    def mug_line(self, quantity=2):
        return PricedLine(
            product_id=self.mug.id, quantity=quantity, unit_price=Decimal("4.50"), name="Mug"
        )


class OrderRepositoryTests(OrderStoreTestBase):
    def test_second_header_for_same_cart_violates_unique_cart(self):
        first = self.header()

        with self.assertRaises(IntegrityError):
            self.header()

        self.assertEqual(Order.objects.filter(cart=self.cart).count(), 1)
        self.assertEqual(self.orders.get_for_cart(self.cart.id).id, first.id)

    def test_transition_is_compare_and_set(self):
        order = self.header()

        moved = self.orders.transition(order.id, (OrderStatus.PENDING,), OrderStatus.ITEMS_WRITTEN)
        stale = self.orders.transition(order.id, (OrderStatus.PENDING,), OrderStatus.FINALIZED)

        self.assertTrue(moved)
        self.assertFalse(stale)
        self.assertEqual(Order.objects.get(id=order.id).status, OrderStatus.ITEMS_WRITTEN)

    def test_list_incomplete_skips_finalized(self):
        pending = self.header()
        other_cart = Cart.objects.create(user=self.user)
        done = self.header(other_cart)
        self.orders.transition(done.id, (OrderStatus.PENDING,), OrderStatus.FINALIZED)

        found = self.orders.list_incomplete(timezone.now() + timedelta(seconds=1))

        self.assertEqual([o.id for o in found], [pending.id])


class OrderItemRepositoryTests(OrderStoreTestBase):
    def test_create_line_twice_keeps_one_row(self):
        order = self.header()

        first, created = self.order_items.create_line(order.id, self.mug_line())
        again, created_again = self.order_items.create_line(order.id, self.mug_line(quantity=5))

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(again.id, first.id)
        self.assertEqual(again.quantity, 2)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 1)
        self.assertEqual(self.order_items.written_product_ids(order.id), {self.mug.id})


class CheckoutAgainstDatabaseTests(OrderStoreTestBase):
    def setUp(self):
        super().setUp()
        self.spoon = Product.objects.create(name="Spoon", price=Decimal("1.25"))
        self.lamp = Product.objects.create(name="Lamp", price=Decimal("20.00"))
        for product, quantity in ((self.mug, 2), (self.spoon, 4), (self.lamp, 1)):
            CartItem.objects.create(cart=self.cart, product=product, quantity=quantity)

    def service(self, order_items):
        return CheckoutService(
            carts=CartRepository(),
            cart_items=CartItemRepository(),
            products=ProductRepository(),
            orders=self.orders,
            order_items=order_items,
        )

    def test_retry_after_partial_item_write_converges(self):
        _, error = self.service(FlakyOrderItemRepository(fail_after=2)).place_order(
            self.cart.id, self.user.id
        )

        self.assertEqual(error.code, "DEPENDENCY_ERROR")
        self.assertTrue(error.details["persisted"])
        order = Order.objects.get(cart=self.cart)
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 2)

        result, error = self.service(OrderItemRepository()).place_order(
            self.cart.id, self.user.id
        )

        self.assertIsNone(error)
        self.assertEqual(result.order_id, order.id)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 3)
        self.assertEqual(Order.objects.filter(cart=self.cart).count(), 1)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.FINALIZED)
        self.assertEqual(order.total_cost, Decimal("34.00"))
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())
        self.assertEqual(Cart.objects.get(id=self.cart.id).status, CartStatus.CHECKED_OUT)
