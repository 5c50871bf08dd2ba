import unittest
from datetime import timedelta
from decimal import Decimal

from apps.orders.dtos import PricedLine
from apps.orders.errors import OrderNotFoundError
from apps.orders.mappers import OrderMapper
from apps.orders.models import OrderStatus
from apps.orders.services import OrderService
from apps.orders.tests.fakes import (
    FakeOrderItemRepository,
    FakeOrderRepository,
    FakeProductRepository,
    InMemoryStore,
)


class OrderServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.service = OrderService(
            orders=FakeOrderRepository(self.store),
            order_items=FakeOrderItemRepository(self.store),
            products=FakeProductRepository(self.store),
            order_mapper=OrderMapper(),
        )
        self.product = self.store.add_product(
            "Desk Lamp", "19.99", category="home", description="Adjustable arm"
        )

    def place(self, user_id, unit_price="19.99", quantity=2, product_name=None):
        line = PricedLine(
            product_id=self.product.id,
            quantity=quantity,
            unit_price=Decimal(unit_price),
            name="Desk Lamp",
            description="Adjustable arm",
            category="home",
        )
        order = self.store.insert_order(
            user_id=user_id,
            cart_id=None,
            total_cost=str(line.line_total),
            lines=[line.to_snapshot()],
            status=OrderStatus.FINALIZED,
        )
        self.store.insert_order_item(order.id, line, product_name=product_name)
        return order

    def test_get_order_returns_recorded_snapshot(self):
        order = self.place(user_id=3)
        self.product.price = Decimal("50.00")
        self.product.name = "Renamed Lamp"

        dto, error = self.service.get_order(order.id, actor_id=3)

        self.assertIsNone(error)
        self.assertEqual(dto.total_cost, "39.98")
        self.assertEqual(dto.status, "finalized")
        item = dto.items[0]
        self.assertEqual(item.unit_price, "19.99")
        self.assertEqual(item.line_total, "39.98")
        self.assertEqual(item.product.name, "Desk Lamp")
        self.assertEqual(item.product.price, "19.99")
        self.assertEqual(item.product.category, "home")

    def test_get_order_falls_back_to_live_product_without_snapshot(self):
        order = self.place(user_id=3, product_name="")
        self.product.name = "Live Lamp"

        dto, _ = self.service.get_order(order.id, actor_id=3)

        self.assertEqual(dto.items[0].product.name, "Live Lamp")
        self.assertEqual(dto.items[0].product.price, "19.99")

    def test_get_unknown_order(self):
        dto, error = self.service.get_order(404, actor_id=3)
        self.assertIsNone(dto)
        self.assertIsInstance(error, OrderNotFoundError)
        self.assertEqual(error.status_code, 404)
        self.assertEqual(error.details, {"orderId": "404"})

    def test_other_users_order_reported_as_missing(self):
        order = self.place(user_id=3)

        _, error = self.service.get_order(order.id, actor_id=4)
        self.assertIsInstance(error, OrderNotFoundError)

        dto, error = self.service.get_order(order.id, actor_id=4, is_privileged=True)
        self.assertIsNone(error)
        self.assertEqual(dto.user_id, 3)

    def test_list_orders_newest_first_and_scoped_to_user(self):
        older = self.place(user_id=3)
        older.created_at = older.created_at - timedelta(days=1)
        newer = self.place(user_id=3, quantity=1)
        self.place(user_id=9)

        orders = self.service.list_orders(3)

        self.assertEqual([o.id for o in orders], [newer.id, older.id])
        self.assertEqual(orders[0].total_cost, "19.99")
