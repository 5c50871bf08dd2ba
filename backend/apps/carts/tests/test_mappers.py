import unittest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from apps.carts.mappers import CartMapper


class CartMapperTests(unittest.TestCase):
    def test_subtotal_sums_known_lines_only(self):
        cart = SimpleNamespace(
            id=1,
            user_id=2,
            status="open",
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        items = [
            SimpleNamespace(id=10, cart_id=1, product_id=5, quantity=3),
            SimpleNamespace(id=11, cart_id=1, product_id=6, quantity=1),
        ]
        products = {
            5: SimpleNamespace(id=5, name="Cup", description="", price=Decimal("1.10"), category="")
        }

        dto = CartMapper().to_dto(cart, items, products)

        self.assertEqual(dto.subtotal, "3.30")
        self.assertEqual(dto.items[0].line_total, "3.30")
        self.assertEqual(dto.items[0].product.name, "Cup")
        self.assertIsNone(dto.items[1].product)
        self.assertEqual(dto.created_at, "2024-05-01T00:00:00+00:00")
