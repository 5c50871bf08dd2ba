import types
import unittest
from unittest.mock import Mock, patch

from rest_framework.test import APIRequestFactory, force_authenticate

from apps.carts.dtos import CartDTO, CartItemDTO
from apps.carts.errors import CartNotOpenError, UnknownProductError
from apps.carts.views import CartDetailView, CartItemDetailView, CartItemListView, CartListView


def make_cart_dto(cart_id=3, user_id=5):
    return CartDTO(
        id=cart_id,
        user_id=user_id,
        status="open",
        created_at="2024-01-01T00:00:00+00:00",
        items=[],
        subtotal="0.00",
    )


class CartViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = types.SimpleNamespace(
            id=5, is_authenticated=True, is_staff=False, is_superuser=False
        )

    def dispatch(self, request, view_cls, **kwargs):
        force_authenticate(request, user=self.user)
        return view_cls.as_view()(request, **kwargs)

    def test_create_cart(self):
        service = Mock()
        service.create_cart.return_value = (make_cart_dto(), None)
        with patch.object(CartListView, "service", service):
            response = self.dispatch(self.factory.post("/carts"), CartListView)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "open")
        service.create_cart.assert_called_once_with(5)

    def test_get_cart(self):
        service = Mock()
        service.get_cart.return_value = (make_cart_dto(), None)
        with patch.object(CartDetailView, "service", service):
            response = self.dispatch(self.factory.get("/carts/3"), CartDetailView, cart_id="3")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["subtotal"], "0.00")
        service.get_cart.assert_called_once_with(3, 5, False)

    def test_add_item_accepts_camel_case_product_id(self):
        service = Mock()
        service.add_item.return_value = (
            CartItemDTO(id=1, cart_id=3, product_id=9, quantity=2, product=None, line_total=None),
            None,
        )
        with patch.object(CartItemListView, "service", service):
            request = self.factory.post(
                "/carts/3/products", {"productId": 9, "quantity": 2}, format="json"
            )
            response = self.dispatch(request, CartItemListView, cart_id="3")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["quantity"], 2)
        service.add_item.assert_called_once_with(3, 5, 9, 2, is_privileged=False)

    def test_add_item_requires_product_and_positive_quantity(self):
        service = Mock()
        with patch.object(CartItemListView, "service", service):
            request = self.factory.post("/carts/3/products", {"quantity": 0}, format="json")
            response = self.dispatch(request, CartItemListView, cart_id="3")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        service.add_item.assert_not_called()

    def test_add_unknown_product(self):
        service = Mock()
        service.add_item.return_value = (None, UnknownProductError(9))
        with patch.object(CartItemListView, "service", service):
            request = self.factory.post(
                "/carts/3/products", {"product_id": 9, "quantity": 1}, format="json"
            )
            response = self.dispatch(request, CartItemListView, cart_id="3")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["details"], {"productId": "9"})

    def test_remove_item_from_locked_cart(self):
        service = Mock()
        service.remove_item.return_value = (False, CartNotOpenError(3, "checking_out"))
        with patch.object(CartItemDetailView, "service", service):
            response = self.dispatch(
                self.factory.delete("/carts/3/products/9"),
                CartItemDetailView,
                cart_id="3",
                product_id="9",
            )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["details"]["status"], "checking_out")

    def test_delete_cart(self):
        service = Mock()
        service.delete_cart.return_value = (True, None)
        with patch.object(CartDetailView, "service", service):
            response = self.dispatch(self.factory.delete("/carts/3"), CartDetailView, cart_id="3")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"message": "Cart deleted successfully"})
