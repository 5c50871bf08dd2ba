import types
import unittest
from unittest.mock import Mock, patch

from rest_framework.test import APIRequestFactory, force_authenticate

from apps.catalog.dtos import ProductDTO
from apps.catalog.errors import ProductNotFoundError
from apps.catalog.views import ProductDetailView, ProductListView


def make_product_dto(product_id=1, name="Widget"):
    return ProductDTO(
        id=product_id,
        name=name,
        description="A product",
        price="10.00",
        category="electronics",
    )


class CatalogViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def dispatch(self, request, view_cls, **kwargs):
        return view_cls.as_view()(request, **kwargs)

    def authenticate(self, request, user):
        force_authenticate(request, user=user)

    @staticmethod
    def _user(user_id, *, staff=False):
        return types.SimpleNamespace(
            id=user_id,
            is_authenticated=True,
            is_staff=staff,
            is_superuser=False,
        )

    def test_product_list_passes_category_filter(self):
        service_mock = Mock()
        service_mock.list_products.return_value = [make_product_dto()]
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.get("/products", {"category": "electronics"})
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]["name"], "Widget")
        service_mock.list_products.assert_called_once_with("electronics")

    def test_product_create_requires_staff(self):
        service_mock = Mock()
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post(
                "/products", {"name": "Lamp", "price": "10.00"}, format="json"
            )
            self.authenticate(request, self._user(3))
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["error"]["code"], "FORBIDDEN")
        service_mock.create_product.assert_not_called()

    def test_product_create_validates_required_fields(self):
        service_mock = Mock()
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post("/products", {"description": "x"}, format="json")
            self.authenticate(request, self._user(1, staff=True))
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 400)
        details = response.data["error"]["details"]
        self.assertIn("name", details)
        self.assertIn("price", details)
        service_mock.create_product.assert_not_called()

    def test_product_create_returns_201(self):
        service_mock = Mock()
        service_mock.create_product.return_value = make_product_dto(5, "Lamp")
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post(
                "/products", {"name": "Lamp", "price": "10.00"}, format="json"
            )
            self.authenticate(request, self._user(1, staff=True))
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["id"], 5)

    def test_product_detail_not_found(self):
        service_mock = Mock()
        service_mock.get_product.return_value = (None, ProductNotFoundError(9))
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get("/products/9")
            response = self.dispatch(request, ProductDetailView, product_id="9")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["details"], {"id": "9"})
        service_mock.get_product.assert_called_once_with(9)

    def test_product_put_returns_message_and_product(self):
        service_mock = Mock()
        service_mock.update_product.return_value = (make_product_dto(2, "Renamed"), None)
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.put(
                "/products/2", {"name": "Renamed", "price": "11.00"}, format="json"
            )
            self.authenticate(request, self._user(1, staff=True))
            response = self.dispatch(request, ProductDetailView, product_id="2")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Product updated successfully")
        self.assertEqual(response.data["product"]["name"], "Renamed")

    def test_product_delete_returns_message(self):
        service_mock = Mock()
        service_mock.delete_product.return_value = (True, None)
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.delete("/products/2")
            self.authenticate(request, self._user(1, staff=True))
            response = self.dispatch(request, ProductDetailView, product_id="2")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"message": "Product deleted successfully"})
        service_mock.delete_product.assert_called_once_with(2)
