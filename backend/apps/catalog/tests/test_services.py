import unittest
from decimal import Decimal

from apps.catalog.errors import ProductNotFoundError
from apps.catalog.services import ProductService


class FakeCache:
    def __init__(self):
        self.store = {}

    def get(self, key, default=None):
        return self.store.get(key, default)

    def set(self, key, value, timeout=None):
        self.store[key] = value


class StubProduct:
    def __init__(self, product_id: int, name: str, price, description: str = '', category: str = ''):
        self.id = product_id
        self.name = name
        self.price = price
        self.description = description
        self.category = category


class FakeProductRepository:
    def __init__(self):
        self._products = {}
        self._pk = 1
        self.list_calls = 0

    def create(self, **data):
        product = StubProduct(
            self._pk,
            data['name'],
            data['price'],
            data.get('description', ''),
            data.get('category', ''),
        )
        self._products[self._pk] = product
        self._pk += 1
        return product

    def get(self, **filters):
        return self._products.get(filters.get('id'))

    def in_bulk(self, ids):
        return {pid: self._products[pid] for pid in ids if pid in self._products}

    def list(self, **filters):
        self.list_calls += 1
        return list(self._products.values())

    def list_by_category(self, category: str):
        self.list_calls += 1
        return [p for p in self._products.values() if p.category.lower() == category.lower()]

    def update_scalar(self, product, **fields):
        for key, value in fields.items():
            if value is not None:
                setattr(product, key, value)
        return product

    def delete(self, product):
        self._products.pop(product.id, None)


class ProductServiceTests(unittest.TestCase):
    def setUp(self):
        self.cache = FakeCache()
        self.repo = FakeProductRepository()
        self.service = ProductService(products=self.repo, cache_backend=self.cache)

    def test_create_product_quantizes_price(self):
        dto = self.service.create_product({'name': 'Lamp', 'price': '19.9', 'category': 'home'})
        self.assertEqual(dto.price, '19.90')
        self.assertEqual(self.repo.get(id=dto.id).price, Decimal('19.90'))

    def test_list_products_is_served_from_cache_until_a_write(self):
        self.service.create_product({'name': 'Lamp', 'price': '10', 'category': 'home'})
        first = self.service.list_products()
        second = self.service.list_products()
        self.assertEqual(first, second)
        self.assertEqual(self.repo.list_calls, 1)

        self.service.create_product({'name': 'Chair', 'price': '25', 'category': 'home'})
        third = self.service.list_products()
        self.assertEqual(self.repo.list_calls, 2)
        self.assertEqual([p.name for p in third], ['Lamp', 'Chair'])

    def test_list_products_filters_by_category(self):
        self.service.create_product({'name': 'Lamp', 'price': '10', 'category': 'home'})
        self.service.create_product({'name': 'Phone', 'price': '300', 'category': 'electronics'})
        data = self.service.list_products('Electronics')
        self.assertEqual([p.name for p in data], ['Phone'])

    def test_disable_cache_always_reads_repository(self):
        service = ProductService(products=self.repo, cache_backend=self.cache, disable_cache=True)
        service.list_products()
        service.list_products()
        self.assertEqual(self.repo.list_calls, 2)
        self.assertEqual(self.cache.store, {})

    def test_get_product_missing_returns_not_found_error(self):
        dto, error = self.service.get_product(42)
        self.assertIsNone(dto)
        self.assertIsInstance(error, ProductNotFoundError)
        self.assertEqual(error.status_code, 404)
        self.assertEqual(error.details, {'id': '42'})

    def test_update_product_changes_only_provided_fields(self):
        created = self.service.create_product(
            {'name': 'Lamp', 'price': '10', 'description': 'Warm light', 'category': 'home'}
        )
        dto, error = self.service.update_product(created.id, {'price': '12.345'})
        self.assertIsNone(error)
        self.assertEqual(dto.price, '12.35')
        self.assertEqual(dto.description, 'Warm light')

    def test_update_missing_product(self):
        dto, error = self.service.update_product(7, {'name': 'x', 'price': '1'})
        self.assertIsNone(dto)
        self.assertEqual(error.code, 'NOT_FOUND')

    def test_delete_product_bumps_cache_version(self):
        created = self.service.create_product({'name': 'Lamp', 'price': '10'})
        version_before = self.cache.get('products:list:version')
        deleted, error = self.service.delete_product(created.id)
        self.assertTrue(deleted)
        self.assertIsNone(error)
        self.assertEqual(self.cache.get('products:list:version'), version_before + 1)
        deleted, error = self.service.delete_product(created.id)
        self.assertFalse(deleted)
        self.assertIsInstance(error, ProductNotFoundError)
