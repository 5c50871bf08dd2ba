from apps.common.repository import GenericRepository
from .models import Product


class ProductRepository(GenericRepository[Product]):
    def __init__(self):
        super().__init__(Product)

    def list(self, **filters):  # type: ignore[override]
        return self.model.objects.filter(**filters).order_by("id")

    def list_by_category(self, category: str):
        return self.list(category__iexact=category)

    def update_scalar(self, product: Product, **fields):
        """Assign the non-``None`` fields and save only those columns."""
        changed = [name for name, value in fields.items() if value is not None]
        for name in changed:
            setattr(product, name, fields[name])
        if changed:
            product.save(update_fields=[*changed, "updated_at"])
        return product
