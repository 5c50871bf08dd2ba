from apps.api.exceptions import NotFoundError


class ProductNotFoundError(NotFoundError):
    default_message = "Product not found"

    def __init__(self, product_id: int):
        super().__init__(details={"id": str(product_id)})
        self.product_id = product_id
