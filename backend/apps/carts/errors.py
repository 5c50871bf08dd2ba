from apps.api.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError


class CartNotFoundError(NotFoundError):
    default_message = "Cart not found"

    def __init__(self, cart_id: int):
        super().__init__(details={"cartId": str(cart_id)})
        self.cart_id = cart_id


class CartAccessDeniedError(ForbiddenError):
    default_message = "You do not have permission to use this cart"

    def __init__(self, cart_id: int):
        super().__init__(details={"cartId": str(cart_id)})
        self.cart_id = cart_id


class CartNotOpenError(ConflictError):
    default_message = "Cart can no longer be modified"

    def __init__(self, cart_id: int, status: str):
        super().__init__(
            details={"cartId": str(cart_id), "status": str(status)},
            hint="Create a new cart to keep shopping.",
        )
        self.cart_id = cart_id
        self.status = status


class CartItemNotFoundError(NotFoundError):
    default_message = "Product is not in this cart"

    def __init__(self, cart_id: int, product_id: int):
        super().__init__(details={"cartId": str(cart_id), "productId": str(product_id)})


class UnknownProductError(BadRequestError):
    default_message = "Product does not exist"

    def __init__(self, product_id: int):
        super().__init__(details={"productId": str(product_id)})
        self.product_id = product_id
