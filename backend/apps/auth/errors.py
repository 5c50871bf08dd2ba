from apps.api.exceptions import BadRequestError


class DuplicateAccountError(BadRequestError):
    def __init__(self, field: str, value: str):
        super().__init__(
            f"{field.capitalize()} already exists",
            details={field: value},
        )
        self.field = field
