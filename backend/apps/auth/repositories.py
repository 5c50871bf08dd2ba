from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model

from .protocols import UserAccountRepositoryProtocol


class DjangoUserAccountRepository(UserAccountRepositoryProtocol):
    def __init__(self) -> None:
        self.model = get_user_model()

    def username_exists(self, username: str) -> bool:
        return self.model.objects.filter(username__iexact=username).exists()

    def email_exists(self, email: str) -> bool:
        return self.model.objects.filter(email__iexact=email).exists()

    def create_user(self, *, email: str, username: str, password: str, **extra: Any):
        # create_user hashes the password
        return self.model.objects.create_user(
            username=username, email=email, password=password, **extra
        )
