from __future__ import annotations

from typing import Any, Protocol


class UserAccountRepositoryProtocol(Protocol):
    def username_exists(self, username: str) -> bool:
        ...

    def email_exists(self, email: str) -> bool:
        ...

    def create_user(self, *, email: str, username: str, password: str, **extra: Any):
        ...
