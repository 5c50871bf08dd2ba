from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from apps.api.exceptions import ApplicationError
from apps.common import get_logger
from .errors import DuplicateAccountError
from .protocols import UserAccountRepositoryProtocol

logger = get_logger(__name__).bind(component="auth", layer="service")


class RegistrationService:
    def __init__(self, users: UserAccountRepositoryProtocol):
        self.users = users
        self.logger = logger.bind(service="RegistrationService")

    def _username_for(self, email: str, requested: Optional[str]) -> str:
        if requested:
            return requested
        # Accounts registered with only an email get the local part as username,
        # suffixed until it is free.
        base = email.split("@", 1)[0] or "user"
        candidate, suffix = base, 1
        while self.users.username_exists(candidate):
            suffix += 1
            candidate = f"{base}{suffix}"
        return candidate

    def register(
        self, data: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApplicationError]]:
        email = data["email"].strip().lower()
        requested_username = (data.get("username") or "").strip()
        self.logger.debug("Received registration request", email=email)

        if self.users.email_exists(email):
            self.logger.info("Registration rejected: email already exists", email=email)
            return None, DuplicateAccountError("email", email)
        if requested_username and self.users.username_exists(requested_username):
            self.logger.info(
                "Registration rejected: username already exists",
                username=requested_username,
            )
            return None, DuplicateAccountError("username", requested_username)

        user = self.users.create_user(
            email=email,
            username=self._username_for(email, requested_username),
            password=data["password"],
            first_name=(data.get("first_name") or "").strip(),
            last_name=(data.get("last_name") or "").strip(),
        )
        self.logger.info("User registered", user_id=user.id, username=user.username)
        return {"id": user.id, "username": user.username, "email": user.email}, None
