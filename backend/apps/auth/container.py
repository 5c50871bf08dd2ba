from __future__ import annotations

from .repositories import DjangoUserAccountRepository
from .services import RegistrationService


def build_registration_service() -> RegistrationService:
    return RegistrationService(users=DjangoUserAccountRepository())
