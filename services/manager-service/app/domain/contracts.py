"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ProvisioningRequest:
    """Validated inputs required to provision a manager account.

    Consumed once by :meth:`ManagerService.create_manager` and never persisted.
    """

    business_email: str
    company_name: str
    company_description: str | None = None


@dataclass(slots=True)
class NewManagerRecord:
    """Fields written when the domain record is first created; the store assigns the id."""

    business_email: str
    company_name: str
    company_description: str | None = None


@dataclass(slots=True)
class EditManagerInput:
    company_name: str
    company_description: str | None = None
    company_address: str | None = None
    business_phone: str | None = None
    state: str | None = None


@dataclass(slots=True)
class UpdateProfileInput:
    business_email: str
    company_name: str
    state: str | None = None
    business_phone: str | None = None
    company_address: str | None = None


@dataclass(slots=True)
class ImageUpload:
    """Raw image payload handed to an :class:`~app.domain.ports.ImageStore`."""

    content: bytes
    content_type: str
    filename: str | None = None


@dataclass(slots=True, frozen=True)
class IdentityResult:
    """Outcome reported by the identity registrar."""

    succeeded: bool
    message: str


class DuplicateAccountError(Exception):
    """Raised by account stores when a write would break business-email uniqueness."""

    def __init__(self, business_email: str) -> None:
        super().__init__(f"business email already registered: {business_email}")
        self.business_email = business_email
