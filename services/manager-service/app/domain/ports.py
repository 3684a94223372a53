"""Collaborator contracts injected into the manager service."""

from __future__ import annotations

from typing import Protocol, Sequence, TypeVar

from .contracts import IdentityResult, ImageUpload, NewManagerRecord
from .manager import ManagerAccount

T_co = TypeVar("T_co", covariant=True)


class AccountStore(Protocol):
    def find_by_email(self, business_email: str) -> Sequence[ManagerAccount]: ...

    def create(self, record: NewManagerRecord) -> ManagerAccount: ...

    def delete(self, account: ManagerAccount) -> None: ...

    def update(self, account: ManagerAccount) -> ManagerAccount: ...

    def get_by_id(self, manager_id: str) -> ManagerAccount | None: ...

    def get_all(self) -> Sequence[ManagerAccount]: ...


class IdentityRegistrar(Protocol):
    def register_manager_identity(
        self, manager_id: str, email: str, credential: str
    ) -> IdentityResult: ...


class Notifier(Protocol):
    """Outbound mail. Implementations raise when the message cannot be handed off."""

    def send_html_email(self, to_address: str, subject: str, html_body: str) -> None: ...


class CredentialGenerator(Protocol):
    def generate(self, seed1: str, seed2: str) -> str: ...


class ParentKeyLookup(Protocol[T_co]):
    """Equality lookup on a foreign key (board → manager, project → board, ticket → project)."""

    def find_by_parent_key(self, key: str) -> Sequence[T_co]: ...


class ImageStore(Protocol):
    def upload(self, manager_id: str, image: ImageUpload) -> str | None: ...

    def discard(self, url: str) -> None: ...
