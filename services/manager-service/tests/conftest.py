from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.domain.contracts import (
    DuplicateAccountError,
    IdentityResult,
    ImageUpload,
    NewManagerRecord,
)
from app.domain.manager import Board, ManagerAccount, Project, Ticket
from app.domain.service import ManagerService
from app.domain.traversal import TicketTraversal
from app.security.throttle import InMemoryThrottle

CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeAccountStore:
    """In-memory account store that counts the calls the workflow makes."""

    def __init__(self) -> None:
        self._accounts: dict[str, ManagerAccount] = {}
        self.create_calls = 0
        self.delete_calls = 0
        self.update_calls = 0
        self.create_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.update_error: Exception | None = None

    def seed(self, business_email: str, company_name: str, **fields) -> ManagerAccount:
        account = ManagerAccount(
            manager_id=fields.pop("manager_id", str(uuid.uuid4())),
            business_email=business_email,
            company_name=company_name,
            created_at=CREATED_AT,
            **fields,
        )
        self._accounts[account.manager_id] = account
        return account

    def __len__(self) -> int:
        return len(self._accounts)

    def find_by_email(self, business_email: str):
        return [
            account
            for account in self._accounts.values()
            if account.business_email.lower() == business_email.lower()
        ]

    def create(self, record: NewManagerRecord) -> ManagerAccount:
        self.create_calls += 1
        if self.create_error is not None:
            raise self.create_error
        if self.find_by_email(record.business_email):
            raise DuplicateAccountError(record.business_email)
        account = ManagerAccount(
            manager_id=str(uuid.uuid4()),
            business_email=record.business_email,
            company_name=record.company_name,
            company_description=record.company_description,
            created_at=datetime.now(timezone.utc),
        )
        self._accounts[account.manager_id] = account
        return account

    def delete(self, account: ManagerAccount) -> None:
        self.delete_calls += 1
        if self.delete_error is not None:
            raise self.delete_error
        self._accounts.pop(account.manager_id, None)

    def update(self, account: ManagerAccount) -> ManagerAccount:
        self.update_calls += 1
        if self.update_error is not None:
            raise self.update_error
        self._accounts[account.manager_id] = account
        return account

    def get_by_id(self, manager_id: str):
        return self._accounts.get(manager_id)

    def get_all(self):
        return list(self._accounts.values())


class FakeIdentityRegistrar:
    def __init__(self) -> None:
        self.result = IdentityResult(succeeded=True, message="Manager registered successfully")
        self.error: Exception | None = None
        self.registrations: list[tuple[str, str, str]] = []

    def register_manager_identity(self, manager_id: str, email: str, credential: str):
        if self.error is not None:
            raise self.error
        if self.result.succeeded:
            self.registrations.append((manager_id, email, credential))
        return self.result


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.error: Exception | None = None

    def send_html_email(self, to_address: str, subject: str, html_body: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((to_address, subject, html_body))


class FakeCredentialGenerator:
    def generate(self, seed1: str, seed2: str) -> str:
        return f"Tmp!{seed2[:3]}9x{len(seed1)}"


class FakeImageStore:
    def __init__(self) -> None:
        self.url: str | None = "https://cdn.example.com/managers/avatar.png"
        self.error: Exception | None = None
        self.uploads: list[tuple[str, ImageUpload]] = []
        self.discarded: list[str] = []

    def upload(self, manager_id: str, image: ImageUpload):
        if self.error is not None:
            raise self.error
        self.uploads.append((manager_id, image))
        return self.url

    def discard(self, url: str) -> None:
        self.discarded.append(url)


class FakeParentStore:
    """Keyed child lookup that records every key it was asked for."""

    def __init__(self, children: dict[str, list] | None = None) -> None:
        self._children = children or {}
        self.lookups: list[str] = []

    def find_by_parent_key(self, key: str):
        self.lookups.append(key)
        return list(self._children.get(key, []))


def make_board(board_id: str, manager_id: str) -> Board:
    return Board(board_id=board_id, manager_id=manager_id, name=f"Board {board_id}", created_at=CREATED_AT)


def make_project(project_id: str, board_id: str) -> Project:
    return Project(project_id=project_id, board_id=board_id, title=f"Project {project_id}", created_at=CREATED_AT)


def make_ticket(ticket_id: str, project_id: str) -> Ticket:
    return Ticket(
        ticket_id=ticket_id,
        project_id=project_id,
        title=f"Ticket {ticket_id}",
        status="open",
        created_at=CREATED_AT,
    )


@pytest.fixture
def accounts() -> FakeAccountStore:
    return FakeAccountStore()


@pytest.fixture
def identities() -> FakeIdentityRegistrar:
    return FakeIdentityRegistrar()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def images() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def service(accounts, identities, notifier, images) -> ManagerService:
    return ManagerService(
        accounts,
        identities,
        notifier,
        FakeCredentialGenerator(),
        images=images,
        admin_email="admin@example.com",
    )


@pytest.fixture
def hierarchy():
    """Two boards for manager ``m-1``; board ``b-2`` has no projects."""
    boards = FakeParentStore({"m-1": [make_board("b-1", "m-1"), make_board("b-2", "m-1")]})
    projects = FakeParentStore({"b-1": [make_project("p-1", "b-1"), make_project("p-2", "b-1")]})
    tickets = FakeParentStore(
        {
            "p-1": [make_ticket("t-1", "p-1"), make_ticket("t-2", "p-1")],
            "p-2": [make_ticket("t-3", "p-2")],
        }
    )
    return boards, projects, tickets


@pytest.fixture
def api_client(service, hierarchy):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.manager_service = service
    app.state.ticket_traversal = TicketTraversal(*hierarchy)

    original_throttle = routes.throttle
    routes.throttle = InMemoryThrottle(max_requests=2, window_seconds=60)

    with TestClient(app) as client:
        yield client

    routes.throttle = original_throttle
