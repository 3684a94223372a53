from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class ManagerAccount:
    """Aggregate root for a tenant administrator and the company it represents."""

    manager_id: str
    business_email: str
    company_name: str
    created_at: datetime
    company_description: str | None = None
    company_address: str | None = None
    business_phone: str | None = None
    state: str | None = None
    image_url: str | None = None
    is_active: bool = True
    updated_at: datetime | None = None


@dataclass(slots=True)
class Board:
    board_id: str
    manager_id: str
    name: str
    created_at: datetime
    description: str | None = None


@dataclass(slots=True)
class Project:
    project_id: str
    board_id: str
    title: str
    created_at: datetime
    description: str | None = None


@dataclass(slots=True)
class Ticket:
    ticket_id: str
    project_id: str
    title: str
    status: str
    created_at: datetime
    priority: str | None = None
    assignee: str | None = None
