"""Board, project and ticket read models owned by the work-tracking services."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel


class BoardView(BaseModel):
    board_id: str
    manager_id: str
    name: str
    description: str | None = None
    created_at: datetime


class ProjectView(BaseModel):
    project_id: str
    board_id: str
    title: str
    description: str | None = None
    created_at: datetime


class TicketView(BaseModel):
    ticket_id: str
    project_id: str
    title: str
    status: str
    priority: str | None = None
    assignee: str | None = None
    created_at: datetime
