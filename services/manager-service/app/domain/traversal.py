"""Fan-out walk over the manager → board → project → ticket ownership chain.

Each stage issues one lookup per parent and concatenates the children in parent
order, so callers see the order the stores returned without any cross-parent sort.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .manager import Board, Project, Ticket
from .ports import ParentKeyLookup

logger = logging.getLogger(__name__)


def boards_for_manager(boards: ParentKeyLookup[Board], manager_id: str) -> list[Board]:
    return list(boards.find_by_parent_key(manager_id))


def projects_for_boards(
    projects: ParentKeyLookup[Project], owners: Iterable[Board]
) -> list[Project]:
    result: list[Project] = []
    for board in owners:
        result.extend(projects.find_by_parent_key(board.board_id))
    return result


def tickets_for_projects(
    tickets: ParentKeyLookup[Ticket], owners: Iterable[Project]
) -> list[Ticket]:
    result: list[Ticket] = []
    for project in owners:
        result.extend(tickets.find_by_parent_key(project.project_id))
    return result


class TicketTraversal:
    """Composes the three lookup stages against injected stores."""

    def __init__(
        self,
        boards: ParentKeyLookup[Board],
        projects: ParentKeyLookup[Project],
        tickets: ParentKeyLookup[Ticket],
    ) -> None:
        self._boards = boards
        self._projects = projects
        self._tickets = tickets

    def boards_owned_by(self, manager_id: str) -> list[Board]:
        return boards_for_manager(self._boards, manager_id)

    def projects_owned_by(self, manager_id: str) -> list[Project]:
        return projects_for_boards(self._projects, self.boards_owned_by(manager_id))

    def tickets_owned_by(self, manager_id: str) -> list[Ticket]:
        """Return every ticket under the manager's boards, in board then project order."""
        boards = self.boards_owned_by(manager_id)
        projects = projects_for_boards(self._projects, boards)
        tickets = tickets_for_projects(self._tickets, projects)
        logger.debug(
            "resolved %s tickets for manager %s across %s boards and %s projects",
            len(tickets),
            manager_id,
            len(boards),
            len(projects),
        )
        return tickets
