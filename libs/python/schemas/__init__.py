"""Shared schema exports."""

from .manager import ManagerView
from .paging import PageView
from .workitems import BoardView, ProjectView, TicketView

__all__ = [
    "BoardView",
    "ManagerView",
    "PageView",
    "ProjectView",
    "TicketView",
]
