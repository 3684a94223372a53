"""HTTP route definitions for the manager service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, EmailStr, Field

from schemas import BoardView, ManagerView, PageView, ProjectView, TicketView

from ..config import get_settings
from ..domain.contracts import (
    EditManagerInput,
    ImageUpload,
    ProvisioningRequest,
    UpdateProfileInput,
)
from ..domain.manager import Board, ManagerAccount, Project, Ticket
from ..domain.results import ErrorKind, Result
from ..domain.service import ManagerService
from ..domain.traversal import TicketTraversal
from ..security.throttle import build_throttle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


class CreateManagerRequest(BaseModel):
    """Payload accepted when provisioning a manager or asking to be onboarded."""

    business_email: EmailStr
    company_name: str = Field(..., min_length=1, max_length=200)
    company_description: str | None = Field(default=None, max_length=2000)


class CreateManagerResponse(BaseModel):
    """Provisioning outcome; ``warning`` is set when the welcome email failed."""

    manager: ManagerView
    message: str
    warning: str | None = None
    errors: list[str] = Field(default_factory=list)


class EditManagerRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    company_description: str | None = None
    company_address: str | None = None
    business_phone: str | None = None
    state: str | None = None


class UpdateProfileRequest(BaseModel):
    business_email: EmailStr
    company_name: str = Field(..., min_length=1, max_length=200)
    state: str | None = None
    business_phone: str | None = None
    company_address: str | None = None


class ManagerActionResponse(BaseModel):
    manager: ManagerView
    message: str


class MessageResponse(BaseModel):
    message: str


settings = get_settings()

throttle = build_throttle(
    settings.rate_limit_backend,
    redis_url=settings.redis_url,
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)

_STATUS_BY_KIND = {
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.invalid_argument: status.HTTP_400_BAD_REQUEST,
    ErrorKind.upstream_failure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_service(request: Request) -> ManagerService:
    """Resolve the `ManagerService` stored on the FastAPI application state."""
    service: ManagerService = request.app.state.manager_service
    return service


def get_traversal(request: Request) -> TicketTraversal:
    traversal: TicketTraversal = request.app.state.ticket_traversal
    return traversal


def to_view(account: ManagerAccount) -> ManagerView:
    """Build a response model from the domain aggregate."""
    return ManagerView(
        manager_id=account.manager_id,
        business_email=account.business_email,
        company_name=account.company_name,
        company_description=account.company_description,
        company_address=account.company_address,
        business_phone=account.business_phone,
        state=account.state,
        image_url=account.image_url,
        is_active=account.is_active,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _require(result: Result) -> Result:
    if result.error is not None:
        raise _http_error(result)
    return result


def _http_error(result: Result) -> HTTPException:
    error = result.error
    if error.kind is ErrorKind.upstream_failure and result.details:
        logger.error("upstream failure: %s (%s)", error.message, "; ".join(result.details))
    return HTTPException(status_code=_STATUS_BY_KIND[error.kind], detail=error.message)


def _check_throttle(key: str) -> None:
    if not throttle.allow(key):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")


@router.post(
    "/managers", response_model=CreateManagerResponse, status_code=status.HTTP_201_CREATED
)
def create_manager(
    payload: CreateManagerRequest,
    service: ManagerService = Depends(get_service),
) -> CreateManagerResponse:
    """Provision a manager account, its sign-in identity, and send the welcome email."""
    _check_throttle(f"provision:{payload.business_email.lower()}")
    result = _require(
        service.create_manager(
            ProvisioningRequest(
                business_email=payload.business_email,
                company_name=payload.company_name,
                company_description=payload.company_description,
            )
        )
    )
    return CreateManagerResponse(
        manager=to_view(result.value),
        message=result.message,
        warning=result.warning,
        errors=list(result.details),
    )


@router.post("/managers/onboarding-requests", response_model=MessageResponse)
def request_onboarding(
    payload: CreateManagerRequest,
    service: ManagerService = Depends(get_service),
) -> MessageResponse:
    """Forward a prospective manager's details to the platform administrator."""
    _check_throttle(f"onboarding:{payload.business_email.lower()}")
    result = _require(
        service.send_onboarding_request(
            ProvisioningRequest(
                business_email=payload.business_email,
                company_name=payload.company_name,
                company_description=payload.company_description,
            )
        )
    )
    return MessageResponse(message=result.message)


@router.get("/managers", response_model=PageView[ManagerView])
def list_managers(
    page: int = Query(default=1),
    per_page: int = Query(default=settings.default_page_size),
    service: ManagerService = Depends(get_service),
) -> PageView[ManagerView]:
    """Return managers ordered by company name, then business email."""
    paged = _require(service.list_managers(page, per_page)).value
    return PageView[ManagerView](
        data=[to_view(account) for account in paged.data],
        current_page=paged.current_page,
        per_page=paged.per_page,
        total_count=paged.total_count,
        total_page_count=paged.total_page_count,
    )


@router.get("/managers/{manager_id}", response_model=ManagerView)
def get_manager(
    manager_id: str,
    service: ManagerService = Depends(get_service),
) -> ManagerView:
    return to_view(_require(service.get_manager(manager_id)).value)


@router.put("/managers/{manager_id}", response_model=ManagerActionResponse)
def edit_manager(
    manager_id: str,
    payload: EditManagerRequest,
    service: ManagerService = Depends(get_service),
) -> ManagerActionResponse:
    """Replace the company details of an existing manager."""
    result = _require(
        service.edit_manager(
            manager_id,
            EditManagerInput(
                company_name=payload.company_name,
                company_description=payload.company_description,
                company_address=payload.company_address,
                business_phone=payload.business_phone,
                state=payload.state,
            ),
        )
    )
    return ManagerActionResponse(manager=to_view(result.value), message=result.message)


@router.patch("/managers/{manager_id}/profile", response_model=ManagerActionResponse)
def update_profile(
    manager_id: str,
    payload: UpdateProfileRequest,
    service: ManagerService = Depends(get_service),
) -> ManagerActionResponse:
    result = _require(
        service.update_profile(
            manager_id,
            UpdateProfileInput(
                business_email=payload.business_email,
                company_name=payload.company_name,
                state=payload.state,
                business_phone=payload.business_phone,
                company_address=payload.company_address,
            ),
        )
    )
    return ManagerActionResponse(manager=to_view(result.value), message=result.message)


@router.put("/managers/{manager_id}/image", response_model=ManagerActionResponse)
async def upload_image(
    manager_id: str,
    request: Request,
    content_type: str = Header(..., alias="Content-Type"),
    service: ManagerService = Depends(get_service),
) -> ManagerActionResponse:
    """Store the raw request body as the manager's profile image."""
    content = await request.body()
    current = _require(await run_in_threadpool(service.get_manager, manager_id)).value
    profile = UpdateProfileInput(
        business_email=current.business_email,
        company_name=current.company_name,
        state=current.state,
        business_phone=current.business_phone,
        company_address=current.company_address,
    )
    image = ImageUpload(content=content, content_type=content_type.split(";")[0].strip())
    result = _require(
        await run_in_threadpool(service.update_profile, manager_id, profile, image)
    )
    return ManagerActionResponse(manager=to_view(result.value), message=result.message)


@router.post("/managers/{manager_id}/activate", response_model=ManagerActionResponse)
def activate_manager(
    manager_id: str,
    service: ManagerService = Depends(get_service),
) -> ManagerActionResponse:
    result = _require(service.activate_manager(manager_id))
    return ManagerActionResponse(manager=to_view(result.value), message=result.message)


@router.post("/managers/{manager_id}/deactivate", response_model=ManagerActionResponse)
def deactivate_manager(
    manager_id: str,
    service: ManagerService = Depends(get_service),
) -> ManagerActionResponse:
    result = _require(service.deactivate_manager(manager_id))
    return ManagerActionResponse(manager=to_view(result.value), message=result.message)


@router.get("/managers/{manager_id}/boards", response_model=list[BoardView])
def list_boards(
    manager_id: str,
    traversal: TicketTraversal = Depends(get_traversal),
) -> list[BoardView]:
    return [_board_view(board) for board in traversal.boards_owned_by(manager_id)]


@router.get("/managers/{manager_id}/projects", response_model=list[ProjectView])
def list_projects(
    manager_id: str,
    traversal: TicketTraversal = Depends(get_traversal),
) -> list[ProjectView]:
    return [_project_view(project) for project in traversal.projects_owned_by(manager_id)]


@router.get("/managers/{manager_id}/tickets", response_model=list[TicketView])
def list_tickets(
    manager_id: str,
    traversal: TicketTraversal = Depends(get_traversal),
) -> list[TicketView]:
    """Return every ticket under the manager's boards, in board then project order."""
    return [_ticket_view(ticket) for ticket in traversal.tickets_owned_by(manager_id)]


def _board_view(board: Board) -> BoardView:
    return BoardView(
        board_id=board.board_id,
        manager_id=board.manager_id,
        name=board.name,
        description=board.description,
        created_at=board.created_at,
    )


def _project_view(project: Project) -> ProjectView:
    return ProjectView(
        project_id=project.project_id,
        board_id=project.board_id,
        title=project.title,
        description=project.description,
        created_at=project.created_at,
    )


def _ticket_view(ticket: Ticket) -> TicketView:
    return TicketView(
        ticket_id=ticket.ticket_id,
        project_id=ticket.project_id,
        title=ticket.title,
        status=ticket.status,
        priority=ticket.priority,
        assignee=ticket.assignee,
        created_at=ticket.created_at,
    )
