"""FastAPI web application for userapi."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, List
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from userapi.api.errors import (
    EMAIL_TAKEN_MESSAGE,
    PASSWORD_MISMATCH_MESSAGE,
    ValidationFailed,
    register_exception_handlers,
)
from userapi.api.user_models import (
    CreateUserRequest,
    MessageResponse,
    UpdateUserRequest,
    UserListResponse,
    UserMutationResponse,
    UserResponse,
)
from userapi.database.database import get_db, init_db
from userapi.database.user_repository import BaseUserRepository, UserRepository
from userapi.integrations.slack import SlackClient
from userapi.jobs.queue import build_job_queue
from userapi.jobs.user_created import NOTIFY_INCLUDE_PASSWORD
from userapi.models.pagination import DEFAULT_PER_PAGE, MAX_PAGE, MAX_PER_PAGE
from userapi.models.user import UserRecord
from userapi.services.user_service import UserService

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
USER_NOT_FOUND = "User not found"


def get_user_repository(db: Session = Depends(get_db)) -> BaseUserRepository:
    """User storage for the current request."""
    return UserRepository(db)


def get_user_service(
    request: Request,
    repository: BaseUserRepository = Depends(get_user_repository),
) -> UserService:
    """Service wired with this request's repository and the app-wide queue and notifier."""
    return UserService(repository, request.app.state.job_queue, request.app.state.notifier)


def _get_existing_user(service: UserService, user_id: int) -> UserRecord:
    user = service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return user


def _add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=UserListResponse)
def list_users(
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, description="Items per page"),
    page: int = Query(1, ge=1, le=MAX_PAGE, description="1-based page number"),
    service: UserService = Depends(get_user_service),
):
    """List users, one page at a time."""
    result = service.get_users_paginated(per_page, page)
    return UserListResponse(
        data=[user.to_public() for user in result.items],
        pagination=result.meta(),
    )


@router.post("", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: CreateUserRequest, service: UserService = Depends(get_user_service)):
    """Create a user and queue the user-created notification."""
    errors: Dict[str, List[str]] = {}
    if payload.password_confirmation != payload.password:
        _add_error(errors, "password", PASSWORD_MISMATCH_MESSAGE)
    if service.user_exists_by_email(payload.email):
        _add_error(errors, "email", EMAIL_TAKEN_MESSAGE)
    if errors:
        raise ValidationFailed(errors)

    user = service.create_user(payload.model_dump(exclude={"password_confirmation"}))
    return UserMutationResponse(message="User created successfully", data=user.to_public())


@router.get("/{user_id}", response_model=UserResponse)
def show_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Get a single user."""
    user = _get_existing_user(service, user_id)
    return UserResponse(data=user.to_public())


@router.put("/{user_id}", response_model=UserMutationResponse)
def update_user(user_id: int, payload: UpdateUserRequest, service: UserService = Depends(get_user_service)):
    """Update the supplied fields of a user."""
    _get_existing_user(service, user_id)

    fields = payload.model_dump(exclude_unset=True, exclude={"password_confirmation"})
    errors: Dict[str, List[str]] = {}
    if "password_confirmation" in payload.model_fields_set and payload.password_confirmation != payload.password:
        _add_error(errors, "password", PASSWORD_MISMATCH_MESSAGE)
    if "email" in fields:
        owner = service.get_user_by_email(fields["email"])
        if owner is not None and owner.id != user_id:
            _add_error(errors, "email", EMAIL_TAKEN_MESSAGE)
    if errors:
        raise ValidationFailed(errors)

    if not service.update_user(user_id, fields):
        logger.error(f"Update of user {user_id} reported no row although it exists")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update user")

    updated = _get_existing_user(service, user_id)
    return UserMutationResponse(message="User updated successfully", data=updated.to_public())


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Permanently delete a user."""
    _get_existing_user(service, user_id)

    if not service.delete_user(user_id):
        logger.error(f"Delete of user {user_id} reported no row although it exists")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete user")

    return MessageResponse(status="success", message="User deleted successfully")


def create_app(job_queue=None, notifier=None, init_database: bool = True) -> FastAPI:
    """Build the application.

    Args:
        job_queue: Queue for background jobs. Defaults to the QUEUE_CONNECTION queue.
        notifier: Sender for notifications. Defaults to SlackClient().
        init_database: Create missing tables on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            init_db()
        if NOTIFY_INCLUDE_PASSWORD:
            logger.warning("NOTIFY_INCLUDE_PASSWORD is enabled: plaintext passwords are sent to the webhook")
        if isinstance(app.state.notifier, SlackClient) and not app.state.notifier.is_configured:
            logger.warning("SLACK_WEBHOOK_URL is not set; user-created notifications will not be delivered")
        yield
        app.state.job_queue.shutdown(wait=True)

    app = FastAPI(
        title="userapi",
        description="User management REST API",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.job_queue = job_queue if job_queue is not None else build_job_queue()
    app.state.notifier = notifier if notifier is not None else SlackClient()

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": API_VERSION}

    app.include_router(router)
    return app


app = create_app()
