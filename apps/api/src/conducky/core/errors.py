"""Exception taxonomy and its HTTP mapping."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

FORBIDDEN_DETAIL = "Insufficient permissions"


class ConduckyError(Exception):
    """Base exception for the service."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class RoleNotFound(ConduckyError):
    """Raised when a role name or id is not in the catalog."""

    def __init__(self, message: str = "Role not found"):
        super().__init__(message)


class UserNotFound(ConduckyError):
    """Raised when a referenced user does not exist."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ValidationError(ConduckyError):
    """Raised when input is well-formed but not acceptable."""


class ScopeNotFound(ConduckyError):
    """Raised when the event or organization a request targets does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Scope not found"):
        super().__init__(message)


class AssignmentNotFound(ConduckyError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Role assignment not found"):
        super().__init__(message)


class InviteNotFound(ConduckyError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Invalid invite code"):
        super().__init__(message)


class InviteUnavailable(ConduckyError):
    """Raised when an invite link is disabled, expired or used up."""

    status_code = status.HTTP_410_GONE


class ConflictError(ConduckyError):
    status_code = status.HTTP_409_CONFLICT


class InfrastructureError(ConduckyError):
    """Raised when the backing store fails. Never retried here."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


def forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConduckyError)
    async def _conducky_error(request: Request, exc: ConduckyError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError):
        logger.exception("database error on %s %s", request.method, request.url.path)
        err = InfrastructureError()
        return JSONResponse(status_code=err.status_code, content={"detail": err.message})
