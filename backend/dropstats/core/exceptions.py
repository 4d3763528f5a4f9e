"""
Service layer custom exceptions.

Absence (``NotFoundError``) and faults (``DatabaseError``, ``ExternalServiceError``)
are kept apart so callers can map them to distinct responses.
"""

from typing import Any, Dict, Optional


class ServiceException(Exception):
    """Base exception for all service layer errors."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.service and self.operation:
            return f"[{self.service}.{self.operation}] {self.message}"
        return self.message


class ValidationError(ServiceException):
    """Exception raised for user-correctable input errors."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        validation_context = context or {}
        if field:
            validation_context["field"] = field
        if value is not None:
            validation_context["value"] = str(value)

        super().__init__(
            message=message,
            service=service,
            operation=operation,
            context=validation_context,
        )


class SteamIDError(ValidationError):
    """Input could not be turned into a SteamID."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message=message, field="steam_id", value=value)


class InvalidSteamIDFormat(SteamIDError):
    """Input matches none of the accepted SteamID notations."""

    pass


class SteamIDOutOfRange(SteamIDError):
    """Input has the right shape but a component does not fit its bit field."""

    pass


class NotFoundError(ServiceException):
    """The requested entity does not exist. Not a fault."""

    pass


class PlayerNotFoundError(NotFoundError):
    """Neither the ranked view nor the raw stats table has a row for the player."""

    def __init__(
        self,
        steam_id: str,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message="User not found or no drops",
            service="StatsService",
            operation=operation,
            context={"steam_id": steam_id},
        )
        self.steam_id = steam_id


class DatabaseError(ServiceException):
    """Exception raised when the relational store is unreachable or a query fails."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=f"Database error: {message}",
            service=service,
            operation=operation,
            context=context,
            original_error=original_error,
        )


class ExternalServiceError(ServiceException):
    """Exception raised for external API service errors."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        external_service: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        external_context = context or {}
        if external_service:
            external_context["external_service"] = external_service
        if status_code:
            external_context["status_code"] = status_code

        super().__init__(
            message=f"External service error: {message}",
            service=service,
            operation=operation,
            context=external_context,
            original_error=original_error,
        )
        self.status_code = status_code


class ResolverError(ExternalServiceError):
    """The vanity url resolver could not be reached or answered with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            service="SteamGateway",
            operation="resolve",
            external_service="steam",
            status_code=status_code,
            context=context,
            original_error=original_error,
        )
