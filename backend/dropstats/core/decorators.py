"""
Service layer decorators for common functionality.

This module provides decorators for error handling and logging in the
service layer.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Dict, Type, ParamSpec, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import DatabaseError, ServiceException

logger = structlog.get_logger(__name__)

# Type variables for generic decorator typing
P = ParamSpec("P")
R = TypeVar("R")


def _build_context(
    func: Callable[..., Any],
    service_name: str,
    args: tuple,
    kwargs: dict,
    include_context: bool,
) -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "service": service_name,
        "operation": func.__name__,
    }
    if not include_context:
        return context

    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()
    for name, value in bound_args.arguments.items():
        if name == "self":
            continue
        # Limit string values to avoid huge log entries
        context[name] = str(value)[:100] if value is not None else None
    return context


def service_error_handler(
    service_name: str,
    include_context: bool = True,
    default_error_type: Type[ServiceException] = ServiceException,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Decorator for handling service method errors with structured logging.

    Service exceptions propagate unchanged. SQLAlchemy errors that escaped
    the store are wrapped in ``DatabaseError``; anything else in
    ``default_error_type``.

    :param service_name: Name of the service (e.g., "StatsService")
    :param include_context: Whether to include method parameters in log context
    :param default_error_type: Exception type used to wrap unexpected errors
    :returns: Decorated coroutine function

    :example:
        @service_error_handler("StatsService")
        async def player_stats(self, steam_id: SteamID) -> PlayerStats:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        operation_name = func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            context = _build_context(func, service_name, args, kwargs, include_context)
            logger.debug("Service method called", **context)

            try:
                result = await func(*args, **kwargs)
            except ServiceException as e:
                logger.info(
                    "Service operation failed",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    error_context=e.context,
                    **context,
                )
                raise
            except SQLAlchemyError as e:
                logger.error(
                    "Database error in service operation",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise DatabaseError(
                    message=str(e),
                    service=service_name,
                    operation=operation_name,
                    original_error=e,
                ) from e
            except Exception as e:
                logger.error(
                    "Unexpected error in service operation",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise default_error_type(
                    message=f"Unexpected error in {service_name}.{operation_name}: {e}",
                    service=service_name,
                    operation=operation_name,
                    original_error=e,
                ) from e

            logger.debug("Service method completed successfully", **context)
            return result

        return wrapper

    return decorator
