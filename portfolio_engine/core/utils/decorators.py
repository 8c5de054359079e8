"""
Utility decorators for transaction logging.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

# Request fields that are safe to put in log context
_LOGGED_FIELDS = ("kind", "amount", "retry_count", "request_id")


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value"):
        return str(value.value)  # Handle enum values
    elif hasattr(value, "quantize"):
        return str(value)  # Handle Decimal types
    else:
        return value


def _extract_transaction_context(bound_args: inspect.BoundArguments) -> dict[str, Any]:
    """Extract loggable request fields from function arguments.

    Destination accounts and payloads are never logged.
    """
    context = {}
    for param_name, value in bound_args.arguments.items():
        if param_name == "self":
            continue
        if param_name in _LOGGED_FIELDS:
            context[param_name] = _serialize_parameter_value(value)
        for field_name in _LOGGED_FIELDS:
            if hasattr(value, field_name) and not callable(getattr(value, field_name)):
                context[field_name] = _serialize_parameter_value(getattr(value, field_name))
    return context


def _create_result_context(
    base_context: dict[str, Any], execution_time_ms: float, result: Any
) -> dict[str, Any]:
    """Create completion logging context."""
    result_context = {
        **base_context,
        "execution_time_ms": round(execution_time_ms, 2),
        "result_type": type(result).__name__,
    }
    outcome = getattr(result, "outcome", None)
    if outcome is not None:
        result_context["outcome"] = _serialize_parameter_value(outcome)
        result_context["status_code"] = getattr(result, "status_code", None)
    return result_context


def _create_error_context(
    base_context: dict[str, Any], execution_time_ms: float, error: Exception
) -> dict[str, Any]:
    """Create error logging context."""
    return {
        **base_context,
        "success": False,
        "execution_time_ms": round(execution_time_ms, 2),
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


def _setup_logging_context(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[dict[str, Any], str]:
    """Setup logging context for a transaction submission."""
    sig = inspect.signature(func)
    bound_args = sig.bind(*args, **kwargs)
    bound_args.apply_defaults()

    context = {
        "correlation_id": str(uuid.uuid4())[:8],
        "timestamp": str(time.time()),
        **_extract_transaction_context(bound_args),
    }
    return context, func.__name__


def log_transactions(func: F) -> F:
    """Decorator to log async transaction submissions with correlation IDs.

    Successful outcomes log at SUCCESS level, other terminal outcomes at
    WARNING. Exceptions are logged and re-raised.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        context, func_name = _setup_logging_context(func, args, kwargs)
        logger.info(f"Transaction started: {func_name}", extra=context)
        start_time = time.time()

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = (time.time() - start_time) * 1000
            error_context = _create_error_context(context, execution_time_ms, e)
            logger.error(f"Transaction failed: {func_name}", extra=error_context)
            raise

        execution_time_ms = (time.time() - start_time) * 1000
        result_context = _create_result_context(context, execution_time_ms, result)
        if getattr(result, "succeeded", False):
            logger.success(f"Transaction completed: {func_name}", extra=result_context)
        else:
            logger.warning(
                f"Transaction ended without success: {func_name} "
                f"({result_context.get('outcome')})",
                extra=result_context,
            )
        return result

    return wrapper  # type: ignore
