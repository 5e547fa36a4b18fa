# Core infrastructure
from academy.core.context import (
    LessonContext,
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)
from academy.core.logging import configure_structlog, get_logger
from academy.core.middleware import RequestContextMiddleware


__all__ = [
    "LessonContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "set_request_id",
    "set_user_id",
]
