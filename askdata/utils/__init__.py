"""Utilities package."""

from .logger import get_app_logger, get_logger, init_app_logger, set_conversation_id, setup_logger
from .query import (
    ensure_read_only,
    extract_query,
    handle_schema,
    is_write_operation,
    parse_json_output,
    wrap_query,
)

__all__ = [
    "get_app_logger",
    "get_logger",
    "setup_logger",
    "init_app_logger",
    "set_conversation_id",
    "ensure_read_only",
    "extract_query",
    "handle_schema",
    "is_write_operation",
    "parse_json_output",
    "wrap_query",
]
