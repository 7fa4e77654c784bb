"""Query text helpers shared by the query tools."""

import json
import re
from typing import Any, Dict, List, Optional

from ..errors import QueryExtractionError, WriteOperationError

# Lexical check only: a token followed by a space anywhere in the text.
WRITE_OPERATIONS = ("insert", "update", "delete", "create", "drop", "alter")
_WRITE_OPERATION_PATTERN = re.compile(r"\b(?:%s) " % "|".join(WRITE_OPERATIONS))

_FENCED_BLOCK_PATTERN = re.compile(r"```[^\n]*\n([\s\S]*?)\n```")


def is_write_operation(query: str) -> bool:
    """Return True if the query text contains a write operation token."""
    return _WRITE_OPERATION_PATTERN.search(query.lower()) is not None


def ensure_read_only(query: str) -> None:
    """
    Reject queries that contain a write operation.

    Raises:
        WriteOperationError: If a write token is present
    """
    if is_write_operation(query):
        raise WriteOperationError()


def wrap_query(query: str, limit: Optional[int] = None) -> str:
    """
    Wrap a query so the database only returns a bounded number of rows.

    Args:
        query: Query text as written by the model or the user
        limit: Row limit, defaults to 1000

    Returns:
        Wrapped query
    """
    query_without_semicolon = query.replace(";", "")

    return (
        f"WITH query AS ({query_without_semicolon})\n"
        f"SELECT * FROM query\n"
        f"LIMIT {limit or 1000}"
    )


def extract_query(text: str) -> str:
    """
    Extract the query from the first fenced block of a model response.

    Later blocks are ignored.

    Raises:
        QueryExtractionError: If the response has no fenced block
    """
    match = _FENCED_BLOCK_PATTERN.search(text or "")
    if not match or not match.group(1).strip():
        raise QueryExtractionError()
    return match.group(1).strip()


def parse_json_output(value: Any) -> Any:
    """Decode a JSON string, returning the value unchanged when it is not JSON."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return value


def handle_schema(engine: str, schema: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Shape a stored data source schema for the prompt."""
    if engine == "BigQuery":
        return {
            "datasets": [
                {"tables": item.get("tables"), "dataset": item.get("schema")}
                for item in schema
            ]
        }

    return {"schemas": schema}
