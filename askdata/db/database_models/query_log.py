"""Query log database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class QueryLogDO:
    """One natural language query attempt - maps to query_logs table."""

    id: str
    data_source_id: str
    workspace_id: str
    prompt: str
    query: str
    success: bool = False
    error_message: Optional[str] = None
    positive_feedback: Optional[str] = None
    negative_feedback: Optional[str] = None
    use_as_example: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
