"""Message log database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class MessageLogDO:
    """Response-level feedback record - maps to message_logs table."""

    id: str
    workspace_id: str
    prompt: str
    response: str
    positive_feedback: Optional[str] = None
    negative_feedback: Optional[str] = None
    use_as_example: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
