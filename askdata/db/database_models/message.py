"""Transcript message database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class MessageDO:
    """Message data object - maps to messages table.

    ``role`` is ``user``, ``assistant`` or ``data``. Tool events keep
    ``{status, input, output, name}`` in ``data``; user messages keep their
    attachment names there.
    """

    conversation_id: str
    uuid: str
    role: str
    content: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None
