"""Repository layer for data access."""

from .account import WorkspaceRepository, UserRepository, DataSourceRepository
from .conversation import ConversationRepository
from .message import MessageRepository
from .query_log import QueryLogRepository
from .message_log import MessageLogRepository

__all__ = [
    "WorkspaceRepository",
    "UserRepository",
    "DataSourceRepository",
    "ConversationRepository",
    "MessageRepository",
    "QueryLogRepository",
    "MessageLogRepository",
]
