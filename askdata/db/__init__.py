"""Database package - connection, models, and repositories."""

from .connection import DatabaseConnection
from .repositories.account import WorkspaceRepository, UserRepository, DataSourceRepository
from .repositories.conversation import ConversationRepository
from .repositories.message import MessageRepository
from .repositories.query_log import QueryLogRepository
from .repositories.message_log import MessageLogRepository

__all__ = [
    "DatabaseConnection",
    "WorkspaceRepository",
    "UserRepository",
    "DataSourceRepository",
    "ConversationRepository",
    "MessageRepository",
    "QueryLogRepository",
    "MessageLogRepository",
]
