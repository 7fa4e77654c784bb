"""Database models (Data Objects) - map to database tables."""

from .account import WorkspaceDO, UserDO, DataSourceDO
from .conversation import ConversationDO
from .message import MessageDO
from .query_log import QueryLogDO
from .message_log import MessageLogDO

__all__ = [
    "WorkspaceDO",
    "UserDO",
    "DataSourceDO",
    "ConversationDO",
    "MessageDO",
    "QueryLogDO",
    "MessageLogDO",
]
