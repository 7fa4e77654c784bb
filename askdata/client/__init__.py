"""Client for the turn stream."""

from .consumer import AssistantStatus, DisplayMessage, StreamConsumer
from .session import ChatSession

__all__ = ["AssistantStatus", "DisplayMessage", "StreamConsumer", "ChatSession"]
