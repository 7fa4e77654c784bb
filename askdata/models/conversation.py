"""Conversation API models."""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ConversationResponse(BaseModel):
    """Response model for conversation information."""

    id: str = Field(description="Conversation ID")
    title: str = Field(description="Conversation title")
    external_thread_id: str = Field(description="Thread ID on the agent runtime")
    owner_id: str = Field(description="User that owns the conversation")
    workspace_id: str = Field(description="Workspace the conversation belongs to")
    created_at: datetime = Field(description="Creation timestamp")


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationResponse] = Field(description="List of conversations")
    total: int = Field(description="Total number of conversations")


class UpdateConversationRequest(BaseModel):
    """Request model for renaming a conversation."""

    title: str = Field(description="New conversation title", min_length=1, max_length=200)


class TranscriptMessageResponse(BaseModel):
    """Response model for one transcript message."""

    id: Optional[int] = Field(None, description="Message ID")
    uuid: str = Field(description="Provider message or step ID")
    role: str = Field(description="Message role (user/assistant/data)")
    content: Optional[str] = Field(None, description="Message text")
    data: Optional[Dict[str, Any]] = Field(None, description="Tool event data or attachments")
    created_at: datetime = Field(description="Message timestamp")


class ConversationMessagesResponse(BaseModel):
    """Response model for conversation messages."""

    conversation_id: str = Field(description="Conversation ID")
    messages: List[TranscriptMessageResponse] = Field(description="List of messages")
    total: int = Field(description="Total number of messages")


class DeleteConversationResponse(BaseModel):
    """Response model for deleting a conversation."""

    message: str
    conversation_id: str
