"""API and domain models."""

from .conversation import (
    ConversationResponse,
    ConversationListResponse,
    UpdateConversationRequest,
    TranscriptMessageResponse,
    ConversationMessagesResponse,
    DeleteConversationResponse,
)
from .tool import (
    RunNaturalLanguageQueryArgs,
    DisplayReportArgs,
    SearchOnWebArgs,
    SaveInformationArgs,
    RegisterUserFeedbackArgs,
)

__all__ = [
    "ConversationResponse",
    "ConversationListResponse",
    "UpdateConversationRequest",
    "TranscriptMessageResponse",
    "ConversationMessagesResponse",
    "DeleteConversationResponse",
    "RunNaturalLanguageQueryArgs",
    "DisplayReportArgs",
    "SearchOnWebArgs",
    "SaveInformationArgs",
    "RegisterUserFeedbackArgs",
]
