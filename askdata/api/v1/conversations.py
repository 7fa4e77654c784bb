"""Conversation REST API routes - V1."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from ...config import Settings
from ...db import (
    ConversationRepository,
    DatabaseConnection,
    MessageRepository,
    UserRepository,
    WorkspaceRepository,
)
from ...db.database_models import ConversationDO, MessageDO, UserDO, WorkspaceDO
from ...errors import ConversationNotFoundError
from ...models.conversation import (
    ConversationListResponse,
    ConversationMessagesResponse,
    ConversationResponse,
    DeleteConversationResponse,
    TranscriptMessageResponse,
    UpdateConversationRequest,
)
from ...models.run import TurnRequest, UploadedFile
from ...providers.base import AgentRunProvider
from ...services import InstructionsBuilder, RunOrchestrator, TitleGenerator, TranscriptRecorder
from ...tools.registry import ToolRegistry
from ...utils.logger import get_logger

router = APIRouter(prefix="/api/v1/conversations", tags=["Conversations"])

ALLOWED_FILE_TYPES = {
    "text/csv",
    "text/plain",
    "text/markdown",
    "application/json",
    "application/pdf",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
}

# Database connection (set by main.py)
db_conn: DatabaseConnection = None
# Application settings (set by main.py)
settings: Settings = None
# Builds the agent runtime client for a workspace (set by main.py)
provider_factory: Callable[[WorkspaceDO], AgentRunProvider] = None
# Shared collaborators (set by main.py)
tool_registry: ToolRegistry = None
recorder: TranscriptRecorder = None
instructions_builder: InstructionsBuilder = None
title_generator: TitleGenerator = None


@dataclass
class Caller:
    """Authenticated user and their workspace."""

    user: UserDO
    workspace: WorkspaceDO


def get_db() -> DatabaseConnection:
    """Dependency to get the database connection."""
    if db_conn is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return db_conn


def get_conversation_repo(db: DatabaseConnection = Depends(get_db)) -> ConversationRepository:
    """Dependency to get conversation repository."""
    return ConversationRepository(db.conn)


def get_message_repo(db: DatabaseConnection = Depends(get_db)) -> MessageRepository:
    """Dependency to get message repository."""
    return MessageRepository(db.conn)


async def get_caller(
    x_user_id: Optional[str] = Header(None),
    db: DatabaseConnection = Depends(get_db)
) -> Caller:
    """Resolve the caller from the X-User-Id header.

    Runs on the event loop thread, like every other use of the connection.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    user = UserRepository(db.conn).get(x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    workspace = WorkspaceRepository(db.conn).get(user.workspace_id)
    if not workspace:
        raise HTTPException(status_code=401, detail="User has no workspace")

    return Caller(user=user, workspace=workspace)


async def get_provider(caller: Caller = Depends(get_caller)) -> AgentRunProvider:
    """Dependency to build the agent runtime client for the caller's workspace."""
    if provider_factory is None:
        raise HTTPException(status_code=500, detail="Agent provider not initialized")
    return provider_factory(caller.workspace)


async def get_orchestrator(
    provider: AgentRunProvider = Depends(get_provider),
    conversations: ConversationRepository = Depends(get_conversation_repo),
    messages: MessageRepository = Depends(get_message_repo)
) -> RunOrchestrator:
    """Dependency to get a run orchestrator bound to this request's provider."""
    if tool_registry is None or recorder is None or instructions_builder is None or title_generator is None:
        raise HTTPException(status_code=500, detail="Conversation services not initialized")
    return RunOrchestrator(
        provider=provider,
        registry=tool_registry,
        recorder=recorder,
        conversations=conversations,
        messages=messages,
        instructions=instructions_builder,
        titles=title_generator,
    )


def _to_response(conv: ConversationDO) -> ConversationResponse:
    """Convert ConversationDO to ConversationResponse."""
    return ConversationResponse(
        id=conv.id,
        title=conv.title,
        external_thread_id=conv.external_thread_id,
        owner_id=conv.owner_id,
        workspace_id=conv.workspace_id,
        created_at=conv.created_at
    )


def _to_message_response(message: MessageDO) -> TranscriptMessageResponse:
    return TranscriptMessageResponse(
        id=message.id,
        uuid=message.uuid,
        role=message.role,
        content=message.content,
        data=message.data,
        created_at=message.created_at
    )


def _get_owned_conversation(repo: ConversationRepository, conversation_id: str, caller: Caller) -> ConversationDO:
    conversation = repo.get_for_owner(conversation_id, caller.user.id, caller.workspace.id)
    if not conversation:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")
    return conversation


async def _read_uploads(files: List[UploadFile]) -> List[UploadedFile]:
    """Check attachment limits and read their content."""
    max_files = settings.max_upload_files if settings else 10
    max_size = settings.max_upload_size if settings else 200 * 1024 * 1024

    if len(files) > max_files:
        raise HTTPException(status_code=400, detail=f"Too many files, at most {max_files} allowed")

    uploads = []
    for file in files:
        if file.content_type not in ALLOWED_FILE_TYPES:
            raise HTTPException(status_code=403, detail="File type not allowed!")
        content = await file.read()
        if len(content) > max_size:
            raise HTTPException(status_code=400, detail=f"File too large: {file.filename}")
        uploads.append(UploadedFile(
            filename=file.filename or "file",
            content=content,
            content_type=file.content_type,
        ))
    return uploads


@router.post("/turns")
async def run_turn(
    text: str = Form(..., min_length=1),
    conversationId: Optional[str] = Form(None),
    file: Optional[List[UploadFile]] = File(None),
    caller: Caller = Depends(get_caller),
    orchestrator: RunOrchestrator = Depends(get_orchestrator)
):
    """
    Send a user message and stream the agent's turn.

    The body is a chunked text/plain stream, one ``<kind>:<json>`` event per line.
    """
    uploads = await _read_uploads(file or [])
    request = TurnRequest(text=text, conversation_id=conversationId or None, files=uploads)

    try:
        stream = await orchestrator.start_turn(request, caller.user, caller.workspace)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return StreamingResponse(stream.chunks(), media_type="text/plain; charset=utf-8")


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    caller: Caller = Depends(get_caller),
    repo: ConversationRepository = Depends(get_conversation_repo)
):
    """List the caller's conversations, newest first."""
    conversations = repo.list_by_owner(caller.user.id, caller.workspace.id)

    return ConversationListResponse(
        conversations=[_to_response(c) for c in conversations],
        total=len(conversations)
    )


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    caller: Caller = Depends(get_caller),
    repo: ConversationRepository = Depends(get_conversation_repo)
):
    """Get conversation details."""
    return _to_response(_get_owned_conversation(repo, conversation_id, caller))


@router.get("/{conversation_id}/messages", response_model=ConversationMessagesResponse)
async def get_conversation_messages(
    conversation_id: str,
    caller: Caller = Depends(get_caller),
    repo: ConversationRepository = Depends(get_conversation_repo),
    message_repo: MessageRepository = Depends(get_message_repo)
):
    """Get the durable transcript of a conversation."""
    conversation = _get_owned_conversation(repo, conversation_id, caller)
    messages = message_repo.get_by_conversation(conversation.id)

    return ConversationMessagesResponse(
        conversation_id=conversation.id,
        messages=[_to_message_response(m) for m in messages],
        total=len(messages)
    )


@router.put("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: str,
    request: UpdateConversationRequest,
    caller: Caller = Depends(get_caller),
    repo: ConversationRepository = Depends(get_conversation_repo)
):
    """Rename a conversation."""
    conversation = _get_owned_conversation(repo, conversation_id, caller)

    if not repo.update_title(conversation.id, request.title):
        raise HTTPException(status_code=500, detail="Failed to update conversation")

    conversation.title = request.title
    return _to_response(conversation)


@router.delete("/{conversation_id}", response_model=DeleteConversationResponse)
async def delete_conversation(
    conversation_id: str,
    caller: Caller = Depends(get_caller),
    provider: AgentRunProvider = Depends(get_provider),
    repo: ConversationRepository = Depends(get_conversation_repo),
    message_repo: MessageRepository = Depends(get_message_repo)
):
    """Delete a conversation, its external thread and its transcript."""
    logger = get_logger("api")
    conversation = _get_owned_conversation(repo, conversation_id, caller)

    try:
        await provider.delete_thread(conversation.external_thread_id)
    except Exception as e:
        logger.error(f"Failed to delete external thread {conversation.external_thread_id}: {e}")

    message_repo.delete_by_conversation(conversation.id)
    if not repo.delete(conversation.id):
        raise HTTPException(status_code=500, detail="Failed to delete conversation")

    return DeleteConversationResponse(
        message="Conversation deleted successfully",
        conversation_id=conversation.id
    )
