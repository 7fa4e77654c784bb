"""Run orchestrator - drives one conversational turn end to end."""

import asyncio
import json
from typing import AsyncIterator, List, Optional, Set
from uuid import uuid4

from ..db.database_models import ConversationDO, MessageDO, UserDO, WorkspaceDO
from ..db.repositories import ConversationRepository, MessageRepository
from ..errors import AskDataError, ConversationNotFoundError, ToolNotFoundError, ToolValidationError
from ..models.run import (
    TERMINAL_EVENT_STATES,
    ProviderEvent,
    ProviderEventType,
    RunLifecycle,
    RunState,
    ToolCall,
    ToolCallStatus,
    ToolOutput,
    TurnRequest,
)
from ..protocol.stream import TurnStream
from ..providers.base import AgentRunProvider
from ..tools.registry import ToolContext, ToolRegistry
from ..utils.logger import get_logger, reset_conversation_id, set_conversation_id
from ..utils.query import parse_json_output
from .instructions import InstructionsBuilder
from .recorder import TranscriptRecorder
from .titles import TitleGenerator


class RunOrchestrator:
    """Starts runs, forwards their events and services tool calls.

    ``start_turn`` does everything that can fail with a client error before
    the response starts; the run itself is driven by a background task that
    writes into the returned :class:`TurnStream`.
    """

    def __init__(
        self,
        provider: AgentRunProvider,
        registry: ToolRegistry,
        recorder: TranscriptRecorder,
        conversations: ConversationRepository,
        messages: MessageRepository,
        instructions: InstructionsBuilder,
        titles: TitleGenerator
    ):
        self.provider = provider
        self.registry = registry
        self.recorder = recorder
        self.conversations = conversations
        self.messages = messages
        self.instructions = instructions
        self.titles = titles
        self.logger = get_logger("orchestrator")
        self._tasks: Set[asyncio.Task] = set()

    async def start_turn(self, request: TurnRequest, user: UserDO, workspace: WorkspaceDO) -> TurnStream:
        """
        Start a turn and return the stream the response will read.

        Args:
            request: User text, optional conversation ID and attachments
            user: Caller
            workspace: Caller's workspace

        Returns:
            TurnStream fed by the run driver

        Raises:
            ConversationNotFoundError: If the conversation does not belong to the caller
        """
        conversation = await self.get_or_create_conversation(request, user, workspace)
        thread_id = conversation.external_thread_id

        file_ids = []
        for file in request.files:
            file_ids.append(await self.provider.upload_file(file))

        message = await self.provider.add_user_message(thread_id, request.text, file_ids)
        self.messages.add(MessageDO(
            conversation_id=conversation.id,
            uuid=message.id,
            role="user",
            content=request.text,
            data={"attachments": [{"filename": file.filename} for file in request.files]} if request.files else None,
            created_at=message.created_at,
        ))

        instructions = await self.instructions.build(user, workspace, request.text)

        stream = TurnStream()
        stream.send_control(conversation.id, message.id)

        context = ToolContext(conversation_id=conversation.id, user=user, workspace=workspace)
        task = asyncio.create_task(self._drive(stream, conversation, instructions, context))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self.logger.info(f"Started turn in conversation {conversation.id}")
        return stream

    async def get_or_create_conversation(self, request: TurnRequest, user: UserDO, workspace: WorkspaceDO) -> ConversationDO:
        if request.conversation_id:
            conversation = self.conversations.get_for_owner(request.conversation_id, user.id, workspace.id)
            if conversation is None:
                raise ConversationNotFoundError(request.conversation_id)
            return conversation

        thread_id = await self.provider.create_thread()
        title = await self.titles.generate(request.text)
        conversation = ConversationDO(
            id=str(uuid4()),
            external_thread_id=thread_id,
            owner_id=user.id,
            workspace_id=workspace.id,
            title=title,
        )
        if not self.conversations.create(conversation):
            raise AskDataError("Failed to create conversation")
        return conversation

    async def _drive(self, stream: TurnStream, conversation: ConversationDO, instructions: str, context: ToolContext):
        """Run driver: forward events and service tool calls until the run ends."""
        lifecycle = RunLifecycle()
        thread_id = conversation.external_thread_id
        log_token = set_conversation_id(conversation.id)

        try:
            lifecycle.transition(RunState.STREAMING)
            events = self.provider.start_run(thread_id, instructions)

            while True:
                pending = await self._forward(events, stream, lifecycle, conversation.id, thread_id)
                if pending is None:
                    break

                lifecycle.transition(RunState.REQUIRES_ACTION)
                self.logger.info(f"Run {lifecycle.run_id} requires {len(pending)} tool call(s)")
                outputs = await self._dispatch_batch(pending, stream, context)

                lifecycle.transition(RunState.STREAMING)
                events = self.provider.submit_tool_outputs(thread_id, lifecycle.run_id, outputs)

            self.logger.info(f"Run {lifecycle.run_id} finished: {lifecycle.state.value}")
        except Exception as e:
            self.logger.exception(f"Run failed in conversation {conversation.id}")
            stream.send_error(str(e) or e.__class__.__name__)
        finally:
            stream.close()
            reset_conversation_id(log_token)

    async def _forward(
        self,
        events: AsyncIterator[ProviderEvent],
        stream: TurnStream,
        lifecycle: RunLifecycle,
        conversation_id: str,
        thread_id: str
    ) -> Optional[List[ToolCall]]:
        """
        Forward one provider stream to the client.

        Returns:
            Tool calls when the run paused for action, None when it ended
        """
        pending: Optional[List[ToolCall]] = None

        async for event in events:
            if event.run_id and lifecycle.run_id is None:
                lifecycle.run_id = event.run_id
                self.recorder.track(self.provider, conversation_id, thread_id, event.run_id)

            if event.type == ProviderEventType.MESSAGE_CREATED:
                stream.send_message_start(event.message_id)
            elif event.type == ProviderEventType.TEXT_DELTA:
                stream.send_text_delta(event.text or "")
            elif event.type == ProviderEventType.REQUIRES_ACTION:
                pending = list(event.tool_calls)
            elif event.type in TERMINAL_EVENT_STATES:
                lifecycle.transition(TERMINAL_EVENT_STATES[event.type])
                if event.type in (ProviderEventType.RUN_FAILED, ProviderEventType.RUN_EXPIRED):
                    raise AskDataError(event.error or f"Run {lifecycle.state.value}")
                return None

        if pending is None:
            raise AskDataError("Run stream ended before the run finished")
        return pending

    async def _dispatch_batch(self, calls: List[ToolCall], stream: TurnStream, context: ToolContext) -> List[ToolOutput]:
        """Run a batch of tool calls concurrently and collect their outputs."""
        outputs = await asyncio.gather(*(self._run_tool_call(call, stream, context) for call in calls))
        return list(outputs)

    async def _run_tool_call(self, call: ToolCall, stream: TurnStream, context: ToolContext) -> ToolOutput:
        """Validate and run one tool call; every call ends completed or failed."""
        input_value = parse_json_output(call.arguments)

        try:
            spec = self.registry.get(call.name)
        except ToolNotFoundError as e:
            self.logger.error(str(e))
            return self._fail(call, stream, input_value, str(e), notify=True)

        try:
            arguments = self.registry.validate(call.name, call.arguments)
        except ToolValidationError as e:
            self.logger.error(f"Validation error for {call.name}: {e.message}")
            return self._fail(call, stream, input_value, e.message, notify=spec.notify)

        call.advance(ToolCallStatus.IN_PROGRESS)
        if spec.notify:
            stream.send_tool_event(call.id, call.status.value, input_value, {}, call.name)

        try:
            output = await self.registry.dispatch(call.name, arguments, context)
        except Exception as e:
            self.logger.exception(f"Tool {call.name} raised")
            return self._fail(call, stream, input_value, str(e), notify=spec.notify)

        call.advance(ToolCallStatus.COMPLETED)
        if spec.notify:
            stream.send_tool_event(call.id, call.status.value, input_value, parse_json_output(output), call.name)
        return ToolOutput(tool_call_id=call.id, output=output)

    @staticmethod
    def _fail(call: ToolCall, stream: TurnStream, input_value, message: str, notify: bool) -> ToolOutput:
        call.advance(ToolCallStatus.FAILED)
        if notify:
            stream.send_tool_event(call.id, call.status.value, input_value, {"error": message}, call.name)
        return ToolOutput(tool_call_id=call.id, output=json.dumps({"error": message}))

    async def wait_idle(self):
        """Wait for every running driver to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
