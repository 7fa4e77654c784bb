"""Transcript recorder.

Rebuilds the durable transcript of a run from the provider's step log once
the run has finished, independently of the live stream.
"""

import asyncio
from typing import Iterable, List, Set

from ..db.database_models import MessageDO
from ..db.repositories import MessageRepository
from ..models.run import ACTIVE_RUN_STATUSES, RunStep
from ..providers.base import AgentRunProvider
from ..utils.logger import get_logger
from ..utils.query import parse_json_output

# Built-in runtime tools, recorded under these names
_BUILTIN_TOOL_NAMES = {
    "code_interpreter": "code_interpreter",
    "file_search": "retrieval",
    "retrieval": "retrieval",
}


class TranscriptRecorder:
    """Writes every assistant message and tool event of a run exactly once."""

    def __init__(
        self,
        messages: MessageRepository,
        recorded_tool_names: Iterable[str],
        poll_interval: float = 2.0
    ):
        self.messages = messages
        self.recorded_tool_names = frozenset(recorded_tool_names)
        self.poll_interval = poll_interval
        self.logger = get_logger("recorder")
        self._tasks: Set[asyncio.Task] = set()

    def track(self, provider: AgentRunProvider, conversation_id: str, thread_id: str, run_id: str) -> asyncio.Task:
        """
        Record a run in the background once it finishes.

        Args:
            provider: Agent runtime that owns the run
            conversation_id: Conversation the run belongs to
            thread_id: External thread ID
            run_id: Run ID

        Returns:
            The background task
        """
        task = asyncio.create_task(self.record(provider, conversation_id, thread_id, run_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.logger.debug(f"Tracking run {run_id} for conversation {conversation_id}")
        return task

    async def record(self, provider: AgentRunProvider, conversation_id: str, thread_id: str, run_id: str) -> int:
        """
        Wait for the run to finish and persist its messages.

        Returns:
            Number of messages inserted (0 on failure or when already recorded)
        """
        try:
            status = await self.wait_for_completion(provider, thread_id, run_id)
            steps = await provider.list_run_steps(thread_id, run_id)
            messages = self.build_messages(conversation_id, steps)
            added = self.messages.add_batch(messages)
            self.logger.info(
                f"Recorded run {run_id} ({status}): {added} of {len(messages)} messages added"
            )
            return added
        except Exception:
            self.logger.exception(f"Failed to record run {run_id}")
            return 0

    async def wait_for_completion(self, provider: AgentRunProvider, thread_id: str, run_id: str) -> str:
        """Poll the run until its status is no longer active."""
        status = await provider.get_run_status(thread_id, run_id)
        while status in ACTIVE_RUN_STATUSES:
            await asyncio.sleep(self.poll_interval)
            status = await provider.get_run_status(thread_id, run_id)
        return status

    def build_messages(self, conversation_id: str, steps: List[RunStep]) -> List[MessageDO]:
        """Turn run steps into transcript messages."""
        messages = []
        for step in steps:
            if step.type == "message_creation":
                if step.message_text is None:
                    continue
                messages.append(MessageDO(
                    conversation_id=conversation_id,
                    uuid=step.id,
                    role="assistant",
                    content=step.message_text,
                    created_at=step.created_at,
                ))

            elif step.type == "tool_calls":
                for index, call in enumerate(step.tool_calls):
                    if call.type == "function":
                        if call.name not in self.recorded_tool_names:
                            continue
                        name = call.name
                        input_value = parse_json_output(call.arguments)
                        output_value = parse_json_output(call.output)
                    elif call.type in _BUILTIN_TOOL_NAMES:
                        name = _BUILTIN_TOOL_NAMES[call.type]
                        input_value = {}
                        output_value = {}
                    else:
                        continue

                    messages.append(MessageDO(
                        conversation_id=conversation_id,
                        uuid=f"{step.id}:{index}",
                        role="data",
                        content="",
                        data={
                            "status": "completed",
                            "input": input_value,
                            "output": output_value,
                            "name": name,
                        },
                        created_at=step.created_at,
                    ))
        return messages

    async def wait_idle(self):
        """Wait for every tracked run to be recorded."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
