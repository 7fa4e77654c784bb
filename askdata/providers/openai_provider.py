"""OpenAI implementations of the agent runtime, completion and semantic search."""

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import numpy as np
from openai import AsyncOpenAI

from ..models.run import (
    ProviderEvent,
    ProviderEventType,
    RunStep,
    StepToolCall,
    ThreadMessage,
    ToolCall,
    ToolOutput,
    UploadedFile,
)
from ..utils.logger import get_logger
from .base import AgentRunProvider, CompletionClient, SearchResult, SemanticSearch

_TERMINAL_RUN_EVENTS = {
    "thread.run.completed": ProviderEventType.RUN_COMPLETED,
    "thread.run.failed": ProviderEventType.RUN_FAILED,
    "thread.run.expired": ProviderEventType.RUN_EXPIRED,
    "thread.run.cancelled": ProviderEventType.RUN_CANCELLED,
}


def build_openai_client(settings) -> AsyncOpenAI:
    """Create an AsyncOpenAI client from application settings."""
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )


def _timestamp(value: Optional[int]) -> datetime:
    if value is None:
        return datetime.utcnow()
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)


class OpenAIAgentRunProvider(AgentRunProvider):
    """Agent runtime backed by the OpenAI Assistants API.

    One instance is built per request, bound to the workspace assistant.
    """

    def __init__(self, client: AsyncOpenAI, assistant_id: str):
        self.client = client
        self.assistant_id = assistant_id
        self.logger = get_logger("providers.openai")

    async def create_thread(self) -> str:
        thread = await self.client.beta.threads.create()
        self.logger.info(f"Created external thread {thread.id}")
        return thread.id

    async def delete_thread(self, thread_id: str) -> None:
        await self.client.beta.threads.delete(thread_id)
        self.logger.info(f"Deleted external thread {thread_id}")

    async def upload_file(self, file: UploadedFile) -> str:
        uploaded = await self.client.files.create(
            file=(file.filename, file.content),
            purpose="assistants",
        )
        return uploaded.id

    async def add_user_message(self, thread_id: str, text: str, file_ids: Sequence[str] = ()) -> ThreadMessage:
        attachments = [
            {"file_id": file_id, "tools": [{"type": "code_interpreter"}]}
            for file_id in file_ids
        ]
        message = await self.client.beta.threads.messages.create(
            thread_id=thread_id,
            role="user",
            content=text,
            attachments=attachments or None,
        )
        return ThreadMessage(id=message.id, created_at=_timestamp(message.created_at))

    async def start_run(self, thread_id: str, instructions: str) -> AsyncIterator[ProviderEvent]:
        manager = self.client.beta.threads.runs.stream(
            thread_id=thread_id,
            assistant_id=self.assistant_id,
            additional_instructions=instructions,
        )
        async for event in self._forward(manager):
            yield event

    async def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> AsyncIterator[ProviderEvent]:
        manager = self.client.beta.threads.runs.submit_tool_outputs_stream(
            thread_id=thread_id,
            run_id=run_id,
            tool_outputs=[
                {"tool_call_id": output.tool_call_id, "output": output.output}
                for output in outputs
            ],
        )
        async for event in self._forward(manager):
            yield event

    async def _forward(self, manager) -> AsyncIterator[ProviderEvent]:
        """Translate Assistants stream events into provider events."""
        async with manager as stream:
            async for event in stream:
                normalized = self._normalize_event(event.event, event.data)
                for item in normalized:
                    yield item

    def _normalize_event(self, name: str, data: Any) -> List[ProviderEvent]:
        if name == "thread.run.created":
            return [ProviderEvent(type=ProviderEventType.RUN_CREATED, run_id=data.id)]

        if name == "thread.message.created":
            return [ProviderEvent(
                type=ProviderEventType.MESSAGE_CREATED,
                run_id=data.run_id,
                message_id=data.id,
            )]

        if name == "thread.message.delta":
            events = []
            for part in data.delta.content or []:
                if part.type == "text" and part.text and part.text.value:
                    events.append(ProviderEvent(
                        type=ProviderEventType.TEXT_DELTA,
                        message_id=data.id,
                        text=part.text.value,
                    ))
            return events

        if name == "thread.run.requires_action":
            tool_calls = [
                ToolCall(
                    id=call.id,
                    name=call.function.name,
                    arguments=call.function.arguments,
                )
                for call in data.required_action.submit_tool_outputs.tool_calls
            ]
            return [ProviderEvent(
                type=ProviderEventType.REQUIRES_ACTION,
                run_id=data.id,
                tool_calls=tool_calls,
            )]

        if name in _TERMINAL_RUN_EVENTS:
            error = data.last_error.message if getattr(data, "last_error", None) else None
            return [ProviderEvent(type=_TERMINAL_RUN_EVENTS[name], run_id=data.id, error=error)]

        return []

    async def get_run_status(self, thread_id: str, run_id: str) -> str:
        run = await self.client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)
        return run.status

    async def list_run_steps(self, thread_id: str, run_id: str) -> List[RunStep]:
        steps = []
        async for step in self.client.beta.threads.runs.steps.list(run_id, thread_id=thread_id, order="asc"):
            details = step.step_details

            if details.type == "message_creation":
                message = await self.client.beta.threads.messages.retrieve(
                    details.message_creation.message_id, thread_id=thread_id
                )
                text = None
                if message.content and message.content[0].type == "text":
                    text = message.content[0].text.value
                steps.append(RunStep(
                    id=step.id,
                    type="message_creation",
                    created_at=_timestamp(message.created_at),
                    message_text=text,
                ))

            elif details.type == "tool_calls":
                tool_calls = []
                for call in details.tool_calls:
                    if call.type == "function":
                        tool_calls.append(StepToolCall(
                            type="function",
                            name=call.function.name,
                            arguments=call.function.arguments,
                            output=call.function.output,
                        ))
                    else:
                        tool_calls.append(StepToolCall(type=call.type))
                steps.append(RunStep(
                    id=step.id,
                    type="tool_calls",
                    created_at=_timestamp(step.created_at),
                    tool_calls=tool_calls,
                ))

        return steps


class OpenAICompletionClient(CompletionClient):
    """Chat completions with a default model."""

    def __init__(self, client: AsyncOpenAI, default_model: str):
        self.client = client
        self.default_model = default_model

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        json_mode: bool = False
    ) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        completion = await self.client.chat.completions.create(
            model=model or self.default_model,
            messages=messages,
            **kwargs,
        )
        return completion.choices[0].message.content or ""


class EmbeddingSemanticSearch(SemanticSearch):
    """Cosine similarity over OpenAI embeddings."""

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-3-large", threshold: float = 0.75):
        self.client = client
        self.model = model
        self.threshold = threshold
        self.logger = get_logger("providers.semantic_search")

    async def _embed(self, texts: List[str]) -> np.ndarray:
        response = await self.client.embeddings.create(model=self.model, input=texts)
        return np.array([item.embedding for item in response.data], dtype=float)

    async def search(self, query: str, documents: List[str]) -> List[SearchResult]:
        if not documents:
            return []

        embeddings = await self._embed([query] + list(documents))
        query_embedding = embeddings[0]
        document_embeddings = embeddings[1:]

        norms = np.linalg.norm(document_embeddings, axis=1) * np.linalg.norm(query_embedding)
        similarities = (document_embeddings @ query_embedding) / np.where(norms == 0, 1.0, norms)

        results = [
            SearchResult(document=document, similarity=float(similarity))
            for document, similarity in zip(documents, similarities)
            if similarity > self.threshold
        ]
        results.sort(key=lambda result: result.similarity, reverse=True)
        self.logger.debug(f"Semantic search matched {len(results)} of {len(documents)} documents")
        return results
