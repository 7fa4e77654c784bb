"""Interfaces of the external collaborators used by the conversation service."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from ..models.run import ProviderEvent, RunStep, ThreadMessage, ToolOutput, UploadedFile


@dataclass
class SearchResult:
    """A document matched by semantic search."""

    document: str
    similarity: float


class AgentRunProvider(ABC):
    """Hosted agent runtime: threads, messages and streaming runs."""

    @abstractmethod
    async def create_thread(self) -> str:
        """Create an external thread and return its ID."""

    @abstractmethod
    async def delete_thread(self, thread_id: str) -> None:
        """Delete an external thread."""

    @abstractmethod
    async def upload_file(self, file: UploadedFile) -> str:
        """Upload an attachment and return the provider file ID."""

    @abstractmethod
    async def add_user_message(self, thread_id: str, text: str, file_ids: Sequence[str] = ()) -> ThreadMessage:
        """Append a user message to the thread."""

    @abstractmethod
    def start_run(self, thread_id: str, instructions: str) -> AsyncIterator[ProviderEvent]:
        """Start a run and stream its events until it ends or pauses."""

    @abstractmethod
    def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> AsyncIterator[ProviderEvent]:
        """Resume a paused run and stream its events until it ends or pauses again."""

    @abstractmethod
    async def get_run_status(self, thread_id: str, run_id: str) -> str:
        """Return the current status of a run."""

    @abstractmethod
    async def list_run_steps(self, thread_id: str, run_id: str) -> List[RunStep]:
        """Return the steps of a run in ascending order."""


class CompletionClient(ABC):
    """Single-shot chat completion."""

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        json_mode: bool = False
    ) -> str:
        """Return the text of the first choice."""


class SemanticSearch(ABC):
    """Rank documents by similarity to a query."""

    @abstractmethod
    async def search(self, query: str, documents: List[str]) -> List[SearchResult]:
        """Return documents above the similarity threshold, most similar first."""


class QueryRunner(ABC):
    """Executes read queries against a data source."""

    @abstractmethod
    async def run(
        self,
        engine: str,
        data_source_id: str,
        query: str,
        params: Optional[List[Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute a query and return its rows; raise on failure."""


class WebSearch(ABC):
    """Reads web pages and runs web searches."""

    @abstractmethod
    async def read(self, url: str) -> str:
        """Return the readable content of a page."""

    @abstractmethod
    async def search(self, query: str) -> str:
        """Return search results for a query."""
