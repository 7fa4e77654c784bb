"""External collaborators: agent runtime, completion, search and query execution."""

from .base import (
    AgentRunProvider,
    CompletionClient,
    QueryRunner,
    SearchResult,
    SemanticSearch,
    WebSearch,
)
from .openai_provider import (
    EmbeddingSemanticSearch,
    OpenAIAgentRunProvider,
    OpenAICompletionClient,
    build_openai_client,
)
from .query_runner import DuckDBQueryRunner
from .web_search import JinaWebSearch

__all__ = [
    "AgentRunProvider",
    "CompletionClient",
    "QueryRunner",
    "SearchResult",
    "SemanticSearch",
    "WebSearch",
    "EmbeddingSemanticSearch",
    "OpenAIAgentRunProvider",
    "OpenAICompletionClient",
    "build_openai_client",
    "DuckDBQueryRunner",
    "JinaWebSearch",
]
