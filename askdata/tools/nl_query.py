"""Natural language query tool.

Turns a question into a query with the completion model, runs it and feeds
any execution error back into the next attempt. Every attempt is stored as a
query log row, so the number of rows for one call always equals the number
of attempts made.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..db.database_models import DataSourceDO, QueryLogDO
from ..db.repositories import DataSourceRepository, QueryLogRepository
from ..errors import QueryExtractionError
from ..models.tool import RunNaturalLanguageQueryArgs
from ..providers.base import CompletionClient, QueryRunner, SemanticSearch
from ..utils.logger import get_logger
from ..utils.query import ensure_read_only, extract_query, handle_schema, wrap_query
from .registry import ToolContext

SYSTEM_PROMPT = (
    "You are a data analysis expert."
    "<instructions>\n"
    "1. Give the necessary SQL to user prompt.\n"
    "2. If the previous query failed, fix the error.\n"
    "3. Always use database schema in the query.\n"
    "4. Create the most generic query possible, because the user can make mistakes in information.\n"
    "5. Prefer use ID, if don't have an ID, use ilike for text fields with a single part of the text using %.\n"
    "</instructions>\n"
)

EXHAUSTED_MESSAGE = (
    "Query failed, please return to user the feedback and don't run the query again. "
    "Probably is a system error."
)


@dataclass
class RetryState:
    """Progress of one tool call across attempts."""

    attempt: int = 0
    last_error: Optional[str] = None
    last_query: Optional[str] = None


class NaturalLanguageQueryTool:
    """Handler for ``run_nl_query``."""

    def __init__(
        self,
        completion: CompletionClient,
        semantic_search: SemanticSearch,
        query_runner: QueryRunner,
        data_sources: DataSourceRepository,
        query_logs: QueryLogRepository,
        model: Optional[str] = None,
        max_attempts: int = 5,
        retry_delay: float = 2.0,
        row_limit: int = 100,
        examples_limit: int = 5
    ):
        self.completion = completion
        self.semantic_search = semantic_search
        self.query_runner = query_runner
        self.data_sources = data_sources
        self.query_logs = query_logs
        self.model = model
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.row_limit = row_limit
        self.examples_limit = examples_limit
        self.logger = get_logger("tools.nl_query")

    async def __call__(self, args: RunNaturalLanguageQueryArgs, context: ToolContext) -> str:
        data_source = self.data_sources.get(args.dataSource_id, context.workspace.id)
        if data_source is None:
            return json.dumps({"error": "DataSource not found"})

        examples = await self.related_queries(data_source, context.workspace.id, args.natural_language_query)
        state = RetryState()

        while True:
            state.attempt += 1
            messages = self.build_messages(args.natural_language_query, data_source, examples, state)
            response = await self.completion.complete(messages, model=self.model)

            try:
                query = extract_query(response)
            except QueryExtractionError as e:
                self.logger.warning(f"No query in model response for data source {data_source.id}")
                return json.dumps({"error": str(e)})

            log = self.query_logs.create(QueryLogDO(
                id=str(uuid4()),
                data_source_id=data_source.id,
                workspace_id=context.workspace.id,
                prompt=args.natural_language_query,
                query=query,
                success=False,
            ))

            try:
                self.logger.info(f"Running query (attempt {state.attempt}): {query}")
                rows = await self.execute(data_source, query)
            except Exception as e:
                error_message = str(e)
                self.logger.error(f"Query attempt {state.attempt} failed: {error_message}")
                self.query_logs.mark_failed(log.id, error_message)

                if state.attempt >= self.max_attempts:
                    return json.dumps({
                        "query": query,
                        "error": EXHAUSTED_MESSAGE,
                        "queryLogId": log.id,
                    })

                state.last_error = error_message
                state.last_query = query
                await asyncio.sleep(self.retry_delay)
                continue

            self.query_logs.mark_succeeded(log.id)
            return json.dumps({"query": query, "rows": rows, "queryLogId": log.id}, default=str)

    async def execute(self, data_source: DataSourceDO, query: str) -> List[Dict[str, Any]]:
        """Guard, wrap and run a query."""
        ensure_read_only(query)
        return await self.query_runner.run(
            data_source.engine,
            data_source.id,
            wrap_query(query, self.row_limit),
        )

    async def related_queries(self, data_source: DataSourceDO, workspace_id: str, prompt: str) -> List[QueryLogDO]:
        """Endorsed queries of this data source whose prompts resemble the request."""
        logs = [
            log for log in self.query_logs.list_examples(data_source.id)
            if log.workspace_id == workspace_id
        ]
        if not logs:
            return []

        try:
            results = await self.semantic_search.search(prompt, [log.prompt for log in logs])
        except Exception as e:
            self.logger.warning(f"Example query search failed, continuing without examples: {e}")
            return []

        matched = [result.document for result in results]
        examples = sorted(
            (log for log in logs if log.prompt in matched),
            key=lambda log: matched.index(log.prompt),
        )
        return examples[:self.examples_limit]

    def build_messages(
        self,
        prompt: str,
        data_source: DataSourceDO,
        examples: List[QueryLogDO],
        state: RetryState
    ) -> List[Dict[str, str]]:
        """Build the completion messages for the current attempt."""
        user_message = f"<prompt>{prompt}</prompt>\n"

        if state.last_error is not None:
            user_message += (
                f"<query_with_error>{state.last_query}</query_with_error>\n"
                f"<error_message>{state.last_error}</error_message>\n"
            )

        user_message += f"<datasource_engine>{data_source.engine}</datasource_engine>\n"

        if data_source.memory:
            user_message += f"<datasource_memory>{json.dumps(data_source.memory)}</datasource_memory>\n"

        if data_source.context:
            user_message += f"<datasource_context>{data_source.context}</datasource_context>\n"

        if examples:
            examples_text = "\n".join(
                f'Prompt: "{example.prompt}" - SQL: "{example.query}"' for example in examples
            )
            user_message += f"<example_queries>{examples_text}</example_queries>\n"

        schema = handle_schema(data_source.engine, data_source.schema)
        user_message += f"<data_source_schema>{json.dumps(schema)}</data_source_schema>\n"

        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_message},
        ]
