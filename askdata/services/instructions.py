"""Per-run additional instructions for the agent."""

import json
from datetime import datetime
from typing import Callable, List

from ..db.database_models import DataSourceDO, MessageLogDO, UserDO, WorkspaceDO
from ..db.repositories import DataSourceRepository, MessageLogRepository
from ..providers.base import SemanticSearch
from ..utils.logger import get_logger


class InstructionsBuilder:
    """Builds the tagged context sent with every run."""

    def __init__(
        self,
        semantic_search: SemanticSearch,
        data_sources: DataSourceRepository,
        message_logs: MessageLogRepository,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.semantic_search = semantic_search
        self.data_sources = data_sources
        self.message_logs = message_logs
        self.clock = clock
        self.logger = get_logger("instructions")

    async def build(self, user: UserDO, workspace: WorkspaceDO, text: str) -> str:
        """
        Build the additional instructions for a run.

        Args:
            user: Caller
            workspace: Caller's workspace
            text: User message that starts the run

        Returns:
            Instructions text
        """
        instructions = f"<user_name>{user.name}</user_name>\n"

        if user.memory:
            instructions += f"<user_memory>{json.dumps(user.memory)}</user_memory>\n"

        related = await self.related_messages(workspace.id, text)
        if related:
            related_text = "\n".join(
                f'Prompt: "{message.prompt}" - Response: "{message.response}"' for message in related
            )
            instructions += f"<related_messages>{related_text}</related_messages>\n"

        instructions += f"<current_date>{self.clock().strftime('%a %b %d %Y %H:%M:%S')}</current_date>\n"

        data_sources = "\n".join(
            self.format_data_source(data_source)
            for data_source in self.data_sources.list_by_workspace(workspace.id)
        )
        instructions += f"<data_sources>{data_sources}</data_sources>\n"
        instructions += f"<workspace_annotations>{json.dumps(workspace.memory)}</workspace_annotations>"
        return instructions

    @staticmethod
    def format_data_source(data_source: DataSourceDO) -> str:
        text = (
            f"Data Source: {data_source.name} ({data_source.engine}) ({data_source.description}) "
            f"- ID: {data_source.id}.\n"
            f"<data_source_context>{data_source.context or ''}</data_source_context>"
        )
        if data_source.memory:
            text += f"<data_source_annotations>{json.dumps(data_source.memory)}</data_source_annotations>"
        return text

    async def related_messages(self, workspace_id: str, text: str) -> List[MessageLogDO]:
        """Endorsed responses whose prompts resemble the message."""
        logs = self.message_logs.list_examples(workspace_id)
        if not logs:
            return []

        try:
            results = await self.semantic_search.search(text, [log.prompt for log in logs])
        except Exception as e:
            self.logger.warning(f"Related message search failed, continuing without examples: {e}")
            return []

        matched = {result.document for result in results}
        return [log for log in logs if log.prompt in matched]
