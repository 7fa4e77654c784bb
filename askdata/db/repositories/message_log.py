"""Message log repository for database operations."""

from typing import List
from .base import BaseRepository
from ..database_models.message_log import MessageLogDO

_COLUMNS = (
    "id, workspace_id, prompt, response, positive_feedback, negative_feedback, "
    "use_as_example, created_at"
)


class MessageLogRepository(BaseRepository):
    """Repository for response-level feedback records."""

    def create(self, log: MessageLogDO) -> bool:
        """
        Create a message log.

        Args:
            log: MessageLogDO instance

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute(f"""
                INSERT INTO message_logs ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                log.id,
                log.workspace_id,
                log.prompt,
                log.response,
                log.positive_feedback,
                log.negative_feedback,
                log.use_as_example,
                log.created_at
            ])
            self.conn.commit()
            self.logger.info(f"Created message log {log.id}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to create message log: {e}")
            return False

    def list_by_workspace(self, workspace_id: str, examples_only: bool = False) -> List[MessageLogDO]:
        """
        List message logs of a workspace, newest first.

        Args:
            workspace_id: Workspace ID
            examples_only: Only return rows endorsed as examples

        Returns:
            List of MessageLogDO instances
        """
        try:
            condition = "AND use_as_example = TRUE" if examples_only else ""
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM message_logs
                WHERE workspace_id = ? {condition}
                ORDER BY created_at DESC
            """, [workspace_id]).fetchall()
            return [
                MessageLogDO(
                    id=row[0],
                    workspace_id=row[1],
                    prompt=row[2],
                    response=row[3],
                    positive_feedback=row[4],
                    negative_feedback=row[5],
                    use_as_example=row[6],
                    created_at=row[7]
                )
                for row in results
            ]
        except Exception as e:
            self.logger.error(f"Failed to list message logs: {e}")
            return []

    def list_examples(self, workspace_id: str) -> List[MessageLogDO]:
        """List endorsed responses of a workspace."""
        return self.list_by_workspace(workspace_id, examples_only=True)
