"""Query log repository for database operations."""

from typing import Optional, List
from .base import BaseRepository
from ..database_models.query_log import QueryLogDO

_COLUMNS = (
    "id, data_source_id, workspace_id, prompt, query, success, error_message, "
    "positive_feedback, negative_feedback, use_as_example, created_at"
)


class QueryLogRepository(BaseRepository):
    """Repository for natural language query attempts."""

    @staticmethod
    def _to_do(row) -> QueryLogDO:
        return QueryLogDO(
            id=row[0],
            data_source_id=row[1],
            workspace_id=row[2],
            prompt=row[3],
            query=row[4],
            success=row[5],
            error_message=row[6],
            positive_feedback=row[7],
            negative_feedback=row[8],
            use_as_example=row[9],
            created_at=row[10]
        )

    def create(self, log: QueryLogDO) -> QueryLogDO:
        """
        Persist a query attempt.

        Unlike the other repository writes this raises, because the caller
        needs the row to report the attempt.

        Args:
            log: QueryLogDO instance

        Returns:
            The stored QueryLogDO
        """
        try:
            self.conn.execute(f"""
                INSERT INTO query_logs ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                log.id,
                log.data_source_id,
                log.workspace_id,
                log.prompt,
                log.query,
                log.success,
                log.error_message,
                log.positive_feedback,
                log.negative_feedback,
                log.use_as_example,
                log.created_at
            ])
            self.conn.commit()
            self.logger.debug(f"Created query log {log.id} for data source {log.data_source_id}")
            return log
        except Exception as e:
            self.logger.error(f"Failed to create query log: {e}")
            raise

    def get(self, log_id: str) -> Optional[QueryLogDO]:
        """Get a query log by ID."""
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS} FROM query_logs WHERE id = ?
            """, [log_id]).fetchone()
            return self._to_do(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get query log {log_id}: {e}")
            return None

    def mark_succeeded(self, log_id: str) -> bool:
        """Mark an attempt as successful."""
        try:
            self.conn.execute("""
                UPDATE query_logs SET success = TRUE WHERE id = ?
            """, [log_id])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to mark query log {log_id} as succeeded: {e}")
            return False

    def mark_failed(self, log_id: str, error_message: str) -> bool:
        """Record the error of an attempt; a failed attempt is never an example."""
        try:
            self.conn.execute("""
                UPDATE query_logs
                SET success = FALSE, error_message = ?, use_as_example = FALSE
                WHERE id = ?
            """, [error_message, log_id])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to mark query log {log_id} as failed: {e}")
            return False

    def update_feedback(self, log_id: str, positive: bool, feedback: str) -> bool:
        """
        Store user feedback on a query.

        Negative feedback also removes the query from the examples.

        Args:
            log_id: Query log ID
            positive: Whether the feedback is positive
            feedback: Feedback text

        Returns:
            True if the row exists and was updated, False otherwise
        """
        try:
            if positive:
                result = self.conn.execute("""
                    UPDATE query_logs SET positive_feedback = ? WHERE id = ?
                    RETURNING id
                """, [feedback, log_id]).fetchall()
            else:
                result = self.conn.execute("""
                    UPDATE query_logs SET negative_feedback = ?, use_as_example = FALSE WHERE id = ?
                    RETURNING id
                """, [feedback, log_id]).fetchall()
            self.conn.commit()
            return len(result) > 0
        except Exception as e:
            self.logger.error(f"Failed to update feedback on query log {log_id}: {e}")
            return False

    def list_examples(self, data_source_id: str, limit: int = 200) -> List[QueryLogDO]:
        """
        List successful queries endorsed as examples for a data source.

        Args:
            data_source_id: Data source ID
            limit: Maximum number of rows

        Returns:
            List of QueryLogDO instances, newest first
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM query_logs
                WHERE data_source_id = ? AND success = TRUE AND use_as_example = TRUE
                ORDER BY created_at DESC
                LIMIT ?
            """, [data_source_id, limit]).fetchall()
            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list query examples: {e}")
            return []

