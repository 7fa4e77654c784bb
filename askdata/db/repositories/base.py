"""Base repository class."""

import json
from typing import Any, List
import duckdb
from ...utils.logger import get_app_logger


class BaseRepository:
    """Base class for all repositories."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize repository with database connection.

        Args:
            conn: DuckDB connection instance
        """
        self.conn = conn
        self.logger = get_app_logger()

    @staticmethod
    def _load_json(value: Any, default: Any = None) -> Any:
        """Decode a JSON column, which DuckDB returns as text."""
        if value is None:
            return default
        if isinstance(value, str):
            return json.loads(value) if value else default
        return value

    def _append_memory(self, table: str, entity_id: str, information: str) -> bool:
        """Append a note to the JSON memory array of a row."""
        try:
            row = self.conn.execute(
                f"SELECT memory FROM {table} WHERE id = ?", [entity_id]
            ).fetchone()
            if not row:
                self.logger.warning(f"Cannot save memory, {table} row {entity_id} not found")
                return False

            memory: List[str] = self._load_json(row[0], [])
            memory.append(information)
            self.conn.execute(
                f"UPDATE {table} SET memory = ? WHERE id = ?",
                [json.dumps(memory), entity_id]
            )
            self.conn.commit()
            self.logger.info(f"Saved memory note on {table} {entity_id}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to save memory on {table} {entity_id}: {e}")
            return False
