"""Query runners for data sources."""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import duckdb

from ..errors import UnsupportedEngineError
from ..utils.logger import get_logger
from .base import QueryRunner


class DuckDBQueryRunner(QueryRunner):
    """Runs queries against one read-only DuckDB file per data source.

    The file for data source ``<id>`` is ``<datasources_dir>/<id>.duckdb``.
    """

    ENGINE = "DuckDB"

    def __init__(self, datasources_dir: str):
        self.datasources_dir = Path(datasources_dir)
        self.logger = get_logger("providers.query_runner")

    def database_path(self, data_source_id: str) -> Path:
        return self.datasources_dir / f"{data_source_id}.duckdb"

    async def run(
        self,
        engine: str,
        data_source_id: str,
        query: str,
        params: Optional[List[Any]] = None
    ) -> List[Dict[str, Any]]:
        if engine != self.ENGINE:
            raise UnsupportedEngineError(engine)

        path = self.database_path(data_source_id)
        if not path.exists():
            raise FileNotFoundError(f"Database file for data source {data_source_id} not found")

        self.logger.info(f"Running query on data source {data_source_id}")
        return await asyncio.to_thread(self._execute, path, query, params)

    @staticmethod
    def _execute(path: Path, query: str, params: Optional[List[Any]]) -> List[Dict[str, Any]]:
        conn = duckdb.connect(str(path), read_only=True)
        try:
            cursor = conn.execute(query, params or [])
            columns = [column[0] for column in cursor.description or []]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            conn.close()
