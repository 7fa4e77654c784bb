"""Report display tool."""

import json

from ..db.repositories import DataSourceRepository
from ..errors import WriteOperationError
from ..models.tool import DisplayReportArgs
from ..providers.base import QueryRunner
from ..utils.logger import get_logger
from ..utils.query import ensure_read_only, wrap_query
from .registry import ToolContext


class DisplayReportTool:
    """Handler for ``display_report``.

    The query is executed only to confirm the report can be rendered; the
    client fetches the data itself, so only report metadata is returned.
    """

    def __init__(self, query_runner: QueryRunner, data_sources: DataSourceRepository, row_limit: int = 100):
        self.query_runner = query_runner
        self.data_sources = data_sources
        self.row_limit = row_limit
        self.logger = get_logger("tools.report")

    async def __call__(self, args: DisplayReportArgs, context: ToolContext) -> str:
        try:
            ensure_read_only(args.query)
        except WriteOperationError as e:
            self.logger.warning(f"Rejected report query with write operation: {args.query}")
            return json.dumps({"error": str(e)})

        data_source = self.data_sources.get(args.dataSourceId, context.workspace.id)
        if data_source is None:
            return json.dumps({"error": "DataSource not found"})

        try:
            await self.query_runner.run(
                data_source.engine,
                data_source.id,
                wrap_query(args.query, self.row_limit),
            )
        except Exception as e:
            self.logger.error(f"Report query failed: {e}")
            return json.dumps({"error": str(e)})

        return json.dumps({
            "success": "The report will be displayed",
            "reportName": args.report_name,
            "reportDescription": args.report_description,
            "reportType": args.report_type,
            "query": args.query,
        })
