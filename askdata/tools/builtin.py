"""Registration of the built-in tools."""

from dataclasses import dataclass

from ..config import Settings
from ..db.connection import DatabaseConnection
from ..db.repositories import (
    DataSourceRepository,
    MessageLogRepository,
    QueryLogRepository,
    UserRepository,
    WorkspaceRepository,
)
from ..models.tool import (
    DisplayReportArgs,
    RegisterUserFeedbackArgs,
    RunNaturalLanguageQueryArgs,
    SaveInformationArgs,
    SearchOnWebArgs,
)
from ..providers.base import CompletionClient, QueryRunner, SemanticSearch, WebSearch
from .feedback import RegisterUserFeedbackTool
from .memory import SaveDataSourceInformationTool, SaveUserInformationTool, SaveWorkspaceInformationTool
from .nl_query import NaturalLanguageQueryTool
from .registry import ToolRegistry, ToolSpec
from .report import DisplayReportTool
from .web import SearchOnWebTool


@dataclass
class ToolDependencies:
    """Collaborators shared by the built-in tools."""

    db: DatabaseConnection
    settings: Settings
    completion: CompletionClient
    semantic_search: SemanticSearch
    query_runner: QueryRunner
    web: WebSearch


def build_default_registry(deps: ToolDependencies) -> ToolRegistry:
    """
    Create a registry with every built-in tool.

    Args:
        deps: Shared collaborators

    Returns:
        Populated ToolRegistry
    """
    conn = deps.db.conn
    settings = deps.settings
    data_sources = DataSourceRepository(conn)
    query_logs = QueryLogRepository(conn)

    registry = ToolRegistry()
    registry.register(ToolSpec(
        name="run_nl_query",
        contract=RunNaturalLanguageQueryArgs,
        handler=NaturalLanguageQueryTool(
            completion=deps.completion,
            semantic_search=deps.semantic_search,
            query_runner=deps.query_runner,
            data_sources=data_sources,
            query_logs=query_logs,
            model=settings.nl_query_model,
            max_attempts=settings.nl_query_max_attempts,
            retry_delay=settings.nl_query_retry_delay,
            row_limit=settings.report_row_limit,
            examples_limit=settings.related_examples_limit,
        ),
    ))
    registry.register(ToolSpec(
        name="display_report",
        contract=DisplayReportArgs,
        handler=DisplayReportTool(deps.query_runner, data_sources, settings.report_row_limit),
    ))
    registry.register(ToolSpec(
        name="search_on_web",
        contract=SearchOnWebArgs,
        handler=SearchOnWebTool(deps.web),
    ))
    registry.register(ToolSpec(
        name="save_user_information",
        contract=SaveInformationArgs,
        handler=SaveUserInformationTool(UserRepository(conn)),
    ))
    registry.register(ToolSpec(
        name="save_workspace_information",
        contract=SaveInformationArgs,
        handler=SaveWorkspaceInformationTool(WorkspaceRepository(conn)),
    ))
    registry.register(ToolSpec(
        name="save_datasource_information",
        contract=SaveInformationArgs,
        handler=SaveDataSourceInformationTool(data_sources),
    ))
    registry.register(ToolSpec(
        name="register_user_feedback",
        contract=RegisterUserFeedbackArgs,
        handler=RegisterUserFeedbackTool(query_logs, MessageLogRepository(conn)),
        notify=False,
        record=False,
    ))
    return registry
