"""Pytest fixtures for API testing."""

import pytest
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI

from askdata.api.v1 import conversations
from askdata.config import Settings
from askdata.db import DataSourceRepository, MessageLogRepository, MessageRepository
from askdata.services import InstructionsBuilder, TitleGenerator, TranscriptRecorder
from askdata.tools import ToolDependencies, build_default_registry

from fakes import (
    FakeAgentRunProvider,
    FakeCompletion,
    FakeQueryRunner,
    FakeSemanticSearch,
    FakeWebSearch,
    sql_block,
)


@pytest.fixture
def provider():
    """Scripted agent runtime shared by every request of a test."""
    return FakeAgentRunProvider()


@pytest.fixture
async def client(db_conn, account, provider):
    """Create async HTTP client over a test app with injected fakes."""
    test_settings = Settings(nl_query_retry_delay=0, recorder_poll_interval=0, max_upload_files=2)
    registry = build_default_registry(ToolDependencies(
        db=db_conn,
        settings=test_settings,
        completion=FakeCompletion(sql_block("SELECT SUM(total) AS total FROM orders")),
        semantic_search=FakeSemanticSearch(),
        query_runner=FakeQueryRunner([{"total": 4200}]),
        web=FakeWebSearch(),
    ))
    recorder = TranscriptRecorder(
        MessageRepository(db_conn.conn),
        registry.recorded_tool_names(),
        poll_interval=0,
    )

    # Inject dependencies into the router
    conversations.db_conn = db_conn
    conversations.settings = test_settings
    conversations.provider_factory = lambda workspace: provider
    conversations.tool_registry = registry
    conversations.recorder = recorder
    conversations.instructions_builder = InstructionsBuilder(
        FakeSemanticSearch(),
        DataSourceRepository(db_conn.conn),
        MessageLogRepository(db_conn.conn),
    )
    conversations.title_generator = TitleGenerator(FakeCompletion('{"title": "Total sales"}'), retry_delay=0)

    # Create a test app without lifespan
    test_app = FastAPI(title="AskData Test")
    test_app.include_router(conversations.router)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-User-Id": "u1"}) as ac:
        yield ac

    await recorder.wait_idle()
