"""Tests for InstructionsBuilder."""

from datetime import datetime

import pytest

from askdata.db.database_models import MessageLogDO
from askdata.db.repositories import DataSourceRepository, MessageLogRepository, UserRepository, WorkspaceRepository
from askdata.services.instructions import InstructionsBuilder

from fakes import FakeSemanticSearch


class BrokenSearch(FakeSemanticSearch):
    async def search(self, query, documents):
        raise RuntimeError("embeddings unavailable")


@pytest.fixture
def make_builder(db_conn):
    def _make(semantic_search=None):
        return InstructionsBuilder(
            semantic_search or FakeSemanticSearch(["revenue"]),
            DataSourceRepository(db_conn.conn),
            MessageLogRepository(db_conn.conn),
            clock=lambda: datetime(2024, 3, 5, 9, 30, 0),
        )
    return _make


class TestInstructionsBuilder:
    """SUT: InstructionsBuilder.build"""

    async def test_basic_sections(self, make_builder, account):
        text = await make_builder().build(account.user, account.workspace, "hello")

        assert text.startswith("<user_name>Ada</user_name>\n")
        assert "<user_memory>" not in text
        assert "<related_messages>" not in text
        assert "<current_date>Tue Mar 05 2024 09:30:00</current_date>" in text
        assert "Data Source: Sales (DuckDB) (Sales warehouse) - ID: ds1." in text
        assert "<data_source_context>Orders are in cents</data_source_context>" in text
        assert text.endswith("<workspace_annotations>[]</workspace_annotations>")

    async def test_memories_included(self, db_conn, make_builder, account):
        UserRepository(db_conn.conn).append_memory("u1", "Prefers charts")
        WorkspaceRepository(db_conn.conn).append_memory("ws1", "Amounts in EUR")
        DataSourceRepository(db_conn.conn).append_memory("ds1", "total is gross")
        user = UserRepository(db_conn.conn).get("u1")
        workspace = WorkspaceRepository(db_conn.conn).get("ws1")

        text = await make_builder().build(user, workspace, "hello")

        assert '<user_memory>["Prefers charts"]</user_memory>' in text
        assert '<data_source_annotations>["total is gross"]</data_source_annotations>' in text
        assert '<workspace_annotations>["Amounts in EUR"]</workspace_annotations>' in text

    async def test_related_messages(self, db_conn, make_builder, account):
        logs = MessageLogRepository(db_conn.conn)
        logs.create(MessageLogDO(id="l1", workspace_id="ws1", prompt="revenue by month", response="Use a bar chart", use_as_example=True))
        logs.create(MessageLogDO(id="l2", workspace_id="ws1", prompt="weather", response="Sunny", use_as_example=True))

        text = await make_builder().build(account.user, account.workspace, "monthly revenue")

        assert '<related_messages>Prompt: "revenue by month" - Response: "Use a bar chart"</related_messages>' in text
        assert "weather" not in text

    async def test_search_failure_skips_related_messages(self, db_conn, make_builder, account):
        MessageLogRepository(db_conn.conn).create(
            MessageLogDO(id="l1", workspace_id="ws1", prompt="revenue", response="r", use_as_example=True)
        )

        text = await make_builder(BrokenSearch()).build(account.user, account.workspace, "revenue")

        assert "<related_messages>" not in text
        assert "<user_name>Ada</user_name>" in text
