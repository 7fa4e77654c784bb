"""Tests for the account and message log repositories."""

from askdata.db.repositories import (
    DataSourceRepository,
    MessageLogRepository,
    UserRepository,
    WorkspaceRepository,
)
from askdata.db.database_models import DataSourceDO, MessageLogDO

from fakes import SALES_SCHEMA


class TestWorkspaceRepository:
    """SUT: WorkspaceRepository"""

    def test_get(self, db_conn, account):
        workspace = WorkspaceRepository(db_conn.conn).get("ws1")
        assert workspace.assistant_id == "asst_1"
        assert workspace.memory == []

    def test_append_memory(self, db_conn, account):
        repo = WorkspaceRepository(db_conn.conn)
        assert repo.append_memory("ws1", "Fiscal year starts in April") is True
        assert repo.append_memory("ws1", "Amounts are in EUR") is True
        assert repo.get("ws1").memory == ["Fiscal year starts in April", "Amounts are in EUR"]

    def test_append_memory_missing_row(self, db_conn):
        assert WorkspaceRepository(db_conn.conn).append_memory("nope", "x") is False


class TestUserRepository:
    """SUT: UserRepository"""

    def test_get_and_append_memory(self, db_conn, account):
        repo = UserRepository(db_conn.conn)
        repo.append_memory("u1", "Prefers charts")
        user = repo.get("u1")
        assert user.name == "Ada"
        assert user.workspace_id == "ws1"
        assert user.memory == ["Prefers charts"]

    def test_missing(self, db_conn):
        assert UserRepository(db_conn.conn).get("nope") is None


class TestDataSourceRepository:
    """SUT: DataSourceRepository"""

    def test_schema_round_trips(self, db_conn, account):
        data_source = DataSourceRepository(db_conn.conn).get("ds1")
        assert data_source.schema == SALES_SCHEMA
        assert data_source.context == "Orders are in cents"

    def test_get_scoped_to_workspace(self, db_conn, account):
        repo = DataSourceRepository(db_conn.conn)
        assert repo.get("ds1", "ws1") is not None
        assert repo.get("ds1", "ws2") is None

    def test_list_by_workspace(self, db_conn, account):
        repo = DataSourceRepository(db_conn.conn)
        repo.create(DataSourceDO(id="ds2", workspace_id="ws2", name="Other", engine="DuckDB"))
        assert [ds.id for ds in repo.list_by_workspace("ws1")] == ["ds1"]


class TestMessageLogRepository:
    """SUT: MessageLogRepository"""

    def test_list_examples_only_endorsed(self, db_conn):
        repo = MessageLogRepository(db_conn.conn)
        repo.create(MessageLogDO(id="l1", workspace_id="ws1", prompt="p1", response="r1", use_as_example=True))
        repo.create(MessageLogDO(id="l2", workspace_id="ws1", prompt="p2", response="r2"))
        repo.create(MessageLogDO(id="l3", workspace_id="ws2", prompt="p3", response="r3", use_as_example=True))

        assert [log.id for log in repo.list_examples("ws1")] == ["l1"]
        assert len(repo.list_by_workspace("ws1")) == 2
