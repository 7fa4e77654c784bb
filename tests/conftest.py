"""Shared pytest fixtures."""

from dataclasses import dataclass

import pytest

from askdata.db import (
    DatabaseConnection,
    DataSourceRepository,
    UserRepository,
    WorkspaceRepository,
)
from askdata.db.database_models import DataSourceDO, UserDO, WorkspaceDO
from askdata.tools.registry import ToolContext

from fakes import SALES_SCHEMA


@dataclass
class Account:
    """A seeded user with their workspace and one data source."""

    user: UserDO
    workspace: WorkspaceDO
    data_source: DataSourceDO


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def account(db_conn) -> Account:
    """Seed a workspace, a user and a DuckDB data source."""
    workspace = WorkspaceDO(id="ws1", name="Acme", assistant_id="asst_1")
    user = UserDO(id="u1", name="Ada", workspace_id="ws1", email="ada@example.com")
    data_source = DataSourceDO(
        id="ds1",
        workspace_id="ws1",
        name="Sales",
        engine="DuckDB",
        description="Sales warehouse",
        context="Orders are in cents",
        schema=SALES_SCHEMA,
    )
    WorkspaceRepository(db_conn.conn).create(workspace)
    UserRepository(db_conn.conn).create(user)
    DataSourceRepository(db_conn.conn).create(data_source)
    return Account(user=user, workspace=workspace, data_source=data_source)


@pytest.fixture
def tool_context(account) -> ToolContext:
    return ToolContext(conversation_id="conv1", user=account.user, workspace=account.workspace)
