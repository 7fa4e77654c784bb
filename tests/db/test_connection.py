"""Tests for DatabaseConnection."""

from askdata.db.connection import DatabaseConnection


EXPECTED_TABLES = {
    "workspaces",
    "users",
    "data_sources",
    "conversations",
    "messages",
    "query_logs",
    "message_logs",
}


class TestDatabaseConnection:
    """SUT: DatabaseConnection"""

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "test.db"
        db = DatabaseConnection(str(path))
        try:
            assert path.parent.exists()
        finally:
            db.close()

    def test_creates_tables(self, db_conn):
        rows = db_conn.conn.execute(
            "SELECT table_name FROM information_schema.tables"
        ).fetchall()
        assert EXPECTED_TABLES <= {row[0] for row in rows}

    def test_schema_init_is_idempotent(self, tmp_path):
        path = str(tmp_path / "test.db")
        DatabaseConnection(path).close()
        db = DatabaseConnection(path)
        try:
            assert db.conn is not None
        finally:
            db.close()

    def test_close_clears_connection(self, tmp_path):
        db = DatabaseConnection(str(tmp_path / "test.db"))
        db.close()
        assert db.conn is None
