"""Database connection and schema management."""

import duckdb
from typing import Optional
from pathlib import Path
from ..utils.logger import get_app_logger


class DatabaseConnection:
    """DuckDB connection manager."""

    def __init__(self, db_path: str = "./data/askdata.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to DuckDB database file
        """
        self.db_path = db_path
        self.logger = get_app_logger()
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

        # Ensure database directory exists
        db_dir = Path(db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

        self._connect()
        self._init_schema()

    def _connect(self):
        """Connect to DuckDB database."""
        try:
            self.conn = duckdb.connect(self.db_path)
            self.logger.info(f"Connected to DuckDB at {self.db_path}")
        except Exception as e:
            self.logger.error(f"Failed to connect to DuckDB: {e}")
            raise

    def _init_schema(self):
        """Initialize database schema."""
        try:
            # Workspaces and users are managed elsewhere; memory is a JSON array
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS workspaces (
                    id VARCHAR PRIMARY KEY,
                    name VARCHAR NOT NULL,
                    assistant_id VARCHAR,
                    memory VARCHAR DEFAULT '[]',
                    created_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id VARCHAR PRIMARY KEY,
                    name VARCHAR NOT NULL,
                    email VARCHAR,
                    workspace_id VARCHAR NOT NULL,
                    memory VARCHAR DEFAULT '[]',
                    created_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS data_sources (
                    id VARCHAR PRIMARY KEY,
                    workspace_id VARCHAR NOT NULL,
                    name VARCHAR NOT NULL,
                    engine VARCHAR NOT NULL,
                    description VARCHAR,
                    context VARCHAR,
                    schema_info JSON,
                    memory VARCHAR DEFAULT '[]',
                    created_at TIMESTAMP NOT NULL
                )
            """)

            # Conversations table - one per external thread
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    id VARCHAR PRIMARY KEY,
                    external_thread_id VARCHAR NOT NULL,
                    owner_id VARCHAR NOT NULL,
                    workspace_id VARCHAR NOT NULL,
                    title VARCHAR,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            # Messages table - durable transcript
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id BIGINT PRIMARY KEY,
                    conversation_id VARCHAR NOT NULL,
                    uuid VARCHAR NOT NULL,
                    role VARCHAR NOT NULL,
                    content VARCHAR,
                    data JSON,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            # Add unique constraint on uuid to prevent recording a run twice
            self.conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_messages_uuid ON messages(uuid)
            """)

            # One row per natural language query attempt
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS query_logs (
                    id VARCHAR PRIMARY KEY,
                    data_source_id VARCHAR NOT NULL,
                    workspace_id VARCHAR NOT NULL,
                    prompt VARCHAR NOT NULL,
                    query VARCHAR NOT NULL,
                    success BOOLEAN DEFAULT FALSE,
                    error_message VARCHAR,
                    positive_feedback VARCHAR,
                    negative_feedback VARCHAR,
                    use_as_example BOOLEAN DEFAULT TRUE,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS message_logs (
                    id VARCHAR PRIMARY KEY,
                    workspace_id VARCHAR NOT NULL,
                    prompt VARCHAR NOT NULL,
                    response VARCHAR NOT NULL,
                    positive_feedback VARCHAR,
                    negative_feedback VARCHAR,
                    use_as_example BOOLEAN DEFAULT FALSE,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            # Create indexes (only on columns that are never updated)
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_users_workspace ON users(workspace_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_data_sources_workspace ON data_sources(workspace_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_conversations_owner ON conversations(owner_id, workspace_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_created ON messages(created_at)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_query_logs_data_source ON query_logs(data_source_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_message_logs_workspace ON message_logs(workspace_id)")

            # Create sequence for message IDs
            self.conn.execute("CREATE SEQUENCE IF NOT EXISTS messages_id_seq START 1")

            self.logger.info("Database schema initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize database schema: {e}")
            raise

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
