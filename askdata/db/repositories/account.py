"""Repositories for workspaces, users and data sources."""

import json
from typing import Optional, List
from .base import BaseRepository
from ..database_models.account import WorkspaceDO, UserDO, DataSourceDO


class WorkspaceRepository(BaseRepository):
    """Repository for workspaces."""

    def create(self, workspace: WorkspaceDO) -> bool:
        try:
            self.conn.execute("""
                INSERT INTO workspaces (id, name, assistant_id, memory, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, [
                workspace.id,
                workspace.name,
                workspace.assistant_id,
                json.dumps(workspace.memory),
                workspace.created_at
            ])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to create workspace: {e}")
            return False

    def get(self, workspace_id: str) -> Optional[WorkspaceDO]:
        try:
            row = self.conn.execute("""
                SELECT id, name, assistant_id, memory, created_at
                FROM workspaces WHERE id = ?
            """, [workspace_id]).fetchone()
            if not row:
                return None
            return WorkspaceDO(
                id=row[0],
                name=row[1],
                assistant_id=row[2],
                memory=self._load_json(row[3], []),
                created_at=row[4]
            )
        except Exception as e:
            self.logger.error(f"Failed to get workspace {workspace_id}: {e}")
            return None

    def append_memory(self, workspace_id: str, information: str) -> bool:
        return self._append_memory("workspaces", workspace_id, information)


class UserRepository(BaseRepository):
    """Repository for users."""

    def create(self, user: UserDO) -> bool:
        try:
            self.conn.execute("""
                INSERT INTO users (id, name, email, workspace_id, memory, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                user.id,
                user.name,
                user.email,
                user.workspace_id,
                json.dumps(user.memory),
                user.created_at
            ])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to create user: {e}")
            return False

    def get(self, user_id: str) -> Optional[UserDO]:
        try:
            row = self.conn.execute("""
                SELECT id, name, email, workspace_id, memory, created_at
                FROM users WHERE id = ?
            """, [user_id]).fetchone()
            if not row:
                return None
            return UserDO(
                id=row[0],
                name=row[1],
                email=row[2],
                workspace_id=row[3],
                memory=self._load_json(row[4], []),
                created_at=row[5]
            )
        except Exception as e:
            self.logger.error(f"Failed to get user {user_id}: {e}")
            return None

    def append_memory(self, user_id: str, information: str) -> bool:
        return self._append_memory("users", user_id, information)


class DataSourceRepository(BaseRepository):
    """Repository for data sources."""

    _COLUMNS = "id, workspace_id, name, engine, description, context, schema_info, memory, created_at"

    def _to_do(self, row) -> DataSourceDO:
        return DataSourceDO(
            id=row[0],
            workspace_id=row[1],
            name=row[2],
            engine=row[3],
            description=row[4],
            context=row[5],
            schema=self._load_json(row[6], []),
            memory=self._load_json(row[7], []),
            created_at=row[8]
        )

    def create(self, data_source: DataSourceDO) -> bool:
        try:
            self.conn.execute(f"""
                INSERT INTO data_sources ({self._COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                data_source.id,
                data_source.workspace_id,
                data_source.name,
                data_source.engine,
                data_source.description,
                data_source.context,
                json.dumps(data_source.schema),
                json.dumps(data_source.memory),
                data_source.created_at
            ])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to create data source: {e}")
            return False

    def get(self, data_source_id: str, workspace_id: Optional[str] = None) -> Optional[DataSourceDO]:
        """
        Get a data source, optionally restricted to a workspace.

        Args:
            data_source_id: Data source ID
            workspace_id: Workspace the data source must belong to

        Returns:
            DataSourceDO instance or None
        """
        try:
            row = self.conn.execute(f"""
                SELECT {self._COLUMNS} FROM data_sources WHERE id = ?
            """, [data_source_id]).fetchone()
            if not row:
                return None
            data_source = self._to_do(row)
            if workspace_id is not None and data_source.workspace_id != workspace_id:
                return None
            return data_source
        except Exception as e:
            self.logger.error(f"Failed to get data source {data_source_id}: {e}")
            return None

    def list_by_workspace(self, workspace_id: str) -> List[DataSourceDO]:
        try:
            results = self.conn.execute(f"""
                SELECT {self._COLUMNS}
                FROM data_sources
                WHERE workspace_id = ?
                ORDER BY created_at ASC
            """, [workspace_id]).fetchall()
            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list data sources: {e}")
            return []

    def append_memory(self, data_source_id: str, information: str) -> bool:
        return self._append_memory("data_sources", data_source_id, information)
