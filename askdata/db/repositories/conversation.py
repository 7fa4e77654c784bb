"""Conversation repository for database operations."""

from typing import Optional, List
from .base import BaseRepository
from ..database_models.conversation import ConversationDO

_COLUMNS = "id, external_thread_id, owner_id, workspace_id, title, created_at"


class ConversationRepository(BaseRepository):
    """Repository for Conversation CRUD operations."""

    @staticmethod
    def _to_do(row) -> ConversationDO:
        return ConversationDO(
            id=row[0],
            external_thread_id=row[1],
            owner_id=row[2],
            workspace_id=row[3],
            title=row[4],
            created_at=row[5]
        )

    def create(self, conversation: ConversationDO) -> bool:
        """
        Create a new conversation record.

        Args:
            conversation: ConversationDO instance

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute(f"""
                INSERT INTO conversations ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                conversation.id,
                conversation.external_thread_id,
                conversation.owner_id,
                conversation.workspace_id,
                conversation.title,
                conversation.created_at
            ])
            self.conn.commit()
            self.logger.info(f"Created conversation record: {conversation.id}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to create conversation: {e}")
            return False

    def get(self, conversation_id: str) -> Optional[ConversationDO]:
        """
        Get conversation by ID.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE id = ?
            """, [conversation_id]).fetchone()
            return self._to_do(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get conversation {conversation_id}: {e}")
            return None

    def get_for_owner(self, conversation_id: str, owner_id: str, workspace_id: str) -> Optional[ConversationDO]:
        """
        Get a conversation only if it belongs to the owner and workspace.

        Returns:
            ConversationDO instance or None
        """
        conversation = self.get(conversation_id)
        if conversation is None:
            return None
        if conversation.owner_id != owner_id or conversation.workspace_id != workspace_id:
            return None
        return conversation

    def list_by_owner(self, owner_id: str, workspace_id: str) -> List[ConversationDO]:
        """
        List conversations of a user in a workspace, newest first.

        Args:
            owner_id: User ID
            workspace_id: Workspace ID

        Returns:
            List of ConversationDO instances
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE owner_id = ? AND workspace_id = ?
                ORDER BY created_at DESC
            """, [owner_id, workspace_id]).fetchall()
            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list conversations: {e}")
            return []

    def update_title(self, conversation_id: str, title: str) -> bool:
        """
        Update conversation title.

        Args:
            conversation_id: Conversation ID
            title: New title

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute("""
                UPDATE conversations SET title = ? WHERE id = ?
            """, [title, conversation_id])
            self.conn.commit()
            self.logger.info(f"Renamed conversation {conversation_id} to '{title}'")
            return True
        except Exception as e:
            self.logger.error(f"Failed to update conversation title: {e}")
            return False

    def delete(self, conversation_id: str) -> bool:
        """
        Delete conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute("""
                DELETE FROM conversations WHERE id = ?
            """, [conversation_id])
            self.conn.commit()
            self.logger.info(f"Deleted conversation: {conversation_id}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to delete conversation: {e}")
            return False
