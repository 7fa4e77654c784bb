"""Message repository for database operations."""

import json
from typing import Optional, List
from .base import BaseRepository
from ..database_models.message import MessageDO


class MessageRepository(BaseRepository):
    """Repository for transcript messages."""

    def add(self, message: MessageDO) -> Optional[int]:
        """
        Add a new message.

        Args:
            message: MessageDO instance

        Returns:
            Message ID if successful, None otherwise
        """
        try:
            result = self.conn.execute("""
                INSERT INTO messages (id, conversation_id, uuid, role, content, data, created_at)
                VALUES (nextval('messages_id_seq'), ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                message.conversation_id,
                message.uuid,
                message.role,
                message.content,
                json.dumps(message.data) if message.data is not None else None,
                message.created_at
            ]).fetchone()

            message_id = result[0] if result else None
            if message_id:
                self.conn.commit()
                self.logger.debug(f"Added message {message_id} to conversation {message.conversation_id}")
            return message_id
        except Exception as e:
            self.logger.error(f"Failed to add message: {e}")
            return None

    def add_batch(self, messages: List[MessageDO]) -> int:
        """
        Add multiple messages in batch, skipping uuids already stored.

        Args:
            messages: List of MessageDO instances

        Returns:
            Number of messages actually inserted
        """
        added_count = 0
        for message in messages:
            try:
                result = self.conn.execute("""
                    INSERT INTO messages (id, conversation_id, uuid, role, content, data, created_at)
                    SELECT nextval('messages_id_seq'), ?, ?, ?, ?, ?, ?
                    WHERE NOT EXISTS (SELECT 1 FROM messages WHERE uuid = ?)
                    RETURNING id
                """, [
                    message.conversation_id,
                    message.uuid,
                    message.role,
                    message.content,
                    json.dumps(message.data) if message.data is not None else None,
                    message.created_at,
                    message.uuid
                ]).fetchall()
                added_count += len(result)
            except Exception as e:
                self.logger.debug(f"Skipped duplicate message {message.uuid}: {e}")

        if added_count > 0:
            self.conn.commit()
            self.logger.debug(f"Added {added_count} messages in batch")

        return added_count

    def get_by_conversation(self, conversation_id: str, limit: int = 1000) -> List[MessageDO]:
        """
        Get messages for a conversation.

        Args:
            conversation_id: Conversation ID
            limit: Maximum number of messages to return

        Returns:
            List of MessageDO instances (chronological order)
        """
        try:
            results = self.conn.execute("""
                SELECT id, conversation_id, uuid, role, content, data, created_at
                FROM messages
                WHERE conversation_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            """, [conversation_id, limit]).fetchall()

            messages = [
                MessageDO(
                    id=row[0],
                    conversation_id=row[1],
                    uuid=row[2],
                    role=row[3],
                    content=row[4],
                    data=self._load_json(row[5]),
                    created_at=row[6]
                )
                for row in results
            ]

            # Reverse to get chronological order
            messages.reverse()
            return messages
        except Exception as e:
            self.logger.error(f"Failed to get conversation messages: {e}")
            return []

    def delete_by_conversation(self, conversation_id: str) -> bool:
        """
        Delete all messages for a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute("""
                DELETE FROM messages WHERE conversation_id = ?
            """, [conversation_id])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to delete messages: {e}")
            return False
