"""Tests for MessageRepository."""

import pytest
from datetime import datetime, timedelta

from askdata.db.repositories.message import MessageRepository
from askdata.db.database_models.message import MessageDO


@pytest.fixture
def repo(db_conn):
    """Provide a MessageRepository."""
    return MessageRepository(db_conn.conn)


def _make_msg(uuid, **overrides):
    defaults = dict(conversation_id="c1", uuid=uuid, role="assistant", content=f"text {uuid}")
    defaults.update(overrides)
    return MessageDO(**defaults)


class TestMessageRepository:
    """Tests for MessageRepository."""

    class TestAdd:
        """SUT: MessageRepository.add"""

        def test_returns_id(self, repo):
            assert repo.add(_make_msg("m1")) is not None
            assert [m.uuid for m in repo.get_by_conversation("c1")] == ["m1"]

        def test_data_round_trips_as_json(self, repo):
            repo.add(_make_msg("m1", role="user", data={"attachments": [{"filename": "a.csv"}]}))
            message = repo.get_by_conversation("c1")[0]
            assert message.data == {"attachments": [{"filename": "a.csv"}]}

        def test_duplicate_uuid_rejected(self, repo):
            repo.add(_make_msg("m1"))
            assert repo.add(_make_msg("m1")) is None

    class TestAddBatch:
        """SUT: MessageRepository.add_batch"""

        def test_counts_inserted_rows(self, repo):
            assert repo.add_batch([_make_msg("m1"), _make_msg("m2")]) == 2

        def test_skips_existing_uuids(self, repo):
            """Recording the same messages again inserts nothing."""
            repo.add_batch([_make_msg("m1"), _make_msg("m2")])
            assert repo.add_batch([_make_msg("m1"), _make_msg("m2"), _make_msg("m3")]) == 1
            assert len(repo.get_by_conversation("c1")) == 3

        def test_empty_batch(self, repo):
            assert repo.add_batch([]) == 0

    class TestGetByConversation:
        """SUT: MessageRepository.get_by_conversation"""

        def test_chronological_order(self, repo):
            now = datetime.utcnow()
            repo.add(_make_msg("m2", created_at=now))
            repo.add(_make_msg("m1", created_at=now - timedelta(minutes=1)))
            repo.add(_make_msg("other", conversation_id="c2"))

            assert [m.uuid for m in repo.get_by_conversation("c1")] == ["m1", "m2"]

        def test_limit_keeps_latest(self, repo):
            now = datetime.utcnow()
            for index in range(5):
                repo.add(_make_msg(f"m{index}", created_at=now + timedelta(seconds=index)))
            assert [m.uuid for m in repo.get_by_conversation("c1", limit=2)] == ["m3", "m4"]

    class TestDeleteByConversation:
        """SUT: MessageRepository.delete_by_conversation"""

        def test_removes_only_that_conversation(self, repo):
            repo.add(_make_msg("m1"))
            repo.add(_make_msg("m2", conversation_id="c2"))
            assert repo.delete_by_conversation("c1") is True
            assert repo.get_by_conversation("c1") == []
            assert len(repo.get_by_conversation("c2")) == 1
