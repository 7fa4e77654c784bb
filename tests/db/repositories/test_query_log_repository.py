"""Tests for QueryLogRepository."""

import pytest

from askdata.db.repositories.query_log import QueryLogRepository
from askdata.db.database_models.query_log import QueryLogDO


@pytest.fixture
def repo(db_conn):
    """Provide a QueryLogRepository."""
    return QueryLogRepository(db_conn.conn)


def _make_log(log_id, **overrides):
    defaults = dict(
        id=log_id,
        data_source_id="ds1",
        workspace_id="ws1",
        prompt="total sales",
        query="SELECT SUM(total) FROM orders",
    )
    defaults.update(overrides)
    return QueryLogDO(**defaults)


class TestQueryLogRepository:
    """Tests for QueryLogRepository."""

    class TestCreate:
        """SUT: QueryLogRepository.create"""

        def test_defaults(self, repo):
            repo.create(_make_log("q1"))
            log = repo.get("q1")
            assert log.success is False
            assert log.use_as_example is True
            assert log.error_message is None

        def test_duplicate_raises(self, repo):
            repo.create(_make_log("q1"))
            with pytest.raises(Exception):
                repo.create(_make_log("q1"))

    class TestMarkFailed:
        """SUT: QueryLogRepository.mark_failed"""

        def test_stores_error_and_drops_example(self, repo):
            repo.create(_make_log("q1"))
            repo.mark_failed("q1", "Binder Error")
            log = repo.get("q1")
            assert log.success is False
            assert log.error_message == "Binder Error"
            assert log.use_as_example is False

    class TestListExamples:
        """SUT: QueryLogRepository.list_examples"""

        def test_only_successful_endorsed_queries(self, repo):
            repo.create(_make_log("ok"))
            repo.mark_succeeded("ok")
            repo.create(_make_log("pending"))
            repo.create(_make_log("failed"))
            repo.mark_failed("failed", "boom")
            repo.create(_make_log("other", data_source_id="ds2"))
            repo.mark_succeeded("other")

            assert [log.id for log in repo.list_examples("ds1")] == ["ok"]

    class TestUpdateFeedback:
        """SUT: QueryLogRepository.update_feedback"""

        def test_positive_keeps_example(self, repo):
            repo.create(_make_log("q1"))
            repo.mark_succeeded("q1")
            assert repo.update_feedback("q1", True, "great") is True
            log = repo.get("q1")
            assert log.positive_feedback == "great"
            assert log.use_as_example is True

        def test_negative_removes_example(self, repo):
            repo.create(_make_log("q1"))
            repo.mark_succeeded("q1")
            repo.update_feedback("q1", False, "wrong totals")
            log = repo.get("q1")
            assert log.negative_feedback == "wrong totals"
            assert log.use_as_example is False
            assert repo.list_examples("ds1") == []

        def test_missing_row(self, repo):
            assert repo.update_feedback("nope", True, "great") is False
