"""Tests for query helpers."""

import pytest

from askdata.errors import QueryExtractionError, WriteOperationError
from askdata.utils.query import (
    ensure_read_only,
    extract_query,
    handle_schema,
    is_write_operation,
    parse_json_output,
    wrap_query,
)


class TestIsWriteOperation:
    """SUT: is_write_operation"""

    @pytest.mark.parametrize("query", [
        "DROP TABLE orders",
        "delete from orders",
        "INSERT INTO orders VALUES (1)",
        "SELECT 1; UPDATE orders SET total = 0",
        "ALTER TABLE orders ADD x INT",
        "CREATE TABLE t (id INT)",
    ])
    def test_write_tokens(self, query):
        assert is_write_operation(query)

    @pytest.mark.parametrize("query", [
        "SELECT created_at, updated_at FROM orders",
        "SELECT * FROM deleted_orders",
        "SELECT SUM(total) FROM orders",
    ])
    def test_read_queries(self, query):
        assert not is_write_operation(query)

    def test_ensure_read_only_raises(self):
        with pytest.raises(WriteOperationError):
            ensure_read_only("DROP TABLE orders")


class TestWrapQuery:
    """SUT: wrap_query"""

    def test_default_limit_and_semicolons(self):
        assert wrap_query("SELECT 1;") == "WITH query AS (SELECT 1)\nSELECT * FROM query\nLIMIT 1000"

    def test_custom_limit(self):
        assert wrap_query("SELECT 1", 100).endswith("LIMIT 100")


class TestExtractQuery:
    """SUT: extract_query"""

    def test_first_block(self):
        text = "Try:\n```sql\nSELECT 1\n```\nor\n```sql\nSELECT 2\n```"
        assert extract_query(text) == "SELECT 1"

    def test_block_without_language(self):
        assert extract_query("```\nSELECT 3\n```") == "SELECT 3"

    @pytest.mark.parametrize("text", ["SELECT 1", "", None, "```sql\n\n```"])
    def test_no_block(self, text):
        with pytest.raises(QueryExtractionError):
            extract_query(text)


class TestParseJsonOutput:
    """SUT: parse_json_output"""

    def test_json_string(self):
        assert parse_json_output('{"a": 1}') == {"a": 1}

    def test_plain_text_unchanged(self):
        assert parse_json_output("not json") == "not json"

    def test_non_string_unchanged(self):
        assert parse_json_output({"a": 1}) == {"a": 1}


class TestHandleSchema:
    """SUT: handle_schema"""

    def test_bigquery_datasets(self):
        schema = [{"schema": "sales", "tables": []}]
        assert handle_schema("BigQuery", schema) == {"datasets": [{"tables": [], "dataset": "sales"}]}

    def test_other_engines(self):
        assert handle_schema("DuckDB", [{"schema": "main"}]) == {"schemas": [{"schema": "main"}]}
