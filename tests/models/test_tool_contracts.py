"""Tests for the tool argument contracts."""

import pytest
from pydantic import ValidationError

from askdata.models.tool import (
    DisplayReportArgs,
    RegisterUserFeedbackArgs,
    RunNaturalLanguageQueryArgs,
    SearchOnWebArgs,
)


def _report(**overrides):
    data = dict(
        report_type="table",
        query="SELECT 1",
        report_name="Sales",
        report_description="Monthly sales",
        dataSourceId="ds1",
    )
    data.update(overrides)
    return data


class TestRunNaturalLanguageQueryArgs:
    """SUT: RunNaturalLanguageQueryArgs"""

    def test_valid(self):
        args = RunNaturalLanguageQueryArgs.model_validate(
            {"natural_language_query": "total sales", "dataSource_id": "ds1"}
        )
        assert args.dataSource_id == "ds1"

    def test_missing_data_source(self):
        with pytest.raises(ValidationError):
            RunNaturalLanguageQueryArgs.model_validate({"natural_language_query": "total sales"})

    def test_empty_query(self):
        with pytest.raises(ValidationError):
            RunNaturalLanguageQueryArgs.model_validate({"natural_language_query": "", "dataSource_id": "ds1"})


class TestDisplayReportArgs:
    """SUT: DisplayReportArgs"""

    def test_table_needs_no_datasets(self):
        assert DisplayReportArgs.model_validate(_report()).datasets is None

    def test_chart_requires_datasets_and_labels(self):
        with pytest.raises(ValidationError) as exc:
            DisplayReportArgs.model_validate(_report(report_type="bar"))
        assert "Datasets and Labels are required" in str(exc.value)

    def test_chart_with_datasets_and_labels(self):
        args = DisplayReportArgs.model_validate(_report(
            report_type="line",
            datasets=[{"label": "Total", "data": "total"}],
            labels="month",
        ))
        assert args.datasets[0].data == "total"

    def test_unknown_report_type(self):
        with pytest.raises(ValidationError):
            DisplayReportArgs.model_validate(_report(report_type="radar"))


class TestSearchOnWebArgs:
    """SUT: SearchOnWebArgs"""

    def test_query_or_url_required(self):
        with pytest.raises(ValidationError) as exc:
            SearchOnWebArgs.model_validate({})
        assert "Either query or url is required" in str(exc.value)

    def test_url_only(self):
        assert SearchOnWebArgs.model_validate({"url": "https://example.com"}).query is None


class TestRegisterUserFeedbackArgs:
    """SUT: RegisterUserFeedbackArgs"""

    def test_intent_must_be_known(self):
        with pytest.raises(ValidationError):
            RegisterUserFeedbackArgs.model_validate({"intent": "neutral", "feedback": "ok", "type": "query"})
