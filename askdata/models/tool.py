"""Argument contracts for the tools exposed to the agent."""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator


CHART_REPORT_TYPES = ("line", "bar", "pie", "doughnut", "polararea")


class RunNaturalLanguageQueryArgs(BaseModel):
    """Arguments of ``run_nl_query``."""

    natural_language_query: str = Field(min_length=1, description="Question in natural language")
    dataSource_id: str = Field(min_length=1, description="Data source to query")


class ReportDataset(BaseModel):
    """One dataset of a chart report."""

    label: str = Field(min_length=1)
    data: str = Field(min_length=1, description="Result column holding the values")
    fill: Optional[bool] = None
    type: Optional[Literal["line", "bar"]] = None


class DisplayReportArgs(BaseModel):
    """Arguments of ``display_report``."""

    report_type: Literal["line", "bar", "pie", "table", "number", "doughnut", "polararea"]
    query: str = Field(min_length=1)
    report_name: str = Field(min_length=1)
    report_description: str = Field(min_length=1)
    datasets: Optional[List[ReportDataset]] = None
    labels: Optional[str] = Field(None, min_length=1, description="Result column holding the labels")
    indexAxis: Optional[Literal["x", "y"]] = None
    xStacked: Optional[bool] = None
    yStacked: Optional[bool] = None
    dataSourceId: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_chart_fields(self):
        """Chart reports need datasets and labels."""
        if self.report_type in CHART_REPORT_TYPES:
            missing = []
            if not self.datasets:
                missing.append("Datasets")
            if not self.labels:
                missing.append("Labels")
            if missing:
                raise ValueError(
                    f"{' and '.join(missing)} are required for line, bar, pie, "
                    "doughnut and polararea reports"
                )
        return self


class SearchOnWebArgs(BaseModel):
    """Arguments of ``search_on_web``."""

    query: Optional[str] = Field(None, min_length=1)
    url: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_target(self):
        if not self.query and not self.url:
            raise ValueError("Either query or url is required")
        return self


class SaveInformationArgs(BaseModel):
    """Arguments of the ``save_*_information`` tools."""

    information: str = Field(min_length=1)
    data_source_id: Optional[str] = Field(None, min_length=1)


class RegisterUserFeedbackArgs(BaseModel):
    """Arguments of ``register_user_feedback``."""

    intent: Literal["positive", "negative"]
    feedback: str = Field(min_length=1)
    query_log_id: Optional[str] = Field(None, min_length=1)
    response: Optional[str] = Field(None, min_length=1)
    type: Literal["query", "response"]
    prompt: Optional[str] = Field(None, min_length=1)
