"""Tools the agent can call during a run."""

from .registry import ToolContext, ToolRegistry, ToolSpec
from .builtin import ToolDependencies, build_default_registry
from .nl_query import NaturalLanguageQueryTool, RetryState

__all__ = [
    "ToolContext",
    "ToolRegistry",
    "ToolSpec",
    "ToolDependencies",
    "build_default_registry",
    "NaturalLanguageQueryTool",
    "RetryState",
]
