"""Tool registry - maps tool names to argument contracts and handlers."""

import json
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, FrozenSet, List, Type

from pydantic import BaseModel, ValidationError

from ..db.database_models import UserDO, WorkspaceDO
from ..errors import ToolNotFoundError, ToolValidationError
from ..utils.logger import get_logger


@dataclass
class ToolContext:
    """Caller context handed to every tool handler."""

    conversation_id: str
    user: UserDO
    workspace: WorkspaceDO


ToolHandler = Callable[[BaseModel, ToolContext], Awaitable[str]]


@dataclass
class ToolSpec:
    """A registered tool.

    ``notify`` controls whether lifecycle events reach the client and
    ``record`` whether the tool appears in the durable transcript.
    """

    name: str
    contract: Type[BaseModel]
    handler: ToolHandler
    notify: bool = True
    record: bool = True


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable message."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


class ToolRegistry:
    """Registry of the tools the agent may call."""

    def __init__(self):
        self._tools: Dict[str, ToolSpec] = {}
        self.logger = get_logger("tools.registry")

    def register(self, spec: ToolSpec):
        """
        Register a tool.

        Args:
            spec: Tool specification
        """
        self._tools[spec.name] = spec
        self.logger.info(f"Registered tool: {spec.name} -> {spec.contract.__name__}")

    def get(self, name: str) -> ToolSpec:
        """
        Get a tool by name.

        Raises:
            ToolNotFoundError: If the tool is not registered
        """
        spec = self._tools.get(name)
        if spec is None:
            raise ToolNotFoundError(name)
        return spec

    def list(self) -> List[str]:
        """List registered tool names."""
        return list(self._tools.keys())

    def recorded_tool_names(self) -> FrozenSet[str]:
        """Names of tools whose calls are kept in the durable transcript."""
        return frozenset(name for name, spec in self._tools.items() if spec.record)

    def validate(self, name: str, raw_arguments: str) -> BaseModel:
        """
        Parse and validate the raw JSON arguments of a call.

        Args:
            name: Tool name
            raw_arguments: Arguments as sent by the agent

        Returns:
            Validated argument model

        Raises:
            ToolNotFoundError: If the tool is not registered
            ToolValidationError: If the arguments do not satisfy the contract
        """
        spec = self.get(name)

        try:
            data = json.loads(raw_arguments) if raw_arguments else {}
        except json.JSONDecodeError as e:
            raise ToolValidationError(name, f"Arguments are not valid JSON: {e}")

        if not isinstance(data, dict):
            raise ToolValidationError(name, "Arguments must be a JSON object")

        try:
            return spec.contract.model_validate(data)
        except ValidationError as e:
            raise ToolValidationError(name, format_validation_error(e))

    async def dispatch(self, name: str, arguments: BaseModel, context: ToolContext) -> str:
        """
        Run a tool handler with validated arguments.

        Returns:
            Handler output as a JSON string
        """
        spec = self.get(name)
        self.logger.info(f"Running tool {name} for conversation {context.conversation_id}")
        output = await spec.handler(arguments, context)
        self.logger.debug(f"Tool {name} output: {output[:500]}")
        return output
