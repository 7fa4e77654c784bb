"""Tests for ToolRegistry."""

import json

import pytest
from pydantic import BaseModel, Field

from askdata.errors import ToolNotFoundError, ToolValidationError
from askdata.tools.registry import ToolRegistry, ToolSpec


class EchoArgs(BaseModel):
    text: str = Field(min_length=1)
    times: int = 1


async def echo(args: EchoArgs, context) -> str:
    return json.dumps({"echo": args.text * args.times})


@pytest.fixture
def registry():
    registry = ToolRegistry()
    registry.register(ToolSpec(name="echo", contract=EchoArgs, handler=echo))
    registry.register(ToolSpec(name="silent", contract=EchoArgs, handler=echo, notify=False, record=False))
    return registry


class TestToolRegistry:
    """Tests for ToolRegistry."""

    class TestGet:
        """SUT: ToolRegistry.get"""

        def test_registered(self, registry):
            assert registry.get("echo").contract is EchoArgs

        def test_unknown_raises(self, registry):
            with pytest.raises(ToolNotFoundError) as exc:
                registry.get("nope")
            assert exc.value.name == "nope"

        def test_list_in_registration_order(self, registry):
            assert registry.list() == ["echo", "silent"]

    class TestValidate:
        """SUT: ToolRegistry.validate"""

        def test_valid_arguments(self, registry):
            args = registry.validate("echo", '{"text": "hi", "times": 2}')
            assert args == EchoArgs(text="hi", times=2)

        def test_missing_field_names_the_field(self, registry):
            with pytest.raises(ToolValidationError) as exc:
                registry.validate("echo", "{}")
            assert "text" in exc.value.message

        def test_malformed_json(self, registry):
            with pytest.raises(ToolValidationError) as exc:
                registry.validate("echo", "{not json")
            assert exc.value.message.startswith("Arguments are not valid JSON")

        def test_non_object(self, registry):
            with pytest.raises(ToolValidationError) as exc:
                registry.validate("echo", "[1, 2]")
            assert exc.value.message == "Arguments must be a JSON object"

        def test_empty_arguments_validated_as_empty_object(self, registry):
            with pytest.raises(ToolValidationError):
                registry.validate("echo", "")

    class TestDispatch:
        """SUT: ToolRegistry.dispatch"""

        async def test_runs_handler(self, registry, tool_context):
            output = await registry.dispatch("echo", EchoArgs(text="ab", times=2), tool_context)
            assert json.loads(output) == {"echo": "abab"}

    class TestRecordedToolNames:
        """SUT: ToolRegistry.recorded_tool_names"""

        def test_excludes_unrecorded(self, registry):
            assert registry.recorded_tool_names() == frozenset({"echo"})
