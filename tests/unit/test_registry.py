"""
Tests for ToolRegistry and ToolDispatcher.
"""

from typing import Any

import pytest
from pydantic import BaseModel, Field

from llm_task_agent.core.planner import Step
from llm_task_agent.exceptions import (
    HandlerError,
    LLMConnectionError,
    PlannerError,
    ToolRegistrationError,
    ToolValidationError,
    UnknownToolError,
)
from llm_task_agent.tools import Capability, ToolDispatcher, ToolInvocation, ToolRegistry


class EchoParams(BaseModel):
    text: str = Field(min_length=1)
    times: int = 1


class EchoTool(Capability):
    name = "echo"
    description = "Repeat text"
    parameter_schema = EchoParams

    def __init__(self):
        self.received = []
        self.closed = False

    async def execute(self, args: EchoParams) -> Any:
        self.received.append(args)
        return {"text": args.text * args.times}

    async def close(self) -> None:
        self.closed = True


class FailingTool(Capability):
    name = "failing"
    description = "Always raises"
    parameter_schema = EchoParams

    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    async def execute(self, args: EchoParams) -> Any:
        self.calls += 1
        raise self.error


class NoDescriptionTool(EchoTool):
    name = "silent"
    description = ""


class NoNameTool(EchoTool):
    name = ""


class BadSchemaTool(EchoTool):
    name = "bad"
    parameter_schema = dict


class TestToolRegistry:
    """Test registration-time contract checks."""

    def test_register_and_get(self):
        """Test registered tools can be looked up."""
        registry = ToolRegistry()
        tool = registry.register(EchoTool())

        assert registry.get("echo") is tool
        assert "echo" in registry
        assert registry.names() == ["echo"]
        assert len(registry) == 1

    def test_duplicate_name_rejected(self):
        """Test two tools cannot share a name."""
        registry = ToolRegistry()
        registry.register(EchoTool())

        with pytest.raises(ToolRegistrationError, match="already registered"):
            registry.register(EchoTool())

    @pytest.mark.parametrize("tool_class", [NoDescriptionTool, NoNameTool, BadSchemaTool])
    def test_contract_violations_rejected(self, tool_class):
        """Test missing name, description or schema fails at registration."""
        with pytest.raises(ToolRegistrationError):
            ToolRegistry().register(tool_class())

    def test_non_capability_rejected(self):
        """Test arbitrary objects are rejected."""
        with pytest.raises(ToolRegistrationError):
            ToolRegistry().register(object())

    def test_unknown_tool(self):
        """Test unknown names raise UnknownToolError listing what exists."""
        registry = ToolRegistry()
        registry.register(EchoTool())

        with pytest.raises(UnknownToolError) as exc_info:
            registry.get("teleport")
        assert "teleport" in str(exc_info.value)
        assert exc_info.value.available == ["echo"]

    def test_describe(self):
        """Test descriptions include the JSON schema."""
        registry = ToolRegistry()
        registry.register(EchoTool())

        described = registry.describe()[0]

        assert described["name"] == "echo"
        assert described["description"] == "Repeat text"
        assert "text" in described["parameters"]["properties"]

    @pytest.mark.asyncio
    async def test_close_closes_tools(self):
        """Test closing the registry closes every tool."""
        registry = ToolRegistry()
        tool = registry.register(EchoTool())

        await registry.close()

        assert tool.closed


class TestToolDispatcher:
    """Test resolving, validating and executing one tool per step."""

    @pytest.fixture
    def registry(self):
        registry = ToolRegistry()
        registry.register(EchoTool())
        return registry

    def running_step(self, **kwargs) -> Step:
        step = Step(id=1, description="Echo hello", **kwargs)
        step.start()
        return step

    @pytest.mark.asyncio
    async def test_execute_named_tool(self, registry):
        """Test a step naming its tool is validated and executed."""
        dispatcher = ToolDispatcher(registry)

        result = await dispatcher.execute(self.running_step(tool="echo", params={"text": "hi", "times": 2}))

        assert result.tool == "echo"
        assert result.data == {"text": "hihi"}
        assert result.arguments == {"text": "hi", "times": 2}
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_handler_receives_schema_instance(self, registry):
        """Test handlers get a validated model, not a dict."""
        await ToolDispatcher(registry).execute(self.running_step(tool="echo", params={"text": "x"}))

        received = registry.get("echo").received[0]
        assert isinstance(received, EchoParams)
        assert received.times == 1

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, registry):
        """Test schema violations raise ToolValidationError before the handler runs."""
        with pytest.raises(ToolValidationError) as exc_info:
            await ToolDispatcher(registry).execute(self.running_step(tool="echo", params={"text": ""}))

        assert exc_info.value.tool == "echo"
        assert exc_info.value.errors[0]["loc"] == ["text"]
        assert registry.get("echo").received == []

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        """Test an unknown tool name is a validation failure."""
        with pytest.raises(UnknownToolError):
            await ToolDispatcher(registry).execute(self.running_step(tool="teleport"))

    @pytest.mark.asyncio
    async def test_handler_exception_wrapped(self):
        """Test handler exceptions become HandlerError with the cause attached."""
        registry = ToolRegistry()
        tool = registry.register(FailingTool(RuntimeError("disk full")))

        with pytest.raises(HandlerError) as exc_info:
            await ToolDispatcher(registry).execute(self.running_step(tool="failing", params={"text": "x"}))

        assert tool.calls == 1
        assert "disk full" in exc_info.value.message
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_tool_selected_by_oracle(self, registry, oracle):
        """Test a step without a tool asks the oracle for one invocation."""
        oracle.push(ToolInvocation(tool="echo", arguments={"text": "ok"}))
        dispatcher = ToolDispatcher(registry, oracle, model="dispatch-model")

        result = await dispatcher.execute(self.running_step())

        assert result.data == {"text": "ok"}
        assert oracle.calls[0]["model"] == "dispatch-model"
        assert "Echo hello" in oracle.calls[0]["messages"][-1].content

    @pytest.mark.asyncio
    async def test_tool_selection_failure_is_planner_error(self, registry, oracle):
        """Test oracle failure during selection raises PlannerError."""
        oracle.push(LLMConnectionError("down"), schema=ToolInvocation)

        with pytest.raises(PlannerError):
            await ToolDispatcher(registry, oracle).execute(self.running_step())

    @pytest.mark.asyncio
    async def test_no_tool_and_no_oracle(self, registry):
        """Test a tool-less step cannot be resolved without an oracle."""
        with pytest.raises(PlannerError):
            await ToolDispatcher(registry).execute(self.running_step())

    @pytest.mark.asyncio
    async def test_result_is_json_ready(self):
        """Test pydantic results are normalized to plain data."""
        class Item(BaseModel):
            url: str

        class ListTool(EchoTool):
            name = "lister"

            async def execute(self, args):
                return [Item(url="https://a"), Item(url="https://b")]

        registry = ToolRegistry()
        registry.register(ListTool())

        result = await ToolDispatcher(registry).execute(self.running_step(tool="lister", params={"text": "x"}))

        assert result.data == [{"url": "https://a"}, {"url": "https://b"}]
