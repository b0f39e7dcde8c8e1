"""
Tool contracts - Declared capabilities and the registry that guards them.

Every tool declares a unique name, a description and a parameter
contract (a pydantic model). The registry is a closed set fixed at
construction: the executor may only invoke names it contains, and only
with arguments that validate against the tool's contract.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Type

from pydantic import BaseModel, ValidationError

from finresearch.core.exceptions import (
    ToolInvocationError,
    ToolSelectionError,
    UnknownToolError,
)

logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """
    Base class for all tools.

    Tools are stateless data-retrieval operations. Subclasses set
    `name`, `description` and `args_schema` and implement `run`.
    """

    name: str = "base_tool"
    description: str = "Base tool description"
    args_schema: Type[BaseModel]

    @abstractmethod
    async def run(self, **kwargs) -> Any:
        """
        Execute the tool's action.

        Args:
            **kwargs: Arguments already validated against args_schema

        Returns:
            JSON-serialisable result data

        Raises:
            Exception: on any failure; the registry wraps it
        """
        pass

    def parameters_schema(self) -> Dict[str, Any]:
        return self.args_schema.model_json_schema()


class ToolRegistry:
    """
    Closed, name-indexed set of tools.

    Usage:
        registry = ToolRegistry([IncomeStatementsTool(service), ...])
        args = registry.validate("get_income_statements", {"ticker": "ACME"})
        data = await registry.invoke("get_income_statements", args)
    """

    def __init__(self, tools: Iterable[BaseTool]):
        self._tools: Dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> BaseTool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def validate(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check a proposed call against the declared contract.

        Returns:
            Normalised arguments (defaults filled, types coerced)

        Raises:
            UnknownToolError: name is not declared
            ToolSelectionError: arguments violate the parameter contract
        """
        tool = self.get(name)
        try:
            parsed = tool.args_schema.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolSelectionError(
                f"Invalid arguments for {name}: {e}", tool_name=name
            ) from e
        return parsed.model_dump(exclude_none=True)

    async def invoke(self, name: str, arguments: Dict[str, Any]) -> Any:
        """
        Invoke a tool with validated arguments.

        Raises:
            ToolInvocationError: the tool raised
        """
        tool = self.get(name)
        try:
            return await tool.run(**arguments)
        except ToolInvocationError:
            raise
        except Exception as e:
            logger.warning(f"Tool {name} raised {type(e).__name__}: {e}")
            raise ToolInvocationError(name, str(e) or type(e).__name__) from e

    def describe(self) -> str:
        """Render the catalogue for prompts."""
        lines = []
        for tool in self._tools.values():
            lines.append(
                f"- {tool.name}: {tool.description}\n"
                f"  schema: {json.dumps(tool.parameters_schema())}"
            )
        return "\n".join(lines)
