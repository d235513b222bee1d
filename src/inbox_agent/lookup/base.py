"""Base tool interface for the lookup agent."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ValidationError

from inbox_agent.results import StepResult

logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """Base class for lookup tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name used for invocation."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description for LLM context."""
        pass

    @property
    @abstractmethod
    def args_schema(self) -> type[BaseModel]:
        """Pydantic model of the tool parameters."""
        pass

    @abstractmethod
    def execute(self, **kwargs: Any) -> StepResult:
        """Execute the tool with validated parameters."""
        pass

    def __call__(self, **kwargs: Any) -> StepResult:
        """Validate parameters, then execute. Never raises."""
        try:
            params = self.args_schema.model_validate(kwargs)
        except ValidationError as e:
            return StepResult.degraded(f"Invalid parameters: {e}")

        try:
            return self.execute(**params.model_dump())
        except Exception as e:
            logger.exception(f"Tool {self.name} failed: {e}")
            return StepResult.degraded(str(e))

    def run_for_agent(self, **kwargs: Any) -> str:
        """Run the tool and render the result as text for the agent."""
        logger.info(f"Agent invoked {self.name} with {kwargs}")
        result = self(**kwargs)
        if result.success:
            return json.dumps(result.value, ensure_ascii=False)
        return json.dumps(f"Error occurred in {self.name}: {result.error}")

    def as_langchain_tool(self) -> StructuredTool:
        """Expose the tool to a LangChain/LangGraph agent."""
        return StructuredTool.from_function(
            func=self.run_for_agent,
            name=self.name,
            description=self.description,
            args_schema=self.args_schema,
        )
