"""
Agent Tools
===========

Tools the LLM can call, plus the Toolbox that binds them by name.

Tool names follow the names the model sees in the tool configs
(``searchGoogle``, ``addTodos``, ...), not the Python function names.

Usage:
    from job_agent.tools import Toolbox

    toolbox = Toolbox(serpapi_key="...")
    resp = await dispatcher.complete_with_tools({
        "messages": messages,
        "tools": toolbox.configs,
    })
    for call in resp.tool_calls:
        result = await toolbox.run_tool_call(call)
"""

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import httpx

from ..providers import FallbackDispatcher, ProviderError, ToolCall
from .browse import BROWSE_WEB_TOOL, fetch_page
from .judge import CHECK_GOAL_DONE_TOOL, check_goal_done
from .search import SEARCH_GOOGLE_TOOL, SEARCH_JOBS_TOOL, SearchTool
from .todo_list import (
    ADD_TODOS_TOOL,
    CHECK_DONE_TODOS_TOOL,
    CHECK_TODOS_TOOL,
    MARK_TODO_DONE_TOOL,
    TodoList,
)

logger = logging.getLogger(__name__)

ToolFunction = Callable[..., Union[Any, Awaitable[Any]]]


class Toolbox:
    """
    Named tool functions with their JSON-schema configs.

    One Toolbox owns one TodoList, so the planning tools share state
    across calls within a run.
    """

    def __init__(
        self,
        serpapi_key: str = "",
        dispatcher: Optional[FallbackDispatcher] = None,
        todo_list: Optional[TodoList] = None,
    ):
        self.todo_list = todo_list or TodoList()
        self.dispatcher = dispatcher
        self.search = SearchTool(serpapi_key, todo_list=self.todo_list, dispatcher=dispatcher)

        self.functions: Dict[str, ToolFunction] = {
            "searchGoogle": self.search.search_google,
            "searchJobs": self._search_jobs,
            "addTodos": self._add_todos,
            "markTodoDone": self.todo_list.mark_todo_done,
            "checkTodos": self.todo_list.check_todos,
            "checkDoneTasks": self.todo_list.check_done_todos,
            "checkGoalDone": self._check_goal_done,
            "browseWeb": fetch_page,
        }
        self.configs: List[Dict[str, Any]] = [
            SEARCH_GOOGLE_TOOL,
            SEARCH_JOBS_TOOL,
            ADD_TODOS_TOOL,
            MARK_TODO_DONE_TOOL,
            CHECK_TODOS_TOOL,
            CHECK_DONE_TODOS_TOOL,
            CHECK_GOAL_DONE_TOOL,
            BROWSE_WEB_TOOL,
        ]

    @property
    def names(self) -> List[str]:
        return [config["name"] for config in self.configs]

    def select(self, *names: str) -> List[Dict[str, Any]]:
        """Configs for a subset of tools, in the order given."""
        by_name = {config["name"]: config for config in self.configs}
        missing = [n for n in names if n not in by_name]
        if missing:
            raise KeyError(f"Unknown tools: {missing}")
        return [by_name[n] for n in names]

    def _add_todos(self, newTodos: List[str]) -> str:
        return self.todo_list.add_todos(newTodos)

    async def _search_jobs(
        self,
        query: str,
        location: str,
        remote: bool = False,
        count: int = 50,
    ) -> str:
        jobs = await self.search.search_jobs(query, location, remote, int(count))
        return json.dumps(jobs)

    async def _check_goal_done(self, goal: str, answer: str) -> str:
        verdict = await check_goal_done(goal, answer, dispatcher=self.dispatcher)
        return json.dumps(verdict)

    async def call(self, name: str, arguments: Dict[str, Any]) -> str:
        """
        Invoke a tool by name.

        Raises:
            KeyError: If no tool has that name
        """
        if name not in self.functions:
            raise KeyError(f"Unknown tool: {name}")
        result = self.functions[name](**arguments)
        if inspect.isawaitable(result):
            result = await result
        return result if isinstance(result, str) else json.dumps(result)

    async def run_tool_call(self, tool_call: Union[ToolCall, Dict[str, Any]]) -> str:
        """
        Run one tool call from a completion and return its string result.

        Failures are returned as text for the model to read.
        """
        if isinstance(tool_call, dict):
            tool_call = ToolCall.from_dict(tool_call)

        try:
            arguments = tool_call.parsed_arguments()
        except ValueError as e:
            logger.warning(f"Bad arguments for {tool_call.name}: {e}")
            return f"Error: could not parse arguments for {tool_call.name}: {e}"

        logger.info(f"Calling tool {tool_call.name}({arguments})")
        try:
            return await self.call(tool_call.name, arguments)
        except KeyError as e:
            return f"Error: {e}"
        except (ProviderError, httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as e:
            logger.error(f"Tool {tool_call.name} failed: {e}")
            return f"Error running {tool_call.name}: {e}"


__all__ = [
    "Toolbox",
    "TodoList",
    "SearchTool",
    "check_goal_done",
    "fetch_page",
    "ADD_TODOS_TOOL",
    "MARK_TODO_DONE_TOOL",
    "CHECK_TODOS_TOOL",
    "CHECK_DONE_TODOS_TOOL",
    "CHECK_GOAL_DONE_TOOL",
    "SEARCH_GOOGLE_TOOL",
    "SEARCH_JOBS_TOOL",
    "BROWSE_WEB_TOOL",
]
