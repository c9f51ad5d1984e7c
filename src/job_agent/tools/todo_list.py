"""
In-memory todo list the agent uses to plan and track work.
"""

import json
import logging
from typing import List

logger = logging.getLogger(__name__)


class TodoList:
    """Open and completed todos; return values are strings for the LLM."""

    def __init__(self):
        self.todos: List[str] = []
        self.done: List[str] = []

    def add_todos(self, new_todos: List[str]) -> str:
        self.todos.extend(new_todos)
        delim = "\n  - "
        logger.info(f"Todo list:{delim}{delim.join(self.todos)}")
        return f"Added {len(new_todos)} to todo list. Now have {len(self.todos)} todos."

    def mark_todo_done(self, todo: str) -> str:
        if todo in self.todos:
            self.todos = [item for item in self.todos if item != todo]
            self.done.append(todo)
            return f"Marked the following todo as done:\n  {todo}"
        return f"Todo list doesn't include todo:\n  {todo}"

    def check_todos(self) -> str:
        if self.todos:
            return json.dumps(self.todos)
        return "The todo list is empty."

    def check_done_todos(self) -> str:
        if self.done:
            return json.dumps(self.done)
        return "No tasks have been marked done."

    def clear(self) -> None:
        self.todos = []
        self.done = []


ADD_TODOS_TOOL = {
    "name": "addTodos",
    "description": "Add an array of todos to my todo list.",
    "parameters": {
        "type": "object",
        "properties": {
            "newTodos": {
                "type": "array",
                "items": {"type": "string"},
                "description": "The array of new todos to add to my todo list.",
            }
        },
        "required": ["newTodos"],
    },
}

MARK_TODO_DONE_TOOL = {
    "name": "markTodoDone",
    "description": "Mark an individual item on my todo list as done.",
    "parameters": {
        "type": "object",
        "properties": {
            "todo": {
                "type": "string",
                "description": "The todo item to mark as done.",
            }
        },
        "required": ["todo"],
    },
}

CHECK_TODOS_TOOL = {
    "name": "checkTodos",
    "description": "Read everything on the todo list.",
    "parameters": {"type": "object", "properties": {}, "required": []},
}

CHECK_DONE_TODOS_TOOL = {
    "name": "checkDoneTasks",
    "description": "Read everything on the todo list that has been marked done.",
    "parameters": {"type": "object", "properties": {}, "required": []},
}
