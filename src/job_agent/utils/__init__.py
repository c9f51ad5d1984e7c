"""Small helpers shared across the agent."""

from .json_extract import extract_json_object, find_json_object

__all__ = ["extract_json_object", "find_json_object"]
