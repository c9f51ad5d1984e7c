"""
LLM as Judge
============

Asks the LLM whether an answer satisfies a request and returns
``{"done": bool, "feedback": [str, ...]}``.

Provider failures and unparseable output both degrade to a conservative
"not done" verdict; the judge never raises.
"""

import logging
from typing import Any, Dict, Optional

from ..providers import FallbackDispatcher, ProviderError, get_dispatcher
from ..utils.json_extract import extract_json_object

logger = logging.getLogger(__name__)

JUDGE_MODEL = "openai/gpt-oss-120b"

JUDGE_PROMPT = """
You are a research assistant who evaluates if answers satisfy requests.
You must respond with ONLY valid JSON in this exact format:
{
  "done": true/false,
  "feedback": ["specific actionable feedback item 1", "specific actionable feedback item 2"]
}

Rules:
1. Respond with ONLY the JSON object, no markdown, no extra text
2. "done" must be true if the answer fully satisfies the request, false otherwise
3. "feedback" must be an array of specific, actionable items
4. If done is true, feedback can be empty array []
5. If done is false, feedback must contain specific things missing
"""

FALLBACK_VERDICT = {
    "done": False,
    "feedback": ["LLM evaluation failed. Please manually review the results."],
}

CHECK_GOAL_DONE_TOOL = {
    "name": "checkGoalDone",
    "description": "Check if the answer successfully meets the requested goal.",
    "parameters": {
        "type": "object",
        "properties": {
            "goal": {
                "type": "string",
                "description": "The requested goal to be completed.",
            },
            "answer": {
                "type": "string",
                "description": "The answer that will be provided to the requesting party to complete that goal.",
            },
        },
        "required": ["goal", "answer"],
    },
}


def fallback_verdict() -> Dict[str, Any]:
    return {"done": False, "feedback": list(FALLBACK_VERDICT["feedback"])}


def normalize_verdict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce a parsed verdict to ``{done: bool, feedback: list[str]}``."""
    feedback = data.get("feedback") or []
    if isinstance(feedback, str):
        feedback = [feedback]
    return {
        "done": data.get("done") is True,
        "feedback": [str(item) for item in feedback],
    }


async def check_goal_done(
    goal: str,
    answer: str,
    dispatcher: Optional[FallbackDispatcher] = None,
) -> Dict[str, Any]:
    """
    Judge whether ``answer`` satisfies ``goal``.

    Args:
        goal: The original request
        answer: The candidate answer
        dispatcher: Dispatcher to use (global one if None)

    Returns:
        Verdict dictionary; the fallback verdict on any failure
    """
    dispatcher = dispatcher or get_dispatcher()
    try:
        resp = await dispatcher.complete_with_tools({
            "model": JUDGE_MODEL,
            "messages": [
                {"role": "developer", "content": JUDGE_PROMPT},
                {"role": "user", "content": f"## Request: {goal}\n\n## Answer: {answer}"},
            ],
            "response_format": {"type": "json_object"},
        })
        verdict = normalize_verdict(extract_json_object(resp.choices[0].message.content))
    except (ProviderError, ValueError) as e:
        logger.error(f"Error in check_goal_done: {e}")
        return fallback_verdict()

    logger.info(f"LLM as judge: {'done' if verdict['done'] else 'not done'}")
    return verdict
