"""
Tutorial Steps
==============

Runnable walkthroughs of the agent, each building on the previous one:

    step0_llm        - Provider detection, caching and text generation
    step1_condition  - LLM as judge
    step2_tool       - Tool-augmented completion
    step3_refactor   - The Toolbox and direct tool usage
    step4_planning   - Full plan / execute / track / validate workflow

Run one with ``job-agent step N``.
"""

import importlib
from typing import Any, Dict, List

STEP_MODULES = {
    0: "step0_llm",
    1: "step1_condition",
    2: "step2_tool",
    3: "step3_refactor",
    4: "step4_planning",
}

BANNER_WIDTH = 60


def banner(title: str) -> None:
    print("\n" + "=" * BANNER_WIDTH)
    print(title)
    print("=" * BANNER_WIDTH)


def section(text: str) -> None:
    print("\n" + "#" * 40)
    print(text)


def print_points(heading: str, points: List[str], bullet: str = "•") -> None:
    print(f"\n{heading}")
    for point in points:
        print(f"{bullet} {point}")


def print_verdict(verdict: Dict[str, Any]) -> None:
    """Show a judge verdict and any feedback."""
    section(f"LLM as judge: {'👍' if verdict.get('done') else '👎'}")
    if not verdict.get("done"):
        print("📝 Feedback for improvement:")
        for i, item in enumerate(verdict.get("feedback") or [], 1):
            print(f"{i}. {item}")


async def run_step(number: int, **kwargs) -> Any:
    """
    Import and run one step.

    Raises:
        ValueError: If there is no such step
    """
    if number not in STEP_MODULES:
        raise ValueError(f"Unknown step: {number}. Available: {sorted(STEP_MODULES)}")
    module = importlib.import_module(f".{STEP_MODULES[number]}", __name__)
    return await module.run(**kwargs)
