"""
Step 1: LLM as judge.

Generates an answer, then asks the judge whether it satisfies the
question.
"""

from typing import Any, Dict, Optional

from ..providers import FallbackDispatcher, ProviderError, get_dispatcher
from ..tools.judge import check_goal_done
from . import banner, print_verdict, section

DEFAULT_PROMPT = "What is the average wing speed of a swallow?"


async def run(
    dispatcher: Optional[FallbackDispatcher] = None,
    prompt: str = DEFAULT_PROMPT,
) -> Optional[Dict[str, Any]]:
    dispatcher = dispatcher or get_dispatcher()

    banner("🚀 STEP 1: LLM as Judge - Response Validation System")
    section(f"Question: {prompt}")

    verdict = None
    try:
        answer = await dispatcher.complete_text(prompt)
        section(f"Answer: {answer}")

        print("\n🔍 Using LLM as Judge to Validate Response:")
        verdict = await check_goal_done(prompt, answer, dispatcher=dispatcher)
        print_verdict(verdict)
    except ProviderError as e:
        print(f"\n❌ Error during validation: {e}")

    banner("🎯 Key Learning Points:")
    print("• LLMs can validate responses against the original request")
    print("• The judge returns actionable feedback when the goal is not met")
    return verdict
