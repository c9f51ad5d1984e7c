"""
Step 2: Tool calling.

Offers the search and todo tools to the model and judges the reply.
"""

from typing import Any, Dict, Optional

from ..providers import FallbackDispatcher, ProviderError, get_dispatcher
from ..tools.judge import check_goal_done
from ..tools.search import SEARCH_GOOGLE_TOOL
from ..tools.todo_list import ADD_TODOS_TOOL
from . import banner, print_verdict, section

DEFAULT_PROMPT = (
    "I want to buy a hoodie with a fur lined hood. It needs a full zipper. "
    "Near Times Square in NYC. Where can I buy one today at lunch time?"
)


async def run(
    dispatcher: Optional[FallbackDispatcher] = None,
    prompt: str = DEFAULT_PROMPT,
) -> Optional[Dict[str, Any]]:
    dispatcher = dispatcher or get_dispatcher()

    banner("🚀 STEP 2: Tool Calling and Integration System")
    section(f"Question: {prompt}")

    try:
        completion = await dispatcher.complete_with_tools({
            "messages": [{"role": "developer", "content": prompt}],
            "tool_choice": "auto",
            "tools": [SEARCH_GOOGLE_TOOL, ADD_TODOS_TOOL],
        })
        message = completion.choices[0].message
        section(f"Agent Response: {message.content}")
        for call in message.tool_calls:
            print(f"🔧 Requested tool: {call.name}({call.arguments})")

        print("\n🔍 Validating Response with LLM Judge:")
        verdict = await check_goal_done(prompt, message.content, dispatcher=dispatcher)
        print_verdict(verdict)
    except ProviderError as e:
        print(f"\n❌ Tool calling failed: {e}")
        print("💡 All configured providers failed or none is configured")
        return None

    return {"completion": completion, "verdict": verdict}
