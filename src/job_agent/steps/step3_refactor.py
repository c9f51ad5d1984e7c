"""
Step 3: the Toolbox.

Uses the tools directly by name, then lets the model call them and runs
the requested tool calls.
"""

from typing import Any, Dict, List, Optional

from ..providers import FallbackDispatcher, ProviderError, get_dispatcher
from ..tools import Toolbox
from ..tools.judge import check_goal_done
from . import banner, print_verdict, section
from .step2_tool import DEFAULT_PROMPT

PLAN = [
    "Research hoodie stores",
    "Find Times Square locations",
    "Check store hours",
    "Get directions",
]


async def run(
    dispatcher: Optional[FallbackDispatcher] = None,
    toolbox: Optional[Toolbox] = None,
    prompt: str = DEFAULT_PROMPT,
) -> Dict[str, Any]:
    dispatcher = dispatcher or get_dispatcher()
    toolbox = toolbox or Toolbox(dispatcher=dispatcher)

    banner("🚀 STEP 3: Refactored Tool System with Active Tool Usage")
    print("\n🔧 Available Tools:")
    print(f"Functions: {', '.join(toolbox.names)}")
    print(f"Configurations: {len(toolbox.configs)} tool configs available")
    section(f"Question: {prompt}")

    print("\n📋 Creating a plan with addTodos...")
    print("✅ Plan created:", await toolbox.call("addTodos", {"newTodos": PLAN}))
    print("✅ Current todos:", await toolbox.call("checkTodos", {}))

    print("\n🔍 Using searchGoogle to find hoodie stores...")
    print(await toolbox.run_tool_call({
        "id": "search-1",
        "function": {
            "name": "searchGoogle",
            "arguments": {"query": "hoodie stores Times Square NYC fur lined zipper", "location": "New York, NY"},
        },
    }))

    await toolbox.call("markTodoDone", {"todo": PLAN[0]})
    await toolbox.call("markTodoDone", {"todo": PLAN[1]})
    print("✅ Progress check:", await toolbox.call("checkTodos", {}))

    tool_results: List[str] = []
    verdict = None
    print("\n🤖 Now trying LLM tool calling...")
    try:
        completion = await dispatcher.complete_with_tools({
            "messages": [{"role": "developer", "content": prompt}],
            "tool_choice": "auto",
            "tools": toolbox.select("searchGoogle"),
        })
        answer = completion.content
        section(f"Answer: {answer}")

        for call in completion.tool_calls:
            result = await toolbox.run_tool_call(call)
            tool_results.append(result)
            print(f"🔧 {call.name}: {result[:200]}")

        print("\n🔍 Validating Response with LLM Judge:")
        verdict = await check_goal_done(prompt, answer, dispatcher=dispatcher)
        print_verdict(verdict)
    except ProviderError as e:
        print(f"\n❌ Tool calling failed: {e}")

    return {
        "todos": toolbox.todo_list.todos,
        "done": toolbox.todo_list.done,
        "tool_results": tool_results,
        "verdict": verdict,
    }
