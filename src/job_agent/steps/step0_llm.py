"""
Step 0: LLM integration and provider fallback.

Shows provider detection, the availability cache and a plain text
generation through the dispatcher.
"""

import logging
from typing import Any, Dict, Optional

from ..providers import FallbackDispatcher, ProviderError, get_dispatcher
from . import banner, print_points

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Explain in one sentence how AI agents work."


async def run(
    dispatcher: Optional[FallbackDispatcher] = None,
    prompt: str = DEFAULT_PROMPT,
) -> Dict[str, Any]:
    dispatcher = dispatcher or get_dispatcher()

    banner("🚀 STEP 0: LLM Integration and Smart Fallback System")
    print_points("📋 This step demonstrates:", [
        "How LLM providers are automatically detected",
        "Provider type detection (URL+Key vs Key-only)",
        "Provider availability caching",
        "Automatic model selection",
    ], bullet="-")

    print("\n🔍 Checking LLM Provider Status:")
    status = dispatcher.get_status()
    active = status.get("active")
    print(f"LLM Provider: {'✅ Available' if active else '❌ Unavailable'}")
    for slot, client_type in status.get("client_types", {}).items():
        print(f"Provider Type: {slot} ({client_type}) - {status['providers'].get(slot)}")
    print(f"Best Available: {active or 'None'}")

    print("\n🧪 Testing Text Generation with Smart Fallback:")
    print(f'\n📝 Prompt: "{prompt}"')
    response = None
    try:
        response = await dispatcher.complete_text(prompt)
        print(f"🤖 Response: {response}")
        print("✅ Text generation successful!")
    except ProviderError as e:
        print(f"❌ Text generation failed: {e}")

    banner("🎯 Key Learning Points:")
    for point in [
        "The system automatically selects the best available LLM provider",
        "Failed providers are marked and skipped in future calls",
        "No repeated availability checks",
        "New providers are added to the fallback chain as slots",
    ]:
        print(f"• {point}")

    return {"status": dispatcher.get_status(), "response": response}
