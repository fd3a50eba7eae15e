import asyncio
import os
import sys

# Ensure the package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from claude_stream import (
    Client,
    MessageCreateParams,
    MessageParam,
    MODEL_CLAUDE_3_HAIKU,
    ROLE_USER,
)


async def main():
    if not os.getenv("ANTHROPIC_API_KEY"):
        print("Please set ANTHROPIC_API_KEY environment variable.")
        return

    params = MessageCreateParams(
        model=MODEL_CLAUDE_3_HAIKU,
        max_tokens=256,
        messages=[MessageParam(role=ROLE_USER, content="Tell me a haiku about streams.")],
    )

    async with Client() as client:
        # 1. Print text as it arrives
        print("--- Text stream ---")
        async with await client.astream_message(params) as stream:
            async for text in stream.text_stream():
                print(text, end="", flush=True)
        print()

        # 2. Collect the complete message
        print("--- Final message ---")
        async with await client.astream_message(params) as stream:
            message = await stream.get_final_message()
        print(message.text)
        print(f"stop_reason={message.stop_reason} usage={message.usage}")


if __name__ == "__main__":
    asyncio.run(main())
