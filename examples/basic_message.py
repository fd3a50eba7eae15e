import os
import sys

# Ensure the package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from claude_stream import (
    Client,
    MessageCreateParams,
    MessageParam,
    MODEL_CLAUDE_3_5_SONNET,
    ROLE_USER,
)


def main():
    if not os.getenv("ANTHROPIC_API_KEY"):
        print("Please set ANTHROPIC_API_KEY environment variable.")
        return

    # 1. Configure the client (credentials come from the environment)
    with Client(timeout=60) as client:
        params = MessageCreateParams(
            model=MODEL_CLAUDE_3_5_SONNET,
            max_tokens=256,
            system="You are a poetic assistant.",
            messages=[MessageParam(role=ROLE_USER, content="Write a haiku about recursion.")],
        )

        # 2. Wait for the complete message
        message = client.create_message(params)

    print(f"Assistant: {message.text}")
    print(f"Usage: {message.usage.input_tokens} in / {message.usage.output_tokens} out")


if __name__ == "__main__":
    main()
