import logging
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
    StreamError,
    StreamEventType,
)


def main():
    if not os.getenv("ANTHROPIC_API_KEY"):
        print("Please set ANTHROPIC_API_KEY environment variable.")
        return

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))

    params = MessageCreateParams(
        model=MODEL_CLAUDE_3_HAIKU,
        max_tokens=256,
        messages=[MessageParam(role=ROLE_USER, content="Count from 1 to 5 slowly.")],
    )

    print("Assistant: ", end="", flush=True)
    with Client() as client, client.stream_message(params) as stream:
        try:
            for event in stream:
                if event.type == StreamEventType.CONTENT_BLOCK_DELTA:
                    print(event.content_block.text, end="", flush=True)
                # The service closes the connection right after a stop reason
                if event.stop_reason:
                    break
        except StreamError as e:
            print(f"\nError: {e}")
            return

        usage = stream.current_message.usage
    print(f"\n({usage.output_tokens} output tokens)")


if __name__ == "__main__":
    main()
