from __future__ import annotations

import argparse
import asyncio
import sys

from roadmap_chat.api.schemas.chat import ChatMessage
from roadmap_chat.client.chat_client import ChatStreamClient
from roadmap_chat.client.results import ChatResultError
from roadmap_chat.core.logging import configure_logging
from roadmap_chat.core.settings import get_settings


def _print_token(token: str, _full_content: str) -> None:
    sys.stdout.write(token)
    sys.stdout.flush()


async def run(question: str, *, system_prompt: str | None, base_url: str | None) -> int:
    settings = get_settings()
    messages = [ChatMessage(role="user", content=question)]
    if system_prompt:
        messages.insert(0, ChatMessage(role="system", content=system_prompt))

    client = ChatStreamClient(
        base_url or settings.client_base_url,
        encode_payload=settings.encode_request_payload,
        timeout_seconds=settings.client_timeout_seconds,
    )

    try:
        result = await client.stream_chat_response(messages, on_token=_print_token)
    finally:
        await client.aclose()

    sys.stdout.write("\n")
    if isinstance(result, ChatResultError):
        print(result.message, file=sys.stderr)
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask the roadmap chat relay a question and stream the answer")
    parser.add_argument("question", help="User message to send")
    parser.add_argument("--system", default=None, help="Optional system message prepended to the conversation")
    parser.add_argument("--base-url", default=None, help="Relay base URL (defaults to CHAT_CLIENT_BASE_URL)")
    args = parser.parse_args()

    configure_logging(get_settings().effective_log_level)
    sys.exit(asyncio.run(run(args.question, system_prompt=args.system, base_url=args.base_url)))


if __name__ == "__main__":
    main()
