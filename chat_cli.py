#!/usr/bin/env python3
"""
Terminal chat against a running server (POST /api/chat, streamed).
Suggested questions from /resources.json can be sent by typing their number.
"""
import argparse
import asyncio

from supportchat.client import ChatClient


async def run(base_url: str) -> None:
    async with ChatClient(base_url) as chat:
        print(chat.history[0]["content"])
        suggestions = await chat.load_suggestions()
        for i, s in enumerate(suggestions, 1):
            print(f"  [{i}] {s['label']}")
        while True:
            try:
                message = await asyncio.to_thread(input, "\n> ")
            except (EOFError, KeyboardInterrupt):
                print()
                return
            if message.strip() in {"/quit", "/exit"}:
                return
            if message.strip().isdigit() and 1 <= int(message.strip()) <= len(suggestions):
                message = suggestions[int(message.strip()) - 1]["prompt"]
                print(message)
            answer = await chat.send(message, on_fragment=lambda s: print(s, end="", flush=True))
            if answer is None:
                continue
            if chat.history[-1]["role"] != "assistant":
                # failed request, nothing was streamed
                print(answer, end="")
            print()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base-url", default="http://localhost:8787")
    args = parser.parse_args()
    asyncio.run(run(args.base_url))


if __name__ == "__main__":
    main()
