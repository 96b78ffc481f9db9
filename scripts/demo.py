#!/usr/bin/env python3
"""
Demo script for the Kisah Sukses AI pipeline.

Runs fully offline: no proxy server or API key is needed. Shows local
rule answers, caching, simulated streaming and session history.
"""

import asyncio
import time

from kisah_ai import KisahAI


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_rules(ai: KisahAI) -> None:
    """Answer a few prompts with the local rule engine."""
    print_section("Local Rule Engine")

    prompts = [
        "halo",
        "tolong saya",
        "ringkas: Ini kalimat satu. Ini kalimat dua. Ini kalimat tiga.",
        "butuh motivasi untuk ujian",
        "ada bug di kode saya",
        "cuaca besok bagaimana?",
    ]
    for prompt in prompts:
        answer = await ai.ask(prompt, session_id="demo")
        print(f"\n  Prompt: {prompt}")
        print(f"  Answer: {answer}")


async def demo_cache(ai: KisahAI) -> None:
    """Show that a repeated prompt is served from the cache."""
    print_section("Response Cache")

    for attempt in ("first", "second"):
        start = time.perf_counter()
        await ai.ask("halo", session_id="cache-demo")
        duration = (time.perf_counter() - start) * 1000
        print(f"  {attempt} ask: {duration:.3f}ms")

    history = ai.get_session("cache-demo").history
    print(f"  Messages recorded: {len(history)} (cache hits record nothing)")
    print(f"  Entries in cache: {ai.resolver.cache.get_stats()['total_entries']}")


async def demo_streaming(ai: KisahAI) -> None:
    """Stream an answer in simulated fragments."""
    print_section("Simulated Streaming")

    prompt = "ringkas: " + "Langkah kecil setiap hari membangun kebiasaan besar. " * 3
    print(f"\n  Prompt: {prompt[:60]}...\n  ", end="")
    fragments: list[str] = []

    def on_chunk(fragment: str) -> None:
        fragments.append(fragment)
        print(fragment, end="|", flush=True)

    full = await ai.stream_ask(prompt, on_chunk, session_id="demo")
    print(f"\n\n  Fragments: {len(fragments)}, total length: {len(full)}")


def demo_history(ai: KisahAI) -> None:
    """Print the recorded conversation."""
    print_section("Session History")

    for message in ai.get_session("demo").history:
        print(f"  [{message.role:<9}] {message.text[:60]}")


async def run() -> None:
    ai = KisahAI.create(offline=True)
    try:
        await demo_rules(ai)
        await demo_cache(ai)
        await demo_streaming(ai)
        demo_history(ai)
    finally:
        await ai.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 Kisah Sukses AI Demo")
    print("=" * 70)
    print("Offline mode: every answer comes from the local rule engine")

    asyncio.run(run())

    print("\n" + "=" * 70)
    print("✅ Demo completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
