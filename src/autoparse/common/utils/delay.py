"""Delay helpers shared across render components."""

from __future__ import annotations

import asyncio
import random


def get_random_delay(base: float, random_range: float) -> float:
    """Return a randomized delay in seconds."""
    return base + random.uniform(0, random_range)


async def sleep_ms(ms: int | float) -> None:
    if ms > 0:
        await asyncio.sleep(ms / 1000)


async def random_pause(min_ms: int, max_ms: int) -> float:
    """Sleep for a random duration within [min_ms, max_ms], returns seconds slept."""
    low, high = sorted((max(min_ms, 0), max(max_ms, 0)))
    delay = get_random_delay(low / 1000, (high - low) / 1000)
    await asyncio.sleep(delay)
    return delay
