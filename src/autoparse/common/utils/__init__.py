"""通用工具模块"""

from .delay import get_random_delay, random_pause, sleep_ms

__all__ = [
    "get_random_delay",
    "random_pause",
    "sleep_ms",
]
