"""Common模块 - 公共工具和基础设施

该模块提供：
- 全局配置管理
- 类型定义
- 日志系统
- 异常类
- 常量定义
- 输入验证
"""

from .config import config, Config
from .logger import get_logger, console
from .exceptions import (
    AutoParseError,
    BrowserError,
    RenderFailure,
    FetchError,
    FetchFailure,
    ParseFailure,
    ValidationError,
    URLValidationError,
)
from .constants import (
    DEFAULT_WAIT_MS,
    DEFAULT_SCROLL_COUNT,
    FIELD_TYPES,
)

__all__ = [
    # 配置
    "config",
    "Config",
    # 日志
    "get_logger",
    "console",
    # 异常
    "AutoParseError",
    "BrowserError",
    "RenderFailure",
    "FetchError",
    "FetchFailure",
    "ParseFailure",
    "ValidationError",
    "URLValidationError",
    # 常量
    "DEFAULT_WAIT_MS",
    "DEFAULT_SCROLL_COUNT",
    "FIELD_TYPES",
]
