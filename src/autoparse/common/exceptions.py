"""自定义异常类

定义项目中使用的所有自定义异常，用于更精细的错误处理。
"""

from __future__ import annotations


class AutoParseError(Exception):
    """AutoParse 基础异常类

    所有自定义异常的基类。
    """
    pass


class BrowserError(AutoParseError):
    """浏览器相关错误的基类"""
    pass


class RenderFailure(BrowserError):
    """页面渲染失败

    浏览器启动或页面导航失败时抛出，对该 URL 是致命错误。
    """
    def __init__(self, url: str, message: str = "页面渲染失败"):
        super().__init__(f"{message}: {url}")
        self.url = url


class FetchError(AutoParseError):
    """普通 HTTP 抓取相关错误的基类"""
    pass


class FetchFailure(FetchError):
    """HTTP 抓取失败

    非 2xx 响应或网络错误时抛出。对单个 URL 致命，对批量任务非致命。
    """
    def __init__(self, url: str, status_code: int | None = None, message: str = "抓取失败"):
        detail = f"{message}: {url}"
        if status_code is not None:
            detail += f" (HTTP {status_code})"
        super().__init__(detail)
        self.url = url
        self.status_code = status_code


class ParseFailure(AutoParseError):
    """解析失败

    JSON-LD 格式错误或选择器非法时在内部抛出，只在候选级别被吞掉，不会向外传播。
    """
    def __init__(self, source: str, reason: str = "无法解析"):
        super().__init__(f"{reason}: {source}")
        self.source = source
        self.reason = reason


class ValidationError(AutoParseError):
    """验证失败错误"""
    pass


class URLValidationError(ValidationError):
    """URL 验证失败"""
    def __init__(self, url: str, reason: str = "格式无效"):
        super().__init__(f"URL 验证失败: {url}, 原因: {reason}")
        self.url = url
        self.reason = reason
