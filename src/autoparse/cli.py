"""CLI 入口"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Optional

import typer
from rich.panel import Panel

from .common.exceptions import AutoParseError
from .common.logger import console, get_logger
from .pipeline import runner

logger = get_logger(__name__)

app = typer.Typer(
    name="autoparse",
    help="AutoParse CLI - 电商页面商品抽取与选择器工具",
    add_completion=False,
)


def run_async_safely(coro):
    """在 CLI 同步上下文中执行协程（已有事件循环时改在新线程中运行）"""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    result_holder: dict[str, Any] = {"result": None, "error": None}

    def _runner():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            result_holder["result"] = loop.run_until_complete(coro)
        except BaseException as exc:  # noqa: BLE001
            result_holder["error"] = exc
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            asyncio.set_event_loop(None)

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()

    if result_holder["error"] is not None:
        raise result_holder["error"]
    return result_holder["result"]


# ============================================================================
# 输入 / 输出辅助
# ============================================================================


def _load_json(inline: str, file: str, name: str, default: Any = None) -> Any:
    """从 --xxx-json 或 --xxx-file 读取 JSON，两者都未提供时返回 default"""
    if file:
        path = Path(file)
        if not path.exists():
            raise ValueError(f"{name} 文件不存在: {file}")
        payload = path.read_text(encoding="utf-8")
    elif inline:
        payload = inline
    else:
        return default

    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{name} JSON 解析失败: {exc}") from exc


def _parse_pairs(values: list[str], separator: str, name: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for value in values:
        key, found, rest = value.partition(separator)
        if not found or not key.strip():
            raise ValueError(f"{name} 格式应为 key{separator}value: {value}")
        pairs[key.strip()] = rest.strip()
    return pairs


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _execute(coro) -> Any:
    """运行协程并把异常映射为退出码：中断 130，其他错误 1"""
    try:
        return run_async_safely(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]用户中断[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        console.print(Panel(f"[red]{e}[/red]", title="执行错误", style="red"))
        raise typer.Exit(1)


def _fail(message: str) -> None:
    console.print(Panel(f"[red]{message}[/red]", title="错误", style="red"))
    raise typer.Exit(1)


# ============================================================================
# 命令
# ============================================================================


@app.command("list")
def list_command(
    url: str = typer.Argument(..., help="列表页 URL"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="导航超时（毫秒）"),
    wait_for: Optional[str] = typer.Option(None, "--wait-for", help="导航后等待的选择器"),
    scroll: bool = typer.Option(True, "--scroll/--no-scroll", help="是否自动滚动加载"),
    stealth: Optional[bool] = typer.Option(None, "--stealth/--no-stealth", help="是否启用反检测脚本"),
    proxy: Optional[str] = typer.Option(None, "--proxy", help="代理服务器，如 http://host:port"),
    header: list[str] = typer.Option([], "--header", "-H", help="附加请求头，格式 'Name: value'"),
    cookie: list[str] = typer.Option([], "--cookie", help="附加 Cookie，格式 name=value"),
):
    """
    渲染列表页并抽取商品

    示例:
        autoparse list "https://www.musinsa.com/category/001"
    """
    try:
        options = {
            "timeoutMs": timeout_ms,
            "waitForSelector": wait_for,
            "scrollToLoad": scroll,
            "botBypass": stealth,
            "proxy": proxy,
            "headers": _parse_pairs(header, ":", "--header"),
            "cookies": [{"name": k, "value": v} for k, v in _parse_pairs(cookie, "=", "--cookie").items()],
        }
    except ValueError as e:
        _fail(str(e))

    console.print(Panel(f"[bold]URL:[/bold] {url}", title="列表抽取", style="cyan"))
    result = _execute(runner.extract_list(url, options))
    _echo_json(result)
    console.print(f"[green]共抽取 {len(result.get('products', []))} 个商品[/green]")


@app.command("detail")
def detail_command(
    url: str = typer.Argument(..., help="商品详情页 URL"),
    mode: str = typer.Option("auto", "--mode", "-m", help="抽取模式: auto / json-ld / dom"),
):
    """渲染详情页并抽取商品字段"""
    result = _execute(runner.extract_detail(url, mode))
    _echo_json(result)
    if "error" in result:
        _fail(result["error"])


@app.command("optimize-selectors")
def optimize_selectors_command(
    urls: list[str] = typer.Argument(..., help="同一站点的样本 URL（最多 5 个）"),
    current_json: str = typer.Option("", "--current-json", help="当前选择器 JSON 对象"),
    current_file: str = typer.Option("", "--current-file", help="当前选择器 JSON 文件"),
):
    """
    多样本选择器优化

    示例:
        autoparse optimize-selectors https://shop.example.com/p/1 https://shop.example.com/p/2
    """
    try:
        current = _load_json(current_json, current_file, "currentSelectors", default={})
    except ValueError as e:
        _fail(str(e))

    result = _execute(runner.optimize_selectors(urls, current))
    _echo_json(result)
    for line in result.get("improvements", []):
        console.print(f"  [cyan]•[/cyan] {line}")


@app.command("recommend")
def recommend_command(
    url: str = typer.Argument(..., help="列表页 URL"),
    items_json: str = typer.Option("", "--items-json", help="已解析条目 JSON 数组"),
    items_file: str = typer.Option("", "--items-file", help="已解析条目 JSON 文件"),
    current_json: str = typer.Option("", "--current-json", help="当前选择器 JSON 对象"),
):
    """按已解析条目的取值反查选择器"""
    try:
        items = _load_json(items_json, items_file, "parsedItems", default=[])
        current = _load_json(current_json, "", "currentSelectors", default={})
    except ValueError as e:
        _fail(str(e))

    if not isinstance(items, list) or not items:
        _fail("请通过 --items-json 或 --items-file 提供非空的条目数组")

    _echo_json(_execute(runner.recommend_selectors(url, items, current)))


@app.command("url-pattern")
def url_pattern_command(
    urls: list[str] = typer.Argument(..., help="一个或多个样本 URL"),
):
    """
    生成 URL 路径模板

    示例:
        autoparse url-pattern https://a.com/goods/123/abc https://a.com/goods/456/abc
    """
    sample = urls[0] if len(urls) == 1 else urls
    try:
        pattern = runner.url_pattern(sample)
    except AutoParseError as e:
        _fail(str(e))
    typer.echo(pattern)


@app.command("analyze")
def analyze_command(
    url: str = typer.Argument(..., help="页面 URL"),
    product_page: bool = typer.Option(False, "--product-page", help="按商品详情页给出选择器建议"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="导航超时（毫秒）"),
):
    """渲染页面并输出结构概览"""
    _echo_json(_execute(runner.analyze(url, is_product_page=product_page, timeout_ms=timeout_ms)))


@app.command("sample")
def sample_command(
    url: str = typer.Argument(..., help="页面 URL"),
    selectors_json: str = typer.Option("", "--selectors-json", help="字段选择器 JSON 对象"),
):
    """抓取页面（不渲染）并按选择器读取样本字段"""
    try:
        selectors = _load_json(selectors_json, "", "selectors", default={})
    except ValueError as e:
        _fail(str(e))

    _echo_json(_execute(runner.parse_sample(url, selectors)))


def main():
    """CLI 入口点

    供 pyproject.toml 中 [project.scripts] 调用。
    """
    app()


if __name__ == "__main__":
    main()
