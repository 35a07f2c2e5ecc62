"""
HTML 文档能力接口

抽取器只依赖这里的 HtmlDocument / ElementSet / Element，
不直接接触具体的解析后端（当前为 BeautifulSoup + lxml）。
"""

from __future__ import annotations

import copy
import re
from typing import Iterable, Iterator, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
import soupsieve as sv
from soupsieve import SelectorSyntaxError

from ..common.exceptions import ParseFailure
from ..common.logger import get_logger

logger = get_logger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def _select(node: Tag, selector: str) -> list[Tag]:
    try:
        return node.select(selector)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        raise ParseFailure(selector, f"选择器无效 ({e})") from e


class Element:
    """单个元素"""

    __slots__ = ("node",)

    def __init__(self, node: Tag):
        self.node = node

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Element) and other.node is self.node

    def __hash__(self) -> int:
        return id(self.node)

    def __repr__(self) -> str:
        return f"<Element {self.tag} classes={self.classes()}>"

    @property
    def tag(self) -> str:
        return self.node.name or ""

    def find(self, selector: str, strict: bool = False) -> "ElementSet":
        """在后代中查找，非法选择器返回空集合（strict=True 时抛出 ParseFailure）"""
        try:
            return ElementSet(Element(n) for n in _select(self.node, selector))
        except ParseFailure as e:
            if strict:
                raise
            logger.debug(f"[Document] 跳过非法选择器: {e}")
            return ElementSet()

    def text(self) -> str:
        """所有后代文本拼接（首尾去空白）"""
        return self.node.get_text().strip()

    def raw_text(self) -> str:
        """未经处理的后代文本"""
        return self.node.get_text()

    def own_text(self) -> str:
        """只包含直接子文本节点，不含后代元素的文本"""
        return "".join(
            str(child)
            for child in self.node.children
            if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
        ).strip()

    def string(self) -> str:
        """脚本等单文本节点元素的原始内容"""
        if self.node.string is not None:
            return str(self.node.string)
        return self.node.get_text()

    def attr(self, name: str) -> Optional[str]:
        value = self.node.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value)

    def has_attr(self, name: str) -> bool:
        return self.node.has_attr(name)

    def attrs(self) -> dict[str, str]:
        return {name: self.attr(name) or "" for name in self.node.attrs}

    def classes(self) -> list[str]:
        value = self.node.get("class") or []
        if isinstance(value, str):
            value = value.split()
        return [c for c in value if c]

    def parent(self) -> Optional["Element"]:
        parent = self.node.parent
        if parent is None or isinstance(parent, BeautifulSoup) or not isinstance(parent, Tag):
            return None
        return Element(parent)

    def children(self) -> "ElementSet":
        return ElementSet(Element(c) for c in self.node.children if isinstance(c, Tag))

    def is_(self, selector: str) -> bool:
        """判断元素自身是否匹配选择器"""
        try:
            return sv.match(selector, self.node)
        except (SelectorSyntaxError, NotImplementedError, ValueError):
            return False


class ElementSet:
    """元素集合，保持文档顺序"""

    def __init__(self, elements: Iterable[Element] = ()):
        self._elements = list(elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __bool__(self) -> bool:
        return bool(self._elements)

    def __getitem__(self, index: int) -> Element:
        return self._elements[index]

    def first(self) -> Optional[Element]:
        return self._elements[0] if self._elements else None

    def last(self) -> Optional[Element]:
        return self._elements[-1] if self._elements else None

    def text(self) -> str:
        """所有元素文本拼接"""
        return "".join(e.raw_text() for e in self._elements).strip()

    def attr(self, name: str) -> Optional[str]:
        """第一个元素的属性值"""
        first = self.first()
        return first.attr(name) if first else None

    def children(self) -> "ElementSet":
        return ElementSet(c for e in self._elements for c in e.children())

    def find(self, selector: str) -> "ElementSet":
        seen: set[Element] = set()
        result: list[Element] = []
        for element in self._elements:
            for match in element.find(selector):
                if match not in seen:
                    seen.add(match)
                    result.append(match)
        return ElementSet(result)


class HtmlDocument:
    """解析后的 HTML 文档"""

    def __init__(self, html: str, url: str = ""):
        self.url = url
        self._soup = BeautifulSoup(html or "", "lxml")

    @classmethod
    def parse(cls, html: str, url: str = "") -> "HtmlDocument":
        return cls(html, url)

    def find(self, selector: str, strict: bool = False) -> ElementSet:
        """全文档查找，非法选择器返回空集合（strict=True 时抛出 ParseFailure）"""
        try:
            return ElementSet(Element(n) for n in _select(self._soup, selector))
        except ParseFailure as e:
            if strict:
                raise
            logger.debug(f"[Document] 跳过非法选择器: {e}")
            return ElementSet()

    def all_elements(self) -> ElementSet:
        return ElementSet(Element(n) for n in self._soup.find_all(True))

    def find_by_class(self, class_name: str) -> ElementSet:
        """按 class 名查找（不经过 CSS 解析，允许 md:flex 之类的类名）"""
        return ElementSet(Element(n) for n in self._soup.find_all(class_=class_name))

    def body(self) -> Optional[Element]:
        return self.find("body").first()

    def body_text(self) -> str:
        body = self.body()
        return body.raw_text() if body else self._soup.get_text()

    def text(self) -> str:
        return self._soup.get_text().strip()

    def title(self) -> str:
        title = self.find("title").first()
        return title.text() if title else ""

    def meta_content(self, key: str) -> Optional[str]:
        """按 property 或 name 读取 meta content"""
        for selector in (f'meta[property="{key}"]', f'meta[name="{key}"]'):
            value = self.find(selector).attr("content")
            if value:
                return value.strip()
        return None

    def all_meta(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for meta in self.find("meta"):
            key = meta.attr("property") or meta.attr("name")
            content = meta.attr("content")
            if key and content:
                result[key] = content
        return result

    def text_sample(self, exclude: Iterable[str] = (), limit: int = 2000) -> str:
        """去掉指定标签后的 body 文本（空白折叠，截断到 limit）"""
        soup = copy.copy(self._soup)
        names = list(exclude)
        for tag in (soup.find_all(names) if names else []):
            tag.decompose()
        root = soup.body or soup
        return collapse_whitespace(root.get_text(" "))[:limit]
