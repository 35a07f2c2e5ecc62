"""商品名清洗"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.config import config

# 营销/噪声词，按顺序依次删除
NOISE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"아울렛"),
    re.compile(r"옵션"),
    re.compile(r"공용"),
    re.compile(r"남성"),
    re.compile(r"여성"),
    re.compile(r"설날\s*빅세일"),
    re.compile(r"타임세일"),
    re.compile(r"단독"),
    re.compile(r"천$"),
    re.compile(r"만$"),
    re.compile(r"\d+\.\d+천?만?"),
    re.compile(r"\(\d{1,3}(,\d{3})*\+?\)"),
)

# 韩文品牌紧跟拉丁字母或括号，如 "어반드레스V-neck Overfit"
KOREAN_BRAND_RE = re.compile(r"^([가-힣]{2,10})([A-Za-z\[\(])")
# 全大写英文品牌，如 "NIKE Air Max"
ENGLISH_BRAND_RE = re.compile(r"^([A-Z][A-Z]+)\s+(.+)$")

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedName:
    name: str
    brand: Optional[str] = None


class NameNormalizer:
    """去噪、分离品牌前缀、截断"""

    def __init__(
        self,
        max_length: Optional[int] = None,
        noise_patterns: Sequence[re.Pattern] = NOISE_PATTERNS,
    ):
        self.max_length = max_length if max_length is not None else config.extractor.name_max_length
        self.noise_patterns = tuple(noise_patterns)

    def normalize(self, raw_name: Optional[str]) -> NormalizedName:
        name = (raw_name or "").strip()
        for pattern in self.noise_patterns:
            name = pattern.sub("", name)
        name = _WHITESPACE_RE.sub(" ", name).strip()

        brand: Optional[str] = None
        korean = KOREAN_BRAND_RE.match(name)
        if korean:
            brand = korean.group(1)
            name = name[len(brand):].strip()
        else:
            english = ENGLISH_BRAND_RE.match(name)
            if english:
                brand = english.group(1)
                name = english.group(2).strip()

        if len(name) > self.max_length:
            name = name[: self.max_length] + "..."

        return NormalizedName(name=name, brand=brand)

    __call__ = normalize
