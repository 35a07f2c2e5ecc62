"""
通用商品字段抽取

对单个商品容器元素，按候选选择器列表依次尝试取字段，
取不到时回退到容器全文的正则匹配。
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from ..document import Element
from .patterns import (
    BACKGROUND_URL_RE,
    DISCOUNT_ANY_RE,
    DISCOUNT_RE,
    GROUPED_WON_RE,
    NUMBER_GROUP_RE,
    PARENT_RATING_RE,
    PARENT_REVIEW_RE,
    absolutize_url,
    find_discount,
    find_original_price,
    find_price,
    find_rating,
    find_review_count,
)

ProductFields = Dict[str, Optional[str]]

NAME_SELECTORS = (
    '[class*="name"]',
    '[class*="title"]',
    '[class*="goods"]',
    "h3",
    "h4",
    "h5",
    ".tit",
    ".prd_name",
    ".item_name",
    'span:not([class*="price"]):not([class*="discount"])',
)

BRAND_SELECTORS = ('[class*="brand"]', ".brand", ".maker")

PRICE_SELECTORS = (
    ".price",
    '[class*="price"]',
    '[class*="cost"]',
    ".price_num",
    ".final-price",
    ".sale-price",
)

IMAGE_SELECTORS = ("img", '[style*="background-image"]')

SALE_PRICE_CLASS = '[class*="sale"], [class*="final"], [class*="current"]'
ORIGINAL_PRICE_CLASS = '[class*="origin"], [class*="before"]'

_LEADING_DIGIT_RE = re.compile(r"^\d")


def _image_from(element: Optional[Element], base_url: str, attrs=("src", "data-src", "data-lazy-src")) -> Optional[str]:
    if element is None:
        return None
    for attr in attrs:
        value = element.attr(attr)
        if value:
            return absolutize_url(value, base_url)
    style = element.attr("style") or ""
    match = BACKGROUND_URL_RE.search(style)
    if match:
        return absolutize_url(match.group(1), base_url)
    return None


def _extract_name(element: Element) -> str:
    for selector in NAME_SELECTORS:
        found = element.find(selector).first()
        text = found.text() if found else ""
        if 3 < len(text) < 200 and not _LEADING_DIGIT_RE.match(text):
            return text
    lines = [line.strip() for line in element.raw_text().split("\n") if line.strip()]
    return lines[0][:100] if lines else ""


def _extract_brand(element: Element) -> Optional[str]:
    for selector in BRAND_SELECTORS:
        found = element.find(selector).first()
        text = found.text() if found else ""
        if 1 < len(text) < 50:
            return text
    return None


def _extract_prices(element: Element) -> ProductFields:
    """价格类元素：区分售价与原价，同时顺带取折扣"""
    price: Optional[str] = None
    original_price: Optional[str] = None
    discount: Optional[str] = None

    for selector in PRICE_SELECTORS:
        for price_el in element.find(selector):
            text = price_el.text()
            numbers = [n for n in NUMBER_GROUP_RE.findall(text) if any(c.isdigit() for c in n)]
            if numbers:
                if price_el.is_(SALE_PRICE_CLASS):
                    price = numbers[0]
                elif price_el.is_(ORIGINAL_PRICE_CLASS):
                    original_price = numbers[0]
                elif not price:
                    price = numbers[0]
            match = DISCOUNT_ANY_RE.search(text)
            if match:
                discount = f"{match.group(1)}%"
        if price:
            break

    return {"price": price, "original_price": original_price, "discount_percent": discount}


def extract_product_info(element: Element, base_url: str) -> ProductFields:
    """从商品容器元素中抽取全部字段

    Args:
        element: 商品容器
        base_url: 用于补全相对链接

    Returns:
        字段字典（键与 Product 字段名一致），未找到的字段为 None
    """
    fields = _extract_prices(element)
    full_text = element.raw_text()

    if not fields["price"]:
        price, combo_discount = find_price(full_text)
        fields["price"] = price
        if combo_discount:
            fields["discount_percent"] = combo_discount
    if not fields["original_price"]:
        fields["original_price"] = find_original_price(full_text)
    if not fields["discount_percent"]:
        fields["discount_percent"] = find_discount(full_text)

    image = None
    for selector in IMAGE_SELECTORS:
        image = _image_from(element.find(selector).first(), base_url)
        if image:
            break

    href = element.attr("href") or element.find("a").attr("href")

    fields.update(
        name=_extract_name(element),
        brand=_extract_brand(element),
        image=image,
        url=absolutize_url(href, base_url),
        rating=find_rating(full_text),
        review_count=find_review_count(full_text),
    )
    return fields


def extract_from_ancestor(ancestor: Element, link: Element, base_url: str) -> ProductFields:
    """商品链接的祖先元素含价格文本时，从祖先全文抽取字段

    商品名优先取链接文本；链接文本过短时取祖先文本中去掉价格、折扣、评分后的首段。
    """
    raw_text = ancestor.raw_text()
    text = re.sub(r"\s+", " ", raw_text).strip()

    name = link.text()
    if len(name) < 3:
        stripped = re.sub(r"\d{1,3}(,\d{3})*\s*원", "", raw_text)
        stripped = re.sub(r"\d{1,2}%", "", stripped)
        stripped = re.sub(r"\d+\.\d+", "", stripped)
        stripped = re.sub(r"\(\d+\)", "", stripped)
        parts = [p.strip() for p in re.split(r"\s{2,}", stripped.strip()) if len(p.strip()) > 3]
        name = parts[0][:150] if parts else ""

    price_match = GROUPED_WON_RE.search(text)
    discount_match = DISCOUNT_RE.search(text)
    rating_match = PARENT_RATING_RE.search(text)
    review_match = PARENT_REVIEW_RE.search(text)

    image = _image_from(link.find("img").first(), base_url, attrs=("src", "data-src"))
    if not image:
        image = _image_from(ancestor.find("img").first(), base_url, attrs=("src", "data-src"))

    return {
        "name": name,
        "price": price_match.group(1) if price_match else None,
        "original_price": None,
        "discount_percent": f"{discount_match.group(1)}%" if discount_match else None,
        "image": image,
        "url": absolutize_url(link.attr("href"), base_url),
        "brand": None,
        "rating": rating_match.group(1) if rating_match else None,
        "review_count": review_match.group(1) if review_match else None,
    }
