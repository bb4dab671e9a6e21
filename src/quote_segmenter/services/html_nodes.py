from collections.abc import Sequence

from bs4 import NavigableString, PageElement, Tag
from bs4.element import PreformattedString

# Elements that render something even without any text inside them.
VISIBLE_TAGS = ("img", "video", "audio", "iframe", "svg", "canvas", "hr")


def is_text_node(node: PageElement) -> bool:
    # Comments, doctypes and CDATA are NavigableStrings too, but never render.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_blank_text_node(node: PageElement) -> bool:
    return is_text_node(node) and not str(node).strip()


def is_non_empty_node(node: PageElement) -> bool:
    return isinstance(node, Tag) or (is_text_node(node) and bool(str(node).strip()))


def element_text(node: Tag) -> str:
    return node.get_text().strip()


def has_visible_content(node: PageElement) -> bool:
    if is_text_node(node):
        return bool(str(node).strip())
    if not isinstance(node, Tag):
        return False
    if element_text(node):
        return True
    if (node.name or "").lower() in VISIBLE_TAGS:
        return True
    return node.find(list(VISIBLE_TAGS)) is not None


def has_visible_content_before(nodes: Sequence[PageElement], index: int) -> bool:
    return any(has_visible_content(node) for node in nodes[:index])


def is_or_contains_blockquote(node: PageElement) -> bool:
    if not isinstance(node, Tag):
        return False
    return node.name == "blockquote" or node.find("blockquote") is not None


def has_class(node: Tag, class_name: str) -> bool:
    return class_name in (node.get("class") or [])
