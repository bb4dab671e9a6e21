import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup, PageElement, Tag

from quote_segmenter.config import get_settings
from quote_segmenter.services.html_nodes import (
    element_text,
    has_class,
    has_visible_content,
    has_visible_content_before,
    is_blank_text_node,
    is_non_empty_node,
    is_or_contains_blockquote,
    is_text_node,
)
from quote_segmenter.services.quote_patterns import (
    is_forwarded_header_text,
    is_quote_header_text,
    starts_with_quote_header,
)

logger = logging.getLogger(__name__)

HTML_PARSER = "lxml"
GMAIL_QUOTE_CLASS = "gmail_quote"
GMAIL_ATTR_CLASS = "gmail_attr"


@dataclass
class HtmlSegments:
    main_html: str
    quoted_html: str
    styles: str


@dataclass
class NestingTooDeep(Exception):
    depth: int
    max_depth: int


class ScanState(enum.Enum):
    SEARCHING = "searching"
    FOUND = "found"
    DONE = "done"


@dataclass
class BoundaryMatch:
    nodes: list[Tag]
    header_text: str
    # Index in the scanned container at which scanning resumes.
    resume_index: int


def parse_html(html: str | None) -> BeautifulSoup:
    return BeautifulSoup(html or "", HTML_PARSER)


def collect_head_styles(soup: BeautifulSoup) -> str:
    if soup.head is None:
        return ""
    return "\n".join(
        "".join(str(part) for part in style.contents) for style in soup.head.find_all("style")
    )


def find_gmail_quote(elem: Tag) -> Tag | None:
    if has_class(elem, GMAIL_QUOTE_CLASS) and elem.find("blockquote") is not None:
        return elem
    # Document order puts an outer gmail_quote before any quote nested in it.
    for nested in elem.find_all(class_=GMAIL_QUOTE_CLASS):
        if nested.find("blockquote") is not None:
            return nested
    return None


def find_quote_container_children(elem: Tag) -> tuple[Tag, Tag] | None:
    children = [child for child in elem.contents if is_non_empty_node(child)]
    for header, quote in zip(children, children[1:]):
        if not isinstance(header, Tag) or not isinstance(quote, Tag):
            continue
        if is_quote_header_text(element_text(header)) and is_or_contains_blockquote(quote):
            return header, quote
    return None


def _match_gmail_quote(elem: Tag, index: int) -> BoundaryMatch | None:
    gmail_quote = find_gmail_quote(elem)
    if gmail_quote is None:
        return None
    attr = gmail_quote.find(class_=GMAIL_ATTR_CLASS)
    header_text = element_text(attr) if isinstance(attr, Tag) else ""
    return BoundaryMatch(nodes=[gmail_quote], header_text=header_text, resume_index=index + 1)


def _match_quote_container(elem: Tag, index: int) -> BoundaryMatch | None:
    pair = find_quote_container_children(elem)
    if pair is None:
        return None
    header, quote = pair
    return BoundaryMatch(nodes=[header, quote], header_text=element_text(header), resume_index=index + 1)


def is_header_element(elem: Tag) -> bool:
    text = element_text(elem)
    if not is_quote_header_text(text):
        return False
    if starts_with_quote_header(text):
        return True
    # A header past other text is this element's own only when no child element holds it.
    return not any(isinstance(child, Tag) and is_quote_header_text(element_text(child)) for child in elem.contents)


def _match_bare_header(elem: Tag, siblings: Sequence[PageElement], index: int) -> BoundaryMatch | None:
    if not is_header_element(elem):
        return None
    header_text = element_text(elem)

    match = BoundaryMatch(nodes=[elem], header_text=header_text, resume_index=index + 1)
    for next_index in range(index + 1, len(siblings)):
        sibling = siblings[next_index]
        if is_blank_text_node(sibling):
            continue
        if is_text_node(sibling):
            break
        if not isinstance(sibling, Tag):
            continue
        if is_or_contains_blockquote(sibling):
            match.nodes.append(sibling)
            match.resume_index = next_index + 1
            break
        if element_text(sibling):
            break
    return match


def match_boundary(elem: Tag, siblings: Sequence[PageElement], index: int) -> BoundaryMatch | None:
    return (
        _match_gmail_quote(elem, index)
        or _match_quote_container(elem, index)
        or _match_bare_header(elem, siblings, index)
    )


def has_visible_content_preceding(node: Tag, container: Tag) -> bool:
    """Whether anything visible precedes ``node`` inside ``container``.

    Checks the preceding siblings at every level between the node and the
    container, so a boundary found several wrappers deep still sees text that
    was written above its wrappers.
    """
    current: Tag = node
    while current is not container and current.parent is not None:
        parent = current.parent
        if has_visible_content_before(parent.contents, parent.index(current)):
            return True
        current = parent
    return False


def find_quote_boundary(container: Tag, depth: int = 0, max_depth: int | None = None) -> list[Tag]:
    """Return the boundary nodes of the first quote region in ``container``.

    The returned tags are references into the container's own tree, in
    document order. Raises ``NestingTooDeep`` when the search would descend
    past ``max_depth`` wrapper levels.
    """
    if max_depth is None:
        max_depth = get_settings().max_nesting_depth
    if depth > max_depth:
        raise NestingTooDeep(depth=depth, max_depth=max_depth)

    children = list(container.contents)
    boundary: list[Tag] = []
    state = ScanState.SEARCHING
    index = 0

    while index < len(children) and state is not ScanState.DONE:
        node = children[index]
        if not isinstance(node, Tag):
            index += 1
            continue

        if state is ScanState.FOUND:
            state = ScanState.DONE
            continue

        match = match_boundary(node, children, index)
        if match is not None:
            if is_forwarded_header_text(match.header_text) and not has_visible_content_preceding(
                match.nodes[0], container
            ):
                logger.debug(
                    "Leaving forwarded message without preceding content in main",
                    extra={"event": "forwarded_message_kept_in_main", "depth": depth},
                )
                state = ScanState.DONE
                continue
            boundary.extend(match.nodes)
            state = ScanState.FOUND
            index = match.resume_index
            continue

        if node.find(True) is not None:
            nested = find_quote_boundary(node, depth + 1, max_depth)
            if nested:
                boundary.extend(nested)
                state = ScanState.FOUND
        index += 1

    return boundary


def remove_trailing_empty(container: Tag, depth: int = 0, max_depth: int | None = None) -> None:
    if max_depth is None:
        max_depth = get_settings().max_nesting_depth
    if depth > max_depth:
        return

    for node in reversed(list(container.contents)):
        if is_text_node(node):
            if str(node).strip():
                break
            node.extract()
            continue
        if not isinstance(node, Tag):
            continue
        if not has_visible_content(node):
            node.extract()
            continue
        remove_trailing_empty(node, depth + 1, max_depth)
        break


def parse_html_body(body_html: str | None) -> HtmlSegments:
    soup = parse_html(body_html)
    styles = collect_head_styles(soup)
    body = soup.body
    if body is None:
        return HtmlSegments(main_html="", quoted_html="", styles=styles)

    max_depth = get_settings().max_nesting_depth
    try:
        boundary = find_quote_boundary(body, max_depth=max_depth)
    except NestingTooDeep as exc:
        logger.warning(
            "HTML body nested too deeply to segment; keeping it all as main content",
            extra={"event": "quote_scan_depth_exceeded", "depth": exc.depth, "max_depth": exc.max_depth},
        )
        boundary = []

    quoted_html = "".join(str(node) for node in boundary)
    for node in boundary:
        node.extract()

    remove_trailing_empty(body, max_depth=max_depth)
    main_html = body.decode_contents()

    logger.debug(
        "Segmented HTML body",
        extra={"event": "html_body_segmented", "boundary_nodes": len(boundary), "has_quote": bool(quoted_html)},
    )
    return HtmlSegments(main_html=main_html, quoted_html=quoted_html, styles=styles)


def html_to_text(html: str | None) -> str:
    soup = parse_html(html)
    return soup.get_text().replace("\r\n", "\n").strip()
