import logging
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlencode

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bs4 import BeautifulSoup

from quote_segmenter.config import get_settings
from quote_segmenter.services.html_quotes import collect_head_styles, parse_html

logger = logging.getLogger(__name__)

FRAGMENT_PARSER = "html.parser"
CID_SCHEME = "cid:"

ALLOWED_TAGS: tuple[str, ...] = (
    "a",
    "abbr",
    "b",
    "blockquote",
    "br",
    "caption",
    "center",
    "code",
    "col",
    "colgroup",
    "div",
    "em",
    "font",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
    "i",
    "img",
    "li",
    "ol",
    "p",
    "pre",
    "s",
    "small",
    "span",
    "strike",
    "strong",
    "sub",
    "sup",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "u",
    "ul",
)

ALLOWED_ATTRIBUTES: dict[str, list[str]] = {
    "*": ["class", "style", "dir", "align", "title", "id"],
    "a": ["href", "name", "target", "rel"],
    "blockquote": ["type", "cite"],
    "font": ["color", "face", "size"],
    "img": ["src", "alt", "width", "height"],
    "table": ["border", "cellpadding", "cellspacing", "width", "bgcolor", "role"],
    "td": ["colspan", "rowspan", "width", "height", "valign", "bgcolor"],
    "th": ["colspan", "rowspan", "width", "height", "valign", "bgcolor"],
}

ALLOWED_PROTOCOLS: tuple[str, ...] = ("http", "https", "mailto", "tel", "data", "cid")

# Dropped with their contents before sanitizing; bleach would keep the text.
DROPPED_ELEMENTS: tuple[str, ...] = ("script", "noscript", "style", "template", "title")


@dataclass(frozen=True)
class AttachmentDescriptor:
    id: str
    filename: str
    mime_type: str
    content_id: str | None = None


@dataclass(frozen=True)
class AttachmentUrlParams:
    board_id: str
    board_card_id: str


@dataclass
class SanitizedEmailHtml:
    sanitized_html: str
    sanitized_display_html: str
    styles: str


def sanitize_html(html: str) -> str:
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        css_sanitizer=CSSSanitizer(),
        strip=True,
        strip_comments=True,
    )


def is_inline_image(attachment: AttachmentDescriptor) -> bool:
    return attachment.mime_type.lower().startswith("image/") and bool(attachment.filename or attachment.content_id)


def cid_references(attachment: AttachmentDescriptor) -> set[str]:
    references: set[str] = set()
    if attachment.filename:
        references.add(f"{CID_SCHEME}{attachment.filename}")
    if attachment.content_id:
        references.add(f"{CID_SCHEME}{attachment.content_id}")
        # Content-ID headers usually carry angle brackets, img sources never do.
        references.add(f"{CID_SCHEME}{attachment.content_id.strip('<>')}")
    return references


def build_attachment_proxy_url(proxy_url: str, url_params: AttachmentUrlParams, attachment_id: str) -> str:
    query = urlencode(
        {
            "boardId": url_params.board_id,
            "boardCardId": url_params.board_card_id,
            "attachmentId": attachment_id,
        }
    )
    return f"{proxy_url}?{query}"


def rewrite_inline_images(
    root: BeautifulSoup,
    attachments: Iterable[AttachmentDescriptor],
    url_params: AttachmentUrlParams,
    proxy_url: str,
) -> int:
    images = root.find_all("img")
    rewritten = 0
    for attachment in attachments:
        if not is_inline_image(attachment):
            continue
        references = cid_references(attachment)
        attachment_url = build_attachment_proxy_url(proxy_url, url_params, attachment.id)
        for image in images:
            if image.get("src") in references:
                image["src"] = attachment_url
                rewritten += 1
    return rewritten


def sanitize_and_rewrite_inline_images(
    html: str | None,
    attachments: Iterable[AttachmentDescriptor],
    url_params: AttachmentUrlParams,
    *,
    proxy_url: str | None = None,
) -> SanitizedEmailHtml:
    if proxy_url is None:
        proxy_url = get_settings().attachment_proxy_url

    document = parse_html(html)
    styles = collect_head_styles(document)
    body = document.body
    if body is None:
        body_html = ""
    else:
        for element in body.find_all(list(DROPPED_ELEMENTS)):
            element.decompose()
        body_html = body.decode_contents()

    fragment = BeautifulSoup(sanitize_html(body_html), FRAGMENT_PARSER)
    rewritten = rewrite_inline_images(fragment, attachments, url_params, proxy_url)
    display_html = str(fragment)

    head_html = f"<style>{styles}</style>" if styles else ""
    sanitized_html = f"<html><head>{head_html}</head><body>{display_html}</body></html>"

    logger.debug(
        "Sanitized email HTML",
        extra={"event": "email_html_sanitized", "inline_images_rewritten": rewritten},
    )
    return SanitizedEmailHtml(
        sanitized_html=sanitized_html,
        sanitized_display_html=display_html,
        styles=styles,
    )
