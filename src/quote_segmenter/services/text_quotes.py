import logging
from dataclasses import dataclass

from quote_segmenter.services.quote_patterns import (
    is_forwarded_header_text,
    is_quote_header_text,
    is_quote_prefixed_line,
)

logger = logging.getLogger(__name__)


@dataclass
class TextSegments:
    main_text: str
    quoted_text: str


@dataclass
class QuoteRegion:
    start: int
    # Last ">" line seen, or None when the region is a header alone.
    last_prefixed: int | None


def find_quote_region(lines: list[str]) -> QuoteRegion | None:
    start: int | None = None
    last_prefixed: int | None = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue

        prefixed = is_quote_prefixed_line(stripped)
        if prefixed or is_quote_header_text(stripped):
            if start is None:
                start = index
            if prefixed:
                last_prefixed = index
        elif start is not None and last_prefixed is not None:
            break

    if start is None:
        return None
    return QuoteRegion(start=start, last_prefixed=last_prefixed)


def _region_end(region: QuoteRegion) -> int:
    if region.last_prefixed is not None:
        return region.last_prefixed + 1
    return region.start + 1


def parse_text_body(body_text: str | None) -> TextSegments:
    text = (body_text or "").replace("\r\n", "\n")
    lines = text.split("\n")

    region = find_quote_region(lines)
    if region is None:
        return TextSegments(main_text=text.rstrip(), quoted_text="")

    before = "\n".join(lines[: region.start])
    if is_forwarded_header_text(lines[region.start]) and not before.strip():
        logger.debug(
            "Leaving forwarded message without preceding content in main",
            extra={"event": "forwarded_message_kept_in_main"},
        )
        return TextSegments(main_text=text.rstrip(), quoted_text="")

    end = _region_end(region)
    after = "\n".join(lines[end:])
    main_text = f"{before}\n{after}".strip()
    quoted_text = "\n".join(lines[region.start : end])

    logger.debug(
        "Segmented text body",
        extra={"event": "text_body_segmented", "quote_start": region.start, "quote_end": end},
    )
    return TextSegments(main_text=main_text, quoted_text=quoted_text)
