import re

# "On Mon, Jan 12, 2024 at 2:45 PM Someone <someone@example.com> wrote:", anywhere in the text.
ON_WROTE_PATTERN = re.compile(r"On\s+.+\s+wrote:", re.IGNORECASE)
# "---------- Forwarded message ---------", only at the start.
FORWARDED_HEADER_PATTERN = re.compile(r"^-+\s*Forwarded message\s*-+", re.IGNORECASE)
QUOTE_HEADER_PATTERN = re.compile(
    rf"{ON_WROTE_PATTERN.pattern}|{FORWARDED_HEADER_PATTERN.pattern}",
    re.IGNORECASE,
)
QUOTE_PREFIX = ">"


def is_quote_header_text(text: str) -> bool:
    return QUOTE_HEADER_PATTERN.search((text or "").strip()) is not None


def starts_with_quote_header(text: str) -> bool:
    return QUOTE_HEADER_PATTERN.match((text or "").strip()) is not None


def is_forwarded_header_text(text: str) -> bool:
    return FORWARDED_HEADER_PATTERN.search((text or "").strip()) is not None


def is_quote_prefixed_line(line: str) -> bool:
    return (line or "").strip().startswith(QUOTE_PREFIX)
