from dataclasses import dataclass
from datetime import datetime
from html import escape
from zoneinfo import ZoneInfo

from quote_segmenter.config import get_settings
from quote_segmenter.services.html_quotes import GMAIL_ATTR_CLASS, GMAIL_QUOTE_CLASS

BLOCKQUOTE_STYLE = "margin:0px 0px 0px 0.8ex;border-left:1px solid rgb(204,204,204);padding-left:1ex"
BLANK_LINE_HTML = "<div><br></div>"


@dataclass(frozen=True)
class Sender:
    email: str
    name: str | None = None


def format_sent_at(sent_at: datetime, time_zone: str | None = None) -> str:
    # Naive datetimes are taken to be in the target zone already.
    if sent_at.tzinfo is not None:
        sent_at = sent_at.astimezone(ZoneInfo(time_zone or get_settings().quote_time_zone))
    hour = sent_at.hour % 12 or 12
    meridiem = "am" if sent_at.hour < 12 else "pm"
    return f"{sent_at:%a, %b} {sent_at.day}, {sent_at.year} at {hour}:{sent_at:%M} {meridiem}"


def format_sender(sender: Sender) -> str:
    if sender.name:
        return f"{sender.name} <{sender.email}>"
    return sender.email


def text_to_html(text: str) -> str:
    lines = text.replace("\r\n", "\n").split("\n")
    return "".join(f"<div>{escape(line)}</div>" if line.strip() else BLANK_LINE_HTML for line in lines)


def build_quoted_html(
    sender: Sender,
    sent_at: datetime | str,
    html: str | None = "",
    text: str | None = "",
    *,
    time_zone: str | None = None,
) -> str:
    sent_label = sent_at if isinstance(sent_at, str) else format_sent_at(sent_at, time_zone)
    header = escape(f"On {sent_label} {format_sender(sender)} wrote:", quote=False)
    body = html if html else text_to_html(text or "")
    return (
        f'<div class="{GMAIL_QUOTE_CLASS}">'
        f'<div class="{GMAIL_ATTR_CLASS}">{header}</div>'
        f'<blockquote class="{GMAIL_QUOTE_CLASS}" style="{BLOCKQUOTE_STYLE}">{body}</blockquote>'
        "</div>"
    )
