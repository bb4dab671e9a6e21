from dataclasses import dataclass

from quote_segmenter.services.html_quotes import parse_html_body
from quote_segmenter.services.text_quotes import parse_text_body


@dataclass
class BodySegments:
    main: str
    quoted: str
    styles: str
    is_html: bool

    @property
    def has_quote(self) -> bool:
        return bool(self.quoted)


def segment_body(body_html: str | None = None, body_text: str | None = None) -> BodySegments:
    # HTML wins whenever it exists; a message with neither is an empty HTML body.
    if body_html or not body_text:
        html_segments = parse_html_body(body_html or "")
        return BodySegments(
            main=html_segments.main_html,
            quoted=html_segments.quoted_html,
            styles=html_segments.styles,
            is_html=True,
        )

    text_segments = parse_text_body(body_text)
    return BodySegments(
        main=text_segments.main_text,
        quoted=text_segments.quoted_text,
        styles="",
        is_html=False,
    )
