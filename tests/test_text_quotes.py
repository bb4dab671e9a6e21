from quote_segmenter.services.text_quotes import find_quote_region, parse_text_body


def test_trailing_quote_after_reply() -> None:
    raw = "Thank you!\n\nOn 2024-01-10 14:20, user@domain.com wrote:\n> original\n> text"
    result = parse_text_body(raw)
    assert result.main_text == "Thank you!"
    assert result.quoted_text == "On 2024-01-10 14:20, user@domain.com wrote:\n> original\n> text"


def test_quote_at_the_start_with_reply_below() -> None:
    raw = """On 2024-01-15 10:30, contact@company.com wrote:
> Hello team,
>
> This is a reminder about the meeting.
>
> Best regards,
> Manager

Sorry, I made an error.
There are actually four sessions scheduled."""

    result = parse_text_body(raw)
    assert result.quoted_text.startswith("On 2024-01-15 10:30, contact@company.com wrote:")
    assert "> Hello team," in result.quoted_text
    assert "> Manager" in result.quoted_text
    assert result.main_text == "Sorry, I made an error.\nThere are actually four sessions scheduled."


def test_body_without_quotes_is_right_trimmed() -> None:
    raw = "  Just a plain email with no quotes.\n\n\n"
    result = parse_text_body(raw)
    assert result.main_text == "  Just a plain email with no quotes."
    assert result.quoted_text == ""


def test_prefixed_lines_without_header() -> None:
    raw = "I have a comment.\n\n> This is a quote\n> from someone\n\nAnd here is more text."
    result = parse_text_body(raw)
    assert result.quoted_text == "> This is a quote\n> from someone"
    assert "I have a comment." in result.main_text
    assert "And here is more text." in result.main_text


def test_only_first_quote_block_is_taken() -> None:
    raw = """Reply text here.

On 2024-01-08 11:00, user1@example.com wrote:
> First quote block
> with content

This should be in main text.

On 2024-01-07 09:00, user2@example.com wrote:
> Second quote block"""

    result = parse_text_body(raw)
    assert "Reply text here." in result.main_text
    assert "This should be in main text." in result.main_text
    assert "> Second quote block" in result.main_text
    assert "On 2024-01-08 11:00" in result.quoted_text
    assert "> First quote block" in result.quoted_text
    assert "Second quote block" not in result.quoted_text


def test_lone_header_quotes_only_itself() -> None:
    raw = "Sounds good.\nOn Fri, Mar 1, 2024 someone@example.com wrote:\nSee you there."
    result = parse_text_body(raw)
    assert result.quoted_text == "On Fri, Mar 1, 2024 someone@example.com wrote:"
    assert result.main_text == "Sounds good.\nSee you there."


def test_forwarded_banner_without_prefixed_lines_quotes_only_itself() -> None:
    raw = """Please review this.

---------- Forwarded message ---------
From: Person A <persona@example.com>
Subject: Important update

This is the forwarded content."""

    result = parse_text_body(raw)
    assert result.quoted_text == "---------- Forwarded message ---------"
    assert result.main_text == (
        "Please review this.\n\nFrom: Person A <persona@example.com>\nSubject: Important update\n\n"
        "This is the forwarded content."
    )


def test_short_forward_keeps_body_in_main() -> None:
    result = parse_text_body("FYI\n---------- Forwarded message ---------\nFrom: A\nOriginal body")
    assert result.quoted_text == "---------- Forwarded message ---------"
    assert result.main_text == "FYI\nFrom: A\nOriginal body"


def test_header_after_text_on_the_same_line() -> None:
    result = parse_text_body("Sure thing. On Mon, Jan 1, 2024 Bob wrote:\n> old")
    assert result.quoted_text == "Sure thing. On Mon, Jan 1, 2024 Bob wrote:\n> old"
    assert result.main_text == ""


def test_header_after_text_with_reply_above() -> None:
    result = parse_text_body("See below.\n\nSent from my phone. On Mon, Jan 1, 2024 Bob wrote:\n> old\n> text")
    assert result.main_text == "See below."
    assert result.quoted_text == "Sent from my phone. On Mon, Jan 1, 2024 Bob wrote:\n> old\n> text"


def test_forwarded_message_with_prefixed_lines_ends_at_last_prefixed_line() -> None:
    raw = """Hi there,
---------- Forwarded message ---------
From: Person B <personb@example.com>
> Content here.

Let me know your thoughts."""

    result = parse_text_body(raw)
    assert "Hi there," in result.main_text
    assert "Let me know your thoughts." in result.main_text
    assert "Forwarded message" in result.quoted_text
    assert result.quoted_text.endswith("> Content here.")


def test_forwarded_message_without_content_before_stays_in_main() -> None:
    raw = """

---------- Forwarded message ---------
From: Person C <personc@example.com>
Subject: Test email

Hey there, this is the forwarded content.
"""

    result = parse_text_body(raw)
    assert result.quoted_text == ""
    assert "Forwarded message" in result.main_text
    assert result.main_text.endswith("Hey there, this is the forwarded content.")


def test_crlf_line_endings() -> None:
    raw = "Thanks\r\n\r\nOn Mon, Jan 1, 2024 a@example.com wrote:\r\n> hi\r\n"
    result = parse_text_body(raw)
    assert result.main_text == "Thanks"
    assert result.quoted_text == "On Mon, Jan 1, 2024 a@example.com wrote:\n> hi"


def test_empty_body() -> None:
    for value in ("", None):
        result = parse_text_body(value)
        assert result.main_text == ""
        assert result.quoted_text == ""


def test_find_quote_region_tracks_last_prefixed_line() -> None:
    lines = ["hello", "On x wrote:", "> a", "", "> b", "after", "> c"]
    region = find_quote_region(lines)
    assert region is not None
    assert region.start == 1
    assert region.last_prefixed == 4


def test_find_quote_region_without_quotes() -> None:
    assert find_quote_region(["hello", "", "world"]) is None
