"""Tests for readable message text: email HTML cleanup and conversion."""

from typing import Any
from unittest.mock import patch

import pytest

from extractors.message import extract_message_body
from html_convert import (
    clean_email_html,
    extract_message_text,
    html_to_markdown,
    strip_tags,
)
from models import MessageBody, PartialError


class TestCleanEmailHtml:

    def test_tracking_pixel_removed(self) -> None:
        html = '<p>Hello</p><img src="https://t.example.com/o.gif" width="1" height="1" />'
        assert clean_email_html(html) == "<p>Hello</p>"

    def test_outlook_conditional_removed(self) -> None:
        html = "<!--[if mso]><table><tr><td>mso only</td></tr></table><![endif]--><p>Body</p>"
        assert clean_email_html(html) == "<p>Body</p>"

    def test_hidden_preheader_removed(self) -> None:
        html = '<div style="display:none;max-height:0">Preview text</div><p>Body</p>'
        assert clean_email_html(html) == "<p>Body</p>"

    def test_hidden_line_break_removed(self) -> None:
        assert clean_email_html('7.<br style="display:none"/>1.26') == "7.1.26"

    def test_empty_blocks_and_spacers_removed(self) -> None:
        html = "<table><tr><td>&nbsp;</td><td>Cell</td></tr></table><p> </p><div></div>"
        assert clean_email_html(html) == "<table><tr><td>Cell</td></tr></table>"

    def test_real_content_untouched(self) -> None:
        html = '<p>Price: <b>£5</b></p><img src="logo.png" width="120">'
        assert clean_email_html(html) == html


class TestStripTags:

    def test_entities_unescaped(self) -> None:
        assert strip_tags("<p>Fish &amp; chips</p><p>&lt;today&gt;</p>") == "Fish & chips <today>"

    def test_whitespace_collapsed(self) -> None:
        assert strip_tags("<div>\n  a\n\n</div>\t<span>b</span>") == "a b"


class TestHtmlToMarkdown:

    def test_blank_input(self) -> None:
        assert html_to_markdown("  \n ") == ("", False)

    def test_converts_markup(self) -> None:
        text, used_fallback = html_to_markdown("<h1>Title</h1><p>Some <b>bold</b> text</p>")

        assert used_fallback is False
        assert "Title" in text
        assert "**bold**" in text
        assert "<b>" not in text

    def test_converter_failure_falls_back_to_tag_stripping(self) -> None:
        with patch("markitdown.MarkItDown.convert_stream", side_effect=RuntimeError("boom")):
            text, used_fallback = html_to_markdown("<p>Fish &amp; chips</p>")

        assert used_fallback is True
        assert text == "Fish & chips"


class TestExtractMessageText:

    def test_plain_preferred(self, gmail_payload: dict[str, Any]) -> None:
        text, warnings = extract_message_text(extract_message_body(gmail_payload))

        assert text == "Hi team,\r\n\r\nThe quarterly report is attached."
        assert warnings == []

    def test_html_preferred(self, gmail_payload: dict[str, Any]) -> None:
        body = extract_message_body(gmail_payload, preference=("html", "plain"))

        text, warnings = extract_message_text(body)

        assert "Hi team," in text
        assert "quarterly report" in text
        assert "<div>" not in text
        assert warnings == []

    def test_no_body(self) -> None:
        text, warnings = extract_message_text(MessageBody())

        assert text == ""
        assert warnings == ["Message has no body content"]

    def test_partial_errors_become_warnings(self) -> None:
        body = MessageBody(
            text_body="Still readable",
            partial_errors=[
                PartialError(path="0.1", reason="text/html payload is not valid utf-8: invalid start byte"),
                PartialError(path="", reason="truncated base64 payload (5 chars)"),
            ],
        )

        text, warnings = extract_message_text(body)

        assert text == "Still readable"
        assert warnings == [
            "Part 0.1 could not be decoded: text/html payload is not valid utf-8: invalid start byte",
            "Part <root> could not be decoded: truncated base64 payload (5 chars)",
        ]

    @pytest.mark.parametrize("html", ["<p></p>", "<div>&nbsp;</div>"])
    def test_html_that_cleans_to_nothing(self, html: str) -> None:
        text, warnings = extract_message_text(MessageBody(html_body=html, preference=("html",)))

        assert text == ""
        assert warnings == []
