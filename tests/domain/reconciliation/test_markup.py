from __future__ import annotations

from catalogsync.domain.reconciliation import plain_text, sanitize_html


def test_sanitize_keeps_allowed_markup() -> None:
    html = '<p>Fast <strong>router</strong> <a href="https://example.com" title="x">link</a></p>'

    assert sanitize_html(html) == html


def test_sanitize_drops_scripts_with_their_content() -> None:
    cleaned = sanitize_html("<p>ok</p><script>alert(1)</script><style>p{}</style>")

    assert cleaned == "<p>ok</p>"


def test_sanitize_unwraps_unknown_tags_and_strips_handlers() -> None:
    cleaned = sanitize_html('<font color="red"><p onclick="x()" class="c">hi</p></font>')

    assert cleaned == "<p>hi</p>"


def test_sanitize_removes_javascript_urls() -> None:
    cleaned = sanitize_html('<a href="java\tscript:alert(1)">x</a><img src="javascript:x" alt="a">')

    assert "javascript" not in cleaned
    assert "script:" not in cleaned
    assert ">x</a>" in cleaned


def test_sanitize_blank_input() -> None:
    assert sanitize_html("   ") == ""


def test_plain_text_strips_tags_and_collapses_whitespace() -> None:
    assert plain_text("TP-Link  <b>AX3000</b>\n Router") == "TP-Link AX3000 Router"
