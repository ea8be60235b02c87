"""Tests for the export HTML sanitizer."""

from docshelf.utils.html_sanitizer import sanitize_html


def test_keeps_formatting_markup():
    markup = "<h2>Title</h2><ul><li>one</li></ul><pre><code>x = 1</code></pre>"
    assert sanitize_html(markup) == markup


def test_removes_script_and_iframe_with_contents():
    cleaned = sanitize_html("<p>ok</p><script>alert(1)</script><iframe src='https://evil'></iframe>")
    assert cleaned == "<p>ok</p>"


def test_strips_event_handler_attributes():
    cleaned = sanitize_html('<img src="a.png" onerror="alert(1)" alt="pic">')
    assert "onerror" not in cleaned
    assert 'src="a.png"' in cleaned
    assert 'alt="pic"' in cleaned


def test_strips_script_urls():
    cleaned = sanitize_html('<a href=" JavaScript:alert(1)">x</a><a href="https://example.com">y</a>')
    assert "javascript" not in cleaned.lower()
    assert 'href="https://example.com"' in cleaned


def test_empty_input():
    assert sanitize_html("") == ""
