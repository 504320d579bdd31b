# tests/test_sanitizer.py
"""Tests for rich-content sanitization."""

import pytest

from cask_notes.services.sanitizer import (
    normalize_href,
    normalize_text_align,
    plain_text_from_html,
    sanitize_content,
    sanitize_plain_text,
)

HOSTILE_SAMPLES = [
    '<p onclick="steal()">Nose: <script>alert(1)</script>vanilla</p>',
    '<a href="javascript:alert(1)">click</a>',
    '<a href="JaVaScRiPt:alert(1)">click</a>',
    '<a href="//evil.example/x">protocol relative</a>',
    '<img src="x" onerror="alert(1)">',
    '<img src="javascript:alert(1)" alt="bad">',
    '<iframe src="https://evil.example"></iframe><p>after</p>',
    '<p style="color: red; background: url(javascript:alert(1)); text-align: center">x</p>',
    '<svg><g onload="alert(1)"></g></svg>',
    '<a href="www.example.com" target="_self">site</a>',
    '<div style="text-align: left;"><span>ok</span></div><!-- comment -->',
    '<table><tr><td colspan="2" style="text-align:right">cell</td></tr></table>',
    'plain & <b>bold</b> "quoted"',
]


class TestSanitizeContent:
    """Allow-list behaviour."""

    def test_empty_input(self) -> None:
        assert sanitize_content(None) == ""
        assert sanitize_content("") == ""

    def test_allowed_markup_survives(self) -> None:
        html = "<h2>Tasting</h2><ul><li><strong>Nose</strong>: <em>peat</em></li></ul>"
        assert sanitize_content(html) == html

    def test_scripts_and_handlers_are_removed(self) -> None:
        cleaned = sanitize_content(HOSTILE_SAMPLES[0])
        assert "<script" not in cleaned
        assert "onclick" not in cleaned
        assert cleaned.startswith("<p>")

    def test_disallowed_tags_are_stripped(self) -> None:
        cleaned = sanitize_content(HOSTILE_SAMPLES[6])
        assert "<iframe" not in cleaned
        assert "<p>after</p>" in cleaned

    @pytest.mark.parametrize("sample", HOSTILE_SAMPLES[1:3])
    def test_javascript_href_is_dropped(self, sample: str) -> None:
        cleaned = sanitize_content(sample)
        assert "javascript" not in cleaned.lower()
        assert "href" not in cleaned
        assert ">click</a>" in cleaned

    def test_protocol_relative_href_is_dropped(self) -> None:
        cleaned = sanitize_content(HOSTILE_SAMPLES[3])
        assert "evil.example" not in cleaned
        assert "href" not in cleaned

    def test_image_event_handlers_and_bad_sources_are_dropped(self) -> None:
        assert "onerror" not in sanitize_content(HOSTILE_SAMPLES[4])
        cleaned = sanitize_content(HOSTILE_SAMPLES[5])
        assert "javascript" not in cleaned
        assert 'alt="bad"' in cleaned

    def test_bare_domain_gets_https_and_safe_rel(self) -> None:
        cleaned = sanitize_content('<a href="www.example.com">site</a>')
        assert 'href="https://www.example.com"' in cleaned
        assert 'rel="noopener noreferrer"' in cleaned
        assert 'target="_blank"' in cleaned

    def test_explicit_target_is_kept_and_rel_forced(self) -> None:
        cleaned = sanitize_content('<a href="https://example.com" rel="opener" target="_self">x</a>')
        assert 'target="_self"' in cleaned
        assert 'rel="noopener noreferrer"' in cleaned
        assert cleaned.count("rel=") == 1

    def test_style_is_reduced_to_text_align(self) -> None:
        cleaned = sanitize_content(HOSTILE_SAMPLES[7])
        assert 'style="text-align: center;"' in cleaned
        assert "color" not in cleaned
        assert "url(" not in cleaned

    def test_style_without_alignment_is_removed(self) -> None:
        assert sanitize_content('<p style="color: red">x</p>') == "<p>x</p>"

    def test_comments_are_removed(self) -> None:
        assert "comment" not in sanitize_content(HOSTILE_SAMPLES[10])

    @pytest.mark.parametrize("sample", HOSTILE_SAMPLES)
    def test_idempotent(self, sample: str) -> None:
        """Sanitizing already-sanitized output changes nothing."""
        once = sanitize_content(sample)
        assert sanitize_content(once) == once


class TestNormalizeHref:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("https://example.com/a", "https://example.com/a"),
            ("mailto:hi@example.com", "mailto:hi@example.com"),
            ("www.example.com", "https://www.example.com"),
            ("/posts/1", "/posts/1"),
            ("#section", "#section"),
            ("javascript:alert(1)", None),
            ("data:text/html;base64,xyz", None),
            ("//evil.example", None),
            ("\\\\evil.example", None),
            ("   ", None),
        ],
    )
    def test_cases(self, value: str, expected: str | None) -> None:
        assert normalize_href(value) == expected


class TestNormalizeTextAlign:
    def test_keeps_last_valid_alignment(self) -> None:
        assert normalize_text_align("text-align: left; text-align: CENTER") == "text-align: center;"

    def test_rejects_unknown_values(self) -> None:
        assert normalize_text_align("text-align: expression(alert(1))") is None
        assert normalize_text_align("color: red") is None


class TestPlainText:
    def test_plain_text_from_html_collapses_whitespace(self) -> None:
        assert plain_text_from_html("<p>Peat&nbsp;and\n<b>smoke</b></p>") == "Peat and smoke"

    def test_markup_only_content_is_empty(self) -> None:
        assert plain_text_from_html("<p><br></p>") == ""

    def test_sanitize_plain_text_strips_tags(self) -> None:
        assert sanitize_plain_text("  <b>Alice</b><script>x</script> ") == "Alicex"
