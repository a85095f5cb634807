"""Tests for scope resolution: prose, comment, string and code spans."""
from m2e.conversion.common import ConversionOptions, Span, SpanKind
from m2e.conversion.detectors.scope_detector import ScopeResolver, is_eligible, resolve_scope, select_syntax
from m2e.conversion.pattern_modules.comment_patterns import (
    C_STYLE,
    HASH,
    LUA,
    MARKDOWN,
    MARKUP,
    PLAIN_TEXT,
    guess_syntax,
    lookup_syntax,
    syntax_for,
)


def kinds(text, spans):
    return [(text[span.start:span.end], span.kind) for span in spans]


def assert_covers(text, spans):
    """Spans are ordered, disjoint and cover the whole text."""
    assert spans[0].start == 0
    assert spans[-1].end == len(text)
    for first, second in zip(spans, spans[1:]):
        assert first.end == second.start


class TestSyntaxLookup:
    """File types map onto a closed set of comment syntaxes."""

    def test_known_extensions(self):
        assert lookup_syntax("py") is HASH
        assert lookup_syntax("go") is C_STYLE
        assert lookup_syntax("md") is MARKDOWN
        assert lookup_syntax("lua") is LUA
        assert lookup_syntax("html") is MARKUP

    def test_file_names_and_dotted_extensions(self):
        assert lookup_syntax("notes.md") is MARKDOWN
        assert lookup_syntax(".py") is HASH
        assert lookup_syntax("src/app/main.TS") is C_STYLE
        assert lookup_syntax("Makefile") is HASH

    def test_unknown_type_falls_back_to_prose(self):
        assert lookup_syntax("cobol-ish") is None
        assert syntax_for("cobol-ish") is PLAIN_TEXT
        assert syntax_for(None) is PLAIN_TEXT

    def test_guess_syntax(self):
        assert guess_syntax("Just a sentence about color.") is PLAIN_TEXT
        assert guess_syntax("# Title\n\nSome text") is MARKDOWN
        assert guess_syntax("import os\n\nprint(os.name)") is HASH
        assert guess_syntax("const x = 1; // set the color") is C_STYLE

    def test_select_syntax(self):
        assert select_syntax("color", ConversionOptions()) is None
        assert select_syntax("color", ConversionOptions(code_aware=True, file_type="py")) is HASH
        assert select_syntax("color", ConversionOptions(code_aware=True, file_type="nonsense")) is PLAIN_TEXT


class TestProseMode:
    """Without code awareness the document is one prose span."""

    def test_single_prose_span(self):
        text = 'x = "color"  # color'
        assert resolve_scope(text) == [Span(0, len(text), SpanKind.PROSE)]

    def test_empty_text(self):
        assert resolve_scope("") == []


class TestCStyle:
    """Line comments, block comments and strings in C-like languages."""

    def test_line_comment_and_code(self):
        text = "int color = 1; // the color\nreturn color;"
        spans = ScopeResolver(C_STYLE).classify(text)
        assert_covers(text, spans)
        assert kinds(text, spans) == [
            ("int color = 1; ", SpanKind.CODE_TOKEN),
            ("// the color", SpanKind.COMMENT),
            ("\nreturn color;", SpanKind.CODE_TOKEN),
        ]

    def test_block_comment_spans_lines(self):
        text = "a /* one\ntwo */ b"
        spans = ScopeResolver(C_STYLE).classify(text)
        assert kinds(text, spans)[1] == ("/* one\ntwo */", SpanKind.COMMENT)

    def test_unclosed_block_comment_runs_to_end(self):
        text = "a /* never closed"
        spans = ScopeResolver(C_STYLE).classify(text)
        assert kinds(text, spans)[-1] == ("/* never closed", SpanKind.COMMENT)

    def test_nested_block_comments_close_at_first_end(self):
        text = "/* a /* b */ c */"
        spans = ScopeResolver(C_STYLE).classify(text)
        assert kinds(text, spans)[0] == ("/* a /* b */", SpanKind.COMMENT)

    def test_strings_with_escapes(self):
        text = 'say("a \\"color\\" here") // done'
        spans = ScopeResolver(C_STYLE).classify(text)
        assert ('"a \\"color\\" here"', SpanKind.STRING_LITERAL) in kinds(text, spans)
        assert kinds(text, spans)[-1] == ("// done", SpanKind.COMMENT)

    def test_comment_marker_inside_string_is_not_a_comment(self):
        text = 'url = "http://example.com"; x'
        spans = ScopeResolver(C_STYLE).classify(text)
        assert all(span.kind is not SpanKind.COMMENT for span in spans)

    def test_single_line_string_stops_at_newline(self):
        text = 'a = "open\nb = 1'
        spans = ScopeResolver(C_STYLE).classify(text)
        assert ('"open', SpanKind.STRING_LITERAL) in kinds(text, spans)


class TestHash:
    """Hash comments and triple-quoted docstrings."""

    def test_docstring_is_a_comment(self):
        text = 'def f():\n    """Return the color."""\n    return "gray"  # gray\n'
        spans = resolve_scope(text, ConversionOptions(code_aware=True, file_type="py"))
        assert_covers(text, spans)
        result = kinds(text, spans)
        assert ('"""Return the color."""', SpanKind.COMMENT) in result
        assert ('"gray"', SpanKind.STRING_LITERAL) in result
        assert ("# gray", SpanKind.COMMENT) in result


class TestMarkdown:
    """Markdown is prose with code blocks carved out."""

    def test_fenced_block_and_inline_code(self):
        text = "The color:\n```\ncolor = 1\n```\nUse `color` here.\n"
        spans = resolve_scope(text, ConversionOptions(code_aware=True, file_type="md"))
        result = kinds(text, spans)
        assert ("```\ncolor = 1\n```", SpanKind.CODE_TOKEN) in result
        assert ("`color`", SpanKind.CODE_TOKEN) in result
        assert result[0] == ("The color:\n", SpanKind.PROSE)

    def test_fence_must_start_a_line(self):
        text = "inline ``` is not a fence"
        spans = ScopeResolver(MARKDOWN).classify(text)
        assert all(span.kind is SpanKind.PROSE for span in spans)

    def test_unmatched_backtick_stays_prose(self):
        text = "a lone ` backtick\nnext line"
        spans = ScopeResolver(MARKDOWN).classify(text)
        assert spans == [Span(0, len(text), SpanKind.PROSE)]

    def test_markdown_conversion_skips_code(self, convert_text):
        convert_text(
            "The color:\n```\ncolor = 1\n```\nUse `color` here.\n",
            "The colour:\n```\ncolor = 1\n```\nUse `color` here.\n",
            code_aware=True,
            file_type="md",
        )


class TestLua:
    """Longest opener wins."""

    def test_block_comment_over_line_comment(self):
        text = "--[[ long\ncomment ]] x = 1"
        spans = ScopeResolver(LUA).classify(text)
        assert kinds(text, spans)[0] == ("--[[ long\ncomment ]]", SpanKind.COMMENT)


class TestEligibility:
    """Which span kinds the detectors may touch."""

    def test_code_tokens_never(self):
        assert not is_eligible(Span(0, 1, SpanKind.CODE_TOKEN), None)

    def test_comments_always(self):
        assert is_eligible(Span(0, 1, SpanKind.COMMENT), C_STYLE)

    def test_strings_only_in_prose_file_types(self):
        string = Span(0, 1, SpanKind.STRING_LITERAL)
        assert not is_eligible(string, C_STYLE)
        assert is_eligible(string, MARKDOWN)
        assert is_eligible(string, None)

    def test_suppressed_spans_never(self):
        assert not is_eligible(Span(0, 1, SpanKind.PROSE, suppressed=True), None)
