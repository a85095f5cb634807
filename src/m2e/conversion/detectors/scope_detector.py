#!/usr/bin/env python3
"""Scope resolution: which parts of a document are prose, comments, strings or code."""
from __future__ import annotations

from enum import Enum, auto
from typing import Optional

from ...core.config import setup_logging
from ..common import ConversionOptions, IgnoreDirective, Span, SpanKind
from ..pattern_modules.comment_patterns import (
    PLAIN_TEXT,
    CommentSyntax,
    Delimiter,
    build_directive_pattern,
    build_generic_comment_pattern,
    find_directive,
    guess_syntax,
    syntax_for,
)
from ..utils import line_of, line_start_offsets

logger = setup_logging(__name__)


class _State(Enum):
    NORMAL = auto()
    IN_LINE_COMMENT = auto()
    IN_BLOCK_COMMENT = auto()
    IN_STRING = auto()
    IN_CODE = auto()


_STATE_KINDS = {
    _State.IN_LINE_COMMENT: SpanKind.COMMENT,
    _State.IN_BLOCK_COMMENT: SpanKind.COMMENT,
    _State.IN_STRING: SpanKind.STRING_LITERAL,
    _State.IN_CODE: SpanKind.CODE_TOKEN,
}


def select_syntax(text: str, options: ConversionOptions) -> Optional[CommentSyntax]:
    """The syntax a document is scanned with, or None for whole-document prose."""
    if not options.code_aware:
        return None
    if options.file_type:
        return syntax_for(options.file_type)
    return guess_syntax(text)


def is_eligible(span: Span, syntax: Optional[CommentSyntax]) -> bool:
    """Whether detectors may propose changes inside the span."""
    if span.suppressed:
        return False
    if span.kind in (SpanKind.PROSE, SpanKind.COMMENT):
        return True
    if span.kind is SpanKind.STRING_LITERAL:
        return syntax is None or not syntax.is_code
    return False


class ScopeResolver:
    """Single left-to-right scanner over one comment syntax."""

    def __init__(self, syntax: CommentSyntax = PLAIN_TEXT) -> None:
        self.syntax = syntax
        self.normal_kind = SpanKind.CODE_TOKEN if syntax.is_code else SpanKind.PROSE

        openers: list[tuple[str, _State, Optional[Delimiter]]] = []
        openers.extend((token, _State.IN_LINE_COMMENT, None) for token in syntax.line_comment_tokens)
        openers.extend((d.start, _State.IN_BLOCK_COMMENT, d) for d in syntax.block_comment_delimiters)
        openers.extend((d.start, _State.IN_STRING, d) for d in syntax.string_delimiters)
        openers.extend((d.start, _State.IN_CODE, d) for d in syntax.code_delimiters)
        # Longest first so '"""' wins over '"' and '--[[' over '--'
        self.openers = sorted(openers, key=lambda item: len(item[0]), reverse=True)

    def classify(self, text: str) -> list[Span]:
        """Split the text into ordered, disjoint spans covering all of it."""
        spans: list[Span] = []
        n = len(text)
        segment_start = 0
        i = 0

        while i < n:
            if text[i] == "\\":
                # Escaped character never opens anything
                i += 2
                continue

            opener = self._match_opener(text, i)
            if opener is None:
                i += 1
                continue

            token, state, delimiter = opener
            end = self._find_end(text, i, token, state, delimiter)
            if end is None:
                # Inline code without a closer on the same line is literal text
                i += len(token)
                continue

            if segment_start < i:
                spans.append(Span(segment_start, i, self.normal_kind))
            spans.append(Span(i, end, _STATE_KINDS[state]))
            i = segment_start = end

        if segment_start < n:
            spans.append(Span(segment_start, n, self.normal_kind))
        return spans

    def _match_opener(self, text: str, i: int) -> Optional[tuple[str, _State, Optional[Delimiter]]]:
        for token, state, delimiter in self.openers:
            if not text.startswith(token, i):
                continue
            if delimiter is not None and delimiter.line_start and not _at_line_start(text, i):
                continue
            return token, state, delimiter
        return None

    def _find_end(
        self, text: str, i: int, token: str, state: _State, delimiter: Optional[Delimiter]
    ) -> Optional[int]:
        n = len(text)
        body = i + len(token)

        if state is _State.IN_LINE_COMMENT:
            newline = text.find("\n", body)
            return n if newline < 0 else newline

        assert delimiter is not None

        if state is _State.IN_BLOCK_COMMENT:
            close = text.find(delimiter.end, body)
            return n if close < 0 else close + len(delimiter.end)

        if state is _State.IN_STRING:
            k = body
            while k < n:
                if delimiter.escapable and text[k] == "\\":
                    k += 2
                    continue
                if text.startswith(delimiter.end, k):
                    return k + len(delimiter.end)
                if not delimiter.multiline and text[k] == "\n":
                    return k
                k += 1
            return n

        # IN_CODE
        if delimiter.line_start:
            line_end = text.find("\n", body)
            k = n if line_end < 0 else line_end + 1
            while k < n:
                close = text.find(delimiter.end, k)
                if close < 0:
                    return n
                if _at_line_start(text, close):
                    return close + len(delimiter.end)
                k = close + len(delimiter.end)
            return n

        close = text.find(delimiter.end, body)
        if close < 0 or close == body or (not delimiter.multiline and "\n" in text[body:close]):
            return None
        return close + len(delimiter.end)


def _at_line_start(text: str, i: int) -> bool:
    """True when only spaces or tabs sit between the previous newline and i."""
    line_begin = text.rfind("\n", 0, i) + 1
    return text[line_begin:i].strip(" \t") == ""


# ==============================================================================
# IGNORE DIRECTIVES
# ==============================================================================


def _directive_sources(
    text: str, spans: list[Span], syntax: Optional[CommentSyntax]
) -> list[tuple[int, int]]:
    """Ranges of text that may carry ignore directives."""
    if syntax is not None and syntax.has_comments:
        return [(span.start, span.end) for span in spans if span.kind is SpanKind.COMMENT]
    return [(m.start(), m.end()) for m in build_generic_comment_pattern().finditer(text)]


def find_directives(
    text: str, spans: list[Span], syntax: Optional[CommentSyntax]
) -> list[tuple[IgnoreDirective, int, int]]:
    """Every directive as (directive, token offset, comment end offset), in text order."""
    found = []
    for start, end in _directive_sources(text, spans, syntax):
        comment = text[start:end]
        directive = find_directive(comment)
        if directive is None:
            continue
        token = build_directive_pattern(directive).search(comment)
        offset = start + (token.start() if token else 0)
        found.append((directive, offset, end))
    found.sort(key=lambda item: item[1])
    return found


def suppressed_lines(directives: list[tuple[IgnoreDirective, int, int]], line_starts: list[int]) -> set[int]:
    """Line numbers (zero based) whose content must not be converted."""
    last_line = len(line_starts) - 1
    lines: set[int] = set()
    block_open: Optional[int] = None

    for directive, offset, comment_end in directives:
        line = line_of(offset, line_starts)
        if directive is IgnoreDirective.WHOLE_FILE:
            return set(range(last_line + 1))
        if directive is IgnoreDirective.SAME_LINE:
            lines.add(line)
        elif directive is IgnoreDirective.NEXT_LINE:
            next_line = line_of(max(offset, comment_end - 1), line_starts) + 1
            if next_line <= last_line:
                lines.add(next_line)
        elif directive is IgnoreDirective.BLOCK_START:
            if block_open is None:
                block_open = line
        elif directive is IgnoreDirective.BLOCK_END:
            if block_open is not None:
                lines.update(range(block_open, line + 1))
                block_open = None
            else:
                lines.add(line)

    if block_open is not None:
        lines.update(range(block_open, last_line + 1))
    return lines


def _apply_suppression(spans: list[Span], line_starts: list[int], lines: set[int]) -> list[Span]:
    if not lines:
        return spans

    result: list[Span] = []
    for span in spans:
        first = line_of(span.start, line_starts)
        last = line_of(span.end - 1, line_starts)
        piece_start = span.start
        current = first in lines
        for line in range(first + 1, last + 1):
            flag = line in lines
            if flag != current:
                boundary = line_starts[line]
                result.append(Span(piece_start, boundary, span.kind, current))
                piece_start, current = boundary, flag
        result.append(Span(piece_start, span.end, span.kind, current))
    return result


def _merge(spans: list[Span]) -> list[Span]:
    merged: list[Span] = []
    for span in spans:
        if len(span) == 0:
            continue
        if merged and merged[-1].kind is span.kind and merged[-1].suppressed == span.suppressed \
                and merged[-1].end == span.start:
            merged[-1] = Span(merged[-1].start, span.end, span.kind, span.suppressed)
        else:
            merged.append(span)
    return merged


# ==============================================================================
# PUBLIC API
# ==============================================================================


def resolve_scope(text: str, options: Optional[ConversionOptions] = None) -> list[Span]:
    """
    Classify a document into ordered, disjoint spans and mark suppressed ones.

    Args:
        text: The whole document
        options: Conversion options (code_aware and file_type are read)

    Returns:
        Spans covering the text; empty for empty text

    """
    if not text:
        return []
    options = options or ConversionOptions()
    syntax = select_syntax(text, options)

    if syntax is None:
        spans = [Span(0, len(text), SpanKind.PROSE)]
    else:
        spans = ScopeResolver(syntax).classify(text)
        logger.debug(f"Classified {len(spans)} spans using '{syntax.name}' syntax")

    directives = find_directives(text, spans, syntax)
    if directives:
        line_starts = line_start_offsets(text)
        lines = suppressed_lines(directives, line_starts)
        logger.debug(f"Found {len(directives)} ignore directives covering {len(lines)} lines")
        spans = _apply_suppression(spans, line_starts, lines)

    return _merge(spans)


def ignore_stats(text: str, options: Optional[ConversionOptions] = None) -> dict[str, int]:
    """Count the ignore directives in a document by kind."""
    options = options or ConversionOptions()
    syntax = select_syntax(text, options) if text else None
    spans = ScopeResolver(syntax).classify(text) if syntax is not None and text else []
    stats = {directive.name.lower(): 0 for directive in IgnoreDirective}
    for directive, _, _ in find_directives(text, spans, syntax):
        stats[directive.name.lower()] += 1
    return stats
