#!/usr/bin/env python3
"""
Comment and string syntax table plus ignore-directive patterns.

The scope resolver is driven entirely by the ``CommentSyntax`` entries defined here.
The table is closed: a file type either maps to one of these entries or falls back
to ``PLAIN_TEXT``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from ..common import IgnoreDirective
from ..pattern_cache import cached_pattern


# ==============================================================================
# SYNTAX TABLE
# ==============================================================================


@dataclass(frozen=True)
class Delimiter:
    """An opening/closing token pair."""

    start: str
    end: str
    multiline: bool = True
    line_start: bool = False
    escapable: bool = False


@dataclass(frozen=True)
class CommentSyntax:
    """How comments, strings and embedded code are written in one family of file types."""

    name: str
    extensions: tuple[str, ...] = ()
    line_comment_tokens: tuple[str, ...] = ()
    block_comment_delimiters: tuple[Delimiter, ...] = ()
    string_delimiters: tuple[Delimiter, ...] = ()
    code_delimiters: tuple[Delimiter, ...] = ()
    is_code: bool = True

    @property
    def has_comments(self) -> bool:
        return bool(self.line_comment_tokens or self.block_comment_delimiters)


def _quotes(*chars: str, multiline: bool = False) -> tuple[Delimiter, ...]:
    return tuple(Delimiter(c, c, multiline=multiline, escapable=True) for c in chars)


PLAIN_TEXT = CommentSyntax(
    name="text",
    extensions=("txt", "text", "plain", "none"),
    is_code=False,
)

MARKDOWN = CommentSyntax(
    name="markdown",
    extensions=("md", "markdown", "mdx", "mdown", "mkd"),
    block_comment_delimiters=(Delimiter("<!--", "-->"),),
    code_delimiters=(
        Delimiter("```", "```", line_start=True),
        Delimiter("~~~", "~~~", line_start=True),
        Delimiter("`", "`", multiline=False),
    ),
    is_code=False,
)

C_STYLE = CommentSyntax(
    name="c-style",
    extensions=(
        "c", "h", "cc", "cpp", "cxx", "hpp", "cs", "java", "kt", "kts", "scala", "js", "jsx",
        "mjs", "cjs", "ts", "tsx", "go", "rs", "swift", "dart", "php", "scss", "less", "groovy",
        "jsonc", "proto",
        "javascript", "typescript", "golang", "rust", "csharp", "kotlin",
    ),
    line_comment_tokens=("//",),
    block_comment_delimiters=(Delimiter("/*", "*/"),),
    string_delimiters=_quotes('"', "'") + (Delimiter("`", "`", escapable=True),),
)

CSS = CommentSyntax(
    name="css",
    extensions=("css",),
    block_comment_delimiters=(Delimiter("/*", "*/"),),
    string_delimiters=_quotes('"', "'"),
)

HASH = CommentSyntax(
    name="hash",
    extensions=(
        "py", "pyw", "pyi", "python", "rb", "ruby", "sh", "bash", "zsh", "fish", "shell", "pl",
        "perl", "r", "yaml", "yml", "toml", "cfg", "conf", "mk", "makefile", "dockerfile",
        "cmake", "tf", "nim", "ex", "exs", "jl", "ps1",
    ),
    line_comment_tokens=("#",),
    # Docstrings read as documentation, so triple-quoted blocks count as comments
    block_comment_delimiters=(Delimiter('"""', '"""'), Delimiter("'''", "'''")),
    string_delimiters=_quotes('"', "'"),
)

DOUBLE_DASH = CommentSyntax(
    name="double-dash",
    extensions=("sql", "psql", "mysql", "hs", "lhs", "haskell", "ada", "adb", "ads", "elm", "vhd", "vhdl"),
    line_comment_tokens=("--",),
    block_comment_delimiters=(Delimiter("/*", "*/"), Delimiter("{-", "-}")),
    string_delimiters=_quotes("'", '"'),
)

LUA = CommentSyntax(
    name="lua",
    extensions=("lua",),
    line_comment_tokens=("--",),
    block_comment_delimiters=(Delimiter("--[[", "]]"),),
    string_delimiters=_quotes('"', "'"),
)

PERCENT = CommentSyntax(
    name="percent",
    extensions=("m", "matlab", "octave", "erl", "hrl", "erlang", "pro", "prolog"),
    line_comment_tokens=("%",),
    block_comment_delimiters=(Delimiter("%{", "%}"),),
    string_delimiters=_quotes('"', "'"),
)

TEX = CommentSyntax(
    name="tex",
    extensions=("tex", "latex", "sty", "cls", "bib"),
    line_comment_tokens=("%",),
    is_code=False,
)

MARKUP = CommentSyntax(
    name="markup",
    extensions=("html", "htm", "xhtml", "xml", "svg", "xsl", "xslt", "vue", "svelte", "jsp", "plist"),
    block_comment_delimiters=(Delimiter("<!--", "-->"),),
)

SEMICOLON = CommentSyntax(
    name="semicolon",
    extensions=("lisp", "lsp", "cl", "el", "elisp", "scm", "ss", "rkt", "clj", "cljs", "cljc",
                "edn", "asm", "s", "nasm", "ini", "reg"),
    line_comment_tokens=(";",),
    string_delimiters=_quotes('"'),
)

COMMENT_SYNTAXES: tuple[CommentSyntax, ...] = (
    PLAIN_TEXT,
    MARKDOWN,
    C_STYLE,
    CSS,
    HASH,
    DOUBLE_DASH,
    LUA,
    PERCENT,
    TEX,
    MARKUP,
    SEMICOLON,
)

_BY_KEY: dict[str, CommentSyntax] = {}
for _syntax in COMMENT_SYNTAXES:
    _BY_KEY[_syntax.name] = _syntax
    for _extension in _syntax.extensions:
        _BY_KEY[_extension] = _syntax


def lookup_syntax(file_type: Optional[str]) -> Optional[CommentSyntax]:
    """Find the syntax for a file type, extension or file name; None when unknown."""
    if not file_type:
        return None
    key = file_type.strip().lower()
    if key in _BY_KEY:
        return _BY_KEY[key]
    # Accept "notes.md", ".py", "Makefile"
    base = key.replace("\\", "/").rsplit("/", 1)[-1]
    if base in _BY_KEY:
        return _BY_KEY[base]
    if "." in base:
        return _BY_KEY.get(base.rsplit(".", 1)[-1].lstrip("."))
    return None


def syntax_for(file_type: Optional[str]) -> CommentSyntax:
    """Like lookup_syntax, but unknown types fall back to plain prose."""
    return lookup_syntax(file_type) or PLAIN_TEXT


# ==============================================================================
# FILE TYPE GUESSING
# ==============================================================================


@cached_pattern
def build_markdown_indicator_pattern() -> Pattern[str]:
    """Fenced blocks, inline code or ATX headings."""
    return re.compile(
        r"""
        ^(?:```|~~~)               # fence at line start
        | `[^`\n]+`                # inline code
        | ^\#{1,6}\s+\S            # heading
        """,
        re.VERBOSE | re.MULTILINE,
    )


@cached_pattern
def build_c_style_indicator_pattern() -> Pattern[str]:
    return re.compile(
        r"""
        (?:^|\s)//\s                                       # line comment
        | /\*                                              # block comment
        | \b(?:function|const|let|var|func|fn|public|private|static|void|return)\b[^\n]*[;{(]
        | =>
        """,
        re.VERBOSE | re.MULTILINE,
    )


@cached_pattern
def build_hash_indicator_pattern() -> Pattern[str]:
    return re.compile(
        r"""
        ^\s*(?:def|class)\s+\w+[^\n]*:\s*$                 # python definitions
        | ^\s*(?:import|from)\s+[\w.]+                     # imports
        | ^\#!                                             # shebang
        """,
        re.VERBOSE | re.MULTILINE,
    )


def guess_syntax(text: str) -> CommentSyntax:
    """Pick a syntax for text whose file type is not known.

    Returns PLAIN_TEXT unless the text clearly looks like markdown or source code.
    """
    if build_markdown_indicator_pattern().search(text):
        return MARKDOWN
    if build_hash_indicator_pattern().search(text):
        return HASH
    if build_c_style_indicator_pattern().search(text):
        return C_STYLE
    return PLAIN_TEXT


# ==============================================================================
# IGNORE DIRECTIVES
# ==============================================================================

# Checked in this order so the generic marker never shadows a specific one
DIRECTIVE_CHECK_ORDER = (
    IgnoreDirective.WHOLE_FILE,
    IgnoreDirective.NEXT_LINE,
    IgnoreDirective.BLOCK_START,
    IgnoreDirective.BLOCK_END,
    IgnoreDirective.SAME_LINE,
)

_DIRECTIVE_SOURCES = {
    IgnoreDirective.WHOLE_FILE: r"\bm2e-ignore-file\b",
    IgnoreDirective.NEXT_LINE: r"\bm2e-ignore-next\b",
    IgnoreDirective.BLOCK_START: r"\bm2e-ignore-start\b",
    IgnoreDirective.BLOCK_END: r"\bm2e-ignore-end\b",
    IgnoreDirective.SAME_LINE: r"\bm2e-ignore(?:-line)?\b(?!-)",
}


@cached_pattern
def build_directive_pattern(directive: IgnoreDirective) -> Pattern[str]:
    return re.compile(_DIRECTIVE_SOURCES[directive], re.IGNORECASE)


def find_directive(comment_text: str) -> Optional[IgnoreDirective]:
    """Return the most specific directive in a comment, or None."""
    if "m2e-ignore" not in comment_text.lower():
        return None
    for directive in DIRECTIVE_CHECK_ORDER:
        if build_directive_pattern(directive).search(comment_text):
            return directive
    return None


@cached_pattern
def build_generic_comment_pattern() -> Pattern[str]:
    """Comment forms recognised when no syntax is active (prose mode)."""
    return re.compile(
        r"""
        (?:^|[^:])//.*             # double slash, not a URL scheme
        | /\*[\s\S]*?\*/           # block
        | (?:^|\s)\#(?:\s.*|!.*|$) # hash followed by space, bang or end
        | (?:^|\s)--(?:\s.*|$)     # double dash
        | <!--[\s\S]*?-->          # markup
        | (?:^|\s)%(?:\s.*|$)      # percent
        | (?:^|\s);(?:\s.*|$)      # semicolon
        | \"\"\"[\s\S]*?\"\"\"     # docstring
        | '''[\s\S]*?'''
        """,
        re.VERBOSE | re.MULTILINE,
    )
