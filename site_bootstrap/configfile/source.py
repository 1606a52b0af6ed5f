"""Structural navigation of the config source text.

The config file is treated as semi-structured text: we only need to know which
object literal a key belongs to. A small scanner tracks brace/bracket depth while
skipping string literals and comments, so a key can be matched only when it is a
direct member of the intended object. This is not a parser.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

# (start, end) of an object body, exclusive of the braces themselves.
Span = tuple[int, int]

ROOT_OBJECT = re.compile(r"\bconst\s+config\b[^=\n]*=\s*\{")

_OPENERS = "{[("
_CLOSERS = "}])"
_PAIRS = {"{": "}", "[": "]", "(": ")"}


def key_pattern(key: str) -> str:
    """Regex source matching ``key:`` as a property name (not a suffix of another)."""
    return rf"(?<![\w$]){re.escape(key)}\s*:\s*"


def _skip_literal(text: str, i: int, end: int) -> int | None:
    """If a string or comment starts at *i*, return the index just past it."""
    ch = text[i]
    nxt = text[i + 1] if i + 1 < end else ""
    if ch == "/" and nxt == "/":
        j = text.find("\n", i, end)
        return end if j == -1 else j
    if ch == "/" and nxt == "*":
        j = text.find("*/", i + 2, end)
        return end if j == -1 else j + 2
    if ch in "'\"`":
        j = i + 1
        while j < end and text[j] != ch:
            j += 2 if text[j] == "\\" else 1
        return min(j + 1, end)
    return None


def depth_map(text: str, span: Span) -> list[int]:
    """Nesting depth of every character in *span*; -1 inside strings and comments."""
    start, end = span
    depths = [-1] * (end - start)
    depth = 0
    i = start
    while i < end:
        skip = _skip_literal(text, i, end)
        if skip is not None:
            i = skip
            continue
        ch = text[i]
        if ch in _OPENERS:
            depths[i - start] = depth
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            depths[i - start] = depth
        else:
            depths[i - start] = depth
        i += 1
    return depths


def matching_close(text: str, open_idx: int) -> int | None:
    """Index of the bracket closing the one at *open_idx*, or None if unbalanced."""
    closer = _PAIRS[text[open_idx]]
    depth = 0
    i = open_idx
    end = len(text)
    while i < end:
        skip = _skip_literal(text, i, end)
        if skip is not None:
            i = skip
            continue
        ch = text[i]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i if ch == closer else None
        i += 1
    return None


def root_span(text: str) -> Span:
    """Body of the ``const config = {...}`` object, or the whole text if absent."""
    m = ROOT_OBJECT.search(text)
    if m:
        open_idx = m.end() - 1
        close = matching_close(text, open_idx)
        if close is not None:
            return (open_idx + 1, close)
    return (0, len(text))


def search_direct(text: str, pattern: re.Pattern[str], span: Span) -> re.Match[str] | None:
    """First match of *pattern* that starts at depth 0 of *span*."""
    depths = depth_map(text, span)
    for m in pattern.finditer(text, span[0], span[1]):
        if depths[m.start() - span[0]] == 0:
            return m
    return None


def find_block(text: str, path: Sequence[str], span: Span | None = None) -> Span | None:
    """Follow *path* through nested object literals and return the innermost body."""
    current = span or root_span(text)
    for key in path:
        m = search_direct(text, re.compile(key_pattern(key) + r"\{"), current)
        if m is None:
            return None
        open_idx = m.end() - 1
        close = matching_close(text, open_idx)
        if close is None:
            return None
        current = (open_idx + 1, close)
    return current


def child_blocks(text: str, span: Span) -> list[tuple[str, Span]]:
    """Direct members of *span* whose value is an object literal."""
    depths = depth_map(text, span)
    pattern = re.compile(r"(?<![\w$])([A-Za-z_$][\w$]*)\s*:\s*\{")
    blocks: list[tuple[str, Span]] = []
    for m in pattern.finditer(text, span[0], span[1]):
        if depths[m.start() - span[0]] != 0:
            continue
        open_idx = m.end() - 1
        close = matching_close(text, open_idx)
        if close is not None:
            blocks.append((m.group(1), (open_idx + 1, close)))
    return blocks


def find_array(text: str, key: str, span: Span | None = None) -> tuple[int, int] | None:
    """(open, close) bracket indices of the array literal assigned to *key*."""
    current = span or root_span(text)
    m = search_direct(text, re.compile(key_pattern(key) + r"\["), current)
    if m is None:
        return None
    open_idx = m.end() - 1
    close = matching_close(text, open_idx)
    if close is None:
        return None
    return (open_idx, close)
