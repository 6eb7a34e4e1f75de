"""
Balanced-parenthesis scanning over Kotlin source text.

A small state machine walks the text one character at a time so that
parentheses inside string literals, character literals and comments never
count towards nesting. Pure functions, no I/O.

>>> span = scan_arguments('mapOf(a to b, "(" to c)', 5)
>>> span.open_index, span.close_index, span.has_elements
(5, 22, True)
>>> scan_arguments("mapOf()", 5).has_elements
False
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from togglehandler.errors import LandmarkNotFound, UnbalancedNesting

_INDENT = re.compile(r"[ \t]*")


class ScanState(Enum):
    SCANNING = "scanning"
    IN_ARGS = "in_args"
    IN_STRING = "in_string"
    IN_LINE_COMMENT = "in_line_comment"
    IN_BLOCK_COMMENT = "in_block_comment"
    DONE = "done"


@dataclass(frozen=True)
class ArgumentSpan:
    """Result of scanning one parenthesized argument list.

    ``last_element_end`` is the offset just past the last code character
    inside the list (comments excluded), or -1 when the list is empty.
    """

    open_index: int
    close_index: int
    has_elements: bool
    last_element_end: int

    @property
    def end(self) -> int:
        return self.close_index + 1


def scan_arguments(text: str, start: int = 0) -> ArgumentSpan:
    """Scan from ``start`` to the first ``(`` and on to its matching ``)``.

    Raises LandmarkNotFound when no opening parenthesis follows ``start``
    and UnbalancedNesting when the text ends before the list closes.

    >>> scan_arguments("f(g(1), 2) + h()", 0).close_index
    9
    >>> scan_arguments("f(/* ) */ x)", 0).last_element_end
    11
    """
    state = ScanState.SCANNING
    resume = ScanState.SCANNING
    quote = ""
    depth = 0
    open_index = -1
    has_elements = False
    last_element_end = -1
    i = start
    n = len(text)

    while i < n:
        ch = text[i]

        if state is ScanState.IN_STRING:
            if ch == "\\" and quote != '"""':
                i += 2
                continue
            if text.startswith(quote, i):
                i += len(quote)
                state = resume
                if state is ScanState.IN_ARGS:
                    last_element_end = i
                continue
            i += 1
            continue

        if state is ScanState.IN_LINE_COMMENT:
            if ch == "\n":
                state = resume
            i += 1
            continue

        if state is ScanState.IN_BLOCK_COMMENT:
            if text.startswith("*/", i):
                state = resume
                i += 2
                continue
            i += 1
            continue

        # SCANNING or IN_ARGS from here on
        if text.startswith("//", i):
            resume, state = state, ScanState.IN_LINE_COMMENT
            i += 2
            continue
        if text.startswith("/*", i):
            resume, state = state, ScanState.IN_BLOCK_COMMENT
            i += 2
            continue
        if ch in "\"'":
            quote = '"""' if text.startswith('"""', i) else ch
            if state is ScanState.IN_ARGS:
                has_elements = True
            resume, state = state, ScanState.IN_STRING
            i += len(quote)
            continue

        if state is ScanState.SCANNING:
            if ch == "(":
                state = ScanState.IN_ARGS
                open_index = i
                depth = 1
            i += 1
            continue

        if ch == ")":
            depth -= 1
            if depth == 0:
                state = ScanState.DONE
                break
        elif ch == "(":
            depth += 1
        elif ch.isspace():
            i += 1
            continue

        has_elements = True
        last_element_end = i + 1
        i += 1

    if state is ScanState.DONE:
        return ArgumentSpan(open_index, i, has_elements, last_element_end)
    if open_index == -1:
        raise LandmarkNotFound("No opening parenthesis found")
    raise UnbalancedNesting(
        f"Parenthesis opened at offset {open_index} is never closed ({depth} still open)"
    )


def comment_ranges(text: str) -> List[Tuple[int, int]]:
    """``(start, end)`` offsets of every ``//`` and ``/* */`` comment.

    Comment markers inside string and character literals are ignored.

    >>> comment_ranges('a // b\\n"//" /* c */')
    [(2, 6), (12, 19)]
    """
    ranges = []
    state = ScanState.SCANNING
    quote = ""
    begin = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if state is ScanState.IN_STRING:
            if ch == "\\" and quote != '"""':
                i += 2
                continue
            if text.startswith(quote, i):
                i += len(quote)
                state = ScanState.SCANNING
                continue
            i += 1
            continue

        if state is ScanState.IN_LINE_COMMENT:
            if ch == "\n":
                ranges.append((begin, i))
                state = ScanState.SCANNING
            i += 1
            continue

        if state is ScanState.IN_BLOCK_COMMENT:
            if text.startswith("*/", i):
                i += 2
                ranges.append((begin, i))
                state = ScanState.SCANNING
                continue
            i += 1
            continue

        if text.startswith("//", i):
            begin, state = i, ScanState.IN_LINE_COMMENT
            i += 2
            continue
        if text.startswith("/*", i):
            begin, state = i, ScanState.IN_BLOCK_COMMENT
            i += 2
            continue
        if ch in "\"'":
            quote = '"""' if text.startswith('"""', i) else ch
            state = ScanState.IN_STRING
            i += len(quote)
            continue
        i += 1

    if state in (ScanState.IN_LINE_COMMENT, ScanState.IN_BLOCK_COMMENT):
        ranges.append((begin, n))
    return ranges


def in_comment(ranges: List[Tuple[int, int]], index: int) -> bool:
    """Whether ``index`` falls inside one of ``ranges``."""
    return any(start <= index < end for start, end in ranges)


def find_matching_paren(text: str, open_index: int) -> int:
    """Offset of the ``)`` closing the ``(`` at ``open_index``."""
    return scan_arguments(text, open_index).close_index


def line_start(text: str, index: int) -> int:
    """Offset of the first character of the line containing ``index``."""
    return text.rfind("\n", 0, index) + 1


def line_end(text: str, index: int) -> int:
    """Offset just past the newline ending the line containing ``index``."""
    newline = text.find("\n", index)
    return len(text) if newline == -1 else newline + 1


def indentation_at(text: str, index: int) -> str:
    """Leading whitespace of the line containing ``index``.

    >>> indentation_at("a\\n    b", 7)
    '    '
    """
    return _INDENT.match(text, line_start(text, index)).group()
