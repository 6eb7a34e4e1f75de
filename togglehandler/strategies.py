"""
Text strategies that add and remove a toggle in each target file.

Every function takes the full text of one file and returns the edited
text. Landmarks are located with regular expressions and the balanced
scanner; nothing here parses Kotlin beyond that. Failures raise a
``ToggleEditError`` subclass and leave the input untouched.

>>> text = "object Defaults {\\n    fun remoteSettingsDefaults() = mapOf()\\n}\\n"
>>> print(add_remote_setting_default(text, ToggleRecord("FooBar")))
object Defaults {
    fun remoteSettingsDefaults() = mapOf(
        Toggle.FooBar.name to false
    )
}
<BLANKLINE>
"""

import logging
import re
from typing import List, Optional

from togglehandler.definitions import SENTINEL_TOGGLE, ToggleRecord, UNKNOWN_DESCRIPTION
from togglehandler.errors import EntryNotFound, LandmarkNotFound
from togglehandler.scanner import (
    comment_ranges,
    find_matching_paren,
    in_comment,
    indentation_at,
    line_end,
    line_start,
    scan_arguments,
)

logger = logging.getLogger(__name__)

DEFAULT_INDENT = "    "

_DECLARATION_HEADER = re.compile(r"data\s+object\s+(\w+)\s*:\s*Toggle\b")
_STRING = r'"(?:[^"\\]|\\.)*"'
_LEADING_BLANK_LINES = re.compile(r"(?:[ \t]*\r?\n)+")
_DOC_MARKER = re.compile(r"(?<![\w.])ToggleDoc\s*\(")
_CLASS_KEYWORD = re.compile(r"class\s+$")
_REMOTE_SETTINGS_SIGNATURE = re.compile(
    r"fun\s+remoteSettingsDefaults\s*\(\s*\)\s*(?::[^=]+)?=\s*mapOf\s*(?:<[^>]*>)?\s*\("
)
_LINE_SEPARATORS = ("", ",", ";")


def kotlin_string(value: str) -> str:
    """Quote a value as a Kotlin string literal.

    >>> kotlin_string('Say "hi" for $5')
    '"Say \\\\"hi\\\\" for \\\\$5"'
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def _kotlin_bool(value: bool) -> str:
    return "true" if value else "false"


def newline_of(text: str) -> str:
    """Line break used by ``text``; edits reuse it so CRLF files stay CRLF.

    >>> newline_of("a\\r\\nb"), newline_of("a\\nb"), newline_of("")
    ('\\r\\n', '\\n', '\\n')
    """
    return "\r\n" if "\r\n" in text else "\n"


# ---------------------------------------------------------------------------
# Registry (Toggle.kt)
# ---------------------------------------------------------------------------


def _live_matches(pattern: "re.Pattern[str]", text: str, end: Optional[int] = None) -> list:
    """Matches of ``pattern`` that do not start inside a comment."""
    comments = comment_ranges(text)
    matches = pattern.finditer(text) if end is None else pattern.finditer(text, 0, end)
    return [match for match in matches if not in_comment(comments, match.start())]


def extract_toggle_names(text: str) -> List[str]:
    """Declared toggle names in file order, without the sentinel.

    >>> extract_toggle_names("data object None : Toggle()\\ndata object Foo : Toggle(")
    ['Foo']
    >>> extract_toggle_names("// data object Old : Toggle(\\ndata object Foo : Toggle(")
    ['Foo']
    """
    return [
        match.group(1)
        for match in _live_matches(_DECLARATION_HEADER, text)
        if match.group(1) != SENTINEL_TOGGLE
    ]


def build_registry_entry(record: ToggleRecord, indent: str = DEFAULT_INDENT,
                         newline: str = "\n") -> str:
    inner = indent + DEFAULT_INDENT
    lines = [
        "",
        f"{indent}data object {record.name} : Toggle(",
        f"{inner}name = {kotlin_string(record.snake_case_name)},",
        f"{inner}isRemoteConfigurable = {_kotlin_bool(record.is_remotely_configurable)},",
        f"{inner}activationDate = {kotlin_string(record.activation_date)},",
        f"{inner}activationVersion = {kotlin_string(record.activation_version)},",
        f"{inner}deprecationDate = {kotlin_string(record.deprecation_date)},",
        f"{inner}description = {kotlin_string(record.full_description)}",
        f"{indent})",
    ]
    return newline.join(lines)


def add_registry_entry(text: str, record: ToggleRecord) -> str:
    """Insert a declaration right before the last closing brace."""
    class_end = text.rfind("}")
    if class_end == -1:
        raise LandmarkNotFound("Could not find closing brace of Toggle class")

    nl = newline_of(text)
    headers = _live_matches(_DECLARATION_HEADER, text, class_end)
    indent = indentation_at(text, headers[-1].start()) if headers else DEFAULT_INDENT
    entry = build_registry_entry(record, indent or DEFAULT_INDENT, nl)
    return text[:class_end] + entry + nl + text[class_end:]


def _strict_declaration(name: str) -> "re.Pattern[str]":
    return re.compile(
        rf"data\s+object\s+{re.escape(name)}\s*:\s*Toggle\s*\(\s*"
        rf"name\s*=\s*{_STRING}\s*,\s*"
        rf"isRemoteConfigurable\s*=\s*(?:true|false)\s*,\s*"
        rf"activationDate\s*=\s*{_STRING}\s*,\s*"
        rf"activationVersion\s*=\s*{_STRING}\s*,\s*"
        rf"deprecationDate\s*=\s*{_STRING}\s*,\s*"
        rf"description\s*=\s*{_STRING}\s*,?\s*\)"
    )


def _find_declaration(text: str, name: str) -> Optional[tuple]:
    strict = _live_matches(_strict_declaration(name), text)
    if strict:
        return strict[0].start(), strict[0].end()

    headers = _live_matches(
        re.compile(rf"data\s+object\s+{re.escape(name)}\s*:\s*Toggle\s*(?=\()"), text
    )
    if not headers:
        return None
    logger.debug("Declaration of %s has non-standard fields, using balanced match", name)
    return headers[0].start(), find_matching_paren(text, headers[0].end()) + 1


def _has_declaration(text: str) -> bool:
    return bool(_live_matches(_DECLARATION_HEADER, text))


def remove_registry_entry(text: str, name: str) -> str:
    """Remove the declaration of ``name`` and tidy the separators around it."""
    span = _find_declaration(text, name)
    if span is None:
        raise EntryNotFound(f"Toggle {name} is not declared")
    match_start, match_end = span
    nl = newline_of(text)

    start = line_start(text, match_start)
    if text[start:match_start].strip():
        start = match_start
    end = line_end(text, match_end)
    if text[match_end:end].strip() not in _LINE_SEPARATORS:
        end = match_end

    removed = text[start:end]
    before, after = text[:start], text[end:]

    if not removed.rstrip().endswith(","):
        stripped = before.rstrip()
        if stripped.endswith(","):
            before = stripped[:-1] + before[len(stripped):]

    blank_lines = _LEADING_BLANK_LINES.match(after)
    if _has_declaration(before):
        had_gap = before.rstrip(" \t").endswith(nl * 2) or blank_lines is not None
        if blank_lines:
            after = after[blank_lines.end():]
        # neighbours keep at most one blank line between them
        gap = nl if had_gap and _has_declaration(after) else ""
        before = before.rstrip() + nl + gap
    elif blank_lines and before.rstrip().endswith("{"):
        # first declaration removed, the next one moves up to the brace
        after = after[blank_lines.end():]
    return before + after


# ---------------------------------------------------------------------------
# Documentation (ToggleDoc.kt)
# ---------------------------------------------------------------------------


def _doc_markers(text: str) -> list:
    """``ToggleDoc(`` call sites, skipping the class declaration itself."""
    return [
        match for match in _live_matches(_DOC_MARKER, text)
        if not _CLASS_KEYWORD.search(text, 0, match.start())
    ]


def build_documentation_entry(record: ToggleRecord, indent: str = DEFAULT_INDENT,
                              newline: str = "\n") -> str:
    inner = indent + DEFAULT_INDENT
    lines = [
        f"{indent}ToggleDoc(",
        f"{inner}toggle = Toggle.{record.name},",
        f"{inner}jiraTask = {kotlin_string(record.jira_task)},",
        f"{inner}description = {kotlin_string(record.description or UNKNOWN_DESCRIPTION)},",
        f"{inner}isRemoteConfigurable = {_kotlin_bool(record.is_remotely_configurable)},",
        f"{inner}activationDate = {kotlin_string(record.activation_date)},",
        f"{inner}activationVersion = {kotlin_string(record.activation_version)},",
        f"{inner}deprecationDate = {kotlin_string(record.deprecation_date)},",
        f"{indent})",
    ]
    return newline.join(lines)


def add_documentation_entry(text: str, record: ToggleRecord) -> str:
    """Append an entry after the last ``ToggleDoc(...)`` in the file."""
    markers = _doc_markers(text)
    if not markers:
        raise LandmarkNotFound("Could not find any ToggleDoc( entry")
    last = markers[-1]

    close = find_matching_paren(text, last.end() - 1)
    indent = indentation_at(text, last.start())
    nl = newline_of(text)
    entry = build_documentation_entry(record, indent, nl)

    after_close = close + 1
    while after_close < len(text) and text[after_close] in " \t":
        after_close += 1

    if after_close < len(text) and text[after_close] == ",":
        insert_at = line_end(text, after_close)
        prefix = "" if text[insert_at - 1:insert_at] == "\n" else nl
        return text[:insert_at] + prefix + entry + "," + nl + text[insert_at:]

    # last entry had no trailing comma, so the new one gets none either
    insert_at = line_end(text, close)
    if text[close + 1:insert_at].strip():
        return text[:close + 1] + "," + nl + entry + text[close + 1:]
    head = text[:close + 1] + "," + text[close + 1:insert_at]
    prefix = "" if head.endswith("\n") else nl
    return head + prefix + entry + nl + text[insert_at:]


# ---------------------------------------------------------------------------
# Service extensions (ServiceExtensions.kt)
# ---------------------------------------------------------------------------


def build_service_extension(record: ToggleRecord) -> str:
    return (
        f"fun {record.accessor_name}(): Boolean = "
        f"DI.serviceProvider.remoteService.isToggled(Toggle.{record.name})"
    )


def locate_service_extension(text: str, name: str) -> Optional[int]:
    """1-based line of the ``is<Name>Enabled`` accessor, if present.

    >>> locate_service_extension("package a\\n\\nfun isFooEnabled(): Boolean = x", "Foo")
    3
    """
    match = re.search(rf"\bfun\s+is{re.escape(name)}Enabled\s*\(", text)
    if match is None:
        return None
    return text.count("\n", 0, match.start()) + 1


def add_service_extension(text: str, record: ToggleRecord) -> str:
    """Append the accessor at end of file. Existing accessors are kept as is."""
    if locate_service_extension(text, record.name) is not None:
        logger.info("Accessor %s already present", record.accessor_name)
        return text
    extension = build_service_extension(record)
    nl = newline_of(text)
    if text.endswith("\n"):
        return f"{text}{nl}{extension}{nl}"
    return f"{text}{nl}{extension}"


# ---------------------------------------------------------------------------
# Remote settings defaults (RemoteSettingsDefaults.kt)
# ---------------------------------------------------------------------------


def _remote_entry_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(rf"(?<![\w.])(?:Toggle\.)?{re.escape(name)}\.name\s+to\s+(?:false|true)\b")


def add_remote_setting_default(text: str, record: ToggleRecord) -> str:
    """Add ``Toggle.<Name>.name to false`` to the ``mapOf`` call."""
    signature = _REMOTE_SETTINGS_SIGNATURE.search(text)
    if signature is None:
        raise LandmarkNotFound("Function remoteSettingsDefaults() not found")

    span = scan_arguments(text, signature.end() - 1)
    entry = f"{record.remote_key} to false"

    if _remote_entry_pattern(record.name).search(text, span.open_index, span.end):
        logger.info("Remote default for %s already present", record.name)
        return text

    nl = newline_of(text)
    if span.has_elements:
        insert_at = span.last_element_end
        indent = indentation_at(text, insert_at - 1)
        if text[insert_at - 1] == ",":
            return text[:insert_at] + f"{nl}{indent}{entry}," + text[insert_at:]
        return text[:insert_at] + f",{nl}{indent}{entry}" + text[insert_at:]

    closing_indent = indentation_at(text, signature.start())
    interior = text[span.open_index + 1:span.close_index].rstrip()
    return (
        text[:span.open_index + 1]
        + f"{interior}{nl}{closing_indent}{DEFAULT_INDENT}{entry}{nl}{closing_indent}"
        + text[span.close_index:]
    )


def remove_remote_setting_default(text: str, name: str) -> str:
    """Delete the entry for ``name`` and any separator it leaves dangling."""
    match = _remote_entry_pattern(name).search(text)
    if match is None:
        raise EntryNotFound(f"Remote default for {name} not found")

    start = line_start(text, match.start())
    end = line_end(text, match.end())
    rest = (text[start:match.start()] + text[match.end():end]).strip()

    if rest in (",", ""):
        result = text[:start] + text[end:]
        if "," in text[start:end]:
            return result
        cursor = start
        while cursor > 0 and text[cursor - 1].isspace():
            cursor -= 1
        if cursor > 0 and text[cursor - 1] == ",":
            result = result[:cursor - 1] + result[cursor:]
        return result

    # entry shares its line with other code
    following = re.match(r"\s*,[ \t]*", text[match.end():])
    if following:
        return text[:match.start()] + text[match.end() + following.end():]
    preceding = re.search(r",\s*$", text[:match.start()])
    if preceding:
        return text[:preceding.start()] + text[match.end():]
    return text[:match.start()] + text[match.end():]
