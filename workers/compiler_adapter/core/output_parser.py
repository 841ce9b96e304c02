"""
Output parser — raw compiler text → structured ResultLine records.

Per line:
  - Strip ANSI colour escapes, expand tabs.
  - Rewrite every alias of the input file (absolute path, bare name,
    already-relative name) to the canonical relative name.
  - Tag ``<file>:<line>[:<col>]: <text>`` and ``<file>(<line>): <text>``
    with location and severity.

Lines that match nothing pass through untagged.  Parsing never raises.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional

from compiler_adapter.io.schema import ResultLine, ResultLineTag, Severity

# ── Patterns ─────────────────────────────────────────────────────────────────

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

_LOCATION_TAIL = r"[(:](?P<line>\d+)(?:[:,](?P<column>\d+))?[):]*\s*(?P<text>.*)$"

# A file name needs at least one letter, so "12:30:00 ..." is not a location.
_LOCATION_RE = re.compile(r"^\s*(?P<file>[\w.+/\\-]*[^\W\d][\w.+/\\-]*)" + _LOCATION_TAIL)

_SEVERITY_RES = (
    (re.compile(r"^(?:fatal\s+)?error\b", re.IGNORECASE), Severity.ERROR),
    (re.compile(r"^warning\b", re.IGNORECASE), Severity.WARNING),
    (re.compile(r"^(?:note|info)\b", re.IGNORECASE), Severity.INFO),
)

TAB_SIZE = 8


# ── Helpers ──────────────────────────────────────────────────────────────────

def strip_ansi(line: str) -> str:
    return _ANSI_RE.sub("", line)


def parse_severity(text: str) -> Severity:
    for pattern, severity in _SEVERITY_RES:
        if pattern.match(text):
            return severity
    return Severity.NONE


def _alias_pattern(filename: str, aliases: Iterable[str]) -> Optional[re.Pattern]:
    names = {a for a in aliases if a}
    names.add(filename)
    # Longest first so an absolute path wins over its basename.
    alternatives = "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))
    return re.compile(rf"(?<![\w./\\-])(?:{alternatives})(?![\w\\/-]|\.\w)")


@lru_cache(maxsize=64)
def _file_location_pattern(filename: str) -> re.Pattern:
    # The input name may hold characters the generic pattern rejects (spaces).
    return re.compile(rf"^\s*(?P<file>{re.escape(filename)})" + _LOCATION_TAIL)


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping the empty tail after a final newline."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


# ── Public API ───────────────────────────────────────────────────────────────

def parse_line(line: str, pattern: Optional[re.Pattern] = None, filename: Optional[str] = None) -> ResultLine:
    """Clean one raw line and tag it if it names a location."""
    text = strip_ansi(line).expandtabs(TAB_SIZE)
    if pattern is not None and filename:
        text = pattern.sub(filename, text)

    match = _file_location_pattern(filename).match(text) if filename else None
    if match is None:
        match = _LOCATION_RE.match(text)
    if match is None:
        return ResultLine(text=text)

    message = match.group("text")
    column = match.group("column")
    tag = ResultLineTag(
        file=match.group("file"),
        line=int(match.group("line")),
        column=int(column) if column else 0,
        severity=parse_severity(message),
        text=message,
    )
    return ResultLine(text=text, tag=tag)


def parse_output(
    text: str,
    filename: Optional[str] = None,
    aliases: Iterable[str] = (),
) -> List[ResultLine]:
    """
    Parse a whole output stream.

    *filename* is the name diagnostics should use for the input file;
    occurrences of any of *aliases* are rewritten to it.
    """
    pattern = _alias_pattern(filename, aliases) if filename else None
    return [parse_line(line, pattern, filename) for line in split_lines(text)]
