"""Detection of the ``#lang`` / ``#reader`` line that DrRacket puts in source files."""

from typing import Optional

_READER_PREFIX = "#reader(lib "


def parse_hashlang(line: str) -> Optional[str]:
    """Return the language named by a ``#lang`` or ``#reader`` line, if any.

    >>> parse_hashlang("#lang htdp/bsl")
    'htdp/bsl'
    >>> parse_hashlang('#reader(lib "htdp-beginner-reader.ss" "lang")((modname x))')
    'htdp-beginner-reader.ss'
    """
    if line.startswith("#lang"):
        return line[len("#lang"):].strip()
    if line.startswith("#reader"):
        if not line.startswith(_READER_PREFIX):
            return None
        rest = line[len(_READER_PREFIX):]
        end = rest.find('"', 1)
        if end == -1:
            return None
        return rest[:end].strip('"')
    return None


def strip_hashlang(text: str) -> tuple[Optional[str], str]:
    """Blank out the first language line of ``text``.

    Returns the declared language (or None) and the text with that line
    emptied. The line itself is kept, empty, so positions reported for the
    rest of the source still match the file.
    """
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if not line.startswith("#"):
            continue
        lang = parse_hashlang(line.rstrip("\r"))
        if lang is not None:
            lines[i] = ""
            return lang, "\n".join(lines)
    return None, text
