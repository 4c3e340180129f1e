"""Tokenizer and recursive-descent parser for Lisp/Scheme S-expressions."""

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional

from .errors import GrammarFailure, InvalidSyntax, NothingToParse
from .hashlang import strip_hashlang
from .types import (
    AtomExpr,
    Boolean,
    Float,
    Integer,
    ListExpr,
    Program,
    QuasiQuoted,
    Quoted,
    String,
    Symbol,
    TokInfo,
    Unquoted,
)

logger = logging.getLogger(__name__)

# Lists, quoting prefixes and datum comments each count as one level.
# Parsing, untag, == and the dataclass repr recurse with up to four Python
# frames per level; at this depth all of them stay below the interpreter's
# default recursion limit.
MAX_DEPTH = 100

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

OPEN = "OPEN"
CLOSE = "CLOSE"
PREFIX = "PREFIX"
DATUM_COMMENT = "DATUM_COMMENT"
STRING = "STRING"
WORD = "WORD"

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}
PREFIXES = {"'": Quoted, "`": QuasiQuoted, ",": Unquoted}

# characters that end a bare word
_WORD_STOP = set(OPENERS) | set(CLOSERS) | set(PREFIXES) | {'"', ";"}

_BOOLS = {"#t": True, "#true": True, "#f": False, "#false": False}
_HEX_RE = re.compile(r"0x[0-9a-fA-F]+")
_INT_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE = re.compile(r"-?(?:[0-9]+\.[0-9]*|\.[0-9]+)")
_FLOAT_SUFFIX_RE = re.compile(r"[0-9]+f")
_HEX_BYTE_RE = re.compile(r"[0-9a-fA-F]{2}")
_CODE_POINT_RE = re.compile(r"\{[0-9a-fA-F]{1,6}\}")


@dataclass
class Token:
    type: str
    text: str
    start: int
    end: int
    info: TokInfo


class _SourceMap:
    """Maps string offsets to 1-based (line, column) pairs."""

    __slots__ = ("src", "line_starts")

    def __init__(self, src: str):
        self.src = src
        self.line_starts = [0] + [i + 1 for i, ch in enumerate(src) if ch == "\n"]

    def line_col(self, offset: int) -> tuple[int, int]:
        line = bisect_right(self.line_starts, offset)
        return line, offset - self.line_starts[line - 1] + 1

    def tokinfo(self, start: int, end: int) -> TokInfo:
        return TokInfo(self.src[start:end], self.line_col(start), self.line_col(end))


# --- Tokenizer ---

def tokenize(src: str) -> list[Token]:
    """Split ``src`` into tokens, dropping line and block comments."""
    return _tokenize(src, _SourceMap(src))


def _tokenize(src: str, smap: _SourceMap) -> list[Token]:
    tokens: list[Token] = []
    n = len(src)
    i = 0

    def emit(kind: str, start: int, end: int) -> None:
        tokens.append(Token(kind, src[start:end], start, end, smap.tokinfo(start, end)))

    while i < n:
        ch = src[i]
        if ch.isspace():
            i += 1
            continue
        if ch == ";":
            nl = src.find("\n", i)
            i = n if nl == -1 else nl + 1
            continue
        if src.startswith("#|", i):
            i = _skip_block_comment(src, i, smap)
            continue
        if src.startswith("#;", i):
            emit(DATUM_COMMENT, i, i + 2)
            i += 2
            continue
        if ch in OPENERS:
            emit(OPEN, i, i + 1)
            i += 1
        elif ch in CLOSERS:
            emit(CLOSE, i, i + 1)
            i += 1
        elif ch in PREFIXES:
            emit(PREFIX, i, i + 1)
            i += 1
        elif ch == '"':
            end = _scan_string(src, i, smap)
            emit(STRING, i, end)
            i = end
        else:
            j = i
            while j < n and not src[j].isspace() and src[j] not in _WORD_STOP:
                j += 1
            emit(WORD, i, j)
            i = j
    return tokens


def _skip_block_comment(src: str, start: int, smap: _SourceMap) -> int:
    depth = 0
    i = start
    while i < len(src):
        if src.startswith("#|", i):
            depth += 1
            i += 2
        elif src.startswith("|#", i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    line, col = smap.line_col(start)
    raise GrammarFailure(f"unterminated block comment starting at line {line}, column {col}")


def _scan_string(src: str, start: int, smap: _SourceMap) -> int:
    """Return the offset just past the closing quote of the string at ``start``."""
    i = start + 1
    while i < len(src):
        ch = src[i]
        if ch == '"':
            return i + 1
        if ch == "\\":
            i = _scan_escape(src, i, smap)
        else:
            i += 1
    line, col = smap.line_col(start)
    raise GrammarFailure(f"unterminated string starting at line {line}, column {col}")


def _scan_escape(src: str, i: int, smap: _SourceMap) -> int:
    if i + 1 >= len(src):
        return i + 1
    kind = src[i + 1]
    if kind == "x":
        m = _HEX_BYTE_RE.match(src, i + 2)
    elif kind == "u":
        m = _CODE_POINT_RE.match(src, i + 2)
    else:
        return i + 2
    if m is None:
        line, col = smap.line_col(i)
        raise GrammarFailure(f"invalid escape `\\{kind}` at line {line}, column {col}")
    return m.end()


# --- Parser ---

class _ParseState:
    __slots__ = ("smap", "tokens", "pos", "depth", "max_depth", "stack")

    def __init__(self, src: str, max_depth: int):
        self.smap = _SourceMap(src)
        self.tokens = _tokenize(src, self.smap)
        self.pos = 0
        self.depth = 0
        self.max_depth = max_depth
        # open-delimiter tokens, innermost last
        self.stack: list[Token] = []

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def span(self, first: Token) -> TokInfo:
        """Source span from ``first`` to the last consumed token."""
        return self.smap.tokinfo(first.start, self.tokens[self.pos - 1].end)


def parse_one(text: str, max_depth: int = MAX_DEPTH):
    """Parse exactly one top-level S-expression.

    Raises NothingToParse when the input starts with a datum comment, and
    InvalidSyntax when more than one expression is present.
    """
    st = _ParseState(text, max_depth)
    if not st.tokens:
        raise GrammarFailure("unexpected end of input: expected an expression")
    if st.tokens[0].type == DATUM_COMMENT:
        # the commented datum must still be well-formed
        _skip_datum_comment(st)
        raise NothingToParse()
    result = None
    while st.peek() is not None:
        tok = st.peek()
        expr = _parse_unit(st)
        if expr is None:
            continue
        if result is not None:
            raise InvalidSyntax(tok.info, tok.text, "expected a single expression, found trailing input")
        result = expr
    return result


def parse_many(text: str, max_depth: int = MAX_DEPTH) -> list:
    """Parse every top-level S-expression in ``text``.

    Top-level datum comments are skipped; any other error aborts the parse.
    """
    st = _ParseState(text, max_depth)
    result = []
    while st.peek() is not None:
        expr = _parse_unit(st)
        if expr is not None:
            result.append(expr)
    logger.debug("parsed %d top-level forms", len(result))
    return result


def parse_program(text: str, max_depth: int = MAX_DEPTH) -> Program:
    """Strip the ``#lang``/``#reader`` line and parse the rest of the file."""
    hashlang, body = strip_hashlang(text)
    if hashlang is None:
        logger.debug("no #lang or #reader line found")
    return Program(hashlang or "", parse_many(body, max_depth))


def _parse_unit(st: _ParseState):
    """Parse one top-level unit; returns None for a datum comment."""
    tok = st.peek()
    if tok.type == DATUM_COMMENT:
        _skip_datum_comment(st)
        logger.debug("skipped datum comment at line %d, column %d", *tok.info.start)
        return None
    return _parse_datum(st)


def _enter(st: _ParseState, tok: Token) -> None:
    st.depth += 1
    if st.depth > st.max_depth:
        raise InvalidSyntax(tok.info, tok.text, f"maximum nesting depth of {st.max_depth} exceeded")


def _skip_datum_comment(st: _ParseState) -> None:
    tok = st.tokens[st.pos]
    st.pos += 1
    _enter(st, tok)
    try:
        _parse_datum(st, owner=tok)
    finally:
        st.depth -= 1


def _parse_datum(st: _ParseState, owner: Optional[Token] = None):
    while True:
        tok = st.peek()
        if tok is None:
            if owner is None:
                raise GrammarFailure("unexpected end of input: expected an expression")
            raise InvalidSyntax(owner.info, owner.text, "expected an expression after this token")
        if tok.type != DATUM_COMMENT:
            break
        _skip_datum_comment(st)

    st.pos += 1
    if tok.type == OPEN:
        return _parse_list(st, tok)
    if tok.type == CLOSE:
        if owner is not None:
            raise InvalidSyntax(tok.info, tok.text, f"expected an expression after `{owner.text}`")
        raise InvalidSyntax(tok.info, tok.text, "unexpected closing delimiter")
    if tok.type == PREFIX:
        _enter(st, tok)
        try:
            inner = _parse_datum(st, owner=tok)
        finally:
            st.depth -= 1
        info = st.span(tok)
        return AtomExpr(PREFIXES[tok.text](inner, info), info)
    if tok.type == STRING:
        return AtomExpr(String(tok.text[1:-1], tok.info), tok.info)
    return AtomExpr(_classify(tok), tok.info)


def _parse_list(st: _ParseState, opener: Token) -> ListExpr:
    _enter(st, opener)
    st.stack.append(opener)
    items = []
    try:
        while True:
            tok = st.peek()
            if tok is None:
                innermost = st.stack[-1]
                raise InvalidSyntax(
                    innermost.info,
                    innermost.text,
                    f"unclosed `{innermost.text}`, expected `{OPENERS[innermost.text]}` before end of input",
                )
            if tok.type == CLOSE:
                st.pos += 1
                innermost = st.stack[-1]
                if CLOSERS[tok.text] != innermost.text:
                    line, col = innermost.info.start
                    raise InvalidSyntax(
                        tok.info,
                        tok.text,
                        f"expected `{OPENERS[innermost.text]}` to close `{innermost.text}` "
                        f"opened at line {line}, column {col}",
                    )
                st.stack.pop()
                return ListExpr(items, st.span(opener))
            if tok.type == DATUM_COMMENT:
                _skip_datum_comment(st)
                continue
            items.append(_parse_datum(st))
    finally:
        st.depth -= 1


def _classify(tok: Token):
    """Turn a bare word into a boolean, number or symbol atom."""
    word, info = tok.text, tok.info
    if word in _BOOLS:
        return Boolean(_BOOLS[word], info)
    if _HEX_RE.fullmatch(word):
        return Integer(_check_int64(int(word[2:], 16), tok), info)
    if _INT_RE.fullmatch(word):
        return Integer(_check_int64(int(word), tok), info)
    if _FLOAT_RE.fullmatch(word):
        return Float(float(word), info)
    if _FLOAT_SUFFIX_RE.fullmatch(word):
        return Float(float(word[:-1]), info)
    return Symbol(word, info)


def _check_int64(value: int, tok: Token) -> int:
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidSyntax(tok.info, tok.text, "malformed numeral: integer does not fit in 64 bits")
    return value
