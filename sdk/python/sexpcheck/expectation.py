"""Expectation files: which language a submission must use and what it must define.

The file holds a single S-expression::

    ((lang "htdp/bsl" "htdp-beginner-reader.ss")
     (defs '(my-func other-func)))

Either the language or the reader may be ``#f``, but not both.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .errors import MalformedExpectation
from .parser import parse_one
from .types import AtomExpr, ListExpr, Quoted, String, symbol_name


@dataclass
class Expectation:
    lang: Optional[str] = None
    reader: Optional[str] = None
    defs: list[str] = field(default_factory=list)

    def is_same_lang(self, lang: str) -> bool:
        return lang in (self.lang, self.reader)

    def get_lang(self) -> Optional[str]:
        """The expected language, preferring ``lang`` over ``reader``."""
        if self.lang is not None:
            return self.lang
        return self.reader


def _string(expr) -> Optional[str]:
    if isinstance(expr, AtomExpr) and isinstance(expr.atom, String):
        return expr.atom.value
    return None


def parse_expectation(text: str) -> Expectation:
    """Parse the text of an expectation file."""
    top = parse_one(text)
    if not isinstance(top, ListExpr) or len(top.items) != 2:
        raise MalformedExpectation("expected a list of a `lang` clause and a `defs` clause")
    lang_clause, defs_clause = top.items

    if not isinstance(lang_clause, ListExpr) or len(lang_clause.items) != 3:
        raise MalformedExpectation("`lang` clause must be (lang <lang> <reader>)")
    head, lang, reader = lang_clause.items
    if symbol_name(head) != "lang" or not all(isinstance(x, AtomExpr) for x in (lang, reader)):
        raise MalformedExpectation("`lang` clause must be (lang <lang> <reader>)")

    if not isinstance(defs_clause, ListExpr) or len(defs_clause.items) != 2:
        raise MalformedExpectation("`defs` clause must be (defs '(<name> ...))")
    head, quoted = defs_clause.items
    if (
        symbol_name(head) != "defs"
        or not isinstance(quoted, AtomExpr)
        or not isinstance(quoted.atom, Quoted)
        or not isinstance(quoted.atom.expr, ListExpr)
    ):
        raise MalformedExpectation("`defs` clause must be (defs '(<name> ...))")

    expectation = Expectation(lang=_string(lang), reader=_string(reader))
    if expectation.lang is None and expectation.reader is None:
        raise MalformedExpectation("at least one of the language and the reader must be given")
    for item in quoted.atom.expr.items:
        name = symbol_name(item)
        if name is not None:
            expectation.defs.append(name)
    return expectation


def load_expectation(path: Union[str, Path]) -> Expectation:
    return parse_expectation(Path(path).read_text())
