"""Check a parsed program against an expectation record."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .expectation import Expectation
from .types import ListExpr, Program, symbol_name

logger = logging.getLogger(__name__)


@dataclass
class MissingDef:
    name: str

    def __str__(self) -> str:
        return f"Missing expected definition: {self.name}"


@dataclass
class WrongHashlang:
    expected: str
    found: str

    def __str__(self) -> str:
        return f"Wrong language selected: expected {self.expected}, found {self.found}"


Violation = Union[MissingDef, WrongHashlang]


def _defined_name(expr) -> Optional[str]:
    # only (define (NAME args ...) body ...) counts
    if not isinstance(expr, ListExpr) or len(expr.items) < 2:
        return None
    head, signature = expr.items[0], expr.items[1]
    if symbol_name(head) != "define" or not isinstance(signature, ListExpr) or not signature.items:
        return None
    return symbol_name(signature.items[0])


def defined_names(program: Program) -> set[str]:
    """Names of the functions defined at the top level of ``program``."""
    names = set()
    for expr in program.body:
        name = _defined_name(expr)
        if name is not None:
            names.add(name)
    return names


def check_wellformedness(expectation: Expectation, program: Program) -> list[Violation]:
    """Collect every violation of ``expectation`` by ``program``.

    An empty list means the program is well-formed.
    """
    violations: list[Violation] = []
    defs = defined_names(program)
    for name in expectation.defs:
        if name not in defs:
            violations.append(MissingDef(name))

    if not expectation.is_same_lang(program.hashlang):
        violations.append(WrongHashlang(expectation.get_lang(), program.hashlang))

    logger.debug("%d definitions found, %d violations", len(defs), len(violations))
    return violations
