"""Decorated S-expression tree, token positions and programs.

Every node carries a decoration ``deco``. Freshly parsed trees are decorated
with :class:`TokInfo`; :func:`untag` erases decorations to ``None`` so that two
parses can be compared structurally with ``==``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar, Union

D = TypeVar("D")


@dataclass(frozen=True)
class TokInfo:
    """Source text of a token plus its 1-based (line, column) start and end."""

    string: str
    start: tuple[int, int]
    end: tuple[int, int]

    def __str__(self) -> str:
        # "token" is lowercase, the message is usually embedded in another one
        return (
            f"token starting at line {self.start[0]}, column {self.start[1]} "
            f"and ending at line {self.end[0]}, column {self.end[1]}:\n"
            f"{self.string}"
        )


# --- Atoms ---

@dataclass
class Symbol(Generic[D]):
    value: str
    deco: Optional[D] = None

    def __str__(self) -> str:
        return self.value


@dataclass
class String(Generic[D]):
    # raw text between the quotes, escapes are kept as written
    value: str
    deco: Optional[D] = None

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass
class Integer(Generic[D]):
    value: int
    deco: Optional[D] = None

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class Float(Generic[D]):
    value: float
    deco: Optional[D] = None

    def __str__(self) -> str:
        # positional notation with a dot, so the text reads back as a float
        text = format(Decimal(repr(self.value)), "f")
        if "." not in text:
            text += ".0"
        return text


@dataclass
class Boolean(Generic[D]):
    value: bool
    deco: Optional[D] = None

    def __str__(self) -> str:
        return "#t" if self.value else "#f"


@dataclass
class Quoted(Generic[D]):
    expr: "Sexpr"
    deco: Optional[D] = None

    prefix = "'"

    def __str__(self) -> str:
        return to_source(self)


@dataclass
class QuasiQuoted(Generic[D]):
    expr: "Sexpr"
    deco: Optional[D] = None

    prefix = "`"

    def __str__(self) -> str:
        return to_source(self)


@dataclass
class Unquoted(Generic[D]):
    expr: "Sexpr"
    deco: Optional[D] = None

    prefix = ","

    def __str__(self) -> str:
        return to_source(self)


Atom = Union[Symbol, String, Integer, Float, Boolean, Quoted, QuasiQuoted, Unquoted]

QUOTING = (Quoted, QuasiQuoted, Unquoted)


# --- S-expressions ---

@dataclass
class AtomExpr(Generic[D]):
    atom: Atom
    deco: Optional[D] = None

    def __str__(self) -> str:
        return to_source(self)


@dataclass
class ListExpr(Generic[D]):
    items: list = field(default_factory=list)
    deco: Optional[D] = None

    def __str__(self) -> str:
        return to_source(self)


Sexpr = Union[AtomExpr, ListExpr]


def to_source(node: Any) -> str:
    """Render a tree as S-expression text, always using round parentheses.

    Walks with an explicit stack, so any tree the parser accepts can be
    rendered regardless of its depth.
    """
    out = []
    # pending work: nodes to render, or literal text to emit
    stack = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, ListExpr):
            stack.append(")")
            for i in range(len(item.items) - 1, -1, -1):
                stack.append(item.items[i])
                if i > 0:
                    stack.append(" ")
            stack.append("(")
        elif isinstance(item, AtomExpr):
            stack.append(item.atom)
        elif isinstance(item, QUOTING):
            stack.append(item.expr)
            stack.append(item.prefix)
        else:
            out.append(str(item))
    return "".join(out)


@dataclass
class Program:
    """A declared language tag plus the top-level forms of a source file."""

    hashlang: str
    body: list = field(default_factory=list)


def get_decoration(node: Any) -> Any:
    """Return the decoration of an Sexpr or Atom node."""
    return node.deco


def untag(node: Any) -> Any:
    """Rebuild ``node`` with every decoration replaced by ``None``."""
    if isinstance(node, ListExpr):
        return ListExpr([untag(item) for item in node.items])
    if isinstance(node, AtomExpr):
        return AtomExpr(untag(node.atom))
    if isinstance(node, QUOTING):
        return type(node)(untag(node.expr))
    if isinstance(node, (Symbol, String, Integer, Float, Boolean)):
        return type(node)(node.value)
    raise TypeError(f"not an S-expression node: {node!r}")


def symbol_name(expr: Any) -> Optional[str]:
    """The name of ``expr`` if it is a bare symbol, else None."""
    if isinstance(expr, AtomExpr) and isinstance(expr.atom, Symbol):
        return expr.atom.value
    return None
