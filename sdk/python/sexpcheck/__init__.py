from .parser import parse_one, parse_many, parse_program
from .types import untag, get_decoration
from .expectation import parse_expectation, load_expectation
from .wellformed import check_wellformedness

__all__ = [
    "parse_one", "parse_many", "parse_program", "untag", "get_decoration",
    "parse_expectation", "load_expectation", "check_wellformedness",
]
