"""CLI: python -m sexpcheck [-v] [<program.rkt> [<expectation.cfg>]]

With no file arguments, reads S-expressions from stdin; a line reading
``!RUN`` parses and prints everything entered since the previous run.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .errors import ParsingError
from .expectation import load_expectation
from .parser import parse_many, parse_program
from .wellformed import check_wellformedness

USAGE = "Usage: python -m sexpcheck [-v] [<program.rkt> [<expectation.cfg>]]"
RUN_COMMAND = "!RUN"

logger = logging.getLogger("sexpcheck")


def repl(stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    buf = []
    for line in stdin:
        if line.startswith(RUN_COMMAND):
            try:
                for expr in parse_many("".join(buf)):
                    print(expr, file=stdout)
            except ParsingError as e:
                print(f"Error: {e}", file=stdout)
            buf.clear()
        else:
            buf.append(line if line.endswith("\n") else line + "\n")


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = "-v" in args
    args = [a for a in args if a != "-v"]
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(args) > 2 or any(a.startswith("-") for a in args):
        print(USAGE, file=sys.stderr)
        return 2
    if not args:
        repl()
        return 0

    program_path = Path(args[0])
    try:
        program = parse_program(program_path.read_text())
        logger.debug("%s declares language %r", program_path, program.hashlang)
        if len(args) == 1:
            for expr in program.body:
                print(expr)
            return 0
        expectation = load_expectation(args[1])
    except (ParsingError, OSError) as e:
        print(e, file=sys.stderr)
        return 1

    violations = check_wellformedness(expectation, program)
    for v in violations:
        print(v)
    if violations:
        return 1
    print("OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
