"""
sexpcheck End-to-End Example

Demonstrates the full flow:
1. Parse a single expression and inspect positions
2. Compare trees structurally with untag
3. Read a DrRacket file and its expectation file
4. Check wellformedness and report violations

Run: pip install -e . && python examples/e2e/e2e.py
"""

from pathlib import Path

from sexpcheck import (
    check_wellformedness, get_decoration, load_expectation, parse_one, parse_program, untag,
)
from sexpcheck.errors import ParsingError

HERE = Path(__file__).resolve().parent.parent

print("=== sexpcheck E2E Demo ===\n")

# 1. Parse one expression
expr = parse_one("[1 (2 {1 2 3}) 3]")
print("1. Parsed", expr)
print(f"   {get_decoration(expr)}\n")

# 2. Comments do not change the tree
a = untag(parse_one("(1 ; c\n 2 #| block |# 3)"))
b = untag(parse_one("(1 #;skipped 2 3)"))
print(f"2. Comment-insensitive equality: {a == b}\n")

# 3. Syntax errors point at the offending token
try:
    parse_one("(bla [bla)]")
except ParsingError as e:
    print("3. Mismatched delimiters:")
    print(f"   {e}\n".replace("\n", "\n   "))

# 4. Wellformedness
for prog_name, cfg_name in [("my_func.rkt", "my_func.cfg"), ("racket_lang.rkt", "two_funcs.cfg")]:
    program = parse_program((HERE / "programs" / prog_name).read_text())
    expectation = load_expectation(HERE / "expectations" / cfg_name)
    violations = check_wellformedness(expectation, program)
    print(f"4. {prog_name} against {cfg_name} (language {program.hashlang})")
    for v in violations:
        print(f"   {v}")
    if not violations:
        print("   OK")
    print()

print("=== Done ===")
