# glower/glowerc.py
"""glowerc – glower CLI

Usage)
    $ glowerc check grammars/calc.g grammars/json.g -D
    $ glowerc ast grammars/calc.g --json -o out/calc.ast.json
    $ glowerc cst grammars/calc.g

Commands
--------
- check : parse + lower every file, report each result (exit 2 if any failed)
- ast   : print the lowered AST (repr, or tagged JSON with --json)
- cst   : print the concrete syntax tree as an indented outline

-D/--debug prints pipeline progress on stderr.
--encoding picks the grammar file codec (utf-8 by default, BOM tolerated).
"""

from __future__ import annotations
import argparse
import pathlib
import sys
from typing import List, Optional

# ------------------------------
# helpers
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)

# ------------------------------
# pipeline
# ------------------------------

def _load_cst(grammar_path: str, debug: bool, encoding: str = "utf-8"):
    from .grammar.loader import load_grammar_text
    from .grammar.parser import parse_cst

    src = load_grammar_text(grammar_path, encoding)
    if debug: _eprint("[DEBUG] %s: read %d chars" % (grammar_path, len(src)))
    cst = parse_cst(src)
    if debug: _eprint("[DEBUG] %s: CST ready | fields=%d" %
                      (grammar_path, len(cst.children.get("fields", []))))
    return cst


def _load_ast(grammar_path: str, debug: bool, encoding: str = "utf-8"):
    from .grammar.transform import to_ast

    g = to_ast(_load_cst(grammar_path, debug, encoding))
    if debug: _eprint("[DEBUG] %s: AST ready | tokens=%d rules=%d" %
                      (grammar_path, len(g.tokens()), len(g.rules())))
    return g

# ------------------------------
# commands
# ------------------------------

def cmd_check(args) -> int:
    from .grammar.transform import try_to_ast

    failed = 0
    for path in args.files:
        try:
            res = try_to_ast(_load_cst(path, debug=args.debug, encoding=args.encoding))
        except SyntaxError as e:
            _eprint(f"[SYNTAX ERROR] {path}")
            _eprint(str(e))
            failed += 1
            continue
        except (OSError, LookupError) as e:
            _eprint(f"[ERROR] {path}: {e}")
            failed += 1
            continue

        if not res.ok:
            _eprint(f"[LOWER ERROR] {path} ({res.error.kind.value})")
            _eprint(str(res.error))
            failed += 1
            continue

        g = res.grammar
        print(f"[CHECK OK] {path} fields={len(g.fields)} tokens={len(g.tokens())} rules={len(g.rules())}")

    if args.debug: _eprint("[DEBUG] checked %d file(s), %d failed" % (len(args.files), failed))
    return 2 if failed else 0


def cmd_ast(args) -> int:
    from .errors import LoweringError
    from .grammar.serialize import dumps

    try:
        g = _load_ast(args.file, debug=args.debug, encoding=args.encoding)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2
    except LoweringError as e:
        _eprint(f"[LOWER ERROR] ({e.kind.value})")
        _eprint(str(e))
        return 2
    except (OSError, LookupError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    text = dumps(g) if args.json else repr(g)
    if args.output:
        out_path = pathlib.Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        print(f"[EMIT] ast -> {out_path}")
        if args.debug: _eprint(f"[DEBUG] bytes={len(text)}")
    else:
        print(text)
    return 0


def cmd_cst(args) -> int:
    try:
        cst = _load_cst(args.file, debug=args.debug, encoding=args.encoding)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2
    except (OSError, LookupError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2
    print(cst.pretty())
    return 0

# ------------------------------
# entry point
# ------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="glowerc", description="glower grammar lowering CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="parse and lower grammar files, reporting each result")
    p_check.add_argument("files", nargs="+", help="grammar files")
    p_check.add_argument("-D", "--debug", action="store_true", help="print pipeline progress")
    p_check.add_argument("--encoding", default="utf-8", help="grammar file encoding (default: utf-8)")
    p_check.set_defaults(func=cmd_check)

    p_ast = sub.add_parser("ast", help="print the lowered AST")
    p_ast.add_argument("file", help="grammar file")
    p_ast.add_argument("--json", action="store_true", help="tagged JSON instead of repr")
    p_ast.add_argument("-o", "--output", help="write to this path instead of stdout")
    p_ast.add_argument("-D", "--debug", action="store_true", help="print pipeline progress")
    p_ast.add_argument("--encoding", default="utf-8", help="grammar file encoding (default: utf-8)")
    p_ast.set_defaults(func=cmd_ast)

    p_cst = sub.add_parser("cst", help="print the concrete syntax tree")
    p_cst.add_argument("file", help="grammar file")
    p_cst.add_argument("-D", "--debug", action="store_true", help="print pipeline progress")
    p_cst.add_argument("--encoding", default="utf-8", help="grammar file encoding (default: utf-8)")
    p_cst.set_defaults(func=cmd_cst)

    args = ap.parse_args(argv)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
