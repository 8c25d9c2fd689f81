# glower/grammar/parser.py
"""glower DSL parser -> CST
- tokens { NAME: { option: value, ... }, ... }
- rules { Rule: seq | seq ... ; ... }
- other top-level fields: NAME: value   /   NAME { ... }
- rule atoms: 'lit' "lit" Ident ( ... ), optional label= prefix, ?/*/+ suffix

The result is a labeled tree (see glower.cst); no normalization happens here.
"""

from __future__ import annotations
import regex as re
from typing import List, Optional, Tuple

from ..cst import CstNode, NodeKind, Role, Tok

# ---- Lexer tokens ----
_TOKEN_SPEC = [
    ("WS",       r"[ \t\f\r]+"),
    ("NEWLINE",  r"\n"),
    ("COMMENT",  r"//[^\n]*"),
    ("MCOMMENT", r"/\*.*?\*/"),
    ("COLON",    r":"),
    ("SEMI",     r";"),
    ("COMMA",    r","),
    ("OR",       r"\|"),
    ("LPAREN",   r"\("),
    ("RPAREN",   r"\)"),
    ("LBRACE",   r"\{"),
    ("RBRACE",   r"\}"),
    ("EQ",       r"="),
    ("QMARK",    r"\?"),
    ("STAR",     r"\*"),
    ("PLUS",     r"\+"),
    ("NUMBER",   r"-?[0-9]+(?:\.[0-9]+)?"),
    ("REGEX",    r"/(?:\\.|[^/\\\n])+/[imsxA]*"),
    ("STRING",   r'"(?:\\.|[^"\\])*"'),
    ("SSTRING",  r"'(?:\\.|[^'\\])*'"),
    ("IDENT",    r"[A-Za-z_][A-Za-z0-9_]*"),
]
MASTER_RE = re.compile("|".join(f"(?P<{n}>{p})" for n, p in _TOKEN_SPEC), re.S)

_SKIP = ("WS", "NEWLINE", "COMMENT", "MCOMMENT")


def _scan(src: str) -> List[Tok]:
    """Newlines only move line/col; they never reach the token stream."""
    toks: List[Tok] = []
    line = col = 1
    i = 0
    while i < len(src):
        m = MASTER_RE.match(src, i)
        if not m:
            snippet = _snippet_caret_at_pos(src, i)
            raise SyntaxError(f"Unexpected char {src[i]!r} at {line}:{col}\n{snippet}")
        kind = m.lastgroup or ""
        lex = m.group(0)
        start, end = i, m.end()

        if kind not in _SKIP:
            toks.append(Tok(kind, lex, start, end, line, col))

        nl_count = lex.count("\n")
        if nl_count:
            line += nl_count
            col = len(lex) - lex.rfind("\n")
        else:
            col += len(lex)
        i = end

    toks.append(Tok("EOF", "", len(src), len(src), line, col))
    return toks


# ---------- error handling utils ----------
def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """[start, end) of the line containing pos"""
    start = src.rfind("\n", 0, pos)
    start = 0 if start == -1 else start + 1
    end = src.find("\n", pos)
    if end == -1:
        end = len(src)
    return start, end

def _snippet_with_caret(src: str, tok: Tok) -> str:
    start, end = _line_bounds(src, tok.start)
    caret = " " * (tok.col - 1) + "^"
    return f"{src[start:end]}\n{caret}"

def _snippet_caret_at_pos(src: str, pos: int) -> str:
    start, end = _line_bounds(src, pos)
    caret = " " * (pos - start) + "^"
    return f"{src[start:end]}\n{caret}"


# --- token stream ---
class _TS:
    def __init__(self, toks: List[Tok], src: str):
        self.toks = toks
        self.i = 0
        self.src = src

    def la(self, k: int = 0) -> Tok:
        j = min(self.i + k, len(self.toks) - 1)
        return self.toks[j]

    def eat(self, kind: str) -> Tok:
        t = self.la()
        if t.kind != kind:
            raise self.error(f"Expected {kind}, got {t.kind}", t)
        self.i += 1
        return t

    def match(self, kind: str) -> Optional[Tok]:
        if self.la().kind == kind:
            return self.eat(kind)
        return None

    def error(self, msg: str, tok: Optional[Tok] = None) -> SyntaxError:
        t = tok or self.la()
        snippet = _snippet_with_caret(self.src, t)
        return SyntaxError(f"{msg} at {t.line}:{t.col}\n{snippet}")


def _node(kind: NodeKind) -> CstNode:
    return CstNode(kind.value)


# --- Grammar Parsing ---
def parse_cst(src: str) -> CstNode:
    """DSL source text -> `root` CST node."""
    ts = _TS(_scan(src), src)
    root = _node(NodeKind.ROOT)
    while ts.la().kind != "EOF":
        root.add(Role.FIELDS, _parse_field(ts))
    return root


def _parse_field(ts: _TS) -> CstNode:
    """
    rules { rule* }
    NAME { (token ,?)* }
    NAME : value
    """
    f = _node(NodeKind.ROOT_FIELD)
    name_tok = ts.eat("IDENT")
    if name_tok.lexeme == "rules" and ts.la().kind == "LBRACE":
        f.add(Role.RULES, _parse_rules(ts))
        return f

    f.add(Role.NAME, name_tok)
    if ts.match("LBRACE"):
        while ts.la().kind != "RBRACE":
            f.add(Role.TOKENS, _parse_token(ts))
            ts.match("COMMA")
        ts.eat("RBRACE")
        return f
    if ts.match("COLON"):
        f.add(Role.VALUE, _parse_option_value(ts))
        return f
    raise ts.error(f"Expected '{{' or ':' after field {name_tok.lexeme}, got {ts.la().kind}")


def _parse_token(ts: _TS) -> CstNode:
    """NAME : { (option (, option)* ,?)? }"""
    t = _node(NodeKind.TOKEN)
    t.add(Role.NAME, ts.eat("IDENT"))
    ts.eat("COLON")
    ts.eat("LBRACE")
    while ts.la().kind != "RBRACE":
        t.add(Role.OPTIONS, _parse_option(ts))
        if not ts.match("COMMA"):
            break
    ts.eat("RBRACE")
    return t


def _parse_option(ts: _TS) -> CstNode:
    opt = _node(NodeKind.TOKEN_OPTION)
    opt.add(Role.NAME, ts.eat("IDENT"))
    ts.eat("COLON")
    opt.add(Role.VALUE, _parse_option_value(ts))
    return opt


_VALUE_ROLES = {
    "NUMBER": Role.NUMBER,
    "REGEX": Role.REGEX,
    "STRING": Role.DOUBLE_QUOTE_STRING,
    "SSTRING": Role.SINGLE_QUOTE_STRING,
}

def _parse_option_value(ts: _TS) -> CstNode:
    v = _node(NodeKind.TOKEN_OPTION_VALUE)
    t = ts.la()
    if t.kind in _VALUE_ROLES:
        v.add(_VALUE_ROLES[t.kind], ts.eat(t.kind))
    elif t.kind == "IDENT":
        tok = ts.eat("IDENT")
        if tok.lexeme == "true":
            v.add(Role.TRUE, tok)
        elif tok.lexeme == "false":
            v.add(Role.FALSE, tok)
        else:
            v.add(Role.IDENTIFIER, tok)
    else:
        raise ts.error(f"Expected an option value, got {t.kind}", t)
    return v


def _parse_rules(ts: _TS) -> CstNode:
    rs = _node(NodeKind.RULES)
    ts.eat("LBRACE")
    while ts.la().kind != "RBRACE":
        rs.add(Role.RULES, _parse_rule(ts))
    ts.eat("RBRACE")
    return rs


def _parse_rule(ts: _TS) -> CstNode:
    """
    NAME : seq (| seq)* ;
    Without any `|` the body is a single rule_sequence. Otherwise every
    alternative, the leading one included, becomes a rule_or_sequence marker;
    an empty leading alternative (`r: | A | B ;`) is dropped.
    """
    r = _node(NodeKind.RULE)
    name_tok = ts.eat("IDENT")
    r.add(Role.NAME, name_tok)
    ts.eat("COLON")
    lead = _parse_sequence(ts)
    if ts.la().kind != "OR":
        r.add(Role.BODY, lead)
    elif lead.children:
        r.add(Role.BODY, _or_branch(lead))
    while ts.match("OR"):
        r.add(Role.BODY, _or_branch(_parse_sequence(ts)))
    if ts.la().kind != "SEMI":
        raise ts.error(f"Missing ';' after rule '{name_tok.lexeme}' (found {ts.la().kind})")
    ts.eat("SEMI")
    return r


def _or_branch(seq: CstNode) -> CstNode:
    branch = _node(NodeKind.RULE_OR_SEQUENCE)
    branch.add(Role.VALUE, seq)
    return branch


_ATOM_START = ("IDENT", "STRING", "SSTRING", "LPAREN")

def _parse_sequence(ts: _TS) -> CstNode:
    seq = _node(NodeKind.RULE_SEQUENCE)
    while ts.la().kind in _ATOM_START:
        expr = _node(NodeKind.RULE_BODY_EXPR)
        expr.add(Role.VALUE, _parse_unary(ts))
        seq.add(Role.EXPR, expr)
    return seq


_MODIFIERS = {"QMARK": Role.OPTIONAL, "STAR": Role.MANY, "PLUS": Role.MANY1}

def _parse_unary(ts: _TS) -> CstNode:
    """(label =)? scalar (? | * | +)?"""
    u = _node(NodeKind.RULE_BODY_EXPR_UNARY)
    if ts.la().kind == "IDENT" and ts.la(1).kind == "EQ":
        u.add(Role.NAME, ts.eat("IDENT"))
        ts.eat("EQ")
    u.add(Role.SCALAR, _parse_scalar(ts))
    kind = ts.la().kind
    if kind in _MODIFIERS:
        u.add(_MODIFIERS[kind], ts.eat(kind))
    return u


def _parse_scalar(ts: _TS) -> CstNode:
    s = _node(NodeKind.RULE_BODY_EXPR_SCALAR)
    t = ts.la()
    if t.kind == "SSTRING":
        s.add(Role.SINGLE_QUOTE_STRING, ts.eat("SSTRING"))
    elif t.kind == "STRING":
        s.add(Role.DOUBLE_QUOTE_STRING, ts.eat("STRING"))
    elif t.kind == "IDENT":
        s.add(Role.IDENTIFIER, ts.eat("IDENT"))
    elif t.kind == "LPAREN":
        s.add(Role.PTH, _parse_pth(ts))
    else:
        raise ts.error(f"Unexpected token {t.kind}", t)
    return s


def _parse_pth(ts: _TS) -> CstNode:
    """( (unary | '|')+ )"""
    p = _node(NodeKind.RULE_BODY_EXPR_PTH)
    lp = ts.eat("LPAREN")
    binary = _node(NodeKind.RULE_BODY_EXPR_BINARY)
    while True:
        k = ts.la().kind
        if k == "OR":
            binary.add(Role.ELEMS, ts.eat("OR"))
        elif k in _ATOM_START:
            binary.add(Role.ELEMS, _parse_unary(ts))
        else:
            break
    if not binary.children:
        raise ts.error("Empty group '()'", lp)
    ts.eat("RPAREN")
    expr = _node(NodeKind.RULE_BODY_EXPR)
    expr.add(Role.VALUE, binary)
    p.add(Role.VALUE, expr)
    return p
