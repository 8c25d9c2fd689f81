# glower/cst.py
"""Concrete syntax tree shape consumed by the lowering pass.

A CST node has a kind (which production it came from) and a mapping from role
label to an ordered list of children. A child is either a terminal `Tok` or
another `CstNode`. Several children may share a role label.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class Tok:
    kind: str       # lexer class, e.g. "IDENT", "REGEX"
    lexeme: str     # literal text image
    start: int = 0
    end: int = 0
    line: int = 1
    col: int = 1

    @property
    def image(self) -> str:
        return self.lexeme


class NodeKind(str, Enum):
    ROOT = "root"
    ROOT_FIELD = "root_field"
    TOKEN = "token"
    TOKEN_OPTION = "token_option"
    TOKEN_OPTION_VALUE = "token_option_value"
    RULES = "rules"
    RULE = "rule"
    RULE_OR_SEQUENCE = "rule_or_sequence"
    RULE_SEQUENCE = "rule_sequence"
    RULE_BODY_EXPR = "rule_body_expr"
    RULE_BODY_EXPR_BINARY = "rule_body_expr_binary"
    RULE_BODY_EXPR_UNARY = "rule_body_expr_unary"
    RULE_BODY_EXPR_SCALAR = "rule_body_expr_scalar"
    RULE_BODY_EXPR_PTH = "rule_body_expr_pth"

    def __str__(self) -> str:
        return self.value


class Role:
    """Role labels used by the grammar CST."""
    FIELDS = "fields"
    RULES = "rules"
    NAME = "name"
    TOKENS = "tokens"
    OPTIONS = "options"
    VALUE = "value"
    NUMBER = "number"
    REGEX = "regex"
    DOUBLE_QUOTE_STRING = "double_quote_string"
    SINGLE_QUOTE_STRING = "single_quote_string"
    IDENTIFIER = "identifier"
    TRUE = "true"
    FALSE = "false"
    BODY = "body"
    EXPR = "expr"
    ELEMS = "elems"
    SCALAR = "scalar"
    PTH = "pth"
    OPTIONAL = "optional"
    MANY = "many"
    MANY1 = "many1"


Child = Union["CstNode", Tok]
Children = Dict[str, List[Child]]


@dataclass
class CstNode:
    kind: str
    children: Children = field(default_factory=dict)

    def add(self, role: str, child: Child) -> "CstNode":
        self.children.setdefault(role, []).append(child)
        return self

    def pretty(self, indent: str = "  ") -> str:
        """Indented multi-line rendering, one child per line."""
        lines: List[str] = []

        def _walk(node: Child, label: Optional[str], level: int) -> None:
            prefix = indent * level + (f"{label}: " if label else "")
            if isinstance(node, Tok):
                lines.append(f"{prefix}{node.kind} {node.lexeme!r}")
                return
            lines.append(f"{prefix}{node.kind}")
            for role, kids in node.children.items():
                for kid in kids:
                    _walk(kid, role, level + 1)

        _walk(self, None, 0)
        return "\n".join(lines)


def is_node(child: object, kind: Optional[str] = None) -> bool:
    if not isinstance(child, CstNode):
        return False
    return kind is None or child.kind == kind


def first(children: Children, role: str) -> Optional[Child]:
    """First child under `role`, or None when the role is absent or empty."""
    kids = children.get(role)
    if not kids:
        return None
    return kids[0]


def image(children: Children, role: str) -> Optional[str]:
    """Text image of the first token under `role`."""
    tok = first(children, role)
    if tok is None:
        return None
    if not isinstance(tok, Tok):
        raise TypeError(f"role {role!r} holds a {type(tok).__name__}, not a token")
    return tok.lexeme


def dump_children(children: Children) -> str:
    """Compact single-line rendering used in error messages."""
    parts = []
    for role, kids in children.items():
        items = []
        for kid in kids:
            if isinstance(kid, Tok):
                items.append(repr(kid.lexeme))
            elif isinstance(kid, CstNode):
                items.append(f"<{kid.kind}>")
            else:
                items.append(repr(kid))
        parts.append(f"{role}: [{', '.join(items)}]")
    return "{" + ", ".join(parts) + "}"
