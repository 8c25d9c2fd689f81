# glower/errors.py
"""Lowering error taxonomy.

Every failure means the CST broke the shape the ruleset expects. Errors are
raised where they are detected and are never retried; there is no partial AST.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional

from .cst import Children, dump_children


class ErrorKind(Enum):
    UNRECOGNIZED_OPTION_VALUE = "unrecognized-option-value"
    MISSING_SUB_VALUE = "missing-sub-value"
    UNHANDLED_NODE_KIND = "unhandled-node-kind"


class LoweringError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, node_kind: Optional[str] = None,
                 children: Optional[Children] = None):
        self.node_kind = node_kind
        self.children = children
        detail = f" {dump_children(children)}" if children is not None else ""
        super().__init__(f"{message}{detail}")


class UnrecognizedOptionValue(LoweringError):
    """None of the value roles of a token option value is populated."""
    kind = ErrorKind.UNRECOGNIZED_OPTION_VALUE


class MissingSubValue(LoweringError):
    """A unary expression has no scalar, or a group has no inner value."""
    kind = ErrorKind.MISSING_SUB_VALUE


class UnhandledNodeKind(LoweringError):
    kind = ErrorKind.UNHANDLED_NODE_KIND
