# glower/__init__.py
"""glower – lowers grammar-DSL concrete syntax trees into a compact AST.

- glower.visitor           : generic kind -> handler dispatch over labeled trees
- glower.grammar.parser    : DSL text -> CST
- glower.grammar.transform : CST -> Grammar AST
- glower.grammar.serialize : tagged (JSON) encoding of the AST
"""

from .cst import CstNode, NodeKind, Role, Tok
from .errors import (
    ErrorKind, LoweringError, MissingSubValue, UnhandledNodeKind, UnrecognizedOptionValue,
)
from .utils import flatten1, merge_consecutive_by, partition_by
from .visitor import Visitor, create_visitor
from .grammar.parser import parse_cst
from .grammar.transform import LowerResult, lower_source, to_ast, try_to_ast
