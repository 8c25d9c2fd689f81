# glower/visitor.py
"""Generic dispatch over a labeled tree.

The engine knows nothing about grammars. A handler registered for a node kind
receives the node's role-labeled children and the recursive `visit` itself, so
it decides which children to descend into (punctuation is simply skipped).

Lookup order for a node:
  1) handler registered for `node.kind` -> handler(node.children, visit)
  2) default handler, if configured    -> default(node, visit)
  3) strict engine                     -> UnhandledNodeKind
  4) otherwise the node is returned unchanged
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .cst import Children
from .errors import UnhandledNodeKind

Visit = Callable[[Any], Any]
Handler = Callable[[Children, Visit], Any]
DefaultHandler = Callable[[Any, Visit], Any]


def _key(kind: Union[str, Enum]) -> str:
    if isinstance(kind, Enum):
        return kind.value
    return kind


class Visitor:
    def __init__(self, handlers: Mapping[Union[str, Enum], Handler],
                 default: Optional[DefaultHandler] = None,
                 strict: bool = False):
        self._handlers: Dict[str, Handler] = {_key(k): h for k, h in handlers.items()}
        self._default = default
        self._strict = strict

    def handles(self, kind: Union[str, Enum]) -> bool:
        return _key(kind) in self._handlers

    def visit(self, node: Any) -> Any:
        kind = getattr(node, "kind", None)
        children = getattr(node, "children", None)
        if kind is not None and children is not None:
            handler = self._handlers.get(_key(kind))
            if handler is not None:
                return handler(children, self.visit)
        if self._default is not None:
            return self._default(node, self.visit)
        if self._strict:
            raise UnhandledNodeKind(f"No handler for node kind {kind!r}", node_kind=kind,
                                    children=children if isinstance(children, dict) else None)
        return node

    __call__ = visit


def create_visitor(handlers: Mapping[Union[str, Enum], Handler],
                   default: Optional[DefaultHandler] = None,
                   strict: bool = False) -> Visit:
    """Build a `visit(node)` function from a kind -> handler table."""
    return Visitor(handlers, default=default, strict=strict).visit
