# glower/grammar/transform.py
"""CST -> Grammar AST lowering.

Handlers are registered per node kind on the generic dispatch engine. Each one
reads only the roles it needs and recurses through the `visit` it is given.

Rule bodies are normalized in two steps:
  - runs of adjacent `| seq` branch markers merge into a single Or
    (`| A | B | C` -> Or([A, B, C]), never nested pairs)
  - a lone branch marker still surfaces as Or([value])
then the body is flattened one level.
"""

from __future__     import annotations
from dataclasses    import dataclass
from typing         import Any, Dict, List, Optional, Tuple

from ..cst          import Children, CstNode, NodeKind, Role, first, image, is_node
from ..errors       import LoweringError, MissingSubValue, UnrecognizedOptionValue
from ..utils        import flatten1, merge_consecutive_by, partition_by
from ..visitor      import Visit, create_visitor
from .ast           import *
from .parser        import parse_cst


@dataclass(frozen=True)
class OrBranch:
    """Alternation branch marker; only lives until the rule-level merge pass."""
    value: Tuple[BodyElement, ...]


# ====== top level

def _root(children: Children, visit: Visit) -> Grammar:
    return Grammar(fields=tuple(visit(f) for f in children.get(Role.FIELDS, [])))


def _root_field(children: Children, visit: Visit) -> Field:
    rules = first(children, Role.RULES)
    if rules is not None:
        # spliced into Grammar.fields as-is
        return visit(rules)
    name = image(children, Role.NAME)
    if name == "tokens":
        return TokenSectionField(tokens=tuple(visit(t) for t in children.get(Role.TOKENS, [])))
    return OtherField(name=name)


# ====== tokens

def _token(children: Children, visit: Visit) -> TokenDef:
    options: Dict[str, OptionValue] = {}
    for opt in children.get(Role.OPTIONS, []):
        name, value = visit(opt)
        options[name] = value   # last one wins
    return TokenDef(name=image(children, Role.NAME), options=options)


def _token_option(children: Children, visit: Visit) -> Tuple[str, OptionValue]:
    return image(children, Role.NAME), visit(first(children, Role.VALUE))


def _number(text: str) -> Number:
    try:
        return Number(int(text))
    except ValueError:
        return Number(float(text))

def _regex(text: str) -> Regex:
    last = text.rfind("/")
    return Regex(pattern=text[1:last], flags=text[last + 1:])

def _unquote(text: str) -> str:
    return text[1:-1]

# First populated role wins; the order is part of the contract.
OPTION_VALUE_ORDER = (
    (Role.NUMBER,              _number),
    (Role.REGEX,               _regex),
    (Role.DOUBLE_QUOTE_STRING, lambda s: StringLiteral(_unquote(s))),
    (Role.SINGLE_QUOTE_STRING, lambda s: StringLiteral(_unquote(s))),
    (Role.IDENTIFIER,          IdentifierRef),
    (Role.TRUE,                lambda s: Boolean(True)),
    (Role.FALSE,               lambda s: Boolean(False)),
)

def _token_option_value(children: Children, visit: Visit) -> OptionValue:
    for role, build in OPTION_VALUE_ORDER:
        if children.get(role):
            text = image(children, role)
            try:
                return build(text)
            except ValueError as e:
                raise UnrecognizedOptionValue(f"Malformed {role} value {text!r}",
                                              node_kind=NodeKind.TOKEN_OPTION_VALUE.value,
                                              children=children) from e
    raise UnrecognizedOptionValue("Failed to map option value",
                                  node_kind=NodeKind.TOKEN_OPTION_VALUE.value,
                                  children=children)


# ====== rules

def _rules(children: Children, visit: Visit) -> RulesField:
    return RulesField(rules=tuple(visit(r) for r in children.get(Role.RULES, [])))


def _rule(children: Children, visit: Visit) -> RuleDef:
    parts = [v for v in (visit(b) for b in children.get(Role.BODY, [])) if v is not None]
    merged = merge_consecutive_by(
        parts,
        lambda v: "or" if isinstance(v, OrBranch) else None,
        lambda run: Or(branches=tuple(b.value for b in run)),
    )
    wrapped = [Or(branches=(v.value,)) if isinstance(v, OrBranch) else v for v in merged]
    return RuleDef(name=image(children, Role.NAME), body=tuple(flatten1(wrapped)))


def _rule_or_sequence(children: Children, visit: Visit) -> OrBranch:
    value = visit(first(children, Role.VALUE))
    return OrBranch(value=tuple(value or ()))


def _rule_sequence(children: Children, visit: Visit) -> Optional[List[Any]]:
    exprs = children.get(Role.EXPR)
    if not exprs:
        return None     # epsilon
    return flatten1(visit(e) for e in exprs)


def _rule_body_expr(children: Children, visit: Visit) -> Any:
    return visit(first(children, Role.VALUE))


def _rule_body_expr_binary(children: Children, visit: Visit) -> Any:
    groups = [
        flatten1(visit(e) for e in group)
        for group in partition_by(
            children.get(Role.ELEMS, []),
            lambda e: not is_node(e, NodeKind.RULE_BODY_EXPR_UNARY.value),
        )
    ]
    if len(groups) == 1:
        return groups[0]
    return Or(branches=tuple(tuple(g) for g in groups))


def _modifier(children: Children) -> Optional[str]:
    # a later marker overrides an earlier one
    modifier = None
    for role, mod in ((Role.OPTIONAL, Modifier.OPTIONAL),
                      (Role.MANY, Modifier.MANY),
                      (Role.MANY1, Modifier.MANY1)):
        if children.get(role):
            modifier = mod
    return modifier

def _rule_body_expr_unary(children: Children, visit: Visit) -> Any:
    scalar = first(children, Role.SCALAR)
    value = visit(scalar) if scalar is not None else None
    if value is None:
        raise MissingSubValue("Unhandled rule_body_expr",
                              node_kind=NodeKind.RULE_BODY_EXPR_UNARY.value,
                              children=children)
    label = image(children, Role.NAME)
    modifier = _modifier(children)
    if label is None and modifier is None:
        return value
    if isinstance(value, list):
        value = tuple(value)
    return Named(value=value, label=label, modifier=modifier)


def _rule_body_expr_scalar(children: Children, visit: Visit) -> Any:
    if children.get(Role.SINGLE_QUOTE_STRING):
        return StringLiteral(_unquote(image(children, Role.SINGLE_QUOTE_STRING)))
    if children.get(Role.DOUBLE_QUOTE_STRING):
        return StringLiteral(_unquote(image(children, Role.DOUBLE_QUOTE_STRING)))
    if children.get(Role.IDENTIFIER):
        return Ref(image(children, Role.IDENTIFIER))
    if children.get(Role.PTH):
        return visit(first(children, Role.PTH))
    return None


def _rule_body_expr_pth(children: Children, visit: Visit) -> Any:
    value = first(children, Role.VALUE)
    if value is None:
        raise MissingSubValue("Unhandled rule_body_expr_pth",
                              node_kind=NodeKind.RULE_BODY_EXPR_PTH.value,
                              children=children)
    return visit(value)


LOWERING_RULES = {
    NodeKind.ROOT:                  _root,
    NodeKind.ROOT_FIELD:            _root_field,
    NodeKind.TOKEN:                 _token,
    NodeKind.TOKEN_OPTION:          _token_option,
    NodeKind.TOKEN_OPTION_VALUE:    _token_option_value,
    NodeKind.RULES:                 _rules,
    NodeKind.RULE:                  _rule,
    NodeKind.RULE_OR_SEQUENCE:      _rule_or_sequence,
    NodeKind.RULE_SEQUENCE:         _rule_sequence,
    NodeKind.RULE_BODY_EXPR:        _rule_body_expr,
    NodeKind.RULE_BODY_EXPR_BINARY: _rule_body_expr_binary,
    NodeKind.RULE_BODY_EXPR_UNARY:  _rule_body_expr_unary,
    NodeKind.RULE_BODY_EXPR_SCALAR: _rule_body_expr_scalar,
    NodeKind.RULE_BODY_EXPR_PTH:    _rule_body_expr_pth,
}

grammar_cst_to_ast = create_visitor(LOWERING_RULES)


def to_ast(cst: CstNode) -> Grammar:
    """CST(root) -> Grammar(AST). Raises LoweringError on malformed trees."""
    return grammar_cst_to_ast(cst)


@dataclass(frozen=True)
class LowerResult:
    grammar: Optional[Grammar] = None
    error: Optional[LoweringError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def try_to_ast(cst: CstNode) -> LowerResult:
    """Like to_ast, but returns the lowering error as a value for callers
    that collect diagnostics over several documents."""
    try:
        return LowerResult(grammar=to_ast(cst))
    except LoweringError as e:
        return LowerResult(error=e)


def lower_source(src: str) -> Grammar:
    """DSL text -> Grammar in one call (parse_cst + to_ast)."""
    return to_ast(parse_cst(src))
