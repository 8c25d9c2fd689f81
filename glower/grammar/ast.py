# glower/grammar/ast.py
"""Grammar AST
- Grammar: top-level fields in source order
- TokenSectionField / OtherField / RulesField: top-level fields
- TokenDef + OptionValue: token declarations and their options
- RuleDef + BodyElement: production rules, bodies already flattened

All nodes are frozen and hashable; sequences are tuples, option maps are
read-only. The tree never points back into the CST.
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from types          import MappingProxyType
from typing         import List, Mapping, Optional, Pattern, Tuple, Union

import regex


class Modifier:
    OPTIONAL = "optional"   # ?
    MANY     = "many"       # *
    MANY1    = "many1"      # +

    ALL = (OPTIONAL, MANY, MANY1)


# ====== token option values

@dataclass(frozen=True)
class Number:
    value: Union[int, float]

_FLAG_MAP = {
    "i": regex.IGNORECASE,
    "m": regex.MULTILINE,
    "s": regex.DOTALL,
    "x": regex.VERBOSE,
    "A": regex.ASCII,
}

@dataclass(frozen=True)
class Regex:
    pattern: str    # text between the slashes, untouched
    flags: str = ""

    def compile(self) -> Pattern[str]:
        f = 0
        for ch in self.flags:
            f |= _FLAG_MAP.get(ch, 0)
        return regex.compile(self.pattern, f)

@dataclass(frozen=True)
class StringLiteral:
    text: str       # quotes stripped, escapes left verbatim

@dataclass(frozen=True)
class IdentifierRef:
    name: str

@dataclass(frozen=True)
class Boolean:
    value: bool

OptionValue = Union[Number, Regex, StringLiteral, IdentifierRef, Boolean]


# ====== rule bodies

@dataclass(frozen=True)
class Ref:
    name: str

@dataclass(frozen=True)
class Or:
    """
    Alternation. One branch per alternative, in source order.
    Each branch is itself a flat sequence of body elements.
    """
    branches: Tuple[Tuple["BodyElement", ...], ...]

@dataclass(frozen=True)
class Named:
    """
    Labeled and/or repeated element.
    - value   : a single element, or a tuple for a parenthesized sequence
    - label   : `label=` prefix, if any
    - modifier: one of Modifier.ALL, None for exactly-once
    """
    value: Union["BodyElement", Tuple["BodyElement", ...]]
    label: Optional[str] = None
    modifier: Optional[str] = None

BodyElement = Union[Or, Named, StringLiteral, Ref]


# ====== declarations

@dataclass(frozen=True)
class TokenDef:
    """Options are copied into a read-only mapping on construction."""
    name: str
    options: Mapping[str, OptionValue] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def __hash__(self) -> int:
        return hash((self.name, tuple(self.options.items())))

@dataclass(frozen=True)
class RuleDef:
    name: str
    body: Tuple[BodyElement, ...] = ()


# ====== top-level fields

@dataclass(frozen=True)
class TokenSectionField:
    tokens: Tuple[TokenDef, ...] = ()
    name: str = "tokens"

@dataclass(frozen=True)
class OtherField:
    name: str

@dataclass(frozen=True)
class RulesField:
    rules: Tuple[RuleDef, ...] = ()
    name: str = "rules"

Field = Union[TokenSectionField, OtherField, RulesField]


@dataclass(frozen=True)
class Grammar:
    fields: Tuple[Field, ...] = ()

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def tokens(self) -> List[TokenDef]:
        """All token declarations, across every tokens block."""
        out: List[TokenDef] = []
        for f in self.fields:
            if isinstance(f, TokenSectionField):
                out.extend(f.tokens)
        return out

    def rules(self) -> List[RuleDef]:
        """All rules, across every rules block."""
        out: List[RuleDef] = []
        for f in self.fields:
            if isinstance(f, RulesField):
                out.extend(f.rules)
        return out
