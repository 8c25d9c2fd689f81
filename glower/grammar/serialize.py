# glower/grammar/serialize.py
"""Tagged encoding of the Grammar AST.

Every node becomes a dict with a "type" discriminator, so each union
(Field, OptionValue, BodyElement) decodes without guessing:

    {"type": "named", "label": null, "modifier": "many1",
     "value": {"type": "ref", "name": "expr"}}

A parenthesized sequence stored in Named.value is encoded as a plain list.
"""

from __future__ import annotations
import json
from typing import Any, Callable, Dict

from .ast import *


def to_data(node: Any) -> Any:
    if isinstance(node, (list, tuple)):
        return [to_data(n) for n in node]
    if isinstance(node, Grammar):
        return {"type": "grammar", "fields": to_data(node.fields)}
    if isinstance(node, TokenSectionField):
        return {"type": "token_section", "name": node.name, "tokens": to_data(node.tokens)}
    if isinstance(node, RulesField):
        return {"type": "rules_field", "name": node.name, "rules": to_data(node.rules)}
    if isinstance(node, OtherField):
        return {"type": "other_field", "name": node.name}
    if isinstance(node, TokenDef):
        return {"type": "token_def", "name": node.name,
                "options": {k: to_data(v) for k, v in node.options.items()}}
    if isinstance(node, RuleDef):
        return {"type": "rule_def", "name": node.name, "body": to_data(node.body)}
    if isinstance(node, Number):
        return {"type": "number", "value": node.value}
    if isinstance(node, Regex):
        return {"type": "regex", "pattern": node.pattern, "flags": node.flags}
    if isinstance(node, StringLiteral):
        return {"type": "string", "text": node.text}
    if isinstance(node, IdentifierRef):
        return {"type": "identifier", "name": node.name}
    if isinstance(node, Boolean):
        return {"type": "boolean", "value": node.value}
    if isinstance(node, Ref):
        return {"type": "ref", "name": node.name}
    if isinstance(node, Or):
        return {"type": "or", "branches": [to_data(b) for b in node.branches]}
    if isinstance(node, Named):
        return {"type": "named", "label": node.label, "modifier": node.modifier,
                "value": to_data(node.value)}
    raise TypeError(f"cannot encode {type(node).__name__}")


def _tuple(items: Any) -> tuple:
    return tuple(from_data(i) for i in items)

_DECODERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "grammar":       lambda d: Grammar(fields=_tuple(d["fields"])),
    "token_section": lambda d: TokenSectionField(tokens=_tuple(d["tokens"]), name=d.get("name", "tokens")),
    "rules_field":   lambda d: RulesField(rules=_tuple(d["rules"]), name=d.get("name", "rules")),
    "other_field":   lambda d: OtherField(name=d["name"]),
    "token_def":     lambda d: TokenDef(name=d["name"],
                                        options={k: from_data(v) for k, v in d["options"].items()}),
    "rule_def":      lambda d: RuleDef(name=d["name"], body=_tuple(d["body"])),
    "number":        lambda d: Number(d["value"]),
    "regex":         lambda d: Regex(pattern=d["pattern"], flags=d.get("flags", "")),
    "string":        lambda d: StringLiteral(d["text"]),
    "identifier":    lambda d: IdentifierRef(d["name"]),
    "boolean":       lambda d: Boolean(d["value"]),
    "ref":           lambda d: Ref(d["name"]),
    "or":            lambda d: Or(branches=tuple(_tuple(b) for b in d["branches"])),
    "named":         lambda d: Named(value=from_data(d["value"]), label=d.get("label"),
                                     modifier=d.get("modifier")),
}


def from_data(data: Any) -> Any:
    if isinstance(data, list):
        return _tuple(data)
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError(f"not a tagged AST node: {data!r}")
    decode = _DECODERS.get(data["type"])
    if decode is None:
        raise ValueError(f"unknown AST node type {data['type']!r}")
    return decode(data)


def dumps(node: Any, indent: int = 2) -> str:
    return json.dumps(to_data(node), indent=indent, ensure_ascii=False)


def loads(text: str) -> Any:
    return from_data(json.loads(text))
