from __future__ import annotations

import json

import pytest

from glower.grammar.ast import (
    Boolean, Grammar, IdentifierRef, Modifier, Named, Number, Or, OtherField, Ref, Regex,
    RuleDef, RulesField, StringLiteral, TokenDef, TokenSectionField,
)
from glower.grammar.serialize import dumps, from_data, loads, to_data
from glower.grammar.transform import lower_source


SAMPLE = Grammar(fields=(
    OtherField("name"),
    TokenSectionField(tokens=(
        TokenDef("WS", {"regex": Regex(r"\s+"), "ignore": Boolean(True)}),
        TokenDef("NUM", {"regex": Regex("[0-9]+", "A"), "priority": Number(1.5),
                         "alias": StringLiteral("number"), "after": IdentifierRef("WS"),
                         "skip": Boolean(False)}),
    )),
    RulesField(rules=(
        RuleDef("expr", (
            Ref("term"),
            Named(value=(Named(value=Ref("PLUS"), label="op"), Ref("term")), modifier=Modifier.MANY),
        )),
        RuleDef("term", (
            Or(branches=((Ref("NUM"),), (StringLiteral("("), Ref("expr"), StringLiteral(")")), ())),
        )),
        RuleDef("empty", ()),
    )),
))


def test_round_trip_every_variant() -> None:
    assert from_data(to_data(SAMPLE)) == SAMPLE
    assert loads(dumps(SAMPLE)) == SAMPLE


def test_decoded_grammar_stays_immutable() -> None:
    g = loads(dumps(SAMPLE))
    with pytest.raises(TypeError):
        g.tokens()[0].options["ignore"] = Boolean(False)
    assert hash(g) == hash(SAMPLE)


def test_every_union_member_is_tagged() -> None:
    data = to_data(SAMPLE)
    assert data["type"] == "grammar"
    assert [f["type"] for f in data["fields"]] == ["other_field", "token_section", "rules_field"]

    opts = data["fields"][1]["tokens"][1]["options"]
    assert {k: v["type"] for k, v in opts.items()} == {
        "regex": "regex", "priority": "number", "alias": "string", "after": "identifier", "skip": "boolean",
    }

    named = data["fields"][2]["rules"][0]["body"][1]
    assert named["type"] == "named"
    assert named["modifier"] == "many"
    assert named["value"][0] == {
        "type": "named", "label": "op", "modifier": None, "value": {"type": "ref", "name": "PLUS"},
    }


def test_dumps_is_plain_json() -> None:
    parsed = json.loads(dumps(SAMPLE))
    assert parsed == to_data(SAMPLE)


def test_round_trip_of_lowered_source() -> None:
    g = lower_source(r"""
        tokens { ID: { regex: /[a-z]+/i, keyword: "if" } }
        rules { stmt: | kw='if' cond=expr body=block? | expr ';' ; }
    """)
    assert loads(dumps(g)) == g


def test_unknown_discriminator() -> None:
    with pytest.raises(ValueError, match="unknown AST node type 'lambda'"):
        from_data({"type": "lambda"})


def test_untagged_data() -> None:
    with pytest.raises(ValueError, match="not a tagged AST node"):
        from_data({"name": "x"})


def test_cannot_encode_foreign_values() -> None:
    with pytest.raises(TypeError):
        to_data(object())
