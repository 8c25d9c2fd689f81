"""Seeded random documents: lowering must be total and keep its invariants."""
from __future__ import annotations

import random
from typing import Iterator, List

import pytest

from glower.grammar.ast import Grammar, Modifier, Named, Or, Ref, StringLiteral, TokenSectionField
from glower.grammar.transform import lower_source

SEEDS = range(40)


class _Gen:
    def __init__(self, seed: int):
        self.rng = random.Random(seed)

    def ident(self) -> str:
        return self.rng.choice(["expr", "term", "Item", "NUMBER", "ID", "stmt", "x_1"])

    def literal(self) -> str:
        body = self.rng.choice(["a", "+", "if", "hello world", r"esc\'q", '"dq"'])
        if '"' in body or "'" in body:
            return f"'{body}'"
        return self.rng.choice([f"'{body}'", f'"{body}"'])

    def unary(self, depth: int) -> str:
        label = f"{self.ident()}=" if self.rng.random() < 0.2 else ""
        roll = self.rng.random()
        if roll < 0.4:
            scalar = self.ident()
        elif roll < 0.8 or depth > 2:
            scalar = self.literal()
        else:
            scalar = self.group(depth + 1)
        suffix = self.rng.choice(["", "", "?", "*", "+"])
        return f"{label}{scalar}{suffix}"

    def group(self, depth: int) -> str:
        parts: List[str] = []
        for _ in range(self.rng.randint(1, 4)):
            if self.rng.random() < 0.3:
                parts.append("|")
            else:
                parts.append(self.unary(depth))
        return "(" + " ".join(parts) + ")"

    def sequence(self) -> str:
        return " ".join(self.unary(0) for _ in range(self.rng.randint(0, 3)))

    def rule(self, name: str) -> str:
        lead = self.sequence() if self.rng.random() < 0.5 else ""
        branches = "".join(f" | {self.sequence()}" for _ in range(self.rng.randint(0, 3)))
        return f"{name}: {lead}{branches} ;"

    def value(self) -> str:
        return self.rng.choice(["1", "-2.5", r"/[a-z]+/i", '"s"', "'t'", "OTHER", "true", "false"])

    def token(self, name: str) -> str:
        opts = ", ".join(f"{self.rng.choice(['regex', 'ignore', 'prio', 'alias'])}: {self.value()}"
                         for _ in range(self.rng.randint(0, 3)))
        return f"{name}: {{ {opts} }}"

    def document(self) -> str:
        out = []
        for i in range(self.rng.randint(0, 4)):
            kind = self.rng.choice(["tokens", "rules", "other"])
            if kind == "tokens":
                out.append("tokens { " + ", ".join(self.token(f"T{i}_{j}") for j in range(self.rng.randint(0, 3))) + " }")
            elif kind == "rules":
                out.append("rules { " + " ".join(self.rule(f"r{i}_{j}") for j in range(self.rng.randint(0, 3))) + " }")
            else:
                out.append(f"meta{i}: {self.value()}")
        return "\n".join(out)


def _elements(body) -> Iterator[object]:
    for el in body:
        yield el
        if isinstance(el, Or):
            for branch in el.branches:
                yield from _elements(branch)
        elif isinstance(el, Named):
            yield from _elements(el.value if isinstance(el.value, tuple) else (el.value,))


@pytest.mark.parametrize("seed", SEEDS)
def test_lowering_is_total_on_generated_documents(seed: int) -> None:
    src = _Gen(seed).document()
    g = lower_source(src)
    assert isinstance(g, Grammar)

    for field in g.fields:
        if isinstance(field, TokenSectionField):
            for t in field.tokens:
                assert len(set(t.options)) == len(t.options)

    for rule in g.rules():
        assert isinstance(rule.body, tuple)
        for el in _elements(rule.body):
            assert isinstance(el, (Or, Named, StringLiteral, Ref)), (src, el)
            if isinstance(el, Named):
                assert el.modifier is None or el.modifier in Modifier.ALL
                assert el.modifier is not None or el.label is not None
            if isinstance(el, Or):
                assert all(isinstance(b, tuple) for b in el.branches)


@pytest.mark.parametrize("seed", SEEDS)
def test_branch_chains_always_lower_to_one_or(seed: int) -> None:
    gen = _Gen(seed)
    n = gen.rng.randint(1, 5)
    src = "rules { r: " + "".join(f" | {gen.sequence()}" for _ in range(n)) + " ; }"
    (rule,) = lower_source(src).rules()
    assert len(rule.body) == 1
    (alt,) = rule.body
    assert isinstance(alt, Or)
    assert len(alt.branches) == n


@pytest.mark.parametrize("seed", SEEDS)
def test_plain_chains_lower_to_one_or(seed: int) -> None:
    gen = _Gen(seed)
    n = gen.rng.randint(2, 5)
    alts = [gen.unary(0)] + [gen.sequence() for _ in range(n - 1)]
    src = "rules { r: " + " | ".join(alts) + " ; }"
    (rule,) = lower_source(src).rules()
    (alt,) = rule.body
    assert isinstance(alt, Or), src
    assert len(alt.branches) == n
    assert alt.branches[0]
