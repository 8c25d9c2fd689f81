from __future__ import annotations

import codecs

import pytest

from glower.grammar.loader import load_grammar_text


def test_newlines_are_normalized(tmp_path) -> None:
    path = tmp_path / "g.g"
    path.write_bytes(b"a\r\nb\rc\n")
    assert load_grammar_text(path) == "a\nb\nc\n"


def test_utf8_bom_is_dropped(tmp_path) -> None:
    path = tmp_path / "g.g"
    path.write_bytes(codecs.BOM_UTF8 + b"rules { }")
    assert load_grammar_text(path) == "rules { }"
    assert load_grammar_text(str(path), encoding="UTF8") == "rules { }"


def test_other_encodings(tmp_path) -> None:
    path = tmp_path / "g.g"
    path.write_bytes("name: 'café'".encode("latin-1"))
    assert load_grammar_text(path, encoding="latin-1") == "name: 'café'"


def test_undecodable_bytes_raise_syntax_error(tmp_path) -> None:
    path = tmp_path / "g.g"
    path.write_bytes(b"rules {\n  r: '\xff' ;\n}")
    with pytest.raises(SyntaxError) as exc:
        load_grammar_text(path)
    msg = str(exc.value)
    assert f"{path}:2:" in msg
    assert "offset 14" in msg
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


def test_unknown_encoding(tmp_path) -> None:
    path = tmp_path / "g.g"
    path.write_text("", encoding="utf-8")
    with pytest.raises(LookupError):
        load_grammar_text(path, encoding="no-such-codec")
