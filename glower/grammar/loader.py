"""Grammar file loader"""

from __future__ import annotations
import codecs
from pathlib    import Path
from typing     import Union

DEFAULT_ENCODING = "utf-8"


def load_grammar_text(path: Union[str, Path], encoding: str = DEFAULT_ENCODING) -> str:
    """
    Read a grammar file and hand the parser plain '\\n'-separated text.

    - a leading utf-8 byte-order mark is dropped
    - undecodable bytes raise SyntaxError (path, line and byte offset), so
      callers report them next to parse errors
    - unknown encodings raise LookupError
    """
    codec = codecs.lookup(encoding).name
    data = Path(path).read_bytes()
    if codec == "utf-8":
        codec = "utf-8-sig"
    try:
        text = data.decode(codec)
    except UnicodeDecodeError as e:
        line = data.count(b"\n", 0, e.start) + 1
        raise SyntaxError(
            f"{path}:{line}: cannot decode byte {data[e.start:e.start + 1]!r} "
            f"at offset {e.start} as {encoding} ({e.reason})"
        ) from e
    return text.replace("\r\n", "\n").replace("\r", "\n")
