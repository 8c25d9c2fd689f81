# glower/utils.py
"""Small list algorithms used by the lowering rules."""

from __future__ import annotations
from typing import Any, Callable, Hashable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def merge_consecutive_by(items: Sequence[T],
                         classify: Callable[[T], Optional[Hashable]],
                         combine: Callable[[List[T]], R]) -> List[Any]:
    """Collapse runs of two or more adjacent items sharing a class.

    `classify` returns a class key, or None for items that never merge.
    Each run of length >= 2 is replaced by `combine(run)`; single items are
    kept as they are. Order is preserved.

        >>> merge_consecutive_by([1, 1, 2, 1], lambda x: x, sum)
        [2, 2, 1]
    """
    out: List[Any] = []
    run: List[T] = []
    run_key: Optional[Hashable] = None

    def _flush() -> None:
        if len(run) >= 2:
            out.append(combine(list(run)))
        else:
            out.extend(run)
        run.clear()

    for item in items:
        key = classify(item)
        if key is not None and run and key == run_key:
            run.append(item)
            continue
        _flush()
        run.append(item)
        run_key = key
        if key is None:
            _flush()
    _flush()
    return out


def partition_by(items: Sequence[T], is_boundary: Callable[[T], bool]) -> List[List[T]]:
    """Split `items` into groups at boundary items, dropping the boundaries.

    Behaves like `str.split`: no boundary gives one group, an empty input gives
    one empty group, and n boundaries always give n + 1 (possibly empty) groups.

        >>> partition_by(["a", "|", "b", "c"], lambda x: x == "|")
        [['a'], ['b', 'c']]
    """
    groups: List[List[T]] = [[]]
    for item in items:
        if is_boundary(item):
            groups.append([])
        else:
            groups[-1].append(item)
    return groups


def flatten1(items: Iterable[Any]) -> List[Any]:
    """Flatten one level: list and tuple members are spliced in, others kept."""
    out: List[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            out.extend(item)
        else:
            out.append(item)
    return out
