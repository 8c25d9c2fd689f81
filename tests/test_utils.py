from __future__ import annotations

from typing import List, Optional

import pytest

from glower.utils import flatten1, merge_consecutive_by, partition_by


def _parity(x: int) -> Optional[str]:
    return "even" if x % 2 == 0 else None


# ---- merge_consecutive_by ----

def test_merge_empty_input() -> None:
    assert merge_consecutive_by([], _parity, list) == []


def test_merge_collapses_runs_of_two_or_more() -> None:
    out = merge_consecutive_by([1, 2, 4, 6, 3, 8], _parity, lambda run: tuple(run))
    assert out == [1, (2, 4, 6), 3, 8]


def test_merge_leaves_single_members_alone() -> None:
    assert merge_consecutive_by([2, 1, 4], _parity, lambda run: tuple(run)) == [2, 1, 4]


def test_merge_none_class_never_merges() -> None:
    assert merge_consecutive_by([1, 3, 5], _parity, lambda run: "merged") == [1, 3, 5]


def test_merge_all_same_class() -> None:
    assert merge_consecutive_by([2, 4, 6, 8], _parity, sum) == [20]


def test_merge_distinct_classes_do_not_merge() -> None:
    out = merge_consecutive_by(["a", "b", "b", "a"], lambda s: s, "".join)
    assert out == ["a", "bb", "a"]


def test_merge_combine_receives_run_in_order() -> None:
    runs: List[List[int]] = []

    def combine(run: List[int]) -> str:
        runs.append(run)
        return "x"

    merge_consecutive_by([2, 4, 1, 6, 8, 10], _parity, combine)
    assert runs == [[2, 4], [6, 8, 10]]


# ---- partition_by ----

def _bar(x: str) -> bool:
    return x == "|"


def test_partition_empty_input_gives_one_empty_group() -> None:
    assert partition_by([], _bar) == [[]]


def test_partition_without_boundary() -> None:
    assert partition_by(["a", "b"], _bar) == [["a", "b"]]


def test_partition_drops_boundaries() -> None:
    assert partition_by(["a", "|", "b", "c", "|", "d"], _bar) == [["a"], ["b", "c"], ["d"]]


@pytest.mark.parametrize(
    "items, expected",
    [
        (["|"], [[], []]),
        (["|", "|"], [[], [], []]),
        (["|", "a"], [[], ["a"]]),
        (["a", "|"], [["a"], []]),
    ],
)
def test_partition_boundary_edges(items: List[str], expected: List[List[str]]) -> None:
    assert partition_by(items, _bar) == expected


# ---- flatten1 ----

def test_flatten1_splices_one_level_only() -> None:
    assert flatten1([1, [2, [3]], (4, 5), "ab"]) == [1, 2, [3], 4, 5, "ab"]


def test_flatten1_accepts_generators() -> None:
    assert flatten1(x for x in ([1], 2)) == [1, 2]
