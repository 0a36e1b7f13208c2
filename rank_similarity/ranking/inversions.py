"""Inversion counting via divide-and-conquer merge sort."""

from __future__ import annotations

from typing import Iterable, MutableSequence

from ..errors import INVERSION_COUNT_MAX, RankOverflowError


def max_inversions(n_items: int) -> int:
    """Largest possible inversion count for a sequence of length `n_items`."""
    n = int(n_items)
    return n * (n - 1) // 2 if n > 1 else 0


def check_inversion_width(n_items: int) -> None:
    """Raise if a sequence of `n_items` could overflow the 64-bit count."""
    if max_inversions(n_items) > INVERSION_COUNT_MAX:
        raise RankOverflowError(
            f"{n_items} items admit up to {max_inversions(n_items)} inversions "
            f"(limit {INVERSION_COUNT_MAX})"
        )


def sort_and_count_inversions(values: MutableSequence[int]) -> int:
    """Count pairs (i, j) with i < j and values[i] > values[j].

    `values` is sorted ascending in place as a side effect. Equal values are
    not counted as inverted.
    """
    n = len(values)
    if n <= 1:
        return 0
    check_inversion_width(n)
    scratch = list(values)
    return _sort_and_count(values, scratch, 0, n)


def count_inversions(values: Iterable[int]) -> int:
    """Same as `sort_and_count_inversions` but leaves the input untouched."""
    return sort_and_count_inversions(list(values))


def _sort_and_count(values: MutableSequence[int], scratch: list[int], lo: int, hi: int) -> int:
    if hi - lo <= 1:
        return 0

    mid = lo + (hi - lo) // 2
    left_inversions = _sort_and_count(values, scratch, lo, mid)
    right_inversions = _sort_and_count(values, scratch, mid, hi)
    split_inversions = _merge_and_count(values, scratch, lo, mid, hi)
    return left_inversions + right_inversions + split_inversions


def _merge_and_count(values: MutableSequence[int], scratch: list[int], lo: int, mid: int, hi: int) -> int:
    """Merge sorted runs [lo, mid) and [mid, hi) counting split inversions."""
    scratch[lo:hi] = values[lo:hi]

    split = 0
    left, right, out = lo, mid, lo
    while left < mid and right < hi:
        if scratch[left] <= scratch[right]:
            values[out] = scratch[left]
            left += 1
        else:
            values[out] = scratch[right]
            right += 1
            # every unconsumed left element is greater than the one just emitted
            split += mid - left
        out += 1

    while left < mid:
        values[out] = scratch[left]
        left += 1
        out += 1
    while right < hi:
        values[out] = scratch[right]
        right += 1
        out += 1

    return split
