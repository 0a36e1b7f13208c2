"""Collision vectors: one user's ratings re-ordered by another user's ranking."""

from __future__ import annotations

import numpy as np

from ..data import RatingTable
from ..errors import AmbiguousUserError, InvalidRankingError, UserNotFoundError


def locate_user_row(table: RatingTable, user_id: int, *, allow_duplicates: bool = False) -> int:
    """Row position of `user_id`.

    With `allow_duplicates` the last matching row wins; otherwise more than one
    match raises `AmbiguousUserError`.
    """
    matches = table.row_indices(user_id)
    if matches.size == 0:
        raise UserNotFoundError(user_id)
    if matches.size > 1 and not allow_duplicates:
        raise AmbiguousUserError(user_id, int(matches.size))
    return int(matches[-1])


def build_rank_index(target_ratings: np.ndarray, *, user_id: int | None = None) -> np.ndarray:
    """Invert a rank row: `index[k]` is the item the target ranked `k + 1`."""
    ranks = np.asarray(target_ratings, dtype=np.int64).reshape(-1)
    n_items = int(ranks.shape[0])
    if n_items == 0:
        return np.empty(0, dtype=np.int64)

    if ranks.min() < 1 or ranks.max() > n_items:
        raise InvalidRankingError(user_id, f"ranks must lie in 1..{n_items}")
    rank_index = np.full(n_items, -1, dtype=np.int64)
    rank_index[ranks - 1] = np.arange(n_items, dtype=np.int64)
    if (rank_index < 0).any():
        missing = (np.flatnonzero(rank_index < 0) + 1).tolist()
        raise InvalidRankingError(user_id, f"ranks {missing} are missing (duplicate ranks present)")
    return rank_index


def collision_vector_from_index(rank_index: np.ndarray, other_ratings: np.ndarray) -> list[int]:
    """Read `other_ratings` in the order given by a target's rank index."""
    other = np.asarray(other_ratings, dtype=np.int64).reshape(-1)
    if other.shape[0] != rank_index.shape[0]:
        raise ValueError(f"expected {rank_index.shape[0]} ratings, got {other.shape[0]}")
    return other[rank_index].tolist()


def build_collision_vector(table: RatingTable, target_user_id: int, other_user_id: int) -> list[int]:
    """Collision vector of `other_user_id` against `target_user_id`.

    Position `i` holds the rating `other_user_id` gave to the item that
    `target_user_id` ranked `i + 1`. Both users must occur exactly once.
    """
    target_row = locate_user_row(table, target_user_id)
    other_row = locate_user_row(table, other_user_id)
    rank_index = build_rank_index(table.ratings[target_row], user_id=target_user_id)
    return collision_vector_from_index(rank_index, table.ratings[other_row])
