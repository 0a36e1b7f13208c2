"""Rank every user by how differently they order items compared to a target user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

import pandas as pd

from ..data import RatingTable
from .collision import build_rank_index, collision_vector_from_index, locate_user_row
from .inversions import check_inversion_width, sort_and_count_inversions


logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["error", "last"]
DUPLICATE_POLICIES: tuple[str, ...] = ("error", "last")


@dataclass(frozen=True)
class UserDissimilarity:
    userId: int
    inversions: int


class RatingComparator:
    """Scores users against a target by counting inversions of collision vectors.

    `duplicate_user_ids` controls what happens when the target id occurs in
    several rows: "error" raises `AmbiguousUserError`, "last" uses the last
    matching row and leaves every row with that id out of the comparison.
    """

    def __init__(self, table: RatingTable, *, duplicate_user_ids: DuplicatePolicy = "error") -> None:
        if duplicate_user_ids not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_user_ids must be one of {DUPLICATE_POLICIES}, got {duplicate_user_ids!r}"
            )
        self.table = table
        self.duplicate_user_ids = duplicate_user_ids

    def rank_users(self, target_user_id: int) -> list[UserDissimilarity]:
        """Every other user with their inversion count, most similar first."""
        uid = int(target_user_id)
        target_row = locate_user_row(self.table, uid, allow_duplicates=(self.duplicate_user_ids == "last"))
        check_inversion_width(self.table.n_items)

        # The target is fixed for the whole run, so its rank index is built once.
        rank_index = build_rank_index(self.table.ratings[target_row], user_id=uid)

        out: list[UserDissimilarity] = []
        for other_id, other_ratings in self.table.rows():
            if other_id == uid:
                continue
            collision = collision_vector_from_index(rank_index, other_ratings)
            inversions = sort_and_count_inversions(collision)
            logger.debug("userId=%d inversions=%d", other_id, inversions)
            out.append(UserDissimilarity(userId=other_id, inversions=inversions))

        # sorted() is stable, so ties keep their input order.
        ranked = sorted(out, key=lambda r: r.inversions)
        logger.info(
            "Ranked %d users against userId=%d over %d items",
            len(ranked),
            uid,
            self.table.n_items,
        )
        return ranked


def compare_ratings(
    table: RatingTable,
    target_user_id: int,
    *,
    duplicate_user_ids: DuplicatePolicy = "error",
) -> list[UserDissimilarity]:
    return RatingComparator(table, duplicate_user_ids=duplicate_user_ids).rank_users(target_user_id)


def ranking_to_frame(results: Sequence[UserDissimilarity]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "userId": [int(r.userId) for r in results],
            "inversions": [int(r.inversions) for r in results],
        },
        columns=["userId", "inversions"],
    )
