from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import RATING_MAX, InvalidRankingError, MalformedInputError, RankOverflowError


logger = logging.getLogger(__name__)

USER_ID_COLUMN = "userId"

# ASCII only: str.isdigit and \d also accept digits int() cannot parse.
NUMBER_PATTERN = r"[0-9]+"


@dataclass(frozen=True)
class RatingTable:
    """Users x items rank matrix, read-only once constructed.

    Row `r` holds the ranks `ratings[r]` given by user `user_ids[r]`. Column
    order is the item order shared by every row.
    """

    user_ids: np.ndarray
    ratings: np.ndarray

    def __post_init__(self) -> None:
        user_ids = np.array(self.user_ids, dtype=np.int64, copy=True).reshape(-1)
        ratings = np.array(self.ratings, dtype=np.int64, copy=True)
        if ratings.ndim == 1 and ratings.size == 0:
            ratings = ratings.reshape(len(user_ids), 0)
        if ratings.ndim != 2:
            raise MalformedInputError(f"ratings must be 2-dimensional, got shape {ratings.shape}")
        if ratings.shape[0] != user_ids.shape[0]:
            raise MalformedInputError(
                f"ratings has {ratings.shape[0]} rows but {user_ids.shape[0]} userIds were given"
            )

        user_ids.flags.writeable = False
        ratings.flags.writeable = False
        object.__setattr__(self, "user_ids", user_ids)
        object.__setattr__(self, "ratings", ratings)

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[int, Sequence[int]]]) -> "RatingTable":
        """Build a table from `(userId, ranks)` pairs."""
        rows = [(uid, list(ranks)) for uid, ranks in rows]
        n_items = len(rows[0][1]) if rows else 0
        for uid, ranks in rows:
            if len(ranks) != n_items:
                raise MalformedInputError(f"userId={uid}: expected {n_items} ratings, got {len(ranks)}")
            for value in (uid, *ranks):
                _check_value(value)

        return cls(
            user_ids=np.array([uid for uid, _ in rows], dtype=np.int64),
            ratings=np.array([ranks for _, ranks in rows], dtype=np.int64).reshape(len(rows), n_items),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "RatingTable":
        """Build a table from a frame whose first column is `userId`."""
        if df.shape[1] == 0:
            raise MalformedInputError("rating frame has no columns")
        return cls(
            user_ids=df.iloc[:, 0].to_numpy(dtype=np.int64),
            ratings=df.iloc[:, 1:].to_numpy(dtype=np.int64),
        )

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.ratings, columns=[f"item_{i}" for i in range(self.n_items)])
        df.insert(0, USER_ID_COLUMN, self.user_ids)
        return df

    @property
    def n_users(self) -> int:
        return int(self.ratings.shape[0])

    @property
    def n_items(self) -> int:
        return int(self.ratings.shape[1])

    def row_indices(self, user_id: int) -> np.ndarray:
        """Positions of every row carrying `user_id`, in input order."""
        return np.flatnonzero(self.user_ids == int(user_id))

    def rows(self) -> Iterator[Tuple[int, np.ndarray]]:
        for uid, ranks in zip(self.user_ids.tolist(), self.ratings):
            yield int(uid), ranks


def _check_value(value: int) -> None:
    if int(value) < 0:
        raise MalformedInputError(f"negative value {value} (userIds and ratings are unsigned)")
    if int(value) > RATING_MAX:
        raise RankOverflowError(f"value {value} exceeds {RATING_MAX}")


def _parse_header(line: str, path: Path) -> Tuple[int, int]:
    tokens = line.split()
    if len(tokens) != 2 or not all(re.fullmatch(NUMBER_PATTERN, t) for t in tokens):
        raise MalformedInputError(f"{path}: expected header '<users> <items>', got {line.strip()!r}")
    return int(tokens[0]), int(tokens[1])


def load_rating_table(path: Path, *, require_permutations: bool = True) -> RatingTable:
    """Load a rating table from its whitespace-separated text form.

    Notes
    -----
    Line 1 is `<users> <items>`; each later line is `<userId> <rank>...`.
    Cells are read as strings and checked before conversion so that malformed
    tokens are reported instead of coerced.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")

    with path.open(encoding="utf-8") as f:
        header = f.readline()
    n_users, n_items = _parse_header(header, path)

    try:
        frame = pd.read_csv(path, sep=r"\s+", header=None, skiprows=1, dtype="string")
    except pd.errors.EmptyDataError:
        frame = pd.DataFrame()
    except pd.errors.ParserError as exc:
        raise MalformedInputError(f"{path}: {exc}") from exc

    if frame.empty:
        table = RatingTable(user_ids=np.empty(0, dtype=np.int64), ratings=np.empty((0, n_items), dtype=np.int64))
    else:
        if frame.isna().to_numpy().any():
            bad_row = int(np.flatnonzero(frame.isna().to_numpy().any(axis=1))[0])
            raise MalformedInputError(f"{path}: line {bad_row + 2} has fewer values than line 2")

        is_number = frame.apply(lambda col: col.str.fullmatch(NUMBER_PATTERN)).to_numpy(dtype=bool)
        if not is_number.all():
            bad_row = int(np.flatnonzero(~is_number.all(axis=1))[0])
            raise MalformedInputError(f"{path}: line {bad_row + 2} contains a non-numeric or negative value")

        if frame.shape[1] - 1 != n_items:
            raise MalformedInputError(
                f"{path}: header declares {n_items} items but rows carry {frame.shape[1] - 1} ratings"
            )

        numbers = frame.apply(pd.to_numeric)
        if (numbers > RATING_MAX).to_numpy(dtype=bool).any():
            raise RankOverflowError(f"{path}: values must not exceed {RATING_MAX}")
        table = RatingTable.from_frame(numbers)

    if table.n_users != n_users:
        logger.warning("%s: header declares %d users but %d rows were read", path, n_users, table.n_users)

    validate_rating_table(table, require_permutations=require_permutations)
    logger.info("Loaded rating table from %s: users=%d items=%d", path, table.n_users, table.n_items)
    return table


def validate_rating_table(table: RatingTable, *, require_permutations: bool = True) -> None:
    """Check value ranges and, optionally, that every row ranks 1..n exactly once."""
    if table.ratings.size:
        if (table.ratings < 0).any():
            raise MalformedInputError("ratings contain negative values")
        if (table.ratings > RATING_MAX).any():
            raise RankOverflowError(f"ratings must not exceed {RATING_MAX}")
    if (table.user_ids < 0).any():
        raise MalformedInputError("userIds contain negative values")
    if (table.user_ids > RATING_MAX).any():
        raise RankOverflowError(f"userIds must not exceed {RATING_MAX}")

    ids = pd.Series(table.user_ids)
    if ids.duplicated().any():
        logger.warning("Rating table has duplicate userIds: %s", sorted(set(ids[ids.duplicated()].tolist())))

    if require_permutations and table.n_items:
        expected = np.arange(1, table.n_items + 1, dtype=np.int64)
        bad = ~(np.sort(table.ratings, axis=1) == expected).all(axis=1)
        if bad.any():
            row = int(np.flatnonzero(bad)[0])
            raise InvalidRankingError(
                int(table.user_ids[row]), f"ratings are not a permutation of 1..{table.n_items}"
            )


def save_rating_table(path: Path, table: RatingTable) -> Path:
    """Write `table` in the same text form `load_rating_table` reads."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{table.n_users} {table.n_items}"]
    for uid, ranks in table.rows():
        lines.append(" ".join([str(uid), *[str(int(r)) for r in ranks]]))
    path.write_text("\n".join(lines) + "\n", newline="\n")
    return path


def generate_rating_table(n_users: int, n_items: int, *, seed: int = 42, first_user_id: int = 1) -> RatingTable:
    """Random table where every user ranks every item exactly once."""
    if int(n_users) < 0 or int(n_items) < 0:
        raise ValueError("n_users and n_items must be non-negative")
    rng = np.random.default_rng(int(seed))
    # argsort of uniform noise gives an independent random permutation per row
    ratings = np.argsort(rng.random((int(n_users), int(n_items))), axis=1) + 1
    user_ids = np.arange(int(first_user_id), int(first_user_id) + int(n_users), dtype=np.int64)
    return RatingTable(user_ids=user_ids, ratings=ratings)
