"""Exception types raised while loading ratings and ranking users."""

from __future__ import annotations


# Ratings are stored as 32-bit unsigned values; inversion counts as 64-bit.
RATING_MAX = 2**32 - 1
INVERSION_COUNT_MAX = 2**64 - 1


class RankSimilarityError(Exception):
    """Base class for all errors raised by this package."""


class MalformedInputError(RankSimilarityError, ValueError):
    """A record cannot be parsed into the expected numeric shape."""


class InvalidRankingError(MalformedInputError):
    """A rating row is not a permutation of 1..n."""

    def __init__(self, user_id: int | None, message: str) -> None:
        super().__init__(message if user_id is None else f"userId={user_id}: {message}")
        self.user_id = None if user_id is None else int(user_id)


class UserNotFoundError(RankSimilarityError, KeyError):
    """The requested userId is not present in the rating table."""

    def __init__(self, user_id: int, message: str | None = None) -> None:
        self.user_id = int(user_id)
        self.message = message or f"Unknown userId: {self.user_id}"
        super().__init__(self.message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.message


class AmbiguousUserError(UserNotFoundError):
    """The requested userId occurs in more than one row."""

    def __init__(self, user_id: int, occurrences: int) -> None:
        super().__init__(user_id, f"userId={int(user_id)} appears in {int(occurrences)} rows")
        self.occurrences = int(occurrences)


class RankOverflowError(RankSimilarityError, OverflowError):
    """A rating or an inversion count does not fit its declared width."""
