from .collision import build_collision_vector, build_rank_index
from .comparator import RatingComparator, UserDissimilarity, compare_ratings
from .inversions import count_inversions, sort_and_count_inversions

__all__ = [
    "RatingComparator",
    "UserDissimilarity",
    "build_collision_vector",
    "build_rank_index",
    "compare_ratings",
    "count_inversions",
    "sort_and_count_inversions",
]
