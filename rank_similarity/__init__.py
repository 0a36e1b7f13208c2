"""Rank users by how closely their item ordering agrees with a target user's.

Core idea:
- Re-order each user's ranks by the order the target user ranked the items
  (the "collision vector")
- Count inversions in that vector with a merge-sort count
- Fewer inversions means a more similar ordering; results are sorted ascending
"""
