"""Two-column text form of a ranking result."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple

from ..errors import MalformedInputError
from .comparator import UserDissimilarity


def format_ranking(target_user_id: int, results: Sequence[UserDissimilarity]) -> str:
    """First line is the target id, then one `<userId> <inversions>` line per user."""
    lines = [str(int(target_user_id))]
    lines.extend(f"{int(r.userId)} {int(r.inversions)}" for r in results)
    return "\n".join(lines) + "\n"


def save_ranking(path: Path, target_user_id: int, results: Sequence[UserDissimilarity]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_ranking(target_user_id, results), newline="\n")
    return path


def load_ranking(path: Path) -> Tuple[int, list[UserDissimilarity]]:
    """Parse a file written by `save_ranking`."""
    path = Path(path)
    lines = [line for line in path.read_text().splitlines() if line.strip()]
    if not lines:
        raise MalformedInputError(f"{path}: ranking file is empty")

    try:
        target_user_id = int(lines[0].strip())
        results = []
        for line in lines[1:]:
            user_id, inversions = line.split()
            results.append(UserDissimilarity(userId=int(user_id), inversions=int(inversions)))
    except ValueError as exc:
        raise MalformedInputError(f"{path}: {exc}") from exc
    return target_user_id, results
