from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    input_dir: Path
    expected_dir: Path
    actual_dir: Path

    @classmethod
    def from_repo_root(
        cls,
        repo_root: Path,
        *,
        input_dir: Path | str = "data/input",
        expected_dir: Path | str = "data/output/expected",
        actual_dir: Path | str = "data/output/actual",
    ) -> "ProjectPaths":
        def _resolve(p: Path | str) -> Path:
            p_path = Path(p) if isinstance(p, str) else p
            if not p_path.is_absolute():
                p_path = repo_root / p_path
            return p_path.resolve()

        return cls(
            input_dir=_resolve(input_dir),
            expected_dir=_resolve(expected_dir),
            actual_dir=_resolve(actual_dir),
        )

    def ensure_dirs(self) -> None:
        for d in (self.input_dir, self.expected_dir, self.actual_dir):
            d.mkdir(parents=True, exist_ok=True)


def get_repo_root() -> Path:
    """Return repo root by searching upwards for `config.yaml` or `.git`."""
    start = Path.cwd().resolve()
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    # Fallback: search upwards from this file (useful when run from elsewhere).
    start = Path(__file__).resolve().parent
    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    raise FileNotFoundError("Could not locate repo root (expected `config.yaml` or `.git`).")
