"""Project configuration read from `config.yaml`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .paths import ProjectPaths, get_repo_root
from .ranking.comparator import DUPLICATE_POLICIES, DuplicatePolicy


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonConfig:
    duplicate_user_ids: DuplicatePolicy = "error"
    require_permutations: bool = True


@dataclass(frozen=True)
class AppConfig:
    repo_root: Path
    paths: ProjectPaths
    comparison: ComparisonConfig = field(default_factory=ComparisonConfig)
    log_level: str = "INFO"
    source: Path | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")
    return obj


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    value = cfg.get(name, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"config section {name!r} must be a mapping")
    return value


def config_from_mapping(cfg: dict[str, Any], *, repo_root: Path, source: Path | None = None) -> AppConfig:
    dataset_cfg = _section(cfg, "dataset")
    comparison_cfg = _section(cfg, "comparison")
    logging_cfg = _section(cfg, "logging")

    paths = ProjectPaths.from_repo_root(
        repo_root,
        input_dir=Path(str(dataset_cfg.get("input_dir", "data/input"))),
        expected_dir=Path(str(dataset_cfg.get("expected_dir", "data/output/expected"))),
        actual_dir=Path(str(dataset_cfg.get("actual_dir", "data/output/actual"))),
    )

    duplicate_user_ids = str(comparison_cfg.get("duplicate_user_ids", "error"))
    if duplicate_user_ids not in DUPLICATE_POLICIES:
        raise ValueError(
            f"comparison.duplicate_user_ids must be one of {DUPLICATE_POLICIES}, got {duplicate_user_ids!r}"
        )

    return AppConfig(
        repo_root=repo_root,
        paths=paths,
        comparison=ComparisonConfig(
            duplicate_user_ids=cast(DuplicatePolicy, duplicate_user_ids),
            require_permutations=bool(comparison_cfg.get("require_permutations", True)),
        ),
        log_level=str(logging_cfg.get("level", "INFO")).upper(),
        source=source,
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration.

    An explicit `config_path` must exist. Without one, `config.yaml` at the
    repo root is used when present, and the built-in defaults otherwise.
    """
    if config_path is not None:
        config_path = Path(config_path).resolve()
        return config_from_mapping(_load_yaml(config_path), repo_root=config_path.parent, source=config_path)

    try:
        repo_root = get_repo_root()
    except FileNotFoundError:
        repo_root = Path.cwd().resolve()

    default_path = repo_root / "config.yaml"
    if default_path.is_file():
        return config_from_mapping(_load_yaml(default_path), repo_root=repo_root, source=default_path)

    logger.debug("No config.yaml under %s, using defaults", repo_root)
    return config_from_mapping({}, repo_root=repo_root)
