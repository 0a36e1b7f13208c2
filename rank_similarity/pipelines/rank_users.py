from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ..config import AppConfig, load_config
from ..data import load_rating_table
from ..errors import RankSimilarityError
from ..ranking.comparator import UserDissimilarity, compare_ratings, ranking_to_frame
from ..ranking.report import save_ranking
from ..utils import setup_logging


logger = logging.getLogger(__name__)


def run_ranking(
    input_path: Path,
    target_user_id: int,
    output_path: Path,
    *,
    config: AppConfig | None = None,
) -> list[UserDissimilarity]:
    """Rank all users of `input_path` against `target_user_id` and write `output_path`."""
    config = config or load_config()
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file does not exist: {input_path}")

    table = load_rating_table(input_path, require_permutations=config.comparison.require_permutations)
    results = compare_ratings(
        table,
        int(target_user_id),
        duplicate_user_ids=config.comparison.duplicate_user_ids,
    )
    out = save_ranking(output_path, int(target_user_id), results)
    logger.info("Wrote %d rows for userId=%d to %s", len(results), int(target_user_id), out)
    return results


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Rank users by how closely they order items like a target user.")
    p.add_argument("input", type=Path, help="Rating table: '<users> <items>' header, then '<userId> <ranks...>' rows")
    p.add_argument("user_id", type=int, help="userId to compare everyone else against")
    p.add_argument("output", type=Path, help="Where to write the ranking (parent dirs are created)")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: repo config.yaml)")
    p.add_argument("--log-level", type=str, default=None, help="Override logging.level from the config")
    p.add_argument("--show", type=int, default=0, help="Also print the N most similar users")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(args.log_level or config.log_level)

    try:
        results = run_ranking(args.input, int(args.user_id), args.output, config=config)
    except RankSimilarityError as exc:
        logger.error("Ranking failed: %s", exc)
        raise SystemExit(2) from exc

    if int(args.show) > 0:
        print(f"\n=== Most similar to userId={int(args.user_id)} ===")
        if results:
            print(ranking_to_frame(results[: int(args.show)]).to_string(index=False))
        else:
            print("No other users in the rating table.")


if __name__ == "__main__":
    main()
