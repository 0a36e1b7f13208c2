"""Regenerate rankings for every golden file and compare them byte-for-byte.

Layout (relative to the configured directories):

    <input_dir>/<name>.txt                 rating table
    <expected_dir>/<name>/<userId>.txt     expected ranking for that target
    <actual_dir>/<name>/<userId>.txt       written by this check
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from ..config import AppConfig, load_config
from ..errors import MalformedInputError, RankSimilarityError
from ..ranking.report import load_ranking
from ..utils import setup_logging
from .rank_users import run_ranking


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseResult:
    input_file: Path
    target_user_id: int
    expected_file: Path
    actual_file: Path
    passed: bool


def files_identical(expected: Path, actual: Path) -> bool:
    return Path(expected).read_bytes() == Path(actual).read_bytes()


def describe_difference(expected: Path, actual: Path) -> str:
    """Human-readable first difference between two ranking files."""
    try:
        expected_target, expected_rows = load_ranking(expected)
        actual_target, actual_rows = load_ranking(actual)
    except MalformedInputError as exc:
        return f"cannot parse ranking: {exc}"

    if expected_target != actual_target:
        return f"target userId expected={expected_target} actual={actual_target}"
    for i, (e, a) in enumerate(zip(expected_rows, actual_rows), start=1):
        if e != a:
            return (
                f"row {i}: expected=({e.userId} {e.inversions}) actual=({a.userId} {a.inversions})"
            )
    if len(expected_rows) != len(actual_rows):
        return f"expected {len(expected_rows)} rows, got {len(actual_rows)}"
    return "same rows, files differ in whitespace or line endings"


def _target_from_case_file(path: Path) -> int:
    try:
        return int(path.stem)
    except ValueError as exc:
        raise MalformedInputError(f"Expected-output file name must be a userId: {path}") from exc


def run_output_check(config: AppConfig) -> list[CaseResult]:
    paths = config.paths
    paths.ensure_dirs()

    out: list[CaseResult] = []
    for input_file in sorted(paths.input_dir.iterdir()):
        if not input_file.is_file():
            continue
        if input_file.suffix != ".txt":
            logger.warning("%s is not a .txt file, skipping", input_file)
            continue

        case_dir = paths.expected_dir / input_file.stem
        if not case_dir.is_dir():
            logger.warning("No expected outputs for %s, skipping", input_file)
            continue

        for expected_file in sorted(p for p in case_dir.iterdir() if p.is_file()):
            target_user_id = _target_from_case_file(expected_file)
            actual_file = paths.actual_dir / input_file.stem / f"{target_user_id}.txt"

            run_ranking(input_file, target_user_id, actual_file, config=config)
            passed = files_identical(expected_file, actual_file)
            if not passed:
                logger.error(
                    "Files are not identical: input_file=%s expected_output_file=%s actual_output_file=%s (%s)",
                    input_file,
                    expected_file,
                    actual_file,
                    describe_difference(expected_file, actual_file),
                )
            out.append(
                CaseResult(
                    input_file=input_file,
                    target_user_id=target_user_id,
                    expected_file=expected_file,
                    actual_file=actual_file,
                    passed=passed,
                )
            )

    logger.info("Checked %d cases, %d failed", len(out), sum(1 for r in out if not r.passed))
    return out


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compare generated rankings against expected output files.")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: repo config.yaml)")
    p.add_argument("--log-level", type=str, default=None, help="Override logging.level from the config")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(args.log_level or config.log_level)

    try:
        results = run_output_check(config)
    except RankSimilarityError as exc:
        logger.error("Expected-output check failed: %s", exc)
        raise SystemExit(2) from exc

    print("\n=== Expected-output check ===")
    if results:
        df = pd.DataFrame(
            [
                {
                    "input": r.input_file.name,
                    "userId": r.target_user_id,
                    "passed": r.passed,
                }
                for r in results
            ]
        )
        print(df.to_string(index=False))
    else:
        print("No test cases found.")

    if any(not r.passed for r in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
