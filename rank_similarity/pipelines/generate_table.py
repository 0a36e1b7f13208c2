from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ..data import generate_rating_table, save_rating_table
from ..utils import setup_logging


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Write a random rating table (every user ranks every item once).")
    p.add_argument("output", type=Path, help="Destination text file")
    p.add_argument("--users", type=int, required=True, help="Number of users")
    p.add_argument("--items", type=int, required=True, help="Number of items")
    p.add_argument("--seed", type=int, default=42, help="Random seed")
    p.add_argument("--first-user-id", type=int, default=1, help="userId of the first row")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)

    table = generate_rating_table(
        int(args.users),
        int(args.items),
        seed=int(args.seed),
        first_user_id=int(args.first_user_id),
    )
    out = save_rating_table(args.output, table)
    logger.info("Wrote rating table users=%d items=%d seed=%d to %s", table.n_users, table.n_items, args.seed, out)


if __name__ == "__main__":
    main()
