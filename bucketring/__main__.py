#!/usr/bin/env python3
"""
Bucket Ring fairness report.

Places random integer buckets and members on rings with a sweep of
virtual-node counts and prints how evenly members are spread.

Usage:
    python -m bucketring
    python -m bucketring --buckets 10 --members 10000 --start 1 --end 800 --step 100

    # Defaults can also come from the environment
    BUCKETRING_ANALYZER_END=400 python -m bucketring
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import numpy as np

from bucketring import __version__
from bucketring.analysis.distribution import best_virtual_nodes, distribution_summary
from bucketring.core import constants as C
from bucketring.core.config import AnalyzerConfig, BucketRingConfig
from bucketring.hashing.converters import int_to_bytes
from bucketring.hashing.functions import HASH_FUNCTIONS, get_hash_function
from bucketring.observability.logging import LogLevel, setup_logging

_INT32_MAX = 2**31 - 1


def _build_parser(defaults: BucketRingConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bucketring",
        description="Member distribution across virtual-node counts",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--buckets", type=int, default=C.DEMO_BUCKETS,
                        help=f"number of random buckets (default: {C.DEMO_BUCKETS})")
    parser.add_argument("--members", type=int, default=C.DEMO_MEMBERS,
                        help=f"number of random members (default: {C.DEMO_MEMBERS})")
    parser.add_argument("--start", type=int, default=defaults.analyzer.start,
                        help="first virtual-node count")
    parser.add_argument("--end", type=int, default=defaults.analyzer.end,
                        help="last virtual-node count (inclusive)")
    parser.add_argument("--step", type=int, default=defaults.analyzer.step,
                        help="virtual-node count increment")
    parser.add_argument("--hash", choices=sorted(HASH_FUNCTIONS), default=defaults.ring.hash_name,
                        help="hash function")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--json-logs", action="store_true", help="emit JSON logs")
    return parser


def _random_population(
    rng: np.random.Generator,
    bucket_count: int,
    member_count: int,
) -> tuple[list[int], list[int]]:
    # Duplicates collapse; order of first appearance is kept
    buckets = list(dict.fromkeys(
        (rng.integers(0, _INT32_MAX, size=bucket_count) // 5).tolist()
    ))
    members = rng.integers(-_INT32_MAX - 1, _INT32_MAX, size=member_count).tolist()
    return buckets, members


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entrypoint."""
    config_result = BucketRingConfig.from_env()
    if config_result.is_err():
        print(config_result.error, file=sys.stderr)
        return 2
    defaults = config_result.unwrap()

    args = _build_parser(defaults).parse_args(argv)

    config = BucketRingConfig(
        ring=defaults.ring,
        analyzer=AnalyzerConfig(start=args.start, end=args.end, step=args.step),
        observability=defaults.observability,
    )
    validation = config.validate()
    if validation.is_err():
        print(f"Invalid arguments: {validation.error}", file=sys.stderr)
        return 2
    if args.buckets < 1 or args.members < 0:
        print("Invalid arguments: need at least one bucket and a non-negative member count",
              file=sys.stderr)
        return 2

    setup_logging(
        LogLevel.from_name(config.observability.log_level),
        json_output=args.json_logs,
    )

    rng = np.random.default_rng(args.seed)
    buckets, members = _random_population(rng, args.buckets, args.members)

    summary = distribution_summary(
        config.analyzer.start,
        config.analyzer.end,
        int_to_bytes,
        int_to_bytes,
        get_hash_function(args.hash),
        buckets,
        members,
        step=config.analyzer.step,
    )

    print(f"{len(buckets)} buckets, {len(members)} members, hash={args.hash}\n")
    print(f"{'vnodes':>7} {'max %':>8} {'min %':>8} {'std %':>8} {'max/min':>9}")
    for virtual_nodes, stats in summary.items():
        print(
            f"{virtual_nodes:>7} {stats.max_percentage:>8.2f} {stats.min_percentage:>8.2f} "
            f"{stats.std_percentage:>8.2f} {stats.imbalance:>9.2f}"
        )

    best = best_virtual_nodes(summary)
    if best is not None:
        print(f"\nFairest virtual-node count: {best}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
