# -*- coding: utf-8 -*-
"""
grtree.cli
==========

Command line program: load a labeled CSV file, keep a random subset of its
attribute columns, train a tree on part of the rows and benchmark it on the
rest, then draw the ROC and precision/recall curves.

    python -m grtree data/data.csv --attributes 5 --seed 42
"""

from __future__ import annotations

import argparse
import logging

from .config import DEFAULT_POSITIVE_LABEL, DEFAULT_PURITY_THRESHOLD, RunConfig, TreeConfig
from .data import load_dataset, sample_attributes, split_dataset
from .metrics import bench_classifier, threshold_sweep
from .plotting import draw_series
from .tree import build

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> RunConfig:
    parser = argparse.ArgumentParser(
        prog="grtree",
        description="Train and benchmark a gain-ratio decision tree on a categorical CSV file.",
    )
    parser.add_argument("data_path", help="headerless CSV file, label in the first column")
    parser.add_argument("--attributes", type=int, default=5,
                        help="number of attribute columns to sample (default: 5)")
    parser.add_argument("--low", type=int, default=1,
                        help="lowest attribute column index to sample from (default: 1)")
    parser.add_argument("--high", type=int, default=23,
                        help="attribute column indices are sampled below this value (default: 23)")
    parser.add_argument("--train-ratio", type=float, default=0.7)
    parser.add_argument("--threshold", type=float, default=0.5)
    parser.add_argument("--n-thresholds", type=int, default=100)
    parser.add_argument("--positive-label", default=DEFAULT_POSITIVE_LABEL)
    parser.add_argument("--purity", type=float, default=DEFAULT_PURITY_THRESHOLD)
    parser.add_argument("--max-depth", type=int, default=None)
    parser.add_argument("--n-jobs", type=int, default=1)
    parser.add_argument("--roc", default="roc.png", help="output path of the ROC curve")
    parser.add_argument("--pr", default="pr.png", help="output path of the PR curve")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    return RunConfig(
        data_path=args.data_path,
        n_attributes=args.attributes,
        low_attribute=args.low,
        high_attribute=args.high,
        train_ratio=args.train_ratio,
        threshold=args.threshold,
        n_thresholds=args.n_thresholds,
        roc_path=args.roc,
        pr_path=args.pr,
        random_state=args.seed,
        log_level=args.log_level,
        tree=TreeConfig(
            purity_threshold=args.purity,
            positive_label=args.positive_label,
            max_depth=args.max_depth,
            n_jobs=args.n_jobs,
        ),
    )


def run(config: RunConfig):
    """Execute the full train/benchmark/plot pipeline and return the benchmark results."""
    attributes = sample_attributes(config.n_attributes, config.low_attribute,
                                   config.high_attribute, config.random_state)
    print(attributes)
    logger.info("Sampled attribute columns %s", attributes)

    dataset = load_dataset(config.data_path, attributes)
    split_seed = None if config.random_state is None else config.random_state + 1
    train, test = split_dataset(dataset, config.train_ratio, split_seed)
    tree = build(train, config.tree)

    results = bench_classifier(tree, test, config.threshold, on_error="skip")
    print(f"For threshold {config.threshold}:")
    print(results.summary())

    roc, pr = threshold_sweep(tree, test, config.n_thresholds, on_error="skip")
    draw_series(roc, config.roc_path, "ROC curve")
    draw_series(pr, config.pr_path, "PR curve")
    return results


def main(argv=None) -> int:
    config = parse_args(argv)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run(config)
    return 0
