# -*- coding: utf-8 -*-
"""
grtree.data
===========

Dataset helpers used upstream of :func:`grtree.tree.build`: loading labeled
records from a headerless CSV file, drawing a random subset of attribute
columns, and splitting records into training and evaluation sets.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .tree import Record

logger = logging.getLogger(__name__)


def load_dataset(path, attributes: Sequence[int], label_column: int = 0) -> list[Record]:
    """
    Read labeled categorical records from a CSV file without header.

    Parameters
    ----------
    path : str or path-like
        Location of the CSV file.
    attributes : sequence of int
        Column indices forming each record's attribute sequence, in order.
    label_column : int, default=0
        Column holding the class label.

    Returns
    -------
    list of (tuple, str)
        One ``(attributes, label)`` record per row.  All values are strings.

    Raises
    ------
    IndexError
        If a requested column does not exist in the file.
    """
    frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    width = frame.shape[1]
    for column in [label_column, *attributes]:
        if not 0 <= column < width:
            raise IndexError(f"column {column} out of range for a file with {width} columns")

    labels = frame.iloc[:, label_column].tolist()
    values = frame.iloc[:, list(attributes)].itertuples(index=False, name=None)
    records = [(tuple(row), label) for row, label in zip(values, labels)]
    logger.info("Loaded %d records with %d attributes from %s", len(records), len(attributes), path)
    return records


def sample_attributes(n: int, low: int, high: int, random_state=None) -> list[int]:
    """
    Draw ``n`` distinct column indices uniformly from ``[low, high)``.

    Raises
    ------
    ValueError
        If the range holds fewer than ``n`` indices.
    """
    if n < 0 or n > high - low:
        raise ValueError(f"cannot draw {n} distinct indices from [{low}, {high})")
    rng = np.random.default_rng(random_state)
    chosen = rng.choice(np.arange(low, high), size=n, replace=False)
    return [int(i) for i in chosen]


def split_dataset(dataset: Sequence[Record], ratio: float,
                  random_state=None) -> tuple[list[Record], list[Record]]:
    """
    Randomly partition records into training and evaluation sets.

    Each record independently lands in the training set when a uniform draw
    from ``[0, 1)`` is below ``ratio``, so the split sizes are only
    approximately proportional.
    """
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"ratio must be in [0, 1], got {ratio!r}")
    rng = np.random.default_rng(random_state)
    draws = rng.random(len(dataset))
    train = [record for record, p in zip(dataset, draws) if p < ratio]
    test = [record for record, p in zip(dataset, draws) if p >= ratio]
    logger.info("Split %d records into %d train / %d test", len(dataset), len(train), len(test))
    return train, test
