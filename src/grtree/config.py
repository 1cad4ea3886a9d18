# -*- coding: utf-8 -*-
"""
grtree.config
=============

Configuration objects.

:class:`TreeConfig` carries the induction policy (purity threshold, positive
label, optional depth cap and worker count) into :func:`grtree.tree.build`,
so trees with different policies can coexist in one process.
:class:`RunConfig` holds the settings of the end-to-end program started with
``python -m grtree``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

#: Majority-label proportion at which a node stops splitting.
DEFAULT_PURITY_THRESHOLD = 0.99
#: Label whose probability every leaf reports.
DEFAULT_POSITIVE_LABEL = "e"


@dataclass(frozen=True)
class TreeConfig:
    """
    Induction policy for a single tree.

    Parameters
    ----------
    purity_threshold : float, default=0.99
        A node becomes a leaf once the proportion of its majority label
        (its *clearance*) reaches this value.  Must lie in ``(0, 1]``.
    positive_label : object, default="e"
        The class whose probability is stored in every leaf.
    max_depth : int or None, default=None
        Depth at which nodes are forced to be leaves.  ``None`` leaves the
        depth unbounded; recursion then stops through the purity and
        zero-gain rules only.
    n_jobs : int or None, default=1
        Number of workers used to grow the subtrees under the root.  ``1``
        and ``None`` build sequentially; ``-1`` uses every core.
    """

    purity_threshold: float = DEFAULT_PURITY_THRESHOLD
    positive_label: object = DEFAULT_POSITIVE_LABEL
    max_depth: int | None = None
    n_jobs: int | None = 1

    def __post_init__(self):
        if not 0.0 < float(self.purity_threshold) <= 1.0:
            raise ValueError(
                f"purity_threshold must be in (0, 1], got {self.purity_threshold!r}"
            )
        if self.max_depth is not None and int(self.max_depth) < 0:
            raise ValueError(f"max_depth must be >= 0 or None, got {self.max_depth!r}")
        if self.n_jobs == 0:
            raise ValueError("n_jobs == 0 has no meaning, use None, -1 or a positive int")


@dataclass
class RunConfig:
    """Settings of the train/benchmark/plot program."""

    data_path: str
    n_attributes: int = 5
    low_attribute: int = 1
    high_attribute: int = 23
    train_ratio: float = 0.7
    threshold: float = 0.5
    n_thresholds: int = 100
    roc_path: str = "roc.png"
    pr_path: str = "pr.png"
    random_state: int | None = None
    log_level: str = "INFO"
    tree: TreeConfig = field(default_factory=TreeConfig)

    def __post_init__(self):
        if not 0.0 <= self.train_ratio <= 1.0:
            raise ValueError(f"train_ratio must be in [0, 1], got {self.train_ratio!r}")
        if self.n_thresholds < 1:
            raise ValueError("n_thresholds must be a positive integer")
