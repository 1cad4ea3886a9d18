# -*- coding: utf-8 -*-
"""
grtree.metrics
==============

Threshold-based evaluation of a :class:`~grtree.tree.DecisionTree`.

A record counts as predicted positive when its probability is at least the
threshold.  Confusion counts come from :func:`sklearn.metrics.confusion_matrix`;
ratios whose denominator is zero are reported as ``nan``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from sklearn.metrics import confusion_matrix

from .exceptions import AttributeIndexOutOfRangeError, UnseenCategoryError
from .tree import DecisionTree, Record

logger = logging.getLogger(__name__)


def _ratio(num: int, den: int) -> float:
    return num / den if den else float("nan")


@dataclass(frozen=True)
class ClassifierResults:
    """Confusion counts and derived rates for one threshold."""

    true_positive: int
    true_negative: int
    false_positive: int
    false_negative: int
    skipped: int = 0

    @property
    def correct(self) -> int:
        return self.true_positive + self.true_negative

    @property
    def total(self) -> int:
        return self.correct + self.false_positive + self.false_negative

    @property
    def accuracy(self) -> float:
        return _ratio(self.correct, self.total)

    @property
    def precision(self) -> float:
        return _ratio(self.true_positive, self.true_positive + self.false_positive)

    @property
    def recall(self) -> float:
        return _ratio(self.true_positive, self.true_positive + self.false_negative)

    @property
    def true_positive_rate(self) -> float:
        return self.recall

    @property
    def false_positive_rate(self) -> float:
        return _ratio(self.false_positive, self.false_positive + self.true_negative)

    @property
    def false_negative_rate(self) -> float:
        return _ratio(self.false_negative, self.false_negative + self.true_positive)

    @property
    def true_negative_rate(self) -> float:
        return _ratio(self.true_negative, self.true_negative + self.false_positive)

    def summary(self) -> str:
        return "\n".join([
            f"Accuracy: {self.accuracy}",
            f"Precision: {self.precision}",
            f"Recall: {self.recall}",
            f"False positive rate: {self.false_positive_rate}",
            f"False negative rate: {self.false_negative_rate}",
            f"True positive rate: {self.true_positive_rate}",
            f"True negative rate: {self.true_negative_rate}",
        ])


def _score_records(tree: DecisionTree, dataset: Iterable[Record], on_error: str):
    if on_error not in ("raise", "skip"):
        raise ValueError(f"on_error must be 'raise' or 'skip', got {on_error!r}")
    y_true, proba, skipped = [], [], 0
    for attributes, label in dataset:
        try:
            p = tree.predict(attributes)
        except (UnseenCategoryError, AttributeIndexOutOfRangeError) as exc:
            if on_error == "raise":
                raise
            logger.warning("Skipping record: %s", exc)
            skipped += 1
            continue
        y_true.append(label == tree.positive_label)
        proba.append(p)
    return np.array(y_true, dtype=bool), np.array(proba, dtype=float), skipped


def _results(y_true: np.ndarray, proba: np.ndarray, threshold: float, skipped: int):
    if len(y_true) == 0:
        return ClassifierResults(0, 0, 0, 0, skipped)
    y_pred = proba >= threshold
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[False, True]).ravel()
    return ClassifierResults(int(tp), int(tn), int(fp), int(fn), skipped)


def bench_classifier(tree: DecisionTree, dataset: Iterable[Record], threshold: float,
                     *, on_error: str = "raise") -> ClassifierResults:
    """
    Evaluate ``tree`` on labeled records at one probability threshold.

    Parameters
    ----------
    tree : DecisionTree
        The tree under evaluation.
    dataset : iterable of (attributes, label)
        Evaluation records.
    threshold : float
        Records with probability ``>= threshold`` are predicted positive.
    on_error : {"raise", "skip"}, default="raise"
        What to do with records the tree cannot route (unseen category or
        short record).  ``"skip"`` logs and excludes them.

    Returns
    -------
    ClassifierResults
    """
    y_true, proba, skipped = _score_records(tree, dataset, on_error)
    return _results(y_true, proba, threshold, skipped)


def threshold_sweep(tree: DecisionTree, dataset: Iterable[Record], n_thresholds: int = 100,
                    *, on_error: str = "raise"):
    """
    ROC and precision/recall points for thresholds ``i / n_thresholds``.

    Returns
    -------
    roc : list of (float, float)
        ``(false_positive_rate, true_positive_rate)`` per threshold.
    pr : list of (float, float)
        ``(precision, recall)`` per threshold.
    """
    y_true, proba, skipped = _score_records(tree, dataset, on_error)
    roc, pr = [], []
    for i in range(n_thresholds):
        results = _results(y_true, proba, i / n_thresholds, skipped)
        roc.append((results.false_positive_rate, results.true_positive_rate))
        pr.append((results.precision, results.recall))
    return roc, pr
