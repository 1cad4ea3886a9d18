# -*- coding: utf-8 -*-
"""
grtree.tree
===========

This module implements a gain-ratio decision tree for categorical data in the
style of Quinlan's C4.5.  Records are fixed-length sequences of categorical
attribute values with a class label.  At every node the attribute with the
highest gain ratio is selected and the node branches once per value observed
for that attribute; growth stops when the majority label is dominant enough
(the node *clearance* reaches ``purity_threshold``) or when no attribute
separates the data any further.

Every leaf stores a single number, the probability of the configured
``positive_label``.  The functional API is :func:`build` and :func:`predict`;
:class:`GainRatioTreeClassifier` wraps both behind a scikit-learn-like
estimator.

A built :class:`DecisionTree` is immutable.  It can be exported as rules,
pretty printed, or rendered with Graphviz.
"""

# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

import numpy as np
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted

from .config import DEFAULT_POSITIVE_LABEL, DEFAULT_PURITY_THRESHOLD, TreeConfig
from .exceptions import (
    AttributeIndexOutOfRangeError,
    EmptyDatasetError,
    InconsistentRecordShapeError,
    UnseenCategoryError,
)

logger = logging.getLogger(__name__)

#: A record is a pair ``(attributes, label)``.
Record = tuple[Sequence[Any], Any]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _counts(values) -> np.ndarray:
    return np.array(list(Counter(values).values()), dtype=float)


def _entropy_from_counts(counts: np.ndarray) -> float:
    p = counts / counts.sum()
    return float(-np.sum(p * np.log2(p)))


def _to_arrays(dataset: Iterable[Record]) -> tuple[np.ndarray, np.ndarray]:
    """Turn ``(attributes, label)`` records into an object matrix and label vector."""
    records = list(dataset)
    if not records:
        raise EmptyDatasetError("cannot build a tree from an empty dataset")
    lengths = {len(attributes) for attributes, _ in records}
    if len(lengths) != 1:
        raise InconsistentRecordShapeError(lengths)
    n_attributes = lengths.pop()
    X = np.empty((len(records), n_attributes), dtype=object)
    for i, (attributes, _) in enumerate(records):
        for j, value in enumerate(attributes):
            X[i, j] = value
    y = np.empty(len(records), dtype=object)
    y[:] = [label for _, label in records]
    return X, y


def _feature_name(attribute: int, feature_names=None) -> str:
    if feature_names is not None and 0 <= attribute < len(feature_names):
        return str(feature_names[attribute])
    return f"X[{attribute}]"


def _sorted_children(stage: Stage):
    return sorted(stage.children.items(), key=lambda item: str(item[0]))


# -----------------------------------------------------------------------------
# Impurity and gain ratio
# -----------------------------------------------------------------------------
def entropy(labels) -> float:
    """
    Shannon entropy, in bits, of the label distribution of a slice.

    Parameters
    ----------
    labels : array-like of shape (n_samples,)
        Class labels of the slice.

    Returns
    -------
    float
        ``-sum(p * log2(p))`` over the labels present in the slice.

    Raises
    ------
    EmptyDatasetError
        If ``labels`` is empty.
    """
    if len(labels) == 0:
        raise EmptyDatasetError("cannot compute the entropy of an empty slice")
    return _entropy_from_counts(_counts(labels))


def split_by_attribute(X: np.ndarray, y: np.ndarray, attribute: int) -> dict:
    """
    Partition a slice by the value of one attribute.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_attributes)
        Attribute values of the slice.
    y : ndarray of shape (n_samples,)
        Class labels of the slice.
    attribute : int
        Column of ``X`` to split on.

    Returns
    -------
    dict
        Mapping ``{value: (X_group, y_group)}`` with one entry per distinct
        value, in order of first appearance.  Each group is a copy and does
        not share memory with ``X`` or ``y``.
    """
    rows: dict[Any, list[int]] = {}
    for i, value in enumerate(X[:, attribute]):
        rows.setdefault(value, []).append(i)
    return {value: (X[idx], y[idx]) for value, idx in rows.items()}


def _group_sizes_and_entropies(X, y, attribute):
    groups = split_by_attribute(X, y, attribute)
    sizes = np.array([len(y_group) for _, y_group in groups.values()], dtype=float)
    entropies = np.array([entropy(y_group) for _, y_group in groups.values()])
    return sizes, entropies


def weighted_entropy(X: np.ndarray, y: np.ndarray, attribute: int) -> float:
    """Entropy left after splitting on ``attribute``, weighted by group size."""
    if len(y) == 0:
        raise EmptyDatasetError("cannot split an empty slice")
    sizes, entropies = _group_sizes_and_entropies(X, y, attribute)
    return float(np.dot(sizes / len(y), entropies))


def split_information(X: np.ndarray, attribute: int) -> float:
    """Entropy of the group-size distribution produced by ``attribute``."""
    if len(X) == 0:
        raise EmptyDatasetError("cannot split an empty slice")
    return _entropy_from_counts(_counts(X[:, attribute]))


def gain_ratio(X: np.ndarray, y: np.ndarray, attribute: int) -> float:
    """
    Information gain of ``attribute`` divided by its split information.

    An attribute that yields a single group has a split information of
    exactly zero; its gain ratio is reported as ``0.0``.
    """
    if len(y) == 0:
        raise EmptyDatasetError("cannot split an empty slice")
    sizes, entropies = _group_sizes_and_entropies(X, y, attribute)
    weights = sizes / len(y)
    split_info = float(-np.sum(weights * np.log2(weights)))
    if split_info == 0.0:
        return 0.0
    gain = entropy(y) - float(np.dot(weights, entropies))
    return gain / split_info


def select_attribute(X: np.ndarray, y: np.ndarray) -> tuple[int, float]:
    """
    Pick the attribute with the greatest gain ratio.

    Attributes are scanned in index order and only a strictly greater gain
    ratio replaces the current best, so ties go to the lowest index.

    Returns
    -------
    tuple
        ``(attribute_index, gain_ratio)``.
    """
    n_attributes = X.shape[1]
    if n_attributes == 0:
        raise ValueError("cannot select an attribute from records without attributes")
    best_attribute, best_gain = 0, gain_ratio(X, y, 0)
    for attribute in range(1, n_attributes):
        gain = gain_ratio(X, y, attribute)
        if gain > best_gain:
            best_attribute, best_gain = attribute, gain
    return best_attribute, best_gain


# -----------------------------------------------------------------------------
# Stopping criteria
# -----------------------------------------------------------------------------
def clearance(labels) -> tuple[float, Any]:
    """
    Proportion of the majority label in a slice, and that label.

    Among equally frequent labels the one that appears first wins.
    """
    if len(labels) == 0:
        raise EmptyDatasetError("cannot compute the clearance of an empty slice")
    label, count = Counter(labels).most_common(1)[0]
    return count / len(labels), label


def leaf_probability(proportion: float, majority_label, positive_label) -> float:
    """Probability of ``positive_label`` for a leaf with the given clearance."""
    if majority_label == positive_label:
        return float(proportion)
    return 1.0 - float(proportion)


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    """Terminal node holding the probability of the positive label."""

    probability: float

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class Stage:
    """
    Internal node branching on one attribute.

    Parameters
    ----------
    attribute : int
        Index of the record position inspected by this node.
    children : Mapping
        ``{value: TreeNode}``, one entry per value of ``attribute`` observed
        in the slice that produced the node.  Stored as a read-only view.
    """

    attribute: int
    children: Mapping[Any, "TreeNode"] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def is_leaf(self) -> bool:
        return False


TreeNode = Union[Leaf, Stage]


# -----------------------------------------------------------------------------
# Tree
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DecisionTree:
    """
    A built gain-ratio tree.

    Instances are produced by :func:`build` and never change afterwards, so
    one tree can serve any number of concurrent readers.

    Attributes
    ----------
    root : Leaf or Stage
        The root node; all other nodes are reachable only through it.
    config : TreeConfig
        The policy the tree was built with.
    n_attributes : int or None
        Attribute count of the training records.
    """

    root: TreeNode
    config: TreeConfig = field(default_factory=TreeConfig)
    n_attributes: int | None = None

    def __iter__(self) -> Iterator[TreeNode]:
        """Yield every node, depth first, children in sorted value order."""
        frontier = [self.root]
        while frontier:
            node = frontier.pop()
            yield node
            if not node.is_leaf:
                frontier.extend(child for _, child in reversed(_sorted_children(node)))

    def __str__(self):
        return self.to_text()

    @property
    def positive_label(self):
        return self.config.positive_label

    @property
    def n_leaves(self) -> int:
        return sum(1 for node in self if node.is_leaf)

    @property
    def n_stages(self) -> int:
        return sum(1 for node in self if not node.is_leaf)

    @property
    def depth(self) -> int:
        """Number of stage nodes on the longest root-to-leaf path."""

        def _depth(node):
            if node.is_leaf:
                return 0
            return 1 + max(_depth(child) for child in node.children.values())

        return _depth(self.root)

    def predict(self, record: Sequence[Any]) -> float:
        """
        Probability of the positive label for one record.

        Parameters
        ----------
        record : sequence
            Attribute values, in the order used for training.

        Returns
        -------
        float
            Value in ``[0, 1]`` stored in the leaf the record reaches.

        Raises
        ------
        AttributeIndexOutOfRangeError
            If the record is shorter than an attribute index on its path.
        UnseenCategoryError
            If a stage node has no branch for the record's value.
        """
        node = self.root
        while not node.is_leaf:
            if node.attribute >= len(record):
                raise AttributeIndexOutOfRangeError(node.attribute, len(record))
            value = record[node.attribute]
            try:
                node = node.children[value]
            except (KeyError, TypeError):
                # unhashable values can never be training keys
                raise UnseenCategoryError(node.attribute, value) from None
        return node.probability

    def predict_many(self, records: Iterable[Sequence[Any]]) -> np.ndarray:
        """
        Positive-label probabilities for several records.

        Parameters
        ----------
        records : iterable of sequence
            Attribute sequences, one per record.

        Returns
        -------
        ndarray of shape (n_records,)

        Raises
        ------
        AttributeIndexOutOfRangeError, UnseenCategoryError
            As raised by :meth:`predict` for the first failing record.
        """
        return np.array([self.predict(record) for record in records], dtype=float)

    # ------------------------------------------------------------------
    # Rule tracing / Graphviz / printing helpers
    # ------------------------------------------------------------------
    def export_rules(self, *, feature_names=None) -> list[str]:
        """
        Export every root-to-leaf path as a human-readable rule.

        Each rule has the form ``<antecedent> => p=<probability>`` where the
        antecedent is the conjunction of the tests along the path.
        """
        rules: list[str] = []
        self._collect_rules(self.root, [], rules, feature_names)
        return rules

    def to_text(self, feature_names=None) -> str:
        lines: list[str] = []
        self._text_node(self.root, "", feature_names, lines)
        return "\n".join(lines)

    def print_tree(self, feature_names=None):
        """Pretty-print the tree to ``stdout``."""
        print(self.to_text(feature_names))

    def export_graphviz(self, filename: str | None = None, *, feature_names=None,
                        format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and nothing is written.
        feature_names : list[str], optional
            Names for the attributes, by index.
        format : str, default="png"
            Output format.  ``'dot'`` writes the DOT source without calling
            the external ``dot`` executable.

        Returns
        -------
        str
            Path to the written file, or the DOT source if ``filename`` is None.
        """
        try:
            import graphviz
        except ImportError:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
        dot = graphviz.Digraph(format=format)
        self._add_graph_nodes(dot, self.root, "0", feature_names)

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            logger.warning("Graphviz 'dot' executable not found, writing DOT source instead")
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _collect_rules(self, node: TreeNode, parts, rules, fn):
        if node.is_leaf:
            body = " AND ".join(parts) if parts else "<root>"
            rules.append(f"{body} => p={node.probability:.4f}")
            return
        name = _feature_name(node.attribute, fn)
        for value, child in _sorted_children(node):
            self._collect_rules(child, parts + [f"{name} == {value!r}"], rules, fn)

    def _text_node(self, node: TreeNode, indent, fn, lines):
        if node.is_leaf:
            lines.append(f"{indent}Predict p={node.probability:.4f}")
            return
        name = _feature_name(node.attribute, fn)
        for value, child in _sorted_children(node):
            lines.append(f"{indent}if {name} == {value!r}:")
            self._text_node(child, indent + "  ", fn, lines)

    def _add_graph_nodes(self, dot, node: TreeNode, name: str, fn):
        if node.is_leaf:
            dot.node(name, f"p={node.probability:.4f}",
                     shape="box", style="filled", color="lightgrey")
            return
        dot.node(name, _feature_name(node.attribute, fn),
                 shape="ellipse", style="filled", color="lightblue")
        for i, (value, child) in enumerate(_sorted_children(node)):
            child_name = f"{name}_{i}"
            self._add_graph_nodes(dot, child, child_name, fn)
            dot.edge(name, child_name, label=str(value))


# -----------------------------------------------------------------------------
# Tree construction (gain ratio)
# -----------------------------------------------------------------------------
def _build_node(X: np.ndarray, y: np.ndarray, config: TreeConfig, depth: int = 0) -> TreeNode:
    """
    Recursively grow the subtree for one slice.

    A leaf is returned when the clearance reaches the purity threshold, when
    ``max_depth`` is reached, or when the best gain ratio is exactly zero.
    Otherwise the slice is partitioned on the selected attribute and one
    subtree is grown per observed value.
    """
    if len(y) == 0:
        raise EmptyDatasetError(f"empty slice reached at depth {depth}")

    proportion, majority = clearance(y)
    probability = leaf_probability(proportion, majority, config.positive_label)
    if proportion >= config.purity_threshold:
        logger.debug("depth=%d n=%d clearance=%.4f: pure leaf", depth, len(y), proportion)
        return Leaf(probability)
    if config.max_depth is not None and depth >= config.max_depth:
        logger.debug("depth=%d n=%d: max_depth leaf", depth, len(y))
        return Leaf(probability)
    if X.shape[1] == 0:
        return Leaf(probability)

    attribute, best_gain = select_attribute(X, y)
    if best_gain == 0.0:
        logger.debug("depth=%d n=%d clearance=%.4f: zero gain leaf", depth, len(y), proportion)
        return Leaf(probability)

    logger.debug("depth=%d n=%d: split on attribute %d (gain ratio %.4f)",
                 depth, len(y), attribute, best_gain)
    groups = split_by_attribute(X, y, attribute)

    if depth == 0 and config.n_jobs not in (None, 1) and len(groups) > 1:
        subtrees = Parallel(n_jobs=config.n_jobs, prefer="threads")(
            delayed(_build_node)(X_group, y_group, config, depth + 1)
            for X_group, y_group in groups.values()
        )
        children = dict(zip(groups, subtrees))
    else:
        children = {
            value: _build_node(X_group, y_group, config, depth + 1)
            for value, (X_group, y_group) in groups.items()
        }
    return Stage(attribute, children)


def build(dataset: Iterable[Record], config: TreeConfig | None = None) -> DecisionTree:
    """
    Induce a decision tree from labeled records.

    Parameters
    ----------
    dataset : iterable of (attributes, label)
        Training records.  Every ``attributes`` sequence must have the same
        length.
    config : TreeConfig, optional
        Induction policy.  Defaults to ``TreeConfig()``.

    Returns
    -------
    DecisionTree

    Raises
    ------
    EmptyDatasetError
        If ``dataset`` holds no records.
    InconsistentRecordShapeError
        If records disagree on their attribute count.
    """
    config = config or TreeConfig()
    X, y = _to_arrays(dataset)
    tree = DecisionTree(_build_node(X, y, config), config, X.shape[1])
    logger.info("Built tree from %d records: %d stages, %d leaves, depth %d",
                len(y), tree.n_stages, tree.n_leaves, tree.depth)
    return tree


def predict(tree: DecisionTree, record: Sequence[Any]) -> float:
    """Probability of the positive label for ``record``; see :meth:`DecisionTree.predict`."""
    return tree.predict(record)


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class GainRatioTreeClassifier(ClassifierMixin, BaseEstimator):
    """
    Binary gain-ratio decision tree classifier for categorical features.

    Parameters
    ----------
    positive_label : object, default="e"
        The class whose probability the leaves store.
    purity_threshold : float, default=0.99
        Clearance at which a node stops splitting.
    max_depth : int or None, default=None
        Optional cap on the depth of the tree.
    threshold : float, default=0.5
        :meth:`predict` returns ``positive_label`` when its probability is at
        least this value.
    n_jobs : int or None, default=1
        Workers used to grow the subtrees under the root.

    Attributes
    ----------
    tree_ : DecisionTree
        The fitted tree.
    classes_ : ndarray
        The training labels together with ``positive_label``; at most two.
    n_features_in_ : int
        Number of attributes seen during :meth:`fit`.
    """

    def __init__(
        self,
        *,
        positive_label=DEFAULT_POSITIVE_LABEL,
        purity_threshold: float = DEFAULT_PURITY_THRESHOLD,
        max_depth: int | None = None,
        threshold: float = 0.5,
        n_jobs: int | None = 1,
    ):
        self.positive_label = positive_label
        self.purity_threshold = purity_threshold
        self.max_depth = max_depth
        self.threshold = threshold
        self.n_jobs = n_jobs

    def fit(self, X, y):
        X = np.asarray(X, dtype=object)
        y = np.asarray(y, dtype=object)
        if X.ndim != 2:
            raise ValueError(f"X must be 2-dimensional, got shape {X.shape}")
        if len(X) != len(y):
            raise ValueError("X and y must have the same number of samples")

        labels = list(dict.fromkeys(y.tolist()))
        if self.positive_label not in labels:
            labels.append(self.positive_label)
        if len(labels) > 2:
            raise ValueError(f"only binary targets are supported, got classes {labels}")
        classes = np.empty(len(labels), dtype=object)
        classes[:] = sorted(labels, key=str)
        self.classes_ = classes
        self.n_features_in_ = X.shape[1]

        config = TreeConfig(
            purity_threshold=self.purity_threshold,
            positive_label=self.positive_label,
            max_depth=self.max_depth,
            n_jobs=self.n_jobs,
        )
        self.tree_ = build(zip(X, y), config)
        return self

    def _positive_proba(self, X) -> np.ndarray:
        check_is_fitted(self)
        X = np.asarray(X, dtype=object)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X.shape[-1]} features, but {type(self).__name__} "
                f"is expecting {self.n_features_in_} features as input"
            )
        return self.tree_.predict_many(X)

    def predict_proba(self, X):
        """
        Class probabilities, one column per entry of ``classes_``.

        The column of ``positive_label`` holds the leaf probability and the
        other column its complement.
        """
        p = self._positive_proba(X)
        proba = np.empty((len(p), len(self.classes_)), dtype=float)
        for k, label in enumerate(self.classes_):
            proba[:, k] = p if label == self.positive_label else 1.0 - p
        return proba

    def predict(self, X):
        p = self._positive_proba(X)
        others = [c for c in self.classes_ if c != self.positive_label]
        negative = others[0] if others else self.positive_label
        out = np.empty(len(p), dtype=object)
        out[:] = [self.positive_label if pi >= self.threshold else negative for pi in p]
        return out

    def export_rules(self, *, feature_names=None) -> list[str]:
        check_is_fitted(self)
        return self.tree_.export_rules(feature_names=feature_names)

    def export_graphviz(self, filename: str | None = None, *, feature_names=None,
                        format: str = "png") -> str:
        check_is_fitted(self)
        return self.tree_.export_graphviz(filename, feature_names=feature_names, format=format)

    def print_tree(self, feature_names=None):
        check_is_fitted(self)
        self.tree_.print_tree(feature_names)
