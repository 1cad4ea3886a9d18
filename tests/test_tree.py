import dataclasses
import math

import numpy as np
import pytest

from grtree import (
    AttributeIndexOutOfRangeError,
    EmptyDatasetError,
    InconsistentRecordShapeError,
    Leaf,
    Stage,
    TreeConfig,
    UnseenCategoryError,
    build,
    clearance,
    entropy,
    gain_ratio,
    predict,
    select_attribute,
    split_by_attribute,
)
from grtree.tree import leaf_probability, split_information, weighted_entropy


def _tiny_dataset():
    """Return the three-record dataset with a single attribute."""
    return [(["a"], "e"), (["a"], "e"), (["b"], "p")]


def _arrays(rows, labels):
    X = np.array(rows, dtype=object)
    y = np.array(labels, dtype=object)
    return X, y


def _noisy_dataset(n=200, n_attributes=4, seed=0):
    rng = np.random.default_rng(seed)
    values = np.array(["x", "y", "z"])
    records = []
    for _ in range(n):
        attrs = list(rng.choice(values, size=n_attributes))
        label = "e" if rng.random() < 0.5 else "p"
        records.append((attrs, label))
    return records


def test_entropy_single_label_is_zero():
    assert entropy(["e", "e", "e"]) == 0.0


def test_entropy_balanced_two_labels_is_one():
    assert entropy(["e", "p", "p", "e"]) == 1.0


def test_entropy_empty_raises():
    with pytest.raises(EmptyDatasetError):
        entropy([])


def test_split_by_attribute_groups_are_copies():
    X, y = _arrays([["a", "x"], ["b", "x"], ["a", "y"]], ["e", "p", "p"])
    groups = split_by_attribute(X, y, 0)
    assert list(groups) == ["a", "b"]
    X_a, y_a = groups["a"]
    assert X_a.tolist() == [["a", "x"], ["a", "y"]]
    assert y_a.tolist() == ["e", "p"]
    assert not np.shares_memory(X_a, X)
    X_a[0, 1] = "changed"
    assert X[0, 1] == "x"


def test_single_group_attribute_has_zero_gain_ratio():
    X, y = _arrays([["a"], ["a"], ["a"]], ["e", "p", "e"])
    assert split_information(X, 0) == 0.0
    assert gain_ratio(X, y, 0) == 0.0


def test_gain_ratio_of_perfect_and_useless_attributes():
    X, y = _arrays([["a", "x"], ["a", "y"], ["b", "x"], ["b", "y"]], ["e", "e", "p", "p"])
    assert weighted_entropy(X, y, 0) == 0.0
    assert gain_ratio(X, y, 0) == pytest.approx(1.0)
    assert gain_ratio(X, y, 1) == pytest.approx(0.0)


def test_gain_ratio_uneven_three_way_split():
    X, y = _arrays([["a"], ["a"], ["b"], ["c"]], ["e", "p", "p", "p"])
    # groups of size 2, 1, 1; only group "a" is impure
    assert split_information(X, 0) == pytest.approx(1.5)
    assert weighted_entropy(X, y, 0) == pytest.approx(0.5)
    gain = entropy(y) - 0.5
    assert entropy(y) == pytest.approx(-(0.25 * math.log2(0.25) + 0.75 * math.log2(0.75)))
    assert gain_ratio(X, y, 0) == pytest.approx(gain / 1.5)


def test_select_attribute_penalizes_many_valued_attribute():
    # attribute 0 is unique per record: highest raw gain, largest split information
    rows = [[str(i), "x" if i < 5 else "y"] for i in range(8)]
    X, y = _arrays(rows, ["e"] * 4 + ["p"] * 4)
    gain_0 = entropy(y) - weighted_entropy(X, y, 0)
    gain_1 = entropy(y) - weighted_entropy(X, y, 1)
    assert gain_0 == pytest.approx(1.0)
    assert gain_0 > gain_1
    assert gain_ratio(X, y, 0) == pytest.approx(1.0 / 3.0)
    assert gain_ratio(X, y, 1) == pytest.approx(gain_1 / split_information(X, 1))
    attribute, best = select_attribute(X, y)
    assert attribute == 1
    assert best == pytest.approx(gain_ratio(X, y, 1))


def test_select_attribute_prefers_separating_attribute():
    X, y = _arrays([["x", "a"], ["y", "a"], ["x", "b"], ["y", "b"]], ["e", "e", "p", "p"])
    attribute, gain = select_attribute(X, y)
    assert attribute == 1
    assert gain == pytest.approx(1.0)


def test_select_attribute_ties_go_to_lowest_index():
    X, y = _arrays([["a", "a"], ["b", "b"]], ["e", "p"])
    assert select_attribute(X, y)[0] == 0


def test_clearance_and_leaf_probability():
    assert clearance(["e", "e", "p"]) == (pytest.approx(2 / 3), "e")
    # equally frequent labels: the first one seen wins
    assert clearance(["p", "e"]) == (0.5, "p")
    assert leaf_probability(0.8, "e", "e") == 0.8
    assert leaf_probability(0.8, "p", "e") == pytest.approx(0.2)
    with pytest.raises(EmptyDatasetError):
        clearance([])


def test_build_and_predict_tiny_dataset():
    tree = build(_tiny_dataset())
    assert isinstance(tree.root, Stage)
    assert tree.root.attribute == 0
    assert tree.root.children["a"] == Leaf(1.0)
    assert tree.root.children["b"] == Leaf(0.0)
    assert predict(tree, ["a"]) == 1.0
    assert predict(tree, ["b"]) == 0.0
    with pytest.raises(UnseenCategoryError) as excinfo:
        predict(tree, ["c"])
    assert excinfo.value.attribute == 0
    assert excinfo.value.value == "c"


def test_predict_unhashable_value_is_unseen_category():
    tree = build(_tiny_dataset())
    with pytest.raises(UnseenCategoryError) as excinfo:
        predict(tree, [["a"]])
    assert excinfo.value.value == ["a"]


def test_build_pure_dataset_is_single_leaf():
    records = [(["u" if i % 3 else "v"], "e") for i in range(100)]
    tree = build(records)
    assert tree.root == Leaf(1.0)
    assert tree.n_stages == 0


def test_build_stops_at_purity_threshold():
    records = [(["u" if i % 2 else "v"], "e") for i in range(99)] + [(["u"], "p")]
    tree = build(records)
    assert tree.root.is_leaf
    assert tree.root.probability == pytest.approx(0.99)

    records = [(["u" if i % 2 else "v"], "p") for i in range(99)] + [(["u"], "e")]
    tree = build(records)
    assert tree.root.is_leaf
    assert tree.root.probability == pytest.approx(0.01)


def test_build_zero_gain_is_leaf():
    tree = build([(["a"], "e"), (["a"], "p")])
    assert tree.root == Leaf(0.5)


def test_purity_threshold_is_configurable():
    records = [(["u"], "e")] * 9 + [(["v"], "p")]
    assert build(records).root.is_leaf is False
    assert build(records, TreeConfig(purity_threshold=0.9)).root == Leaf(0.9)


def test_positive_label_is_configurable():
    tree = build(_tiny_dataset(), TreeConfig(positive_label="p"))
    assert predict(tree, ["a"]) == 0.0
    assert predict(tree, ["b"]) == 1.0


def test_build_rejects_empty_and_ragged_data():
    with pytest.raises(EmptyDatasetError):
        build([])
    with pytest.raises(InconsistentRecordShapeError):
        build([(["a", "b"], "e"), (["a"], "p")])


def test_predict_short_record_raises():
    tree = build([(["x", "a"], "e"), (["x", "b"], "p")])
    assert tree.root.attribute == 1
    with pytest.raises(AttributeIndexOutOfRangeError) as excinfo:
        predict(tree, ["x"])
    assert isinstance(excinfo.value, IndexError)
    assert excinfo.value.length == 1


def test_predict_is_pure():
    records = _noisy_dataset()
    tree = build(records)
    record = records[0][0]
    before = tree.root
    assert predict(tree, record) == predict(tree, record)
    assert tree.root is before


def test_stage_keys_match_observed_values():
    records = _noisy_dataset()

    def check(node, subset):
        if node.is_leaf:
            return
        observed = {attrs[node.attribute] for attrs, _ in subset}
        assert set(node.children) == observed
        for value, child in node.children.items():
            check(child, [r for r in subset if r[0][node.attribute] == value])

    check(build(records).root, records)


def test_depth_is_bounded_by_attribute_count():
    tree = build(_noisy_dataset(n_attributes=4))
    assert tree.n_stages > 0
    assert tree.depth <= 4


def test_max_depth_caps_tree():
    records = _noisy_dataset()
    assert build(records, TreeConfig(max_depth=0)).root.is_leaf
    assert build(records, TreeConfig(max_depth=1)).depth == 1


def test_parallel_build_matches_sequential():
    records = _noisy_dataset()
    sequential = build(records)
    parallel = build(records, TreeConfig(n_jobs=2))
    assert parallel.root == sequential.root


def test_tree_is_immutable():
    tree = build(_tiny_dataset())
    with pytest.raises(dataclasses.FrozenInstanceError):
        tree.root = Leaf(0.5)
    with pytest.raises(TypeError):
        tree.root.children["c"] = Leaf(0.5)


def test_invalid_config_raises():
    with pytest.raises(ValueError):
        TreeConfig(purity_threshold=0.0)
    with pytest.raises(ValueError):
        TreeConfig(max_depth=-1)
