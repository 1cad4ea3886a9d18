# -*- coding: utf-8 -*-
"""
grtree.exceptions
=================

Typed failures raised by tree induction and prediction.

Build-time errors (:class:`EmptyDatasetError`,
:class:`InconsistentRecordShapeError`) and predict-time errors
(:class:`UnseenCategoryError`, :class:`AttributeIndexOutOfRangeError`) all
derive from :class:`TreeError`.  Each one also derives from the closest
built-in exception so callers that already catch ``ValueError``,
``LookupError`` or ``IndexError`` keep working.
"""

from __future__ import annotations


class TreeError(Exception):
    """Base class for every error raised by :mod:`grtree`."""


class EmptyDatasetError(TreeError, ValueError):
    """A dataset slice that must hold at least one record is empty."""


class InconsistentRecordShapeError(TreeError, ValueError):
    """Records of one dataset disagree on their attribute count."""

    def __init__(self, lengths):
        self.lengths = sorted(lengths)
        super().__init__(
            f"all records must have the same number of attributes, got {self.lengths}"
        )


class UnseenCategoryError(TreeError, LookupError):
    """A record presents a value never observed for an attribute during training.

    Attributes
    ----------
    attribute : int
        Index of the attribute inspected by the stage node.
    value : object
        The value found in the record.
    """

    def __init__(self, attribute: int, value):
        self.attribute = attribute
        self.value = value
        super().__init__(f"unseen category {value!r} for attribute {attribute}")


class AttributeIndexOutOfRangeError(TreeError, IndexError):
    """A record is too short for the attribute index a stage node expects."""

    def __init__(self, attribute: int, length: int):
        self.attribute = attribute
        self.length = length
        super().__init__(
            f"attribute index {attribute} out of range for a record of length {length}"
        )
