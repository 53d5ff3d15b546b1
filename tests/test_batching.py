# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from itertools import count

from py_neo_transparence.batching import batch


def test_batch_groups_consecutive_items_with_remainder_last():
    assert list(batch(range(5), 2)) == [[0, 1], [2, 3], [4]]


def test_batch_exact_multiple():
    assert list(batch("abcdef", 3)) == [["a", "b", "c"], ["d", "e", "f"]]


def test_batch_larger_than_input():
    assert list(batch([1, 2], 100)) == [[1, 2]]


def test_batch_of_empty_input_yields_nothing():
    assert list(batch([], 3)) == []


def test_non_positive_size_yields_nothing():
    assert list(batch([1, 2, 3], 0)) == []
    assert list(batch([1, 2, 3], -1)) == []


def test_batch_is_lazy_over_unbounded_sources():
    chunks = batch(count(), 3)

    assert next(chunks) == [0, 1, 2]
    assert next(chunks) == [3, 4, 5]
