import io
import itertools
import math
import random
from enum import Enum

import pytest

from extension_suite.utils import enums, functional, mappings, sequences, strings


# --- batch ---

@pytest.mark.parametrize("length", [0, 1, 5, 6, 7, 12])
@pytest.mark.parametrize("size", [1, 2, 3, 5])
def test_batch_chunk_count_sizes_and_order(length, size):
    items = list(range(length))

    chunks = list(sequences.batch(items, size))

    assert len(chunks) == math.ceil(length / size)
    assert all(len(chunk) == size for chunk in chunks[:-1])
    if chunks:
        assert 0 < len(chunks[-1]) <= size
    assert list(itertools.chain.from_iterable(chunks)) == items


def test_batch_none_is_empty():
    assert list(sequences.batch(None, 3)) == []


def test_batch_rejects_non_positive_size():
    with pytest.raises(ValueError):
        sequences.batch([1, 2], 0)


def test_batch_is_lazy():
    chunks = sequences.batch(itertools.count(), 4)

    assert next(chunks) == [0, 1, 2, 3]
    assert next(chunks) == [4, 5, 6, 7]


# --- other sequence helpers ---

def test_randomise_keeps_items():
    items = list(range(20))

    shuffled = sequences.randomise(items, random.Random(7))

    assert sorted(shuffled) == items
    assert shuffled != items


def test_tap_allows_side_effects():
    seen = []

    assert list(sequences.tap([1, 2, 3], seen.append)) == [1, 2, 3]
    assert seen == [1, 2, 3]


def test_tap_with_index():
    seen = []

    list(sequences.tap_with_index("ab", lambda item, index: seen.append((item, index))))

    assert seen == [("a", 0), ("b", 1)]


def test_to_deduplicated_dict_first_wins():
    result = sequences.to_deduplicated_dict([("a", 1), ("b", 2), ("a", 3)], lambda pair: pair[0])

    assert result == {"a": ("a", 1), "b": ("b", 2)}


def test_to_deduplicated_dict_replace_item():
    result = sequences.to_deduplicated_dict([("a", 1), ("a", 3)], lambda pair: pair[0], replace_item=True)

    assert result == {"a": ("a", 3)}


def test_to_dict_with_index():
    result = sequences.to_dict_with_index("xy", lambda item, i: i, lambda item, i: item * (i + 1))

    assert result == {0: "x", 1: "yy"}


def test_to_dict_with_index_rejects_duplicate_keys():
    with pytest.raises(ValueError):
        sequences.to_dict_with_index([1, 2], lambda item, i: "same", lambda item, i: item)


def test_distinct_by():
    assert list(sequences.distinct_by([1, 2, 2, 3, 4, 1], lambda x: x)) == [1, 2, 3, 4]


def test_distinct_with_report():
    duplicates = []

    result = sequences.distinct_with_report(["a", "b", "A", "a"], str.lower, lambda item, count: duplicates.append((item, count)))

    assert result == ["a", "b"]
    assert duplicates == [("a", 3)]


def test_for_each_variants():
    seen = []
    sequences.for_each([1, 2], seen.append)
    sequences.for_each_with_index(["z"], lambda item, index: seen.append((item, index)))

    assert seen == [1, 2, ("z", 0)]


def test_concatenate_and_prepend():
    assert list(sequences.concatenate([1, 2], 3, 4)) == [1, 2, 3, 4]
    assert list(sequences.prepend([3], 1, 2)) == [1, 2, 3]
    assert list(sequences.prepend(None, 1)) == [1]


# --- mappings ---

def test_get_value_or_default():
    data = {"a": 1}

    assert mappings.get_value_or_default(data, "a") == 1
    assert mappings.get_value_or_default(data, "b") is None
    assert mappings.get_value_or_default(data, "b", 5) == 5


def test_add_or_update():
    data = {}

    mappings.add_or_update(data, "hits", lambda: 1, lambda v: v + 1)
    stored = mappings.add_or_update(data, "hits", lambda: 1, lambda v: v + 1)

    assert stored == 2
    assert data == {"hits": 2}


# --- functional ---

def test_pipe_to_and_tap_value():
    seen = []

    assert functional.pipe_to(3, lambda x: x * 2) == 6
    assert functional.tap_value("v", seen.append) == "v"
    assert seen == ["v"]


# --- strings ---

def test_when_only_applies_action_if_predicate_true():
    builder = io.StringIO()

    strings.when(builder, lambda: True, lambda b: strings.append_line(b, "yes"))
    strings.when(builder, lambda: False, lambda b: strings.append_line(b, "no"))

    assert builder.getvalue() == "yes\n"


def test_process_sequence_folds_items():
    builder = strings.process_sequence(io.StringIO(), [1, 2, 3], lambda b, item: strings.append_line(b, str(item)))

    assert builder.getvalue() == "1\n2\n3\n"


# --- enums ---

class Side(Enum):
    BID = "bid"
    ASK = "ask"

    __descriptions__ = {"BID": "Buy side of the book"}


class Level(Enum):
    LOW = (1, "Low priority")

    def __init__(self, rank, description):
        self.rank = rank
        self.description = description


def test_get_description():
    assert enums.get_description(Side.BID) == "Buy side of the book"
    assert enums.get_description(Side.ASK) is None
    assert enums.get_description(Level.LOW) == "Low priority"
