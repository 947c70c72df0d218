from __future__ import annotations

import pytest

from tuplegen.domain.adapters import (
    CollectionSequenceSource,
    FactorySequenceSource,
    as_sequence_source,
    source_size,
)
from tuplegen.domain.exceptions import NonRestartableSourceError
from tuplegen.domain.ports.sources import SequenceSource
from tuplegen.domain.tuples import Tuples


class _CountingSource:
    def __init__(self, values):
        self.values = values
        self.opened = 0

    def iterator(self):
        self.opened += 1
        return iter(self.values)


def test_collection_adapter_gives_independent_cursors():
    source = CollectionSequenceSource([1, 2, 3])

    first = source.iterator()
    second = source.iterator()
    next(first)

    assert list(first) == [2, 3]
    assert list(second) == [1, 2, 3]
    assert source.size() == 3


def test_collection_adapter_satisfies_protocol():
    assert isinstance(CollectionSequenceSource([]), SequenceSource)
    assert isinstance(FactorySequenceSource(list), SequenceSource)


def test_custom_source_passes_through_and_is_reopened_on_wrap():
    source = _CountingSource(["x", "y"])

    assert as_sequence_source(source) is source
    rows = [list(row) for row in Tuples([1, 2, 3], source).tuples()]

    assert len(rows) == 6
    # first open + one per carry (3 values of the left source)
    assert source.opened == 4


def test_generator_is_rejected_as_non_restartable():
    with pytest.raises(NonRestartableSourceError) as exc:
        as_sequence_source(x for x in range(3))
    assert exc.value.code == "NON_RESTARTABLE_SOURCE"
    assert exc.value.details == {"type": "generator"}


def test_plain_iterator_is_rejected_by_tuples():
    with pytest.raises(NonRestartableSourceError):
        Tuples([1], iter([1, 2]))


def test_callable_becomes_factory_source():
    def letters():
        yield from "ab"

    source = as_sequence_source(letters)

    assert isinstance(source, FactorySequenceSource)
    assert list(source.iterator()) == ["a", "b"]
    assert list(source.iterator()) == ["a", "b"]
    assert source_size(source) is None


def test_unsupported_value_raises_type_error():
    with pytest.raises(TypeError):
        as_sequence_source(42)


def test_source_size_for_custom_source_without_size():
    assert source_size(_CountingSource([1])) is None
