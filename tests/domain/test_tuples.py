from __future__ import annotations

import pytest

from tuplegen.domain.error_codes import ErrorCode
from tuplegen.domain.exceptions import NoElementError, RegistrationClosedError, UnsupportedOperationError
from tuplegen.domain.tuples import IterationState, Tuples


def _collect(tuples: Tuples) -> list[list]:
    return [list(row) for row in tuples.tuples()]


def test_two_sources_enumerate_in_odometer_order():
    tuples = Tuples([1, 2], ["x", "y"])

    assert _collect(tuples) == [[1, "x"], [1, "y"], [2, "x"], [2, "y"]]


def test_empty_source_gives_empty_product():
    iterator = Tuples([1, 2], []).tuples()

    assert iterator.has_next() is False
    assert iterator.state is IterationState.EXHAUSTED
    with pytest.raises(NoElementError):
        iterator.next()


def test_single_source_yields_one_element_tuples():
    assert _collect(Tuples(["a", "b", "c"])) == [["a"], ["b"], ["c"]]


def test_sizes_2_3_2_yield_12_tuples_with_carry_at_seventh():
    rows = _collect(Tuples(["a1", "a2"], ["b1", "b2", "b3"], ["c1", "c2"]))

    assert len(rows) == 12
    assert rows[5] == ["a1", "b3", "c2"]
    assert rows[6] == ["a2", "b1", "c1"]
    assert rows[-1] == ["a2", "b3", "c2"]


def test_last_source_varies_fastest():
    rows = _collect(Tuples(range(3), range(4)))

    for prev, cur in zip(rows, rows[1:]):
        assert prev[1] != cur[1]
    first_column_changes = sum(1 for prev, cur in zip(rows, rows[1:]) if prev[0] != cur[0])
    assert first_column_changes == 2


def test_total_is_product_of_sizes():
    tuples = Tuples(range(2), range(5), range(3), range(1))

    assert sum(1 for _ in tuples.tuples()) == 30
    assert tuples.size() == 30


def test_has_next_is_idempotent():
    iterator = Tuples([1, 2], ["x"]).tuples()

    assert iterator.has_next() is True
    assert iterator.has_next() is True
    assert iterator.state is IterationState.READY
    assert list(iterator.next()) == [1, "x"]
    assert iterator.state is IterationState.NOT_COMPUTED
    assert iterator.has_next() is True
    assert iterator.has_next() is True
    assert list(iterator.next()) == [2, "x"]
    assert iterator.has_next() is False
    assert iterator.has_next() is False


def test_next_without_has_next_walks_whole_product():
    iterator = Tuples([1, 2], [3]).tuples()

    assert list(iterator.next()) == [1, 3]
    assert list(iterator.next()) == [2, 3]
    with pytest.raises(NoElementError) as exc:
        iterator.next()
    assert exc.value.code == ErrorCode.NO_ELEMENT.value


def test_next_past_exhaustion_keeps_failing():
    iterator = Tuples(["only"]).tuples()
    iterator.next()

    for _ in range(3):
        with pytest.raises(NoElementError):
            iterator.next()


def test_remove_is_unsupported():
    iterator = Tuples([1]).tuples()

    with pytest.raises(UnsupportedOperationError) as exc:
        iterator.remove()
    assert exc.value.to_dict()["code"] == "UNSUPPORTED_OPERATION"
    assert exc.value.operation == "remove"


def test_buffer_is_aliased_between_calls():
    iterator = Tuples([1, 2], ["x", "y"]).tuples()

    first = iterator.next()
    first_snapshot = list(first)
    second = iterator.next()

    assert second is first
    assert first_snapshot != list(second)
    assert first_snapshot == [1, "x"]
    assert list(second) == [1, "y"]


def test_snapshot_mode_returns_fresh_tuples():
    rows = list(Tuples([1, 2], ["x"]).tuples(snapshot=True))

    assert rows == [(1, "x"), (2, "x")]
    assert rows[0] is not rows[1]


def test_tuple_length_matches_source_count():
    for row in Tuples("ab", "cd", "ef").tuples():
        assert len(row) == 3


def test_no_sources_yield_single_empty_tuple():
    rows = [list(row) for row in Tuples().tuples()]

    assert rows == [[]]


def test_construct_from_list_and_add():
    tuples = Tuples.from_list([[1, 2], ["x"]])
    tuples.add(["p", "q"])

    assert len(tuples) == 3
    assert _collect(tuples) == [[1, "x", "p"], [1, "x", "q"], [2, "x", "p"], [2, "x", "q"]]


def test_add_after_tuples_requested_is_rejected():
    tuples = Tuples([1, 2])
    tuples.tuples()

    assert tuples.closed is True
    with pytest.raises(RegistrationClosedError) as exc:
        tuples.add([3])
    assert exc.value.details == {"sources_count": 1}


def test_fresh_iterator_re_enumerates():
    tuples = Tuples([1, 2], ["x"])

    assert _collect(tuples) == _collect(tuples)


def test_python_iteration_protocol():
    seen = []
    for row in Tuples([1, 2], [3, 4]):
        seen.append(tuple(row))

    assert seen == [(1, 3), (1, 4), (2, 3), (2, 4)]


def test_source_that_stops_restarting_ends_enumeration():
    calls = {"count": 0}

    def flaky():
        calls["count"] += 1
        return [1, 2] if calls["count"] == 1 else []

    rows = _collect(Tuples(["a", "b"], flaky))

    assert rows == [["a", 1], ["a", 2]]
    assert calls["count"] == 2


def test_cursor_errors_propagate():
    def broken():
        yield 1
        raise RuntimeError("disk gone")

    iterator = Tuples(["a"], broken).tuples()
    iterator.next()

    with pytest.raises(RuntimeError, match="disk gone"):
        iterator.has_next()


def test_exhaustion_closes_generator_cursors():
    closed = []

    def values():
        try:
            yield "x"
            yield "y"
        finally:
            closed.append(True)

    iterator = Tuples(values, []).tuples()

    assert iterator.has_next() is False
    assert closed == [True]


def test_close_stops_enumeration_and_closes_cursors():
    closed = []

    def values():
        try:
            yield "x"
            yield "y"
        finally:
            closed.append(True)

    iterator = Tuples([1, 2], values).tuples()

    assert iterator.next() == [1, "x"]
    iterator.close()

    assert closed == [True]
    assert iterator.has_next() is False
    assert iterator.state is IterationState.EXHAUSTED
    with pytest.raises(NoElementError):
        iterator.next()


def test_size_unknown_for_factory_sources():
    assert Tuples([1, 2], lambda: range(3)).size() is None
    assert Tuples([], lambda: range(3)).size() == 0
