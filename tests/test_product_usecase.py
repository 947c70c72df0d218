from __future__ import annotations

import io
import logging

import pytest

from tuplegen.domain.tuples import Tuples
from tuplegen.infra.artifacts.report_writer import createEmptyReport
from tuplegen.usecases.product_usecase import ProductUseCase


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tuplegen.test.usecase")


def _report():
    return createEmptyReport(runId="run-1", command="product", configSources=[])


def test_run_writes_text_rows(logger):
    out = io.StringIO()
    report = _report()

    code = ProductUseCase(separator="|").run(Tuples([1, 2], ["x"]), out, logger, "run-1", report)

    assert code == 0
    assert out.getvalue() == "1|x\n2|x\n"
    assert report.summary.tuples_written == 2
    assert report.summary.tuples_total == 2
    assert report.summary.truncated is False
    assert report.meta.sources_count == 2


def test_run_csv_quotes_values_with_separator(logger):
    out = io.StringIO()

    ProductUseCase(output_format="csv").run(Tuples(["a,b"], [None]), out, logger, "run-1", _report())

    assert out.getvalue() == '"a,b",\n'


def test_limit_zero_writes_nothing_and_marks_truncated(logger):
    out = io.StringIO()
    report = _report()

    ProductUseCase(limit=0).run(Tuples([1]), out, logger, "run-1", report)

    assert out.getvalue() == ""
    assert report.summary.truncated is True


def test_limit_equal_to_total_is_not_truncated(logger):
    report = _report()

    ProductUseCase(limit=2).run(Tuples([1, 2]), io.StringIO(), logger, "run-1", report)

    assert report.summary.truncated is False
    assert report.summary.tuples_written == 2


def test_count_falls_back_to_enumeration(logger):
    report = _report()

    total = ProductUseCase().count(Tuples([1, 2], lambda: iter("abc")), logger, "run-1", report)

    assert total == 6
    assert report.summary.tuples_total == 6


def test_invalid_arguments_are_rejected():
    with pytest.raises(ValueError):
        ProductUseCase(output_format="xml")
    with pytest.raises(ValueError):
        ProductUseCase(limit=-1)


def test_csv_separator_must_be_single_character():
    with pytest.raises(ValueError, match="single character"):
        ProductUseCase(output_format="csv", separator="::")
    with pytest.raises(ValueError):
        ProductUseCase(output_format="csv", separator="")
    assert ProductUseCase(output_format="text", separator="::").separator == "::"


def test_limit_closes_open_cursors(logger):
    closed = []

    def values():
        try:
            yield from "abc"
        finally:
            closed.append(True)

    report = _report()

    ProductUseCase(limit=1).run(Tuples([1], values), io.StringIO(), logger, "run-1", report)

    assert report.summary.truncated is True
    assert closed == [True]
