from __future__ import annotations

import csv
import json
import logging
from typing import Any, Callable, Sequence, TextIO

from tuplegen.config.config import OUTPUT_FORMATS
from tuplegen.domain.tuples import Tuples
from tuplegen.infra.logging.setup import logEvent


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class ProductUseCase:
    """
    Назначение/ответственность:
        Use-case перебора декартова произведения с записью кортежей в поток.
    Взаимодействия:
        - Tuples/TupleIterator для ленивого перебора.
        - logger/run_id/report передаются вызывающей командой.
    """

    def __init__(
        self,
        output_format: str = "text",
        separator: str = ",",
        limit: int | None = None,
    ) -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        if output_format == "csv" and len(separator) != 1:
            raise ValueError(f"CSV separator must be a single character, got {separator!r}")
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        self.output_format = output_format
        self.separator = separator
        self.limit = limit

    def _make_writer(self, out: TextIO) -> Callable[[Sequence[Any]], None]:
        if self.output_format == "csv":
            csv_writer = csv.writer(out, delimiter=self.separator, lineterminator="\n")
            return lambda row: csv_writer.writerow([_stringify(v) for v in row])
        if self.output_format == "json":
            return lambda row: out.write(json.dumps(list(row), ensure_ascii=False, default=str) + "\n")
        return lambda row: out.write(self.separator.join(_stringify(v) for v in row) + "\n")

    def run(
        self,
        tuples: Tuples[Any],
        out: TextIO,
        logger: logging.Logger,
        run_id: str,
        report,
    ) -> int:
        report.meta.sources_count = len(tuples)
        report.meta.limit = self.limit
        report.summary.tuples_total = tuples.size()

        logEvent(
            logger,
            logging.INFO,
            run_id,
            "product",
            f"Enumeration started: sources={len(tuples)} expected={report.summary.tuples_total}",
        )

        write = self._make_writer(out)
        written = 0
        iterator = tuples.tuples()
        try:
            while iterator.has_next():
                if self.limit is not None and written >= self.limit:
                    report.summary.truncated = True
                    break
                write(iterator.next())
                written += 1
        finally:
            iterator.close()

        report.summary.tuples_written = written
        logEvent(
            logger,
            logging.INFO,
            run_id,
            "product",
            f"Enumeration finished: written={written} truncated={report.summary.truncated}",
        )
        return 0

    def count(
        self,
        tuples: Tuples[Any],
        logger: logging.Logger,
        run_id: str,
        report,
    ) -> int:
        """
        Назначение:
            Число кортежей произведения. Если размеры всех источников известны,
            считается без перебора, иначе перебором.
        """
        report.meta.sources_count = len(tuples)
        total = tuples.size()
        if total is None:
            logEvent(logger, logging.DEBUG, run_id, "count", "Source sizes unknown, counting by enumeration")
            total = 0
            iterator = tuples.tuples()
            try:
                for _ in iterator:
                    total += 1
            finally:
                iterator.close()
        report.summary.tuples_total = total
        logEvent(logger, logging.INFO, run_id, "count", f"Tuples total: {total}")
        return total
