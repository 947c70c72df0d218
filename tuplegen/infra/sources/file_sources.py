from __future__ import annotations

import csv
from typing import Iterator

from tuplegen.infra.sources.csv_utils import CsvFormatError, parseNull


class LineFileSequenceSource:
    """
    Назначение/ответственность:
        Источник значений из текстового файла: одно значение на строку.
        Файл переоткрывается при каждом iterator(), поэтому источник
        перезапускаемый и не держит содержимое в памяти.
    """

    kind = "lines"

    def __init__(self, path: str, encoding: str = "utf-8") -> None:
        self.path = path
        self.encoding = encoding

    def iterator(self) -> Iterator[str]:
        with open(self.path, "r", encoding=self.encoding) as f:
            for line in f:
                value = line.strip()
                if value:
                    yield value

    def size(self) -> int | None:
        return None

    def __repr__(self) -> str:
        return f"LineFileSequenceSource({self.path!r})"


class CsvColumnSequenceSource:
    """
    Назначение/ответственность:
        Источник значений одной колонки CSV-файла.
    Контракт:
        - column: имя колонки (has_header=True) или её номер с нуля.
        - Пустые ячейки и NULL пропускаются, значения тримятся.
    Ошибки/исключения:
        CsvFormatError, если нет заголовка или колонки.
    """

    kind = "csv"

    def __init__(self, path: str, column: str, has_header: bool = True) -> None:
        self.path = path
        self.column = column
        self.has_header = has_header

    def iterator(self) -> Iterator[str]:
        with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
            if self.has_header:
                reader = csv.DictReader(f, delimiter=",")
                if reader.fieldnames is None:
                    raise CsvFormatError(f"Missing header in CSV: {self.path}")
                if self.column not in reader.fieldnames:
                    raise CsvFormatError(f"Column '{self.column}' not found in CSV: {self.path}")
                for row in reader:
                    value = parseNull(row.get(self.column))
                    if value is not None:
                        yield value
                return

            try:
                index = int(self.column)
            except ValueError as exc:
                raise CsvFormatError(f"Column index must be an integer without header: {self.column}") from exc
            reader = csv.reader(f, delimiter=",")
            for csv_line_no, row in enumerate(reader, start=1):
                if not row:
                    continue
                if index >= len(row):
                    raise CsvFormatError(
                        f"Invalid column count at line {csv_line_no}: expected > {index}, got {len(row)}"
                    )
                value = parseNull(row[index])
                if value is not None:
                    yield value

    def size(self) -> int | None:
        return None

    def __repr__(self) -> str:
        return f"CsvColumnSequenceSource({self.path!r}, {self.column!r})"
