from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import httpx

from tuplegen.domain.adapters import CollectionSequenceSource
from tuplegen.domain.exceptions import InvalidSourceSpecError
from tuplegen.domain.ports.sources import SequenceSource
from tuplegen.infra.sources.file_sources import CsvColumnSequenceSource, LineFileSequenceSource
from tuplegen.infra.sources.http_source import HttpSequenceSource

SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9_-]*):(.*)$", re.DOTALL)
KNOWN_SCHEMES = ("values", "range", "lines", "csv")


class SourceSpecParser:
    """
    Назначение/ответственность:
        Строит SequenceSource по строковому описанию из CLI/config.

    Поддерживаемые формы:
        values:a,b,c      значения через разделитель (схему можно опустить: a,b,c)
        range:0:10[:2]    целые числа как range(start, stop, step)
        lines:PATH        строки текстового файла
        csv:PATH#COLUMN   колонка CSV по имени (или по номеру с нуля без заголовка)
        http(s)://URL     JSON-массив по HTTP
    """

    def __init__(
        self,
        separator: str = ",",
        timeout_seconds: float = 20.0,
        retries: int = 3,
        retry_backoff_seconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.separator = separator
        self.timeout_seconds = timeout_seconds
        self.retries = retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.transport = transport

    def parse(self, spec: str) -> SequenceSource[Any]:
        text = spec.strip()
        if not text:
            raise InvalidSourceSpecError(spec, "empty spec")

        if text.startswith(("http://", "https://")):
            return HttpSequenceSource(
                text,
                timeoutSeconds=self.timeout_seconds,
                retries=self.retries,
                retryBackoffSeconds=self.retry_backoff_seconds,
                transport=self.transport,
            )

        match = SCHEME_RE.match(text)
        if match is None:
            return self._values(text)

        scheme, body = match.group(1).lower(), match.group(2)
        if scheme == "values":
            return self._values(body)
        if scheme == "range":
            return self._range(spec, body)
        if scheme == "lines":
            return LineFileSequenceSource(self._existing_file(spec, body))
        if scheme == "csv":
            return self._csv(spec, body)
        raise InvalidSourceSpecError(spec, f"unknown scheme '{scheme}' (expected one of {', '.join(KNOWN_SCHEMES)}, http, https)")

    def build(self, entry: Any) -> SequenceSource[Any]:
        """
        Назначение:
            Источник из элемента config.sources: строка-описание или список значений.
        """
        if isinstance(entry, str):
            return self.parse(entry)
        if isinstance(entry, list):
            return CollectionSequenceSource(list(entry))
        raise InvalidSourceSpecError(repr(entry), "expected a spec string or a list of values")

    def _values(self, body: str) -> CollectionSequenceSource[str]:
        if body.strip() == "":
            return CollectionSequenceSource([])
        items = [item.strip() for item in body.split(self.separator)]
        return CollectionSequenceSource([item for item in items if item != ""])

    def _range(self, spec: str, body: str) -> CollectionSequenceSource[int]:
        parts = body.split(":")
        if len(parts) not in (2, 3):
            raise InvalidSourceSpecError(spec, "expected range:START:STOP[:STEP]")
        try:
            numbers = [int(part) for part in parts]
        except ValueError as exc:
            raise InvalidSourceSpecError(spec, "range bounds must be integers") from exc
        if len(numbers) == 3 and numbers[2] == 0:
            raise InvalidSourceSpecError(spec, "range step must not be zero")
        return CollectionSequenceSource(range(*numbers))

    def _csv(self, spec: str, body: str) -> CsvColumnSequenceSource:
        path, sep, column = body.rpartition("#")
        if not sep or not path or not column:
            raise InvalidSourceSpecError(spec, "expected csv:PATH#COLUMN")
        has_header = not column.isdigit()
        return CsvColumnSequenceSource(self._existing_file(spec, path), column, has_header=has_header)

    def _existing_file(self, spec: str, path: str) -> str:
        p = Path(path)
        if not p.exists() or not p.is_file():
            raise InvalidSourceSpecError(spec, f"file not found: {path}")
        return str(p)


def describe_source(source: SequenceSource[Any]) -> str:
    """Короткое имя вида источника для вывода check-sources."""
    return getattr(source, "kind", type(source).__name__)


__all__ = ["SourceSpecParser", "describe_source"]
