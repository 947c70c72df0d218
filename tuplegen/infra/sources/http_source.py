from __future__ import annotations

import time
from typing import Any, Iterator

import httpx

from tuplegen.domain.exceptions import SourceFetchError


class HttpSequenceSource:
    """
    Назначение/ответственность:
        Источник значений из JSON-массива, отдаваемого по HTTP(S).
        Каждый iterator() заново запрашивает URL: так источник остаётся
        перезапускаемым без хранения ответа между обходами.
    Контракт:
        - Ответ 200 с JSON-массивом, либо объект с ключом "items" (массив).
        - Ретраи на 429/5xx и сетевых ошибках с экспоненциальной задержкой.
    Ошибки/исключения:
        SourceFetchError после исчерпания ретраев или при неверном формате.
    """

    kind = "http"

    def __init__(
        self,
        url: str,
        timeoutSeconds: float = 20.0,
        retries: int = 3,
        retryBackoffSeconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url
        self.retries = retries
        self.retryBackoffSeconds = retryBackoffSeconds
        self.retry_attempts = 0
        self.fetch_count = 0
        self.client = httpx.Client(timeout=timeoutSeconds, transport=transport)

    def iterator(self) -> Iterator[Any]:
        return iter(self.fetchValues())

    def size(self) -> int | None:
        return None

    def close(self) -> None:
        self.client.close()

    def _should_retry(self, resp: httpx.Response) -> bool:
        """Решает, стоит ли повторить запрос (429 или 5xx)."""
        if resp.status_code == 429:
            return True
        if 500 <= resp.status_code <= 599:
            return True
        return False

    def _sleep_backoff(self, attempt: int) -> None:
        """Задержка с экспоненциальным ростом для ретраев."""
        delay = self.retryBackoffSeconds * (2 ** attempt)
        time.sleep(delay)

    def _get_with_retry(self) -> httpx.Response:
        attempt = 0
        while True:
            try:
                resp = self.client.get(self.url, headers={"accept": "application/json"})
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self.retries:
                    raise SourceFetchError(f"Network error: {exc}", url=self.url) from exc
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if resp.status_code == 200:
                return resp

            if self._should_retry(resp) and attempt < self.retries:
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            raise SourceFetchError(
                f"HTTP {resp.status_code}",
                url=self.url,
                status_code=resp.status_code,
                retryable=self._should_retry(resp),
            )

    def fetchValues(self) -> list[Any]:
        """GET JSON с ретраями; возвращает список значений или бросает SourceFetchError."""
        resp = self._get_with_retry()
        self.fetch_count += 1
        try:
            data = resp.json()
        except ValueError as exc:
            raise SourceFetchError(
                "Invalid JSON response",
                url=self.url,
                status_code=resp.status_code,
                retryable=False,
            ) from exc
        if isinstance(data, dict):
            data = data.get("items")
        if not isinstance(data, list):
            raise SourceFetchError(
                "Expected a JSON array of values",
                url=self.url,
                status_code=resp.status_code,
                retryable=False,
            )
        return data

    def __repr__(self) -> str:
        return f"HttpSequenceSource({self.url!r})"
