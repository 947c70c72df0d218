from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Iterable, Iterator, TypeVar

from tuplegen.domain.adapters import as_sequence_source, source_size
from tuplegen.domain.exceptions import NoElementError, RegistrationClosedError, UnsupportedOperationError
from tuplegen.domain.ports.sources import SequenceSource

T = TypeVar("T")

_MISSING = object()


class IterationState(str, Enum):
    """
    Назначение:
        Состояние перебора вместо nullable-флага "есть следующий".
    """

    NOT_STARTED = "NOT_STARTED"
    NOT_COMPUTED = "NOT_COMPUTED"
    READY = "READY"
    EXHAUSTED = "EXHAUSTED"


class TupleIterator(Generic[T]):
    """
    Назначение/ответственность:
        Ленивый перебор декартова произведения источников по принципу одометра:
        последний источник меняется быстрее всех, при исчерпании его курсор
        открывается заново, а перенос уходит в соседний слева разряд.

    Инварианты/гарантии:
        - Пока перебор идёт, на каждый источник открыт ровно один курсор.
        - Буфер кортежа имеет длину, равную числу источников, и не пересоздаётся:
          next() каждый раз возвращает один и тот же list. Чтобы сохранить
          значения, вызывающий копирует его (или включает snapshot=True).
        - has_next() идемпотентен: повторные вызовы не сдвигают перебор.
        - Итератор одноразовый; для повторного перебора нужен новый.

    Ограничения:
        Не потокобезопасен. Источники обязаны поддерживать повторный обход.
    """

    def __init__(self, sources: Iterable[SequenceSource[T]], snapshot: bool = False) -> None:
        self._sources: list[SequenceSource[T]] = list(sources)
        self._cursors: list[Iterator[T] | None] = [None] * len(self._sources)
        self._tuple: list[Any] = [None] * len(self._sources)
        self._state = IterationState.NOT_STARTED
        self._snapshot = snapshot

    @property
    def state(self) -> IterationState:
        return self._state

    def has_next(self) -> bool:
        self._ensure_seeked()
        return self._state is IterationState.READY

    def next(self) -> list[T] | tuple[T, ...]:
        """
        Контракт:
            Возвращает текущий кортеж и помечает его как потреблённый.
        Ошибки/исключения:
            NoElementError, если перебор исчерпан.
        """
        self._ensure_seeked()
        if self._state is not IterationState.READY:
            raise NoElementError(details={"sources_count": len(self._sources)})
        self._state = IterationState.NOT_COMPUTED
        if self._snapshot:
            return tuple(self._tuple)
        return self._tuple

    def remove(self) -> None:
        raise UnsupportedOperationError("remove")

    def close(self) -> None:
        """Досрочно завершает перебор и закрывает открытые курсоры."""
        self._state = IterationState.EXHAUSTED
        self._release_cursors()

    def __iter__(self) -> TupleIterator[T]:
        return self

    def __next__(self) -> list[T] | tuple[T, ...]:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def _ensure_seeked(self) -> None:
        if self._state is IterationState.NOT_STARTED:
            found = self._seek_first()
        elif self._state is IterationState.NOT_COMPUTED:
            found = self._seek_next()
        else:
            return
        if found:
            self._state = IterationState.READY
        else:
            self._state = IterationState.EXHAUSTED
            self._release_cursors()

    def _seek_first(self) -> bool:
        for index, source in enumerate(self._sources):
            cursor = source.iterator()
            value = next(cursor, _MISSING)
            self._cursors[index] = cursor
            if value is _MISSING:
                # один пустой источник обнуляет всё произведение
                return False
            self._tuple[index] = value
        return True

    def _seek_next(self) -> bool:
        for index in range(len(self._sources) - 1, -1, -1):
            value = next(self._cursors[index], _MISSING)
            if value is not _MISSING:
                self._tuple[index] = value
                return True

            # разряд исчерпан: начинаем его заново и переносим влево
            cursor = self._sources[index].iterator()
            value = next(cursor, _MISSING)
            self._cursors[index] = cursor
            if value is _MISSING:
                return False
            self._tuple[index] = value
        return False

    def _release_cursors(self) -> None:
        for index, cursor in enumerate(self._cursors):
            close = getattr(cursor, "close", None)
            if close is not None:
                close()
            self._cursors[index] = None


class Tuples(Generic[T]):
    """
    Назначение/ответственность:
        Реестр упорядоченных источников, из которого строится перебор
        всех n-кортежей декартова произведения. i-й элемент кортежа
        берётся из i-го источника.

    Пример:
        Tuples([1, 2], ["x", "y"]) перебирает
        [1, "x"], [1, "y"], [2, "x"], [2, "y"].

    Ограничения:
        Источники регистрируются до первого вызова tuples(); после него
        add() выбрасывает RegistrationClosedError. Новые итераторы при этом
        можно получать сколько угодно раз.
    """

    def __init__(self, *sources: Any) -> None:
        self._sources: list[SequenceSource[T]] = []
        self._closed = False
        for source in sources:
            self.add(source)

    @classmethod
    def from_list(cls, sources: Iterable[Any]) -> Tuples[Any]:
        return cls(*sources)

    def add(self, source: Any) -> None:
        """
        Контракт:
            Добавляет источник в конец списка. Принимает SequenceSource,
            фабрику без аргументов или коллекцию (см. as_sequence_source).
        Ошибки/исключения:
            RegistrationClosedError, если перебор уже запрошен.
            NonRestartableSourceError для одноразовых итераторов.
        """
        if self._closed:
            raise RegistrationClosedError(len(self._sources))
        self._sources.append(as_sequence_source(source))

    @property
    def sources(self) -> tuple[SequenceSource[T], ...]:
        return tuple(self._sources)

    @property
    def closed(self) -> bool:
        return self._closed

    def size(self) -> int | None:
        """Число кортежей, если размеры всех источников известны (0, если хоть один пуст)."""
        total: int | None = 1
        for source in self._sources:
            size = source_size(source)
            if size == 0:
                return 0
            if size is None or total is None:
                total = None
                continue
            total *= size
        return total

    def tuples(self, snapshot: bool = False) -> TupleIterator[T]:
        self._closed = True
        return TupleIterator(self._sources, snapshot=snapshot)

    def __iter__(self) -> TupleIterator[T]:
        return self.tuples()

    def __len__(self) -> int:
        return len(self._sources)


__all__ = ["IterationState", "TupleIterator", "Tuples"]
