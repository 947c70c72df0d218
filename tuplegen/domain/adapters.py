from __future__ import annotations

from collections.abc import Iterable, Iterator, Sized
from typing import Any, Callable, Generic, TypeVar

from tuplegen.domain.exceptions import NonRestartableSourceError
from tuplegen.domain.ports.sources import SequenceSource

T = TypeVar("T")


class CollectionSequenceSource(Generic[T]):
    """
    Назначение/ответственность:
        Адаптер упорядоченной коллекции в памяти к SequenceSource.
        Состояния не хранит: каждый iterator() это новый iter(collection).
    """

    kind = "collection"

    def __init__(self, collection: Iterable[T]) -> None:
        self.collection = collection

    def iterator(self) -> Iterator[T]:
        return iter(self.collection)

    def size(self) -> int | None:
        if isinstance(self.collection, Sized):
            return len(self.collection)
        return None

    def __repr__(self) -> str:
        return f"CollectionSequenceSource({self.collection!r})"


class FactorySequenceSource(Generic[T]):
    """
    Назначение/ответственность:
        Источник поверх фабрики без аргументов, возвращающей свежий iterable
        (например, функция-генератор). Позволяет перебирать данные,
        которые не материализованы в памяти.
    """

    kind = "factory"

    def __init__(self, factory: Callable[[], Iterable[T]]) -> None:
        self.factory = factory

    def iterator(self) -> Iterator[T]:
        return iter(self.factory())

    def size(self) -> int | None:
        return None

    def __repr__(self) -> str:
        name = getattr(self.factory, "__name__", type(self.factory).__name__)
        return f"FactorySequenceSource({name})"


def as_sequence_source(value: Any) -> SequenceSource[Any]:
    """
    Назначение:
        Приводит регистрируемое значение к SequenceSource.

    Входные данные:
        value: Any
            SequenceSource, фабрика (callable без аргументов) или коллекция.

    Выходные данные:
        SequenceSource

    Алгоритм:
        - объект с методом iterator() принимается как есть;
        - одноразовый итератор/генератор отклоняется (его нельзя перезапустить);
        - callable оборачивается в FactorySequenceSource;
        - прочие iterable оборачиваются в CollectionSequenceSource.
    """
    if isinstance(value, SequenceSource):
        return value
    if isinstance(value, Iterator):
        raise NonRestartableSourceError(type(value).__name__)
    if callable(value):
        return FactorySequenceSource(value)
    if isinstance(value, Iterable):
        return CollectionSequenceSource(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a sequence source")


def source_size(source: SequenceSource[Any]) -> int | None:
    """Размер источника, если он известен без обхода, иначе None."""
    size = getattr(source, "size", None)
    if size is None:
        return None
    return size()


__all__ = [
    "CollectionSequenceSource",
    "FactorySequenceSource",
    "as_sequence_source",
    "source_size",
]
