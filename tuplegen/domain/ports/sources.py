from __future__ import annotations

from typing import Iterator, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class SequenceSource(Protocol[T_co]):
    """
    Назначение/ответственность:
        Источник упорядоченной конечной последовательности значений,
        умеющий по запросу выдавать новый независимый курсор.
    Взаимодействия:
        Потребляется TupleIterator: курсор открывается при старте перебора
        и повторно при каждом переносе разряда.
    Ограничения:
        Источник обязан быть перезапускаемым: каждый вызов iterator()
        начинает обход с первого элемента в том же порядке.
    """

    def iterator(self) -> Iterator[T_co]:
        """
        Контракт:
            Возвращает новый курсор, стоящий перед первым элементом.
        Ошибки/исключения:
            Ошибки ввода-вывода источника пробрасываются как есть.
        """
        ...


__all__ = ["SequenceSource"]
