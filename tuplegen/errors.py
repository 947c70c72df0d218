from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

# protocol - нарушение контракта перебора (next после исчерпания, remove)
# misuse   - неверный порядок вызовов Tuples (add после tuples())
# source   - источник нельзя перезапустить или получить его значения
# config   - некорректная спецификация источника или настройка
ERROR_CATEGORIES = ("protocol", "misuse", "source", "config")


@dataclass
class AppError(Exception):
    """
    Назначение:
        Базовая ошибка tuplegen. Подклассы из tuplegen.domain.exceptions
        фиксируют category и code (ErrorCode), CLI превращает ошибку
        в строку "ERROR: ..." и элемент items[] отчёта через to_dict().

    Поля:
        category: str
            Одна из ERROR_CATEGORIES.
        code: str
            Значение ErrorCode, например NO_ELEMENT или SOURCE_FETCH_ERROR.
        message: str
            Текст для stderr и лога.
        retryable: bool
            True, если повтор может помочь (сетевые сбои, 429/5xx HTTP-источника).
        details: dict
            Контекст: число источников, спецификация, URL, HTTP-статус.

    Ошибки/исключения:
        ValueError при неизвестной category.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.category not in ERROR_CATEGORIES:
            raise ValueError(f"Unknown error category: {self.category}")
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details or {},
        }


__all__ = ["AppError", "ERROR_CATEGORIES"]
