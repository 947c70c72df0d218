from __future__ import annotations

from tuplegen.domain.error_codes import ErrorCode
from tuplegen.errors import AppError


class NoElementError(AppError):
    def __init__(self, message: str = "No more tuples: enumeration is exhausted", details: dict | None = None):
        """
        Назначение:
            next() вызван, когда следующего кортежа нет (перебор окончен или произведение пустое).
        """
        super().__init__(
            category="protocol",
            code=ErrorCode.NO_ELEMENT.value,
            message=message,
            details=details or {},
        )


class UnsupportedOperationError(AppError):
    def __init__(self, operation: str):
        """
        Назначение:
            Операция не поддерживается перечислением (например, remove()).
        """
        super().__init__(
            category="protocol",
            code=ErrorCode.UNSUPPORTED_OPERATION.value,
            message=f"Operation is not supported: {operation}",
            details={"operation": operation},
        )
        self.operation = operation


class RegistrationClosedError(AppError):
    def __init__(self, sources_count: int):
        """
        Назначение:
            Попытка добавить источник после того, как перебор уже был получен через tuples().
        """
        super().__init__(
            category="misuse",
            code=ErrorCode.REGISTRATION_CLOSED.value,
            message="Cannot add a source after enumeration has been requested",
            details={"sources_count": sources_count},
        )


class NonRestartableSourceError(AppError):
    def __init__(self, value_type: str):
        """
        Назначение:
            Источник нельзя перезапустить с начала (одноразовый итератор/генератор).
        Контракт:
            Перенос разряда в одометре требует повторного открытия курсора,
            поэтому такие источники отклоняются при регистрации.
        """
        super().__init__(
            category="source",
            code=ErrorCode.NON_RESTARTABLE_SOURCE.value,
            message=(
                f"Source of type {value_type} is a single-pass iterator; "
                "wrap a factory that returns a fresh iterable instead"
            ),
            details={"type": value_type},
        )


class InvalidSourceSpecError(AppError):
    def __init__(self, spec: str, reason: str):
        """
        Назначение:
            Строковое описание источника (CLI/config) не распознано.
        """
        super().__init__(
            category="config",
            code=ErrorCode.INVALID_SOURCE_SPEC.value,
            message=f"Invalid source spec '{spec}': {reason}",
            details={"spec": spec, "reason": reason},
        )
        self.spec = spec


class SourceFetchError(AppError):
    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
    ):
        """
        Назначение:
            Ошибка чтения удалённого источника (сеть/HTTP/формат ответа).
        """
        super().__init__(
            category="source",
            code=ErrorCode.SOURCE_FETCH_ERROR.value,
            message=message,
            retryable=retryable,
            details={"url": url, "status_code": status_code},
        )
        self.status_code = status_code


__all__ = [
    "NoElementError",
    "UnsupportedOperationError",
    "RegistrationClosedError",
    "NonRestartableSourceError",
    "InvalidSourceSpecError",
    "SourceFetchError",
]
