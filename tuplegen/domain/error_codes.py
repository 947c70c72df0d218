from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок перечисления кортежей и источников.
    """

    NO_ELEMENT = "NO_ELEMENT"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    NON_RESTARTABLE_SOURCE = "NON_RESTARTABLE_SOURCE"
    INVALID_SOURCE_SPEC = "INVALID_SOURCE_SPEC"
    SOURCE_FETCH_ERROR = "SOURCE_FETCH_ERROR"
