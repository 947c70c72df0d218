from __future__ import annotations

import pytest

from tuplegen.domain.exceptions import (
    InvalidSourceSpecError,
    NoElementError,
    NonRestartableSourceError,
    RegistrationClosedError,
    SourceFetchError,
)
from tuplegen.errors import ERROR_CATEGORIES, AppError


def test_domain_errors_use_known_categories():
    errors = [
        NoElementError(),
        RegistrationClosedError(2),
        NonRestartableSourceError("generator"),
        InvalidSourceSpecError("range:x", "bad bounds"),
        SourceFetchError("HTTP 503", url="http://h/v", status_code=503),
    ]
    assert [e.category for e in errors] == ["protocol", "misuse", "source", "config", "source"]
    assert all(e.category in ERROR_CATEGORIES for e in errors)


def test_to_dict_carries_report_fields():
    item = SourceFetchError("HTTP 503", url="http://h/v", status_code=503).to_dict()
    assert item == {
        "category": "source",
        "code": "SOURCE_FETCH_ERROR",
        "message": "HTTP 503",
        "retryable": True,
        "details": {"url": "http://h/v", "status_code": 503},
    }


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError, match="Unknown error category"):
        AppError(category="employee", code="X", message="x")
