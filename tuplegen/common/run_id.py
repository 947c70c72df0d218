from __future__ import annotations

import re
import uuid

_SAFE_RUN_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def generate_run_id() -> str:
    """
    Назначение:
        Сгенерировать run_id для запуска команды.
    """
    return str(uuid.uuid4())


def is_safe_run_id(run_id: str) -> bool:
    """
    Назначение:
        Проверить, что run_id можно подставить в имя log/report файла.
    """
    return bool(_SAFE_RUN_ID_RE.match(run_id))
