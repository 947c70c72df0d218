from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from tuplegen.common.time import getNowIso


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные отчёта запуска команды.

    Поля:
        run_id, command, started_at, finished_at, duration_ms
        source_specs: list[str]
            Описания источников, как они были заданы.
        sources_count: int | None
        limit: int | None
            Ограничение на число выведенных кортежей.
        log_file, report_dir: str | None
        config_sources: list[str]
            Откуда пришли настройки (config/env/cli).
    """
    run_id: str
    command: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    source_specs: list[str] = field(default_factory=list)
    sources_count: int | None = None
    limit: int | None = None
    log_file: str | None = None
    report_dir: str | None = None
    config_sources: list[str] = field(default_factory=list)


@dataclass
class ReportSummary:
    """
    Назначение:
        Сводные счётчики запуска.
    """
    tuples_total: int | None = None
    tuples_written: int = 0
    truncated: bool = False
    failed: int = 0


@dataclass
class Report:
    """
    Назначение:
        Корневой объект отчёта.

    Поля:
        items: list[dict]
            Ошибки запуска (AppError.to_dict()).
    """
    meta: ReportMeta
    summary: ReportSummary
    items: list[dict] = field(default_factory=list)


def createEmptyReport(runId: str, command: str, configSources: list[str]) -> Report:
    meta = ReportMeta(
        run_id=runId,
        command=command,
        started_at=getNowIso(),
        config_sources=configSources or [],
    )
    return Report(meta=meta, summary=ReportSummary(), items=[])


def finalizeReport(report: Report, durationMs: int, logFile: str | None, reportDir: str) -> None:
    """
    Назначение:
        Финализирует отчёт: время завершения, длительность, пути.
    """
    report.meta.finished_at = getNowIso()
    report.meta.duration_ms = durationMs
    report.meta.log_file = logFile
    report.meta.report_dir = reportDir


def writeReportJson(report: Report, reportDir: str, fileBaseName: str) -> str:
    """
    Назначение:
        Записывает report.json на диск.

    Входные данные:
        fileBaseName: str
            Например: "report_product_<runId>"

    Выходные данные:
        str
            Полный путь к созданному файлу.
    """
    Path(reportDir).mkdir(parents=True, exist_ok=True)
    reportPath = str(Path(reportDir) / f"{fileBaseName}.json")

    data: dict[str, Any] = {
        "meta": asdict(report.meta),
        "summary": asdict(report.summary),
        "items": report.items,
    }

    with open(reportPath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return reportPath
