from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Any

import httpx
import typer

from tuplegen.common.run_id import generate_run_id, is_safe_run_id
from tuplegen.common.time import getDurationMs
from tuplegen.config.config import Settings, loadSettings
from tuplegen.domain.adapters import source_size
from tuplegen.domain.tuples import Tuples
from tuplegen.errors import AppError
from tuplegen.infra.artifacts.report_writer import Report, createEmptyReport, finalizeReport, writeReportJson
from tuplegen.infra.logging.setup import (
    StdStreamToLogger,
    TeeStream,
    closeCommandLogger,
    createCommandLogger,
    logEvent,
    mapLogLevel,
)
from tuplegen.infra.sources.csv_utils import CsvFormatError
from tuplegen.infra.sources.spec_parser import SourceSpecParser, describe_source
from tuplegen.usecases.product_usecase import ProductUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)

SOURCE_HELP = "Source spec: values:a,b | a,b | range:0:10[:2] | lines:PATH | csv:PATH#COLUMN | http(s)://URL"


def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def failCommand(logger: logging.Logger, runId: str, report: Report, component: str, exc: Exception) -> int:
    """
    Назначение:
        Единая обработка ошибки команды: лог, отчёт, сообщение в stderr.

    Выходные данные:
        int
            Exit code 2.
    """
    if isinstance(exc, AppError):
        item = exc.to_dict()
        message = exc.message
    else:
        item = {"category": component, "code": type(exc).__name__, "message": str(exc), "retryable": False, "details": {}}
        message = str(exc)
    report.items.append(item)
    report.summary.failed += 1
    logEvent(logger, logging.ERROR, runId, component, f"{item['code']}: {message}")
    typer.echo(f"ERROR: {message}", err=True)
    return 2


def buildTuples(
    settings: Settings,
    specs: list[str] | None,
    report: Report,
    transport: httpx.BaseTransport | None = None,
) -> Tuples[Any]:
    """
    Назначение:
        Собирает Tuples из --source (в порядке указания) или из config.sources.

    Ошибки/исключения:
        InvalidSourceSpecError / ValueError, если источники не заданы или некорректны.
    """
    parser = SourceSpecParser(
        timeout_seconds=settings.timeout_seconds,
        retries=settings.retries,
        retry_backoff_seconds=settings.retry_backoff_seconds,
        transport=transport,
    )
    tuples: Tuples[Any] = Tuples()
    if specs:
        for spec in specs:
            tuples.add(parser.parse(spec))
        report.meta.source_specs = list(specs)
    elif settings.sources:
        for entry in settings.sources:
            tuples.add(parser.build(entry))
        report.meta.source_specs = [entry if isinstance(entry, str) else repr(entry) for entry in settings.sources]
    else:
        raise ValueError("no sources given (use --source or config key 'sources')")
    return tuples


def closeSources(tuples: Tuples[Any]) -> None:
    """Закрывает источники, держащие ресурсы (HTTP-клиенты)."""
    for source in tuples.sources:
        close = getattr(source, "close", None)
        if close is not None:
            close()


def runWithReport(ctx: typer.Context, commandName: str, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - дублирует stderr в лог (tee)
        - гарантирует запись отчёта в finally
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    report = createEmptyReport(runId=runId, command=commandName, configSources=sources)

    originalStderr = sys.stderr
    sys.stderr = TeeStream(originalStderr, StdStreamToLogger(logger, logging.ERROR, runId, "stderr"))

    exitCode: int | None = None

    try:
        logEvent(logger, logging.INFO, runId, "core", f"Command started: {commandName} config_sources={sources}")
        exitCode = runner(logger, report)
    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(report=report, durationMs=durationMs, logFile=logFilePath, reportDir=settings.report_dir)
        reportPath = writeReportJson(report, settings.report_dir, f"report_{commandName}_{runId}")
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")

        sys.stderr.flush()
        sys.stderr = originalStderr
        closeCommandLogger(logger)

    if exitCode is not None:
        raise typer.Exit(code=exitCode)


def runProductCommand(
    ctx: typer.Context,
    specs: list[str] | None,
    outputFormat: str | None,
    separator: str | None,
    limit: int | None,
    sourceTransport: httpx.BaseTransport | None = None,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        tuples: Tuples[Any] | None = None
        try:
            usecase = ProductUseCase(
                output_format=(outputFormat or settings.output_format).lower(),
                separator=separator if separator is not None else settings.separator,
                limit=limit,
            )
            tuples = buildTuples(settings, specs, report, transport=sourceTransport)
            return usecase.run(tuples, sys.stdout, logger, runId, report)
        except (AppError, CsvFormatError, OSError, ValueError) as exc:
            return failCommand(logger, runId, report, "product", exc)
        finally:
            if tuples is not None:
                closeSources(tuples)

    runWithReport(ctx=ctx, commandName="product", runner=execute)


def runCountCommand(
    ctx: typer.Context,
    specs: list[str] | None,
    sourceTransport: httpx.BaseTransport | None = None,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        tuples: Tuples[Any] | None = None
        try:
            tuples = buildTuples(settings, specs, report, transport=sourceTransport)
            total = ProductUseCase().count(tuples, logger, runId, report)
        except (AppError, CsvFormatError, OSError, ValueError) as exc:
            return failCommand(logger, runId, report, "count", exc)
        finally:
            if tuples is not None:
                closeSources(tuples)
        typer.echo(f"total={total}")
        return 0

    runWithReport(ctx=ctx, commandName="count", runner=execute)


def runCheckSourcesCommand(ctx: typer.Context, specs: list[str] | None) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        tuples: Tuples[Any] | None = None
        try:
            tuples = buildTuples(settings, specs, report)
            for index, source in enumerate(tuples.sources):
                size = source_size(source)
                typer.echo(f"index={index} kind={describe_source(source)} size={'unknown' if size is None else size}")
            report.meta.sources_count = len(tuples)
        except (AppError, OSError, ValueError) as exc:
            return failCommand(logger, runId, report, "sources", exc)
        finally:
            if tuples is not None:
                closeSources(tuples)
        logEvent(logger, logging.INFO, runId, "sources", f"Sources OK: {len(tuples)}")
        return 0

    runWithReport(ctx=ctx, commandName="check-sources", runner=execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier. If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="HTTP source timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", help="Retry attempts for HTTP sources"),
    retryBackoffSeconds: float | None = typer.Option(None, "--retry-backoff-seconds", help="Base backoff for retries"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()
    elif not is_safe_run_id(runId):
        typer.echo(f"ERROR: invalid run id: {runId}", err=True)
        raise typer.Exit(code=2)

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "timeout_seconds": timeoutSeconds,
        "retries": retries,
        "retry_backoff_seconds": retryBackoffSeconds,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command()
def product(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(None, "--source", "-s", help=SOURCE_HELP),
    outputFormat: str | None = typer.Option(None, "--format", help="Output format: text|csv|json"),
    separator: str | None = typer.Option(None, "--separator", help="Value separator for text/csv output"),
    limit: int | None = typer.Option(None, "--limit", min=0, help="Stop after N tuples"),
):
    """Print every tuple of the cartesian product, last source varying fastest."""
    runProductCommand(ctx, source, outputFormat, separator, limit)


@app.command()
def count(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(None, "--source", "-s", help=SOURCE_HELP),
):
    """Print the number of tuples in the product."""
    runCountCommand(ctx, source)


@app.command("check-sources")
def checkSources(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(None, "--source", "-s", help=SOURCE_HELP),
):
    """Parse source specs and print their kind and size."""
    runCheckSourcesCommand(ctx, source)


if __name__ == "__main__":
    app()
