from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

OUTPUT_FORMATS = ("text", "csv", "json")


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Logging
    log_level: str = "INFO"

    # HTTP sources
    timeout_seconds: float = 20.0
    retries: int = 3
    retry_backoff_seconds: float = 0.5

    # Output
    output_format: str = "text"
    separator: str = ","

    # Sources declared in config (spec strings or literal lists)
    sources: tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_VARS = {
    "log_dir": "TUPLEGEN_LOG_DIR",
    "report_dir": "TUPLEGEN_REPORT_DIR",
    "log_level": "TUPLEGEN_LOG_LEVEL",
    "timeout_seconds": "TUPLEGEN_TIMEOUT_SECONDS",
    "retries": "TUPLEGEN_RETRIES",
    "retry_backoff_seconds": "TUPLEGEN_RETRY_BACKOFF_SECONDS",
    "output_format": "TUPLEGEN_OUTPUT_FORMAT",
    "separator": "TUPLEGEN_SEPARATOR",
}


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _parse_int(name: str, v: str) -> int:
    try:
        return int(v)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value for {name}: {v}") from exc


def _parse_float(name: str, v: str) -> float:
    try:
        return float(v)
    except ValueError as exc:
        raise ValueError(f"Invalid number value for {name}: {v}") from exc


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {key: _env_get(name) for key, name in ENV_VARS.items()}
    if any(v is not None for v in env.values()):
        sources.append("env")

    merged: dict[str, Any] = {
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "report_dir": cfg.get("report_dir", defaults.report_dir),
        "log_level": cfg.get("log_level", defaults.log_level),
        "timeout_seconds": cfg.get("timeout_seconds", defaults.timeout_seconds),
        "retries": cfg.get("retries", defaults.retries),
        "retry_backoff_seconds": cfg.get("retry_backoff_seconds", defaults.retry_backoff_seconds),
        "output_format": cfg.get("output_format", defaults.output_format),
        "separator": cfg.get("separator", defaults.separator),
        "sources": cfg.get("sources", defaults.sources),
    }

    # apply env
    for key in ("log_dir", "report_dir", "log_level", "output_format", "separator"):
        if env[key] is not None:
            merged[key] = env[key]
    if env["timeout_seconds"] is not None:
        merged["timeout_seconds"] = _parse_float(ENV_VARS["timeout_seconds"], env["timeout_seconds"])
    if env["retries"] is not None:
        merged["retries"] = _parse_int(ENV_VARS["retries"], env["retries"])
    if env["retry_backoff_seconds"] is not None:
        merged["retry_backoff_seconds"] = _parse_float(
            ENV_VARS["retry_backoff_seconds"], env["retry_backoff_seconds"]
        )

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    output_format = str(merged["output_format"]).strip().lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {merged['output_format']}")

    config_sources = merged["sources"] or ()
    if not isinstance(config_sources, (list, tuple)):
        raise ValueError("Config key 'sources' must be a list")

    settings = Settings(
        log_dir=str(merged["log_dir"]),
        report_dir=str(merged["report_dir"]),
        log_level=str(merged["log_level"]),
        timeout_seconds=float(merged["timeout_seconds"]),
        retries=int(merged["retries"]),
        retry_backoff_seconds=float(merged["retry_backoff_seconds"]),
        output_format=output_format,
        separator=str(merged["separator"]),
        sources=tuple(config_sources),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
