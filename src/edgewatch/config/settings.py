"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

# Sheet credentials may be supplied through the environment instead of TOML.
_SHEETS_ENV = {
    "service_account_email": "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "private_key": "GOOGLE_PRIVATE_KEY",
    "sheet_id": "GOOGLE_SHEET_ID",
}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        polling: dict[str, Any] | None = None,
        sync: dict[str, Any] | None = None,
        sheets: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        server: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
        environ: dict[str, str] | None = None,
    ):
        self.polling = polling or {}
        self.sync = sync or {}
        self.sheets = sheets or {}
        self.storage = storage or {}
        self.server = server or {}
        self.logging = logging or {}
        self._environ = os.environ if environ is None else environ

    @classmethod
    def from_dict(cls, raw: dict[str, Any], environ: dict[str, str] | None = None) -> Settings:
        return cls(
            polling=raw.get("polling"),
            sync=raw.get("sync"),
            sheets=raw.get("sheets"),
            storage=raw.get("storage"),
            server=raw.get("server"),
            logging=raw.get("logging"),
            environ=environ,
        )

    # Polling
    @property
    def gamma_api_base(self) -> str:
        return self.polling.get("gamma_api_base", "https://gamma-api.polymarket.com")

    @property
    def poll_interval_sec(self) -> float:
        return float(self.polling.get("interval_sec", 10.0))

    @property
    def poll_limit(self) -> int:
        return int(self.polling.get("limit", 100))

    @property
    def poll_timeout_sec(self) -> float:
        return float(self.polling.get("timeout_sec", 15.0))

    # Sync engine
    @property
    def sync_interval_sec(self) -> float:
        return float(self.sync.get("interval_sec", 3600.0))

    @property
    def sync_top_n(self) -> int:
        return int(self.sync.get("top_n", 100))

    @property
    def sync_backoff_step_ms(self) -> int:
        return int(self.sync.get("step_ms", 5000))

    @property
    def sync_backoff_decay_ms(self) -> int:
        return int(self.sync.get("decay_ms", 1000))

    @property
    def sync_max_delay_ms(self) -> int:
        return int(self.sync.get("max_delay_ms", 20000))

    @property
    def sink_kind(self) -> str:
        return str(self.sync.get("sink", "sheets")).lower()

    # Google Sheets
    def _sheets_value(self, key: str) -> str:
        value = self._environ.get(_SHEETS_ENV[key]) or self.sheets.get(key) or ""
        return str(value)

    @property
    def sheet_id(self) -> str:
        return self._sheets_value("sheet_id")

    @property
    def service_account_email(self) -> str:
        return self._sheets_value("service_account_email")

    @property
    def private_key(self) -> str:
        # Keys pasted into env files usually carry escaped newlines
        return self._sheets_value("private_key").replace("\\n", "\n")

    @property
    def worksheet_title(self) -> str:
        return self.sheets.get("worksheet_title", "Edge Candidates")

    @property
    def sheets_configured(self) -> bool:
        return bool(self.sheet_id and self.service_account_email and self.private_key)

    # Storage
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/edgewatch.duckdb")

    # Server
    @property
    def server_host(self) -> str:
        return self.server.get("host", "127.0.0.1")

    @property
    def server_port(self) -> int:
        return int(self.server.get("port", 3690))

    # Logging
    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
