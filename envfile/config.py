"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.10
    import tomli as tomllib  # type: ignore[no-redef]

DEFAULT_LOG_LEVEL = "warning"
DEFAULT_FILES = (".env",)
DEFAULT_STRICT = False
DEFAULT_OVERRIDE = False
DEFAULT_EXPAND = True

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class GlobalConfig:
    log_level: str


@dataclass(frozen=True)
class LoadConfig:
    files: tuple[Path, ...]
    strict: bool
    override: bool
    expand: bool


@dataclass(frozen=True)
class Config:
    global_cfg: GlobalConfig
    load: LoadConfig

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Config":
        global_data = data.get("global", {})
        load_data = data.get("load", {})
        if not isinstance(global_data, dict):
            raise ConfigError("[global] must be a table")
        if not isinstance(load_data, dict):
            raise ConfigError("[load] must be a table")

        files = load_data.get("files", list(DEFAULT_FILES))
        if not isinstance(files, list):
            raise ConfigError("load.files must be a list of paths")
        for path in files:
            if not isinstance(path, str) or not path.strip():
                raise ConfigError("load.files must be a list of non-empty strings")
        config = Config(
            global_cfg=GlobalConfig(
                log_level=str(global_data.get("log_level", DEFAULT_LOG_LEVEL)),
            ),
            load=LoadConfig(
                files=tuple(_expand_path(path) for path in files),
                strict=_require_bool(load_data, "strict", DEFAULT_STRICT),
                override=_require_bool(load_data, "override", DEFAULT_OVERRIDE),
                expand=_require_bool(load_data, "expand", DEFAULT_EXPAND),
            ),
        )
        validate_config(config)
        return config


def default_config() -> Config:
    return Config.from_dict({})


def load_config(path: Path) -> Config:
    if not path.is_absolute():
        raise ConfigError(f"config path must be absolute: {path}")
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    return Config.from_dict(data)


def validate_config(config: Config) -> None:
    _validate_log_level(config.global_cfg.log_level)
    if not config.load.files:
        raise ConfigError("load.files must include at least one path")


def _expand_path(raw: Any) -> Path:
    return Path(str(raw)).expanduser()


def _require_bool(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"load.{key} must be true or false")
    return value


def _validate_log_level(value: str) -> None:
    if value.lower() not in LOG_LEVELS:
        raise ConfigError(
            f"global.log_level must be one of {sorted(LOG_LEVELS)}; got {value}"
        )
