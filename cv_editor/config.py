from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from .errors import ConfigError


CONFIG_FILENAME = "cv_editor.yml"

yaml = YAML()
yaml.preserve_quotes = True


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = None
    max_upload_bytes: int = 2 * 1024 * 1024

    def flask_config(self) -> dict[str, Any]:
        return {"MAX_CONTENT_LENGTH": self.max_upload_bytes}


def _default_config_path() -> Path:
    return Path.cwd() / CONFIG_FILENAME


def _load_yaml(path: Path) -> CommentedMap:
    if not path.exists():
        return CommentedMap()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.load(handle)
    except YAMLError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if data is None:
        return CommentedMap()
    if not isinstance(data, CommentedMap):
        raise ConfigError(f"{path.name} must contain a mapping at the top level.")
    return data


def _coerce(name: str, value: Any, default: Any) -> Any:
    if value is None:
        return None if name == "log_file" else default
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigError(f"`{name}` must be true or false.")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"`{name}` must be a positive integer.")
        return value
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"`{name}` must be a non-empty string.")
    return value.strip()


def load_settings(path: Path | str | None = None) -> Settings:
    """Read settings from ``cv_editor.yml``; missing file or keys keep defaults."""
    config_path = Path(path) if path is not None else _default_config_path()
    if path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    data = _load_yaml(config_path)

    defaults = Settings()
    values: dict[str, Any] = {}
    for spec in fields(Settings):
        if spec.name in data:
            values[spec.name] = _coerce(spec.name, data[spec.name], getattr(defaults, spec.name))
    return Settings(**values)
