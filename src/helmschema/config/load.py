from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML

from .model import GenerateConfig

DEFAULT_CONFIG_FILE = ".helm-schema.yaml"


class ConfigError(RuntimeError):
    pass


_yaml = YAML(typ="safe")


def load_config(
    config_path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> GenerateConfig:
    """Read the generator config and apply command line overrides on top.

    An explicitly given config file must exist; the default one is optional.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Missing config: {config_path}")
        data = load_yaml_mapping(config_path, required=True)
    elif Path(DEFAULT_CONFIG_FILE).exists():
        data = load_yaml_mapping(Path(DEFAULT_CONFIG_FILE), required=False)

    merged = dict(data)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        merged.pop(key.replace("_", "-"), None)
        merged[key] = value
    try:
        return GenerateConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def load_yaml_mapping(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigError(f"Missing required file: {path}")
        return {}
    data = _load_yaml(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a YAML mapping at the top level.")
    return data


def _load_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to parse YAML: {path}") from exc
