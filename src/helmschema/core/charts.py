from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from ruamel.yaml import YAML

CHART_FILE = "Chart.yaml"


class ChartError(RuntimeError):
    pass


class ChartDependency(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    alias: str | None = None

    @property
    def values_key(self) -> str:
        return self.alias or self.name


class ChartFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    dependencies: list[ChartDependency] = Field(default_factory=list)

    @field_validator("description", "dependencies", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "" if info.field_name == "description" else []
        return value


def discover_charts(search_root: Path) -> Iterator[Path]:
    """Yield every Chart.yaml below ``search_root`` in a stable order."""
    if not search_root.exists():
        raise ChartError(f"Chart search root not found: {search_root}")
    if search_root.is_file():
        if search_root.name == CHART_FILE:
            yield search_root
        return
    yield from sorted(path for path in search_root.rglob(CHART_FILE) if path.is_file())


def read_chart(chart_path: Path) -> ChartFile:
    try:
        data = YAML(typ="safe", pure=True).load(chart_path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ChartError(f"Failed to parse chart file: {chart_path}") from exc
    if not isinstance(data, dict):
        raise ChartError(f"{chart_path} must be a YAML mapping at the top level.")
    try:
        return ChartFile.model_validate(data)
    except ValidationError as exc:
        raise ChartError(f"Invalid chart file {chart_path}: {exc}") from exc


def find_values_file(chart_dir: Path, value_files: list[str]) -> Path:
    for name in value_files:
        candidate = chart_dir / name
        if candidate.is_file():
            return candidate
    raise ChartError("No values file found.")
