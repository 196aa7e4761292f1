from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class HelmSchemaEvent:
    ts: float = field(default_factory=time.perf_counter)
    level: str = "INFO"
    command: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))


@dataclass(frozen=True)
class CommandStarted(HelmSchemaEvent):
    type: str = "CommandStarted"
    search_root: Path | None = None
    options: dict[str, Any] | None = None


@dataclass(frozen=True)
class CommandCompleted(HelmSchemaEvent):
    type: str = "CommandCompleted"
    ok: bool = True
    exit_code: int = 0


@dataclass(frozen=True)
class StageStarted(HelmSchemaEvent):
    type: str = "StageStarted"
    stage_id: str = ""
    label: str = ""


@dataclass(frozen=True)
class StageProgress(HelmSchemaEvent):
    type: str = "StageProgress"
    stage_id: str = ""
    current: int = 0
    total: int = 0
    note: str | None = None


@dataclass(frozen=True)
class StageCompleted(HelmSchemaEvent):
    type: str = "StageCompleted"
    stage_id: str = ""
    duration_ms: float = 0.0
    status: str = "success"


@dataclass(frozen=True)
class StageFailed(HelmSchemaEvent):
    type: str = "StageFailed"
    stage_id: str = ""
    duration_ms: float = 0.0
    error_code: str = ""
    message: str = ""


@dataclass(frozen=True)
class ChartsDiscovered(HelmSchemaEvent):
    type: str = "ChartsDiscovered"
    charts: list[Path] = field(default_factory=list)


@dataclass(frozen=True)
class ChartProcessed(HelmSchemaEvent):
    type: str = "ChartProcessed"
    chart_path: Path | None = None
    chart_name: str | None = None
    values_path: Path | None = None
    duration_ms: float = 0.0


@dataclass(frozen=True)
class ChartFailed(HelmSchemaEvent):
    type: str = "ChartFailed"
    level: str = "ERROR"
    chart_path: Path | None = None
    chart_name: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DependencyLinked(HelmSchemaEvent):
    type: str = "DependencyLinked"
    chart_name: str = ""
    dependency: str = ""
    mode: str = ""


@dataclass(frozen=True)
class SchemaRendered(HelmSchemaEvent):
    type: str = "SchemaRendered"
    chart_name: str = ""
    chart_path: Path | None = None
    json_text: str = ""


@dataclass(frozen=True)
class FileWritten(HelmSchemaEvent):
    type: str = "FileWritten"
    path: Path | None = None
    bytes: int = 0


@dataclass(frozen=True)
class FileWriteFailed(HelmSchemaEvent):
    type: str = "FileWriteFailed"
    level: str = "ERROR"
    path: Path | None = None
    message: str = ""


def _serialize(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value
