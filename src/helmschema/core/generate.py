from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from helmschema.config.load import ConfigError, load_config
from helmschema.config.model import GenerateConfig
from helmschema.core import events as ev
from helmschema.core.charts import ChartError, ChartFile, discover_charts, find_values_file, read_chart
from helmschema.schema.errors import HelmSchemaError
from helmschema.schema.synth import values_to_schema

logger = logging.getLogger(__name__)


@dataclass
class ChartResult:
    chart_path: Path
    chart: ChartFile | None = None
    values_path: Path | None = None
    schema: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def name(self) -> str | None:
        return self.chart.name if self.chart else None


def process_chart(chart_path: Path, config: GenerateConfig) -> ChartResult:
    """Synthesize the schema of a single chart, collecting instead of raising errors."""
    result = ChartResult(chart_path=chart_path)
    started = time.perf_counter()
    try:
        result.chart = read_chart(chart_path)
        result.values_path = find_values_file(chart_path.parent, config.value_files)
        schema = values_to_schema(result.values_path, config.synthesis_options())
        result.schema = schema.to_dict()
    except (ChartError, HelmSchemaError) as exc:
        result.errors.append(str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.debug("Unexpected error in chart %s", chart_path, exc_info=True)
        result.errors.append(f"Unexpected error: {type(exc).__name__}: {exc}")
    result.duration_ms = _elapsed_ms(started)
    return result


def generate_events(
    *,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Iterable[ev.HelmSchemaEvent]:
    options = dict(overrides or {})
    search_root = options.get("chart_search_root")
    yield ev.CommandStarted(
        command="generate",
        search_root=Path(search_root) if search_root else None,
        options=options,
    )

    yield ev.StageStarted(command="generate", stage_id="load_config", label="Load config")
    started = time.perf_counter()
    try:
        config = load_config(config_path, overrides=overrides)
    except ConfigError as exc:
        yield ev.StageFailed(
            command="generate",
            stage_id="load_config",
            duration_ms=_elapsed_ms(started),
            error_code="config_error",
            message=str(exc),
        )
        yield ev.CommandCompleted(command="generate", ok=False, exit_code=2)
        return
    yield ev.StageCompleted(command="generate", stage_id="load_config", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="generate", stage_id="discover_charts", label="Discover charts")
    started = time.perf_counter()
    search_root = Path(config.chart_search_root)
    try:
        chart_paths = list(discover_charts(search_root))
    except ChartError as exc:
        yield ev.StageFailed(
            command="generate",
            stage_id="discover_charts",
            duration_ms=_elapsed_ms(started),
            error_code="discovery_error",
            message=str(exc),
        )
        yield ev.CommandCompleted(command="generate", ok=False, exit_code=2)
        return
    yield ev.ChartsDiscovered(command="generate", charts=chart_paths)
    yield ev.StageCompleted(
        command="generate", stage_id="discover_charts", duration_ms=_elapsed_ms(started)
    )

    yield ev.StageStarted(command="generate", stage_id="synthesize", label="Synthesize schemas")
    started = time.perf_counter()
    results: list[ChartResult] = []
    for item in _synthesize_all(chart_paths, config, results):
        yield item
    results.sort(key=lambda result: str(result.chart_path))
    yield ev.StageCompleted(
        command="generate",
        stage_id="synthesize",
        duration_ms=_elapsed_ms(started),
        status="success" if all(result.ok for result in results) else "partial",
    )

    yield ev.StageStarted(command="generate", stage_id="link_dependencies", label="Link dependencies")
    started = time.perf_counter()
    if config.no_dependencies:
        ordered = list(results)
        status = "skipped"
    else:
        failed_before = {result.chart_path for result in results if not result.ok}
        ordered = dependency_order(results)
        for result in ordered:
            if not result.ok and result.chart_path not in failed_before:
                yield ev.ChartFailed(
                    command="generate",
                    chart_path=result.chart_path,
                    chart_name=result.name,
                    errors=list(result.errors),
                )
        for item in _link_dependencies(ordered, config):
            yield item
        status = "success"
    yield ev.StageCompleted(
        command="generate",
        stage_id="link_dependencies",
        duration_ms=_elapsed_ms(started),
        status=status,
    )

    yield ev.StageStarted(command="generate", stage_id="write_output", label="Write output")
    started = time.perf_counter()
    for item in _write_output(ordered, config):
        yield item
    yield ev.StageCompleted(
        command="generate",
        stage_id="write_output",
        duration_ms=_elapsed_ms(started),
        status="skipped" if config.dry_run else "success",
    )

    ok = all(result.ok for result in results)
    yield ev.CommandCompleted(command="generate", ok=ok, exit_code=0 if ok else 2)


def dependency_order(results: list[ChartResult]) -> list[ChartResult]:
    """Order charts so that every chart comes after the charts it depends on."""
    by_name = {result.chart.name: result for result in results if result.chart is not None}
    visit_state: dict[Path, int] = {}
    stack: list[str] = []
    ordered: list[ChartResult] = []

    def dfs(result: ChartResult) -> None:
        state = visit_state.get(result.chart_path, 0)
        if state == 1:
            name = result.chart.name
            cycle_start = stack.index(name)
            cycle = stack[cycle_start:] + [name]
            result.errors.append("Dependency cycle detected: " + " -> ".join(cycle))
            return
        if state == 2:
            return
        visit_state[result.chart_path] = 1
        stack.append(result.chart.name)
        for dependency in result.chart.dependencies:
            target = by_name.get(dependency.name)
            if target is not None:
                dfs(target)
        stack.pop()
        visit_state[result.chart_path] = 2
        ordered.append(result)

    for result in results:
        if result.chart is None:
            ordered.append(result)
        else:
            dfs(result)
    return ordered


def _synthesize_all(
    chart_paths: list[Path],
    config: GenerateConfig,
    results: list[ChartResult],
) -> Iterable[ev.HelmSchemaEvent]:
    if not chart_paths:
        return
    workers = config.workers or (os.cpu_count() or 1) * 2
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(process_chart, path, config) for path in chart_paths]
        for current, future in enumerate(as_completed(futures), start=1):
            result = future.result()
            results.append(result)
            if result.ok:
                yield ev.ChartProcessed(
                    command="generate",
                    chart_path=result.chart_path,
                    chart_name=result.name,
                    values_path=result.values_path,
                    duration_ms=result.duration_ms,
                )
            else:
                yield ev.ChartFailed(
                    command="generate",
                    chart_path=result.chart_path,
                    chart_name=result.name,
                    errors=list(result.errors),
                )
            yield ev.StageProgress(
                command="generate",
                stage_id="synthesize",
                current=current,
                total=len(chart_paths),
            )


def _link_dependencies(
    ordered: list[ChartResult],
    config: GenerateConfig,
) -> Iterable[ev.HelmSchemaEvent]:
    processed: dict[str, ChartResult] = {}
    for result in ordered:
        if not result.ok or result.schema is None or result.chart is None:
            continue
        properties = result.schema.setdefault("properties", {})
        for dependency in result.chart.dependencies:
            key = dependency.values_key
            linked = processed.get(dependency.name)
            if config.use_references:
                entry: dict[str, Any] = {"title": key}
                if linked is not None and linked.chart.description:
                    entry["description"] = linked.chart.description
                entry["$ref"] = f"charts/{dependency.name}/{config.output_file}"
                mode = "reference"
            else:
                if linked is None:
                    continue
                entry = {"type": "object", "title": key}
                if linked.chart.description:
                    entry["description"] = linked.chart.description
                entry["properties"] = linked.schema.get("properties", {})
                mode = "embed"
            properties[key] = entry
            yield ev.DependencyLinked(
                command="generate",
                chart_name=result.chart.name,
                dependency=key,
                mode=mode,
            )
        processed[result.chart.name] = result


def _write_output(
    ordered: list[ChartResult],
    config: GenerateConfig,
) -> Iterable[ev.HelmSchemaEvent]:
    for result in ordered:
        if not result.ok or result.schema is None:
            continue
        json_text = render_schema(result.schema)
        if config.dry_run:
            yield ev.SchemaRendered(
                command="generate",
                chart_name=result.name or "",
                chart_path=result.chart_path,
                json_text=json_text,
            )
            continue
        target = result.chart_path.parent / config.output_file
        try:
            target.write_text(json_text, encoding="utf-8")
        except OSError as exc:
            result.errors.append(f"Failed to write {target}: {exc}")
            yield ev.FileWriteFailed(command="generate", path=target, message=str(exc))
            continue
        yield ev.FileWritten(command="generate", path=target, bytes=len(json_text.encode("utf-8")))


def render_schema(schema: dict[str, Any]) -> str:
    payload = json.dumps(schema, indent=2, ensure_ascii=False, default=str)
    return f"{payload}\n"


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
