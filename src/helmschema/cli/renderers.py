from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from helmschema import __version__
from helmschema.core import events as ev
from helmschema.core.stages import GENERATE_STAGES, STAGE_LABELS

RULE_WIDTH = 64
RULE_LINE = "-" * RULE_WIDTH


def run_events(events: Iterable[ev.HelmSchemaEvent], renderer: "Renderer") -> int:
    exit_code = 0
    for event in events:
        renderer.handle(event)
        if isinstance(event, ev.CommandCompleted):
            exit_code = event.exit_code
    renderer.close()
    return exit_code


class Renderer:
    def handle(self, event: ev.HelmSchemaEvent) -> None:  # noqa: D401
        """Handle a single event."""

    def close(self) -> None:
        return None


class GenerateRenderer(Renderer):
    """Progress on ``console``, rendered schemas (``--dry-run``) on ``out``."""

    def __init__(self, console: Console, out: Console):
        self.console = console
        self.out = out
        self._charts_total = 0
        self._written: list[Path] = []
        self._failures: list[ev.ChartFailed] = []
        self._stage_failure: ev.StageFailed | None = None
        self._dry_run = False

    def handle(self, event: ev.HelmSchemaEvent) -> None:
        if isinstance(event, ev.CommandStarted):
            self.console.print(f"helm-schema v{__version__}\n{RULE_LINE}")
            return
        if isinstance(event, ev.ChartsDiscovered):
            self._charts_total = len(event.charts)
            return
        if isinstance(event, ev.StageStarted):
            note = None
            if event.stage_id == "synthesize" and self._charts_total:
                note = f"({self._charts_total} charts)"
            self.console.print(_format_stage_start_line(event.stage_id, note))
            return
        if isinstance(event, ev.StageCompleted):
            if event.stage_id == "write_output" and event.status == "skipped":
                self._dry_run = True
            self.console.print(_format_stage_line(event.stage_id, event.status, event.duration_ms))
            return
        if isinstance(event, ev.StageFailed):
            self._stage_failure = event
            self.console.print(_format_stage_line(event.stage_id, "failed", event.duration_ms))
            return
        if isinstance(event, ev.ChartProcessed):
            name = event.chart_name or event.chart_path
            self.console.print(
                f"CHART OK {escape(str(name))} ({escape(str(event.values_path))}) "
                f"{_format_duration(event.duration_ms)}"
            )
            return
        if isinstance(event, ev.ChartFailed):
            self._failures.append(event)
            name = event.chart_name or event.chart_path
            self.console.print(f"[red]CHART FAIL[/red] {escape(str(name))}: {len(event.errors)} error(s)")
            return
        if isinstance(event, ev.DependencyLinked):
            self.console.print(
                f"DEPENDENCY {escape(event.chart_name)} -> {escape(event.dependency)} ({event.mode})"
            )
            return
        if isinstance(event, ev.SchemaRendered):
            self.console.print(
                f"Printing jsonschema for {escape(event.chart_name)} chart "
                f"({escape(str(event.chart_path))})"
            )
            self.out.out(event.json_text, end="", highlight=False)
            return
        if isinstance(event, ev.FileWritten):
            if event.path:
                self._written.append(Path(event.path))
            return
        if isinstance(event, ev.FileWriteFailed):
            self.console.print(f"[red]WRITE FAIL[/red] {escape(str(event.path))}: {escape(event.message)}")
            return
        if isinstance(event, ev.CommandCompleted):
            self._finish(event)

    def _finish(self, event: ev.CommandCompleted) -> None:
        if self._stage_failure:
            self.console.print(_stage_failure_panel(self._stage_failure))
            return
        for failure in self._failures:
            self.console.print(_chart_failure_panel(failure))
        if self._dry_run:
            self.console.print("Dry run complete (no files written)")
            return
        for path in self._written:
            self.console.print(f"WROTE {escape(str(path))}")
        if event.ok:
            self.console.print(f"Generated {len(self._written)} schema(s)")


class GenerateJsonRenderer(Renderer):
    """One JSON object per event, for machines."""

    def __init__(self, console: Console):
        self.console = console

    def handle(self, event: ev.HelmSchemaEvent) -> None:
        self.console.out(json.dumps(event.to_dict(), sort_keys=True), highlight=False)


def _format_duration(elapsed_ms: float) -> str:
    if elapsed_ms < 1000:
        return f"{elapsed_ms:.0f}ms"
    seconds = elapsed_ms / 1000
    if seconds < 10:
        return f"{seconds:.2f}s"
    return f"{seconds:.1f}s"


def _format_stage_line(stage_id: str, status: str, elapsed_ms: float | None) -> str:
    label = _stage_label(stage_id)
    index = _stage_index(stage_id)
    padding = "." * max(2, 28 - len(label))
    duration = f"  {_format_duration(elapsed_ms)}" if elapsed_ms is not None else ""
    return f"[{index}/{len(GENERATE_STAGES)}] {label} {padding} {_status_word(status)}{duration}"


def _format_stage_start_line(stage_id: str, note: str | None = None) -> str:
    label = _stage_label(stage_id)
    index = _stage_index(stage_id)
    padding = "." * max(2, 28 - len(label))
    suffix = " START"
    if note:
        suffix = f"{suffix} {note}"
    return f"[{index}/{len(GENERATE_STAGES)}] {label} {padding}{suffix}"


def _stage_label(stage_id: str) -> str:
    return STAGE_LABELS.get(stage_id, stage_id)


def _stage_index(stage_id: str) -> int:
    for index, (key, _label) in enumerate(GENERATE_STAGES, start=1):
        if key == stage_id:
            return index
    return 0


def _status_word(status: str) -> str:
    return {
        "success": "OK",
        "failed": "FAIL",
        "skipped": "SKIP",
        "partial": "PARTIAL",
    }.get(status, status.upper())


def _stage_failure_panel(event: ev.StageFailed) -> Panel:
    body = "\n".join(
        [
            f"stage: {event.stage_id}",
            f"error: {event.message}",
        ]
    )
    return Panel(Text(body), title="Generate failed", box=box.ROUNDED, title_align="left")


def _chart_failure_panel(event: ev.ChartFailed) -> Panel:
    name = event.chart_name or "?"
    lines = [f"chart: {name} ({event.chart_path})", *[f"error: {error}" for error in event.errors]]
    return Panel(Text("\n".join(lines)), title="Chart failed", box=box.ROUNDED, title_align="left")
