from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from helmschema.cli.renderers import GenerateJsonRenderer, GenerateRenderer, run_events
from helmschema.core.events import ChartFailed, ChartProcessed, CommandCompleted, CommandStarted
from helmschema.core.generate import generate_events


def make_console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


def test_json_renderer_emits_one_object_per_event() -> None:
    console = make_console()
    events = [
        CommandStarted(command="generate", search_root=Path("charts")),
        CommandCompleted(command="generate", ok=True, exit_code=0),
    ]

    exit_code = run_events(events, GenerateJsonRenderer(console))

    lines = console.file.getvalue().splitlines()
    assert exit_code == 0
    assert [json.loads(line)["type"] for line in lines] == ["CommandStarted", "CommandCompleted"]
    assert json.loads(lines[0])["search_root"] == "charts"


def test_generate_renderer_prints_chart_failures() -> None:
    console = make_console()
    events = [
        CommandStarted(command="generate"),
        ChartFailed(
            command="generate",
            chart_path=Path("charts/broken/Chart.yaml"),
            chart_name="broken",
            errors=["Error while parsing comment of key [name]"],
        ),
        CommandCompleted(command="generate", ok=False, exit_code=2),
    ]

    exit_code = run_events(events, GenerateRenderer(console, make_console()))

    output = console.file.getvalue()
    assert exit_code == 2
    assert "CHART FAIL broken" in output
    assert "key [name]" in output


@pytest.mark.integration
def test_generate_renderer_dry_run_prints_schema(chart_tree: Path) -> None:
    console = make_console()
    out = make_console()
    events = generate_events(overrides={"chart_search_root": str(chart_tree), "dry_run": True})

    exit_code = run_events(events, GenerateRenderer(console, out))

    assert exit_code == 0
    assert "Dry run complete" in console.file.getvalue()
    printed = out.file.getvalue()
    assert printed.count('"$schema"') == 2
    assert "Printing jsonschema for parent chart" in console.file.getvalue()


def test_generate_renderer_escapes_chart_paths() -> None:
    console = make_console()
    events = [
        CommandStarted(command="generate"),
        ChartProcessed(
            command="generate",
            chart_path=Path("charts/[bold]odd/Chart.yaml"),
            chart_name="[red]odd",
            values_path=Path("charts/[bold]odd/values.yaml"),
        ),
        CommandCompleted(command="generate", ok=True, exit_code=0),
    ]

    run_events(events, GenerateRenderer(console, make_console()))

    output = console.file.getvalue()
    assert "CHART OK [red]odd (charts/[bold]odd/values.yaml)" in output
