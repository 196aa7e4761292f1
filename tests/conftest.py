from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


@pytest.fixture
def chart_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A parent chart with one subchart, both with annotated values."""
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "charts"

    write_file(
        root / "parent" / "Chart.yaml",
        """
apiVersion: v2
name: parent
description: Parent chart
version: 0.1.0
dependencies:
  - name: child
    version: 0.1.0
""",
    )
    write_file(
        root / "parent" / "values.yaml",
        """
# number of pods
replicaCount: 1
child:
  enabled: false
""",
    )

    write_file(
        root / "parent" / "charts" / "child" / "Chart.yaml",
        """
apiVersion: v2
name: child
description: Child chart
version: 0.1.0
""",
    )
    write_file(
        root / "parent" / "charts" / "child" / "values.yaml",
        """
# @schema
# type: boolean
# @schema
enabled: true
""",
    )
    return root
