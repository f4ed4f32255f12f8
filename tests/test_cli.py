from pathlib import Path
import json
import textwrap

from typer.testing import CliRunner

from routewire.cli import app

runner = CliRunner()

SOURCE = """
from camel.builder import RouteBuilder


class TickRoute(RouteBuilder):
    def configure(self):
        self.from_("timer:tick").to("log:tick")
"""


def test_analyze_then_list_json(tmp_path: Path):
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "tick.py").write_text(textwrap.dedent(SOURCE), encoding="utf-8")

    result = runner.invoke(app, ["analyze", str(repo)])
    assert result.exit_code == 0, result.output
    assert "Endpoints found: 2" in result.output

    result = runner.invoke(app, ["endpoints", "list", str(repo), "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [(r["endpoint_uri"], r["consumer_only"], r["producer_only"]) for r in rows] == [
        ("timer:tick", True, False),
        ("log:tick", False, True),
    ]


def test_list_rejects_unknown_role(tmp_path: Path):
    result = runner.invoke(app, ["endpoints", "list", str(tmp_path), "--role", "both"])
    assert result.exit_code != 0


def test_analyze_rejects_missing_repo(tmp_path: Path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "missing")])
    assert result.exit_code != 0
