from __future__ import annotations

import json
import logging

import pytest

pytest.importorskip("rich_click")
pytest.importorskip("rich")

from click.testing import CliRunner

import fiqlparser
from fiqlparser.cli.errors import CLIError
from fiqlparser.cli.main import cli
from fiqlparser.cli.render import build_tree, render_error


def test_cli_no_args_shows_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_cli_version_option() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert fiqlparser.__version__ in result.output


def test_cli_version_json() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["version", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output.strip())
    assert payload["version"] == fiqlparser.__version__
    assert "pythonVersion" in payload


def test_cli_version_text() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["version"])
    assert result.exit_code == 0
    assert f"version: {fiqlparser.__version__}" in result.output


# =============================================================================
# parse
# =============================================================================


def test_parse_text_output() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "title==foo*;(updated=lt=-P1D,title==*bar)"])
    assert result.exit_code == 0
    assert result.output == "(title == foo* AND (updated < -P1D OR title == *bar))\n"


def test_parse_json_output() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "column==value", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["Type"] == "Expr"
    assert payload["Nodes"][0]["Operator"] == "=="
    assert payload["Nodes"][0]["Nodes"][1] == {"Type": "Const", "Value": "value"}


def test_parse_json_format_matches_flag() -> None:
    runner = CliRunner()
    by_format = runner.invoke(cli, ["parse", "a==b", "--format", "json"])
    by_flag = runner.invoke(cli, ["parse", "a==b", "--json"])
    assert by_format.output == by_flag.output


def test_parse_tree_output() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "a=gt=1;b", "--format", "tree"])
    assert result.exit_code == 0
    assert "Binary AND" in result.output
    assert "Argument 1 (number)" in result.output
    assert "Selector b (exists)" in result.output


def test_parse_error_renders_caret() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "a==b;"])
    assert result.exit_code == 2
    assert "Parse error at line 1, column 5: dangling operator" in result.output
    assert "    ^" in result.output


def test_parse_error_quiet_omits_caret() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-q", "parse", "a==b;"])
    assert result.exit_code == 2
    assert "dangling operator" in result.output
    assert "^" not in result.output


def test_no_unary_rejects_bare_selector() -> None:
    runner = CliRunner()
    assert runner.invoke(cli, ["parse", "email"]).exit_code == 0
    result = runner.invoke(cli, ["--no-unary", "parse", "email"])
    assert result.exit_code == 2
    assert "dangling comparator" in result.output


def test_verbose_logs_parse_to_stderr() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-vv", "parse", "a==b"])
    assert result.exit_code == 0
    assert "Parsed filter" in result.output


def test_logging_restored_after_command() -> None:
    logger = logging.getLogger("fiqlparser")
    handlers_before = list(logger.handlers)
    runner = CliRunner()
    runner.invoke(cli, ["-v", "parse", "a==b"])
    assert logger.handlers == handlers_before


def test_unary_policy_from_environment() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "email"], env={"FIQL_UNARY": "false"})
    assert result.exit_code == 2


# =============================================================================
# match
# =============================================================================


def test_match_filters_array_from_stdin() -> None:
    runner = CliRunner()
    entities = [{"status": "active", "score": 12}, {"status": "active", "score": 3}]
    result = runner.invoke(
        cli, ["match", "status==active;score=gt=10"], input=json.dumps(entities)
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == [{"status": "active", "score": 12}]


def test_match_single_object_from_file(tmp_path) -> None:
    path = tmp_path / "entity.json"
    path.write_text(json.dumps({"name": "Acme"}), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["match", "name==Ac*", "--file", str(path)])
    assert result.exit_code == 0
    assert json.loads(result.output) == [{"name": "Acme"}]


def test_match_invalid_json() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["match", "a==b"], input="{not json")
    assert result.exit_code == 2
    assert "Invalid JSON" in result.output
    assert "Hint:" in result.output


def test_match_rejects_scalar_payload() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["match", "a==b"], input="[1, 2]")
    assert result.exit_code == 2
    assert "Usage error" in result.output


def test_match_parse_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["match", "a=gt=soon"], input="[]")
    assert result.exit_code == 2
    assert "expected number or date or duration" in result.output


# =============================================================================
# Rendering helpers
# =============================================================================


def test_render_error_without_position(capsys: pytest.CaptureFixture[str]) -> None:
    render_error(CLIError("boom", hint="try again"))
    captured = capsys.readouterr()
    assert "Error: boom" in captured.err
    assert "Hint: try again" in captured.err


def test_build_tree_labels_groups() -> None:
    tree = build_tree(fiqlparser.parse("(a==b)"))
    assert str(tree.label) == "Expr"
    group = tree.children[0]
    assert str(group.label) == "Group"
    assert str(group.children[0].label) == "Binary =="
