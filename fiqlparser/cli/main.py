from __future__ import annotations

import json
import platform
from collections.abc import Callable
from typing import Any

import click
import rich_click

import fiqlparser

from ..predicate import compile_predicate
from ..serialization import to_json
from .context import CLIContext
from .errors import CLIError
from .logging import configure_logging, restore_logging
from .render import emit_json, render_error, render_tree


def _run(ctx: CLIContext, fn: Callable[[], None]) -> None:
    try:
        fn()
    except CLIError as e:
        render_error(e, quiet=ctx.quiet)
        raise click.exceptions.Exit(e.exit_code) from e


@click.group(
    name="fiql",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=rich_click.RichGroup,
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--unary/--no-unary",
    default=True,
    show_default=True,
    envvar="FIQL_UNARY",
    help="Accept bare selectors as existence checks.",
)
@click.version_option(version=fiqlparser.__version__, prog_name="fiql")
@click.pass_context
def cli(click_ctx: click.Context, *, quiet: bool, verbose: int, unary: bool) -> None:
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    click_ctx.obj = CLIContext(quiet=quiet, verbosity=verbose, unary=unary)
    previous_logging = configure_logging(verbosity=verbose)
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


@cli.command(name="parse", cls=rich_click.RichCommand)
@click.argument("expression")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "tree", "json"]),
    default="text",
    show_default=True,
    help="Normalized text, a tree view, or the JSON projection.",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --format json.")
@click.pass_obj
def parse_cmd(ctx: CLIContext, expression: str, output_format: str, json_flag: bool) -> None:
    """Parse EXPRESSION and print its tree."""

    def fn() -> None:
        tree = ctx.parse(expression)
        fmt = "json" if json_flag else output_format
        if fmt == "json":
            click.echo(to_json(tree))
        elif fmt == "tree":
            render_tree(tree)
        else:
            click.echo(tree.to_string())

    _run(ctx, fn)


def _load_entities(stream: Any) -> list[dict[str, Any]]:
    try:
        payload = json.load(stream)
    except json.JSONDecodeError as e:
        raise CLIError(
            f"Input is not valid JSON: {e.msg}",
            exit_code=2,
            error_type="invalid_json",
            hint="Provide a JSON object or an array of objects.",
        ) from e
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, list) and all(isinstance(item, dict) for item in payload):
        return payload
    raise CLIError(
        "Input must be a JSON object or an array of objects.",
        exit_code=2,
        error_type="usage_error",
    )


@cli.command(name="match", cls=rich_click.RichCommand)
@click.argument("expression")
@click.option(
    "--file",
    "input_file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="JSON object or array of objects to filter ('-' for stdin).",
)
@click.pass_obj
def match_cmd(ctx: CLIContext, expression: str, input_file: Any) -> None:
    """Print the entities from the input that match EXPRESSION."""

    def fn() -> None:
        predicate = compile_predicate(ctx.parse(expression))
        entities = _load_entities(input_file)
        emit_json([entity for entity in entities if predicate(entity)])

    _run(ctx, fn)


@cli.command(name="version", cls=rich_click.RichCommand)
@click.option("--json", "json_flag", is_flag=True, help="Emit JSON.")
def version_cmd(json_flag: bool) -> None:
    data = {
        "version": fiqlparser.__version__,
        "pythonVersion": platform.python_version(),
        "platform": platform.platform(),
    }
    if json_flag:
        emit_json(data)
        return
    for key, value in data.items():
        click.echo(f"{key}: {value}")


def main() -> None:  # pragma: no cover
    cli()
