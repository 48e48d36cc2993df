"""graphstate CLI — replay command logs and inspect snapshots."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from graphstate.engine import GraphReducer, GraphState, command_from_dict, graph_stats
from graphstate.engine.core import validate_state
from graphstate.models import ReducerConfig

logger = logging.getLogger("graphstate.cli")


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path}: invalid JSON ({e})")


def _read_commands(path: str) -> list[dict[str, Any]]:
    """Read a JSON array of commands, or one JSON command per line."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        if text.lstrip().startswith("["):
            return json.loads(text)
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path}: invalid JSON ({e})")


def _load_state(path: str, id_key: str | None = None) -> GraphState:
    """Load a snapshot; with ``id_key``, require every edge endpoint to carry it."""
    try:
        state = GraphState.from_dict(_read_json(path))
    except (ValueError, KeyError, TypeError) as e:
        raise click.ClickException(f"{path}: not a graph snapshot ({e})")
    if id_key is not None:
        for edge in state.edges.values():
            if id_key not in edge.source or id_key not in edge.target:
                raise click.ClickException(
                    f"{path}: edge '{edge.id}' endpoints have no '{id_key}' key "
                    f"(check --id-key)"
                )
    return state


def _match_node(state: GraphState, raw: str) -> Any:
    """Map a command-line node argument onto a node id of the snapshot."""
    for node_id in (*state.nodes, *state.edge_map):
        if str(node_id) == raw:
            return node_id
    return raw


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


@click.group()
@click.option("--id-key", default="id", help="Property holding node identifiers.")
@click.option("--verbose", "-v", is_flag=True, help="Log transitions to stderr.")
@click.pass_context
def cli(ctx: click.Context, id_key: str, verbose: bool) -> None:
    """graphstate CLI — replay graph commands and query snapshots."""
    if verbose:
        # stdout is reserved for JSON output
        logging.basicConfig(
            stream=sys.stderr, level=logging.DEBUG, format="%(levelname)s: %(message)s"
        )
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = ReducerConfig(id_property_name=id_key)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--id-key")


@cli.command()
@click.argument("commands_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--state",
    "state_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Snapshot to start from (default: empty graph).",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write here.")
@click.pass_context
def replay(
    ctx: click.Context, commands_file: str, state_file: str | None, output: str | None
) -> None:
    """Apply a command log to a snapshot and print the result."""
    reducer = GraphReducer(ctx.obj["config"])
    state = _load_state(state_file, reducer.id_key) if state_file else GraphState.empty()
    for lineno, data in enumerate(_read_commands(commands_file), start=1):
        try:
            state = reducer(state, command_from_dict(data))
        except (ValueError, KeyError, TypeError) as e:
            raise click.ClickException(f"{commands_file}: command {lineno}: {e!r}")
    logger.info(
        "Replayed %s: %d nodes, %d edges", commands_file, len(state.nodes), len(state.edges)
    )
    text = _dump(state.to_dict())
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"Wrote snapshot to {output}", err=True)
    else:
        click.echo(text)


@cli.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("node")
@click.option("--to", "other", default=None, help="Only edges to this node.")
@click.option("--label", default=None, help="Only the newest edge with this label.")
@click.pass_context
def edges(
    ctx: click.Context, state_file: str, node: str, other: str | None, label: str | None
) -> None:
    """List the edges of NODE in a snapshot."""
    reducer = GraphReducer(ctx.obj["config"])
    state = _load_state(state_file, reducer.id_key)
    node = _match_node(state, node)
    other = _match_node(state, other) if other is not None else None
    if label is not None:
        if other is None:
            raise click.UsageError("--label requires --to")
        found = reducer.edge_with_label_between(state, label, node, other)
        results = [found] if found else []
    elif other is not None:
        results = reducer.edges_between(state, node, other)
    else:
        results = reducer.edges_of_node(state, node)
    if not results:
        click.echo("No edges found.")
        return
    key = reducer.id_key
    for e in results:
        props = json.dumps(dict(e.properties), default=str)
        click.echo(f"  {e.id}  {e.source[key]} -[{e.label}]-> {e.target[key]}  {props}")


@cli.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, state_file: str) -> None:
    """Validate index consistency of a snapshot."""
    id_key = ctx.obj["config"].id_property_name
    state = _load_state(state_file, id_key)
    result = validate_state(state, id_key)
    if result["valid"]:
        click.echo("Snapshot is valid.")
    else:
        click.echo("Validation errors:")
        for err in result["errors"]:
            click.echo(f"  ERROR: {err}")
    for warn in result["warnings"]:
        click.echo(f"  WARNING: {warn}")
    if not result["valid"]:
        ctx.exit(1)


@cli.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
def stats(state_file: str) -> None:
    """Show snapshot statistics."""
    s = graph_stats(_load_state(state_file))
    click.echo(f"Nodes: {s['num_nodes']}  Edges: {s['num_edges']}")
    if s["nodes_by_label"]:
        click.echo("Nodes by label:")
        for t, c in s["nodes_by_label"].items():
            click.echo(f"  {t}: {c}")
    if s["edges_by_label"]:
        click.echo("Edges by label:")
        for t, c in s["edges_by_label"].items():
            click.echo(f"  {t}: {c}")


if __name__ == "__main__":
    cli()
