"""Click CLI for tuan.

Reads an entity/relation description produced by an analysis step (YAML or
JSON, both parsed with PyYAML)::

    entities:
      - key: src/app.ts
      - key: src/util.ts
        label: util
    relations:
      - {source: src/app.ts, target: src/util.ts, weight: 2}

and prints the laid-out graph or its clusters to stdout.
"""

from pathlib import Path

import click
import yaml

from tuan_graph.builder import BuildResult, build_graph
from tuan_graph.config import CLUSTER_MODES, EngineConfig, load_config
from tuan_graph.errors import ValidationError
from tuan_graph.paths import configure_logger, debug_enabled, log_file, set_debug

_log = configure_logger("tuan")

# Shared Click settings: make -h and --help both work everywhere
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


class HelpGroup(click.Group):
    """Click Group that treats 'help' as an alias for --help.

    Handles two cases:
    - ``tuan help`` - runs the registered ``help`` command
    - ``tuan cluster help`` - 'help' as an arg to a leaf command
    """

    def resolve_command(self, ctx, args):
        cmd_name, cmd, remaining = super().resolve_command(ctx, args)
        if (remaining and remaining[0] == "help"
                and cmd is not None and not isinstance(cmd, click.Group)):
            remaining = ["--help"] + remaining[1:]
        return cmd_name, cmd, remaining


def _load_input(path: Path) -> tuple[list, list]:
    """Parse the entity/relation document at *path*."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Could not parse {path}: {e}")
    except UnicodeDecodeError as e:
        raise click.ClickException(f"{path} is not valid UTF-8: {e}")
    if not isinstance(data, dict) or not isinstance(data.get("entities"), list):
        raise click.ClickException(f"{path}: expected a mapping with an 'entities' list")
    relations = data.get("relations") or []
    if not isinstance(relations, list):
        raise click.ClickException(f"{path}: 'relations' must be a list")
    return data["entities"], relations


def _build(path: Path, config: EngineConfig) -> BuildResult:
    entities, relations = _load_input(path)
    try:
        result = build_graph(entities, relations, config=config)
    except ValidationError as e:
        raise click.ClickException(str(e))
    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)
    if result.warnings:
        click.echo(f"{result.warning_count} relation(s) dropped", err=True)
    return result


@click.group(cls=HelpGroup, context_settings=CONTEXT_SETTINGS)
@click.option("-c", "--config", "config_path", default=None, envvar="TUAN_CONFIG",
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML config file (or set TUAN_CONFIG env var)")
@click.pass_context
def cli(ctx, config_path: Path | None):
    """tuan - lay out and cluster module dependency graphs."""
    try:
        ctx.obj = load_config(config_path)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--config")
    _log.info("tuan %s (config=%s)", ctx.invoked_subcommand, config_path)


@cli.command("layout")
@click.argument("input_path", metavar="INPUT",
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "output_fmt", default="text", type=click.Choice(["json", "text"]),
              help="Output format")
@click.pass_obj
def layout_cmd(config: EngineConfig, input_path: Path, output_fmt: str):
    """Compute a force-directed layout for INPUT."""
    from tuan_graph.layout import positioning
    from tuan_graph.output import graph_to_json, layout_to_text

    graph = _build(input_path, config).graph
    try:
        report = positioning(graph, config.layout)
    except ValidationError as e:
        raise click.ClickException(str(e))

    if output_fmt == "json":
        click.echo(graph_to_json(graph))
    else:
        click.echo(layout_to_text(graph))
        state = "converged" if report.converged else "stopped"
        click.echo(f"\n{state} after {report.iterations} iterations")


@cli.command("cluster")
@click.argument("input_path", metavar="INPUT",
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--threshold", default=None, type=float,
              help="Merge threshold (default from config)")
@click.option("--mode", default=None, type=click.Choice(CLUSTER_MODES),
              help="strength: edges >= threshold merge; distance: edges <= threshold merge")
@click.option("--labels/--no-labels", default=True, help="Name clusters from member paths")
@click.option("--output", "output_fmt", default="text", type=click.Choice(["json", "text"]),
              help="Output format")
@click.pass_obj
def cluster_cmd(config: EngineConfig, input_path: Path, threshold: float | None,
                mode: str | None, labels: bool, output_fmt: str):
    """Partition INPUT into clusters of strongly related modules."""
    from tuan_graph.labeler import label_clusters
    from tuan_graph.output import clusters_to_json, clusters_to_text

    threshold = config.cluster.threshold if threshold is None else threshold
    graph = _build(input_path, config).graph
    try:
        clusters = graph.clusterize(threshold, mode=mode)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--threshold")

    if labels:
        label_clusters(graph, clusters)

    if output_fmt == "json":
        click.echo(clusters_to_json(clusters, graph))
    else:
        click.echo(clusters_to_text(clusters, graph))


@cli.command("debug")
@click.argument("state", required=False, type=click.Choice(["on", "off"]))
def debug_cmd(state: str | None):
    """Show or toggle debug logging (on/off)."""
    if state is not None:
        set_debug(state == "on")
    status = "on" if debug_enabled() else "off"
    click.echo(f"debug logging {status} ({log_file()})")


@cli.command("help")
@click.pass_context
def help_cmd(ctx):
    """Show this help."""
    click.echo(ctx.parent.get_help())


def main():
    cli()
