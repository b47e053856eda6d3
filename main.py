"""Main CLI interface for ats (Android test step)."""

import sys

import click
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import LogLevel, StepConfig, set_config
from reporting.testaddon import TestAddonExporter
from runner.driver import StepContext, StepDriver, TaskProfile
from runner.selector import select_variants
from tools.base import ConfigError, StepError

console = Console()

__version__ = "0.3.0"


def load_config(ctx, **overrides) -> StepConfig:
    """Resolve the step config from the environment, exit 1 when it is invalid."""
    try:
        config = StepConfig.from_env(**overrides)
    except ConfigError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        for suggestion in e.suggestions:
            console.print(f"[dim]• {suggestion}[/dim]")
        sys.exit(1)

    options = ctx.obj or {}
    if options.get("log_level"):
        config.log_level = LogLevel(options["log_level"])
    if options.get("log_file"):
        config.log_file = options["log_file"]
    if options.get("verbose"):
        config.is_debug = True

    set_config(config)
    return config


def print_config(config: StepConfig) -> None:
    table = Table(title="Step inputs", show_header=False, title_justify="left")
    table.add_column("Input", style="cyan")
    table.add_column("Value")
    for key, value in config.summary_rows():
        table.add_row(key, value)
    console.print(table)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Set the logging level",
)
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, log_level, log_file, verbose):
    """ats: run Android Gradle unit and snapshot tests, then export their results."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--project-location", help="Gradle project directory (env: project_location)")
@click.option("--task", help="Gradle task to run, e.g. test or verifySnapshots (env: task)")
@click.option("--variant", help="Variant to run, all when empty (env: variant)")
@click.option("--module", help="Module to run, all when empty (env: module)")
@click.pass_context
def run(ctx, project_location, task, variant, module):
    """Run the test task and export its results."""
    config = load_config(
        ctx, project_location=project_location, task=task, variant=variant, module=module
    )
    console.print(
        Panel.fit(
            f"[bold blue]ats[/bold blue] - [dim]Android test step[/dim]\n"
            f"[dim]Task:[/dim] {config.task}",
            border_style="blue",
        )
    )
    print_config(config)

    try:
        context = StepContext.create(config)
    except StepError as e:
        logger.error(f"Process config: failed to open project, error: {e}")
        sys.exit(1)

    sys.exit(StepDriver(context).run())


@cli.command()
@click.option("--project-location", help="Gradle project directory (env: project_location)")
@click.option("--task", help="Gradle task whose variants to list (env: task)")
@click.pass_context
def variants(ctx, project_location, task):
    """List the variants of the test task, marking the selected ones."""
    config = load_config(ctx, project_location=project_location, task=task)

    try:
        context = StepContext.create(config)
        all_variants = context.project.get_task(config.task).get_variants(config.gradle_args)
        profile = TaskProfile.for_task(config.task)
        selected = select_variants(
            all_variants, config.module, config.variant, variant_suffix=profile.variant_suffix
        )
    except StepError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)

    if not all_variants:
        console.print(f"[yellow]No variants found for task '{config.task}'.[/yellow]")
        return

    table = Table(title=f"Variants of '{config.task}'")
    table.add_column("Module", style="cyan")
    table.add_column("Variant")
    table.add_column("Selected", justify="center")
    for module, names in all_variants.items():
        for name in names:
            mark = "[green]✓[/green]" if name in selected.get(module, []) else "[dim]-[/dim]"
            table.add_row(module or "<root>", name, mark)
    console.print(table)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
def classify(paths):
    """Show the test addon directory each artifact path would be exported to."""
    exporter = TestAddonExporter(test_result_dir="")
    for path in paths:
        console.print(f"{path} => [green]{exporter.export_dir_for(path)}[/green]")


@cli.command()
def version():
    """Show ats version information."""
    console.print(f"[bold blue]ats[/bold blue] (Android test step) version [green]{__version__}[/green]")
    console.print("[dim]Gradle unit and snapshot test runner with result export[/dim]")


if __name__ == "__main__":
    cli()
