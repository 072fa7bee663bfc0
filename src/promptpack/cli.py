"""
promptpack CLI - tooling for prompt plugin authors.

Validate a plugin directory, inspect its templates, and preview how commands
render and which agents a context would select.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from promptpack.logging_config import setup_logging

app = typer.Typer(
    name="promptpack",
    help="promptpack - load, validate and route prompt plugins",
    no_args_is_help=True,
)

console = Console()


def _init_logging() -> None:
    try:
        setup_logging(context="cli")
    except PermissionError:
        import logging

        logging.basicConfig(level=logging.INFO)


def _load(plugin_dir: str):
    """Load a plugin directory or exit with the failures printed."""
    from promptpack.loader import PluginLoadError, load_plugin_dir

    path = Path(plugin_dir)
    if not path.is_dir():
        console.print(f"[bold red]Error:[/bold red] Plugin directory not found: {plugin_dir}")
        raise typer.Exit(1)

    try:
        return load_plugin_dir(path)
    except PluginLoadError as e:
        if e.failures:
            console.print(
                f"[bold red]✗ {len(e.failures)} template file(s) failed to load:[/bold red]"
            )
            for failure in e.failures:
                console.print(f"  [red]{escape(str(failure))}[/red]", highlight=False)
        else:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def validate(
    plugin_dir: str = typer.Argument(..., help="Plugin directory containing plugin.json"),
    strict: bool = typer.Option(
        False, "--strict", help="Also fail on templates missing from the manifest"
    ),
) -> None:
    """
    Validate a plugin: parse every declared template and check the manifest.
    """
    _init_logging()
    plugin = _load(plugin_dir)

    console.print(f"[bold blue]Plugin:[/bold blue] {plugin.name} v{plugin.version}")
    console.print(f"  Entries checked: {plugin.report.checked}")

    for failure in plugin.skipped:
        console.print(f"  [yellow]⚠ Unreadable:[/yellow] {escape(str(failure))}", highlight=False)

    for manifest_failure in plugin.report.failures:
        console.print(f"  [red]✗ {escape(str(manifest_failure))}[/red]", highlight=False)

    for path in plugin.undeclared:
        console.print(f"  [yellow]⚠ Not in manifest:[/yellow] {path}", highlight=False)

    failed = not plugin.ok or (strict and bool(plugin.undeclared))
    if failed:
        console.print("[bold red]Validation failed[/bold red]")
        raise typer.Exit(1)

    console.print("[green]✓ Plugin is valid[/green]")


@app.command("list")
def list_templates(
    plugin_dir: str = typer.Argument(..., help="Plugin directory containing plugin.json"),
    kind: Optional[str] = typer.Option(None, help="Only list 'command' or 'agent'"),
) -> None:
    """List the commands and agents a plugin provides."""
    from promptpack.templates.document import TemplateKind

    _init_logging()
    plugin = _load(plugin_dir)

    try:
        kinds = [TemplateKind(kind)] if kind else list(TemplateKind)
    except ValueError:
        console.print(f"[bold red]Error:[/bold red] Unknown kind: {kind}")
        raise typer.Exit(1)

    table = Table(title=f"{plugin.name} v{plugin.version}")
    table.add_column("Kind")
    table.add_column("Identifier")
    table.add_column("Model")
    table.add_column("Path")
    table.add_column("Description")

    for template_kind in kinds:
        for document in plugin.store.list(template_kind):
            table.add_row(
                template_kind.value,
                document.identifier,
                document.model or "-",
                document.source_path,
                escape(document.description),
            )

    console.print(table)


@app.command()
def show(
    plugin_dir: str = typer.Argument(..., help="Plugin directory containing plugin.json"),
    kind: str = typer.Argument(..., help="'command' or 'agent'"),
    identifier: str = typer.Argument(..., help="Template identifier"),
) -> None:
    """Print one template's metadata and body."""
    from promptpack.exceptions import NotFound
    from promptpack.templates.frontmatter import render_frontmatter

    _init_logging()
    plugin = _load(plugin_dir)

    try:
        document = plugin.store.get(kind, identifier)
    except ValueError:
        console.print(f"[bold red]Error:[/bold red] Unknown kind: {kind}")
        raise typer.Exit(1)
    except NotFound as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    typer.echo(render_frontmatter(document.metadata, document.body))


@app.command()
def render(
    plugin_dir: str = typer.Argument(..., help="Plugin directory containing plugin.json"),
    command: str = typer.Argument(..., help="Command identifier"),
    arguments: Optional[List[str]] = typer.Argument(
        None, help="Argument text (joined with spaces)"
    ),
) -> None:
    """Render a command with its argument text, as the host would send it."""
    from promptpack.exceptions import UnknownCommand

    _init_logging()
    plugin = _load(plugin_dir)

    argument_text = " ".join(arguments or [])
    try:
        resolved = plugin.router().resolve_command(command, argument_text)
    except UnknownCommand as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if resolved.model:
        console.print(f"[dim]model: {resolved.model}[/dim]", highlight=False)
    typer.echo(resolved.text)


@app.command()
def match(
    plugin_dir: str = typer.Argument(..., help="Plugin directory containing plugin.json"),
    context: str = typer.Argument(..., help="Description of the current situation"),
    judge: Optional[str] = typer.Option(
        None, help="Judge to use: keyword, openai or anthropic (default from settings)"
    ),
) -> None:
    """Rank the plugin's agents against a context description."""
    from promptpack.exceptions import JudgeError
    from promptpack.matching import create_judge

    _init_logging()
    plugin = _load(plugin_dir)

    try:
        agent_judge = create_judge(judge)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        matches = plugin.router(agent_judge).match_agent(context)
    except JudgeError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not matches:
        console.print("[yellow]No agent matches this context[/yellow]")
        return

    table = Table(title=f"Agents for: {escape(context)}")
    table.add_column("Rank", justify="right")
    table.add_column("Agent")
    table.add_column("Score", justify="right")
    table.add_column("Reason")
    for rank, agent_match in enumerate(matches, start=1):
        table.add_row(
            str(rank),
            agent_match.identifier,
            f"{agent_match.score:.2f}",
            escape(agent_match.reason or ""),
        )
    console.print(table)


@app.command()
def plugins(
    plugin_dir: Optional[List[Path]] = typer.Option(
        None, "--plugin-dir", help="Extra directory to search for plugins"
    ),
) -> None:
    """List plugins found in the plugin search directories."""
    from promptpack.loader import PluginLoader

    _init_logging()
    loader = PluginLoader(plugin_dirs=plugin_dir)
    manifests = loader.discover_plugins()

    if not manifests:
        console.print("No plugins found.")
        return

    table = Table()
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Entries", justify="right")
    table.add_column("Path")
    for manifest in manifests:
        table.add_row(
            manifest.name,
            manifest.version,
            str(len(manifest.entries)),
            str(manifest.plugin_dir),
        )
    console.print(table)


if __name__ == "__main__":
    app()
