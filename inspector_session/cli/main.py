"""
Inspector CLI - Command-line access to a remote automation session.
"""

import json
import os
import shlex
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from inspector_session import __version__
from inspector_session.core.errors import InspectorError, is_session_lost
from inspector_session.core.session import InspectorConfig, InspectorSession

console = Console()

SHELL_HELP = """\
[bold]Commands[/bold]
  find <strategy> <selector>       find one element (quote strategies with spaces)
  findall <strategy> <selector>    find all matching elements
  el <id|name> <method> \\[args...]  run a method on a cached element by id, or by its name
                                   (el1, els1\\[0]) once it has one; single elements
                                   are named on their first command
  call <method> \\[args...]          run a session method (back, source, get <url>, ...)
  restart                          reset variable names to el1/els1
  script                           show the generated script
  save                             write command log and script to the report dir
  help                             show this help
  quit                             end the session"""


def _load_capabilities(caps: Optional[str]) -> Optional[Dict[str, Any]]:
    """Accept capabilities as a JSON string or a path to a JSON file."""
    if not caps:
        return None
    if os.path.exists(caps):
        with open(caps, "r", encoding="utf-8") as f:
            return json.load(f)
    return json.loads(caps)


def session_options(func):
    """Options shared by commands that open a remote session."""
    options = [
        click.option('--server-url', default=None, help='Appium server or Selenium Grid URL'),
        click.option('--caps', default=None, help='Capabilities as JSON or path to a JSON file'),
        click.option('--automation', default=None, type=click.Choice(['appium', 'selenium']),
                     help='Client used to open the session (default: appium)'),
        click.option('--headless/--headed', default=False, help='Run the browser headless (selenium only)'),
        click.option('--report-dir', default=None, help='Report output directory'),
        click.option('--settle-delay-ms', default=None, type=int,
                     help='Delay before the post-command snapshot (default: 500)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(server_url, caps, automation, headless, report_dir, settle_delay_ms) -> InspectorConfig:
    return InspectorConfig.from_env(
        server_url=server_url,
        capabilities=_load_capabilities(caps),
        automation=automation,
        headless=headless,
        report_dir=report_dir,
        settle_delay_ms=settle_delay_ms,
    )


@click.group()
@click.version_option(version=__version__, prog_name="inspector-session")
def cli():
    """🔍 Inspector Session - drive a remote Appium/Selenium session

    Find elements, run commands and get a fresh source and screenshot
    after each one, with readable variable names (el1, els1, ...).
    """
    pass


@cli.command()
@session_options
def shell(server_url, caps, automation, headless, report_dir, settle_delay_ms):
    """
    Start an interactive inspector shell.

    \b
    Examples:

        inspector-session shell --caps caps.json

        inspector-session shell --automation selenium --server-url http://localhost:4444
    """
    config = _build_config(server_url, caps, automation, headless, report_dir, settle_delay_ms)

    console.print(Panel.fit(
        f"[bold blue]🔍 Inspector Session[/bold blue]\n"
        f"[dim]{config.automation} @ {config.server_url}[/dim]",
        border_style="blue"
    ))
    console.print("[dim]Type 'help' for commands.[/dim]\n")

    with InspectorSession(config) as session:
        while True:
            try:
                line = click.prompt("inspector", prompt_suffix="> ", default="", show_default=False)
            except click.Abort:
                break
            if not line.strip():
                continue
            try:
                words = shlex.split(line)
            except ValueError as e:
                console.print(f"[red]❌ {escape(str(e))}[/red]")
                continue
            if words[0] in ("quit", "exit"):
                break
            try:
                _run_shell_command(session, words)
            except InspectorError as e:
                console.print(f"[red]❌ {escape(str(e))}[/red]")
            except Exception as e:
                if is_session_lost(e):
                    console.print(f"[bold red]❌ Session lost: {e}[/bold red]")
                    break
                console.print(f"[red]❌ Error: {escape(str(e))}[/red]")


def _run_shell_command(session: InspectorSession, words) -> None:
    command, rest = words[0], words[1:]

    if command == "help":
        console.print(SHELL_HELP)
    elif command == "find" and len(rest) == 2:
        entry = session.handler.fetch_element(rest[0], rest[1])
        if entry is None:
            console.print("[yellow]⚠️ No element found[/yellow]")
        else:
            console.print(
                f"[green]✅ Found[/green] {escape(entry.id)} [dim]({escape(entry.strategy)}={escape(entry.selector)}, "
                f"unnamed until its first command)[/dim]"
            )
    elif command == "findall" and len(rest) == 2:
        collection = session.handler.fetch_elements(rest[0], rest[1])
        table = Table(show_header=True, header_style="bold cyan", title=collection.variable_name)
        table.add_column("Variable", style="green")
        table.add_column("Id", style="yellow")
        for el in collection.elements:
            table.add_row(el.reference, el.id)
        console.print(table)
    elif command == "el" and len(rest) >= 2:
        element_id = _resolve_element_id(session, rest[0])
        _print_result(session.handler.execute_element_command(element_id, rest[1], rest[2:]))
    elif command == "call" and rest:
        _print_result(session.handler.execute_method(rest[0], rest[1:]))
    elif command == "restart":
        session.handler.restart()
        console.print("[green]✅ Variable names reset[/green]")
    elif command == "script":
        generated = session.recorder.generate_script()
        if generated:
            console.print(generated, markup=False, highlight=False)
        else:
            console.print("[dim](nothing recorded)[/dim]")
    elif command == "save":
        console.print(f"[dim]Saved: {session.save()}[/dim]")
    else:
        console.print(f"[yellow]Unknown or incomplete command: {' '.join(words)}[/yellow]")


def _resolve_element_id(session: InspectorSession, token: str) -> str:
    """Accept a cached id or a name the cache has assigned, such as el1 or els2[0]."""
    cache = session.handler.cache
    if token in cache:
        return token
    entry = cache.find_by_reference(token)
    return entry.id if entry else token


def _print_result(result) -> None:
    table = Table(show_header=False, box=None)
    if result.element is not None:
        table.add_row("[bold]Element:[/bold]", f"{result.element.reference} ({result.element.id})")
    table.add_row("[bold]Method:[/bold]", result.method_name)
    table.add_row("[bold]Result:[/bold]", escape(repr(result.result)))

    snapshot = result.snapshot
    if snapshot.source_error:
        table.add_row("[bold]Source:[/bold]", f"[yellow]⚠️ {escape(str(snapshot.source_error))}[/yellow]")
    else:
        table.add_row("[bold]Source:[/bold]", f"{len(snapshot.source or '')} chars")
    if snapshot.screenshot_error:
        table.add_row("[bold]Screenshot:[/bold]", f"[yellow]⚠️ {escape(str(snapshot.screenshot_error))}[/yellow]")
    else:
        table.add_row("[bold]Screenshot:[/bold]", f"{len(snapshot.screenshot or '')} bytes (base64)")
    console.print(table)


@cli.command()
@click.argument('run_dir')
@session_options
def replay(run_dir, server_url, caps, automation, headless, report_dir, settle_delay_ms):
    """
    Re-run a saved session against a new remote session.

    \b
    Example:

        inspector-session replay ./inspector_reports/20251227_074249 --caps caps.json
    """
    console.print(Panel.fit(
        f"[bold magenta]🎬 Session Replay[/bold magenta]\n"
        f"[dim]Replaying: {run_dir}[/dim]",
        border_style="magenta"
    ))

    from inspector_session.reporters.session_replayer import SessionReplayer

    replayer = SessionReplayer(run_dir)
    try:
        recorded = replayer.load()
    except FileNotFoundError as e:
        console.print(f"[red]❌ Error: {escape(str(e))}[/red]")
        raise SystemExit(1)

    console.print(f"[bold]Run ID:[/bold] {recorded.run_id}")
    console.print(f"[bold]Commands:[/bold] {recorded.total_commands}\n")

    config = _build_config(server_url, caps, automation, headless, report_dir, settle_delay_ms)
    with InspectorSession(config) as session:
        def on_step(step, success):
            status = "[green]✅[/green]" if success else "[red]❌[/red]"
            console.print(f"  {status} {step.event_type} → {step.target} {step.method_name or ''}")

        results = replayer.replay(session.handler, callback=on_step)
        saved = session.save()

    successes = sum(1 for _, ok in results if ok)
    console.print(f"\n[bold]Replay complete: {successes}/{len(results)} steps succeeded[/bold]")
    console.print(f"[dim]Report: {saved}[/dim]")
    if successes != len(results):
        raise SystemExit(1)


@cli.command()
@click.argument('run_dir')
def script(run_dir):
    """Print the script generated for a saved session."""
    from inspector_session.reporters.session_replayer import SessionReplayer

    try:
        click.echo(SessionReplayer(run_dir).read_script(), nl=False)
    except FileNotFoundError as e:
        console.print(f"[red]❌ Error: {escape(str(e))}[/red]")
        raise SystemExit(1)


@cli.command()
def version():
    """Show version information."""
    console.print(f"Inspector Session v{__version__}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
