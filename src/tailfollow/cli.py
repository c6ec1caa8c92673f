from __future__ import annotations
import asyncio
import json
from typing import Optional
import typer
from rich.console import Console

from .config import FollowConfig, coerce_config, load_config
from .logging_setup import configure_logging
from .newline import deduce, style_name
from .session import follow

app = typer.Typer(help="tailfollow - follow growing text files line by line")
console = Console()
err_console = Console(stderr=True)


async def _follow(file: str, cfg: FollowConfig, json_out: bool, max_lines: int) -> int:
    count = 0
    session = None

    def on_line(filename: str, text: str) -> None:
        nonlocal count
        if json_out:
            print(json.dumps({"file": filename, "line": text}, ensure_ascii=False), flush=True)
        else:
            console.print(text, markup=False, highlight=False, soft_wrap=True)
        count += 1
        if max_lines and count >= max_lines:
            session.close()

    def on_error(filename: str, reason: Exception) -> None:
        err_console.print(f"[bold red]Error:[/bold red] {filename}: {reason}", style="red")

    session = follow(file, cfg, on_line)
    session.on("error", on_error)
    try:
        await session.wait_closed()
    finally:
        # also reached on Ctrl+C, so a persistent watcher thread never outlives us
        session.close()
    return count


@app.command("follow")
def follow_cmd(
    file: str = typer.Option(..., "--file", "-f", help="Path to a file to follow (tail -f)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to follow options YAML"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON lines (one object per line)"),
    from_start: bool = typer.Option(False, "--from-start", help="Read file from beginning (default: follow new lines only)"),
    poll_interval: Optional[float] = typer.Option(None, "--poll", help="Polling interval seconds for the file watcher"),
    max_lines: int = typer.Option(0, "--max-lines", "-n", help="Stop after N lines (0: run until Ctrl+C)"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v for info, -vv for debug logging"),
):
    configure_logging(verbose)
    try:
        cfg = load_config(config) if config else FollowConfig()
        overrides = {}
        if from_start:
            overrides["start_offset"] = 0
        if poll_interval is not None:
            overrides["poll_interval"] = poll_interval
        if overrides:
            cfg = coerce_config({**vars(cfg), **overrides})
    except FileNotFoundError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except ValueError as e:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)

    if not json_out:
        err_console.print(f"[green]Following[/green] {file}  (Ctrl+C to stop)")

    try:
        asyncio.run(_follow(file, cfg, json_out, max_lines))
    except FileNotFoundError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except PermissionError:
        err_console.print(
            f"[bold red]Error:[/bold red] Permission denied: {file}\n"
            f"Please ensure you have read permission for this file",
            style="red",
        )
        raise typer.Exit(1)
    except ValueError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        err_console.print("[yellow]Stopped.[/yellow]")


@app.command()
def sniff(
    file: str = typer.Option(..., "--file", "-f", help="Path to a file to inspect"),
    size: int = typer.Option(64 * 1024, "--bytes", "-b", help="Number of leading bytes to sample"),
):
    """Print the newline convention (LF or CRLF) used by a file."""
    try:
        with open(file, "rb") as f:
            sample = f.read(size)
    except FileNotFoundError:
        err_console.print(
            f"[bold red]Error:[/bold red] File not found: {file}\n"
            f"Please check the file path and try again",
            style="red",
        )
        raise typer.Exit(1)
    except PermissionError:
        err_console.print(f"[bold red]Error:[/bold red] Permission denied: {file}", style="red")
        raise typer.Exit(1)

    console.print(style_name(deduce(sample)))


if __name__ == "__main__":
    app()
