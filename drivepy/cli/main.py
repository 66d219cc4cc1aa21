"""drivepy CLI - Main commands."""
import asyncio
import json
import logging
import signal
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="drivepy",
    help="Drive service CLI: resumable uploads, async jobs and batches",
    add_completion=False
)
console = Console()

TOKEN_ENV_VAR = "DRIVEPY_TOKEN"
MIB = 1024 * 1024


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def make_client(token: Optional[str], root_url: Optional[str], verbose: bool):
    from drivepy import APIConfig, DriveClient, StaticTokenAuth, setup_logging

    if not token:
        console.print(f"[red]No access token. Pass --token or set {TOKEN_ENV_VAR}.[/red]")
        raise typer.Exit(1)
    if verbose:
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
        setup_logging(logging.DEBUG)

    try:
        config = APIConfig(root_url=root_url) if root_url else APIConfig.from_env()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    return DriveClient(config, auth=StaticTokenAuth(token))


def describe_item(item) -> str:
    """Name and size of an item; size is omitted when the service did not report it."""
    name = item.name or item.id or "item"
    if item.size is None:
        return name
    return f"{name} ({item.size:,} bytes)"


def cancel_on_interrupt(token) -> None:
    """Turn Ctrl-C into a cooperative cancel of token."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel, "Interrupted by user")
    except NotImplementedError:
        # Windows event loops: Ctrl-C cancels the task and the session is still deleted
        pass


def commands_from_json(data: List[Dict[str, Any]], url_for) -> List[Any]:
    """Build ServiceCommands from a list of {url, method, headers, body, result} objects."""
    from drivepy import ResultKind, ServiceCommand

    commands = []
    for entry in data:
        body = entry.get("body")
        content_type = entry.get("contentType")
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
            content_type = content_type or "application/json"
        commands.append(ServiceCommand(
            url=url_for(entry["url"]),
            verb=entry.get("method", "GET").upper(),
            headers=dict(entry.get("headers") or {}),
            content_type=content_type,
            body=body,
            result_kind=ResultKind(entry.get("result", "none"))
        ))
    return commands


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    dest: str = typer.Option(None, "--dest", "-d", help="Destination path (default: file name at root)"),
    fragment_mib: int = typer.Option(10, "--fragment-mib", "-f", help="Fragment size in MiB"),
    conflict: str = typer.Option("fail", "--conflict", help="fail, replace or rename"),
    token: str = typer.Option(None, "--token", envvar=TOKEN_ENV_VAR, help="Bearer access token"),
    root_url: str = typer.Option(None, "--root-url", help="Service root URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Upload a file through a resumable upload session."""
    from drivepy import CancellationToken, DriveException, OperationCancelled, UploadOptions

    async def do_upload():
        cancel_token = CancellationToken()
        cancel_on_interrupt(cancel_token)
        target = dest or file_path.name

        async with make_client(token, root_url, verbose) as drive:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {file_path.name}", total=100)

                def on_progress(percent: int, transferred: int, total: int):
                    progress.update(task, completed=percent)

                try:
                    options = UploadOptions(
                        fragment_size=fragment_mib * MIB,
                        fragment_alignment=MIB,
                        progress_callback=on_progress,
                        cancel_token=cancel_token,
                        name_conflict=conflict
                    )
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")
                    raise typer.Exit(2)

                try:
                    item = await drive.upload_large_file(
                        drive.create_session_url(target), file_path, options
                    )
                except OperationCancelled:
                    console.print("[yellow]Upload cancelled[/yellow]")
                    raise typer.Exit(130)
                except DriveException as e:
                    console.print(f"[red]Upload failed: {e}[/red]")
                    raise typer.Exit(1)

        console.print(f"[green]Uploaded {describe_item(item)}[/green]")
        console.print(f"ID: {item.id}")

    run_async(do_upload())


@app.command()
def wait(
    status_url: str = typer.Argument(..., help="Status URL from a 202 Location header"),
    max_delay: float = typer.Option(30.0, "--max-delay", help="Longest pause between polls (s)"),
    token: str = typer.Option(None, "--token", envvar=TOKEN_ENV_VAR, help="Bearer access token"),
    root_url: str = typer.Option(None, "--root-url", help="Service root URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Poll a long-running operation until it finishes."""
    from drivepy import AsyncJobStatus, CancellationToken, DriveException, OperationCancelled, PollConfig

    async def do_wait():
        cancel_token = CancellationToken()
        cancel_on_interrupt(cancel_token)

        async with make_client(token, root_url, verbose) as drive:
            task = drive.task_from_status_url(status_url)
            try:
                with console.status("Waiting for operation..."):
                    await drive.wait_for_task(task, PollConfig(max_delay=max_delay), cancel_token)
            except OperationCancelled:
                console.print("[yellow]Stopped waiting[/yellow]")
                raise typer.Exit(130)
            except DriveException as e:
                console.print(f"[red]Polling failed: {e}[/red]")
                raise typer.Exit(1)

        if task.status.status is AsyncJobStatus.FAILED:
            console.print(f"[red]Operation failed ({task.status.operation or 'unknown'})[/red]")
            raise typer.Exit(1)

        console.print("[green]Operation completed[/green]")
        if task.finished_item is not None:
            console.print(f"Item: {describe_item(task.finished_item)} ({task.finished_item.id})")

    run_async(do_wait())


@app.command()
def batch(
    commands_file: Path = typer.Argument(..., help="JSON list of commands", exists=True, dir_okay=False),
    token: str = typer.Option(None, "--token", envvar=TOKEN_ENV_VAR, help="Bearer access token"),
    root_url: str = typer.Option(None, "--root-url", help="Service root URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Send several commands as one batch request."""
    from drivepy import DriveException

    try:
        data = json.loads(commands_file.read_text(encoding="utf-8"))
    except ValueError as e:
        console.print(f"[red]Invalid JSON: {e}[/red]")
        raise typer.Exit(2)
    if not isinstance(data, list):
        console.print("[red]Commands file must contain a JSON list[/red]")
        raise typer.Exit(2)

    async def do_batch():
        async with make_client(token, root_url, verbose) as drive:
            try:
                commands = commands_from_json(data, drive.api.url_for)
                responses = await drive.batch(commands)
            except (KeyError, ValueError) as e:
                console.print(f"[red]Invalid command: {e}[/red]")
                raise typer.Exit(2)
            except DriveException as e:
                console.print(f"[red]Batch failed: {e}[/red]")
                raise typer.Exit(1)

        table = Table()
        table.add_column("#", justify="right", style="dim")
        table.add_column("Command")
        table.add_column("Status", justify="right")
        table.add_column("Detail")

        for index, response in enumerate(responses, 1):
            command = response.command
            if response.was_error:
                error = response.error()
                status = f"[red]{response.status_code}[/red]"
                detail = f"{error.code}: {error.message}" if error else ""
            else:
                status = f"[green]{response.status_code}[/green]"
                detail = response.http_response.status_description
            table.add_row(str(index), f"{command.verb} {command.url}", status, detail)

        console.print(table)

    run_async(do_batch())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
