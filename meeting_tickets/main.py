"""
Main CLI interface for Meeting Tickets.

This module provides the Typer-based command-line interface. Its single
command, start, records a short meeting clip, transcribes it, extracts
actionable tickets and lets the user accept or decline each one.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import pyperclip
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .core.config import config, create_client, load_env
from .core.pipeline import MeetingPipeline
from .core.recorder import AudioRecorder, RecordingError
from .core.report import accepted_tickets, format_report
from .core.types import MeetingReport

app = typer.Typer(
    name="meeting-tickets",
    help="Meeting Tickets CLI - Record a meeting, extract action items and triage them in the terminal",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(debug: bool) -> None:
    """Route all module loggers through a rich handler on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=debug)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """
    Record a meeting and turn assigned tasks into tickets.

    Run `meeting-tickets start` to begin.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


@app.command()
def start(
    duration: Optional[float] = typer.Option(None, "--duration", "-d", min=0.5, help="Recording length in seconds (default: RECORDING_DURATION or 10)"),
    audio_file: Optional[str] = typer.Option(None, "--audio-file", help="Where to write the recording (default: AUDIO_FILE_PATH or ./recording.wav)"),
    keep_audio: bool = typer.Option(True, "--keep-audio/--no-keep-audio", help="Keep the recording after the run"),
    copy: bool = typer.Option(True, "--copy/--no-copy", help="Copy the accepted tickets to the clipboard"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file with OPENAI_API_KEY and settings"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging and JSON request traces"),
):
    """
    Record audio, transcribe it, and review the detected tickets.

    Examples:
        meeting-tickets start
        meeting-tickets start --duration 30 --no-keep-audio
        meeting-tickets start --env-file ~/.config/meeting-tickets.env --debug
    """
    load_env(env_file)

    # CLI flag always overrides .env
    if debug:
        os.environ["MT_DEBUG"] = "1"
    _configure_logging(os.getenv("MT_DEBUG") == "1")

    try:
        client = create_client()
        recorder = AudioRecorder(duration=duration)
        audio_path = Path(audio_file) if audio_file else config.audio_file

        console.print(f"🎙️  Starting audio recording for {recorder.duration:g} seconds...")
        pipeline = MeetingPipeline(console, client, recorder, audio_path, keep_audio=keep_audio)
        report = pipeline.run()

    except RecordingError as e:
        console.print(f"[bold red]Recording Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if report.responses:
        _display_report(report, copy)


def _display_report(report: MeetingReport, copy: bool):
    """Print the plain-text summary of accepted tickets."""
    console.print("\n[bold blue]📋 Meeting Report:[/bold blue]")
    summary = format_report(report.responses)
    console.print(summary, markup=False, highlight=False)

    if copy and accepted_tickets(report.responses):
        try:
            pyperclip.copy(summary)
        except Exception:
            # Silently handle clipboard errors to not break functionality
            pass


if __name__ == "__main__":
    app()
