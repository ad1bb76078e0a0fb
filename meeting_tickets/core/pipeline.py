"""
Meeting pipeline for Meeting Tickets.

This module wires the sequential steps of a run together:
record → transcribe → extract tickets → review → report.
"""

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .progress import reporter
from .recorder import AudioRecorder, discard
from .review import review_tickets
from .speech import transcribe_recording
from .tickets import extract_tickets
from .types import MeetingReport, TicketResponse

logger = logging.getLogger(__name__)


class MeetingPipeline:
    """
    Runs one recording session end to end.

    Steps that fail degrade to an empty report; only a capture failure
    (RecordingError) propagates to the caller.
    """

    def __init__(
        self,
        console: Console,
        client: Optional[Any],
        recorder: AudioRecorder,
        audio_file: Path,
        keep_audio: bool = True,
        review: Optional[Callable[[List[str]], List[TicketResponse]]] = None,
    ):
        self.console = console
        self.client = client
        self.recorder = recorder
        self.audio_file = Path(audio_file)
        self.keep_audio = keep_audio
        self.review = review or review_tickets

    def transcribe(self) -> Optional[str]:
        """Record a clip and transcribe it."""
        with reporter.stage(self.console, f"Recording audio for {self.recorder.duration:g} seconds…"):
            self.recorder.record(self.audio_file)
            reporter.step("Transcribing audio…")
            transcription = transcribe_recording(str(self.audio_file), self.client)
        return transcription

    def extract(self, transcription: str) -> List[str]:
        with reporter.stage(self.console, "Analyzing for actionable items…"):
            tickets = extract_tickets(transcription, self.client)
        reporter.note(f"{len(tickets)} ticket(s) found")
        return tickets

    def run(self) -> MeetingReport:
        """
        Execute the full pipeline.

        Returns:
            MeetingReport with the transcript and reviewed tickets (empty when
            nothing was transcribed or no tickets were found)

        Raises:
            RecordingError: If audio capture fails
        """
        try:
            transcription = self.transcribe()
        finally:
            if not self.keep_audio:
                discard(self.audio_file)

        if not transcription:
            self.console.print("[yellow]No transcribable audio detected or transcription failed.[/yellow]")
            return MeetingReport()

        self.console.print("[bold]Transcription:[/bold]")
        self.console.print(Panel(escape(transcription), border_style="dim"))

        tickets = self.extract(transcription)
        if not tickets:
            self.console.print("[yellow]No actionable items detected in the conversation.[/yellow]")
            return MeetingReport(transcript=transcription)

        self.console.print("[bold green]Generated tickets:[/bold green]")
        for i, ticket in enumerate(tickets, 1):
            self.console.print(f"   {i}. {escape(ticket)}")

        logger.debug(f"Opening review form for {len(tickets)} tickets")
        responses = self.review(tickets)
        return MeetingReport(transcript=transcription, responses=responses)
