"""
Basic tests for Meeting Tickets functionality.

These tests verify core functionality without requiring API keys or external services.
"""

import json
from io import StringIO
from pathlib import Path

import pytest
from pydantic import ValidationError
from rich.console import Console

from meeting_tickets.core.debug_log import DebugLogger, get_debug_logger
from meeting_tickets.core.progress import ProgressReporter
from meeting_tickets.core.report import accepted_tickets, format_report
from meeting_tickets.core.tickets import NO_TICKETS_SENTINEL, parse_tickets
from meeting_tickets.core.types import MeetingReport, TicketResponse, TicketStatus, Transcript


class TestTypes:
    """Test the type definitions and data structures."""

    def test_transcript_defaults(self):
        transcript = Transcript(text="hello team")
        assert transcript.text == "hello team"
        assert transcript.lang_hint == "auto"

    def test_ticket_response_starts_pending(self):
        response = TicketResponse(ticket="TO DO [Alice]: Ship it")
        assert response.status == TicketStatus.PENDING

    def test_ticket_status_accepts_string_values(self):
        response = TicketResponse(ticket="TO DO [Bob]: Review PR", status="declined")
        assert response.status is TicketStatus.DECLINED

    def test_ticket_status_rejects_unknown_value(self):
        with pytest.raises(ValidationError):
            TicketResponse(ticket="TO DO [Bob]: Review PR", status="maybe")

    def test_status_assignment_is_validated(self):
        response = TicketResponse(ticket="TO DO [Bob]: Review PR")
        with pytest.raises(ValidationError):
            response.status = "archived"

    def test_meeting_report_accepted_keeps_order(self):
        report = MeetingReport(
            transcript="...",
            responses=[
                TicketResponse(ticket="TO DO [A]: one", status=TicketStatus.ACCEPTED),
                TicketResponse(ticket="TO DO [B]: two", status=TicketStatus.DECLINED),
                TicketResponse(ticket="TO DO [C]: three", status=TicketStatus.ACCEPTED),
            ],
        )
        assert report.accepted == ["TO DO [A]: one", "TO DO [C]: three"]

    def test_empty_meeting_report(self):
        report = MeetingReport()
        assert report.transcript == ""
        assert report.responses == []
        assert report.accepted == []


class TestParseTickets:
    """Test filtering of the model response into ticket lines."""

    def test_sentinel_yields_no_tickets(self):
        assert parse_tickets(NO_TICKETS_SENTINEL) == []
        assert parse_tickets(f"  {NO_TICKETS_SENTINEL}\n") == []

    def test_empty_content_yields_no_tickets(self):
        assert parse_tickets("") == []

    def test_lines_without_prefix_are_dropped(self):
        content = "\n".join(
            [
                "Here are the tickets:",
                "TO DO [Alice]: Update the release notes",
                "- TO DO [Bob]: not a ticket, wrong prefix",
                "",
                "  TO DO [Carol]: Book the retro room  ",
                "Thanks!",
            ]
        )
        assert parse_tickets(content) == [
            "TO DO [Alice]: Update the release notes",
            "TO DO [Carol]: Book the retro room",
        ]

    def test_prefix_is_case_sensitive(self):
        assert parse_tickets("to do [Alice]: lowercase marker") == []

    def test_order_is_preserved(self):
        content = "TO DO [Z]: last name first\nTO DO [A]: first name last"
        assert parse_tickets(content) == ["TO DO [Z]: last name first", "TO DO [A]: first name last"]


class TestReport:
    """Test the plain-text meeting report."""

    def _responses(self, *statuses):
        return [TicketResponse(ticket=f"TO DO [P{i}]: task {i}", status=s) for i, s in enumerate(statuses, 1)]

    def test_no_accepted_tickets(self):
        responses = self._responses(TicketStatus.DECLINED, TicketStatus.PENDING)
        assert format_report(responses) == "No tickets were accepted."

    def test_empty_responses(self):
        assert format_report([]) == "No tickets were accepted."

    def test_only_accepted_listed_in_order(self):
        responses = self._responses(TicketStatus.ACCEPTED, TicketStatus.DECLINED, TicketStatus.PENDING, TicketStatus.ACCEPTED)
        assert accepted_tickets(responses) == ["TO DO [P1]: task 1", "TO DO [P4]: task 4"]
        assert format_report(responses) == "Accepted tickets:\n   1. TO DO [P1]: task 1\n   2. TO DO [P4]: task 4"


class TestProgressReporter:
    """Test stage tracking output."""

    def _console(self):
        output = StringIO()
        return Console(file=output, force_terminal=False, width=100), output

    def test_steps_are_checked_off_in_order(self):
        console, output = self._console()
        progress = ProgressReporter()

        with progress.stage(console, "Recording audio…"):
            progress.step("Transcribing audio…")
        progress.note("2 ticket(s) found")

        text = output.getvalue()
        assert progress.completed == ["Recording audio…", "Transcribing audio…"]
        assert "✓ Recording audio…" in text
        assert "✓ Transcribing audio…" in text
        assert "  ✓ 2 ticket(s) found" in text
        assert text.index("Recording") < text.index("Transcribing") < text.index("ticket(s)")

    def test_failed_stage_is_crossed_out_and_reraised(self):
        console, output = self._console()
        progress = ProgressReporter()

        with pytest.raises(RuntimeError, match="no microphone"):
            with progress.stage(console, "Recording audio…"):
                raise RuntimeError("no microphone")

        assert "✗ Recording audio…" in output.getvalue()
        assert "✓" not in output.getvalue()
        assert progress.completed == []

    def test_bracketed_text_is_printed_literally(self):
        console, output = self._console()
        progress = ProgressReporter()

        with progress.stage(console, "Waiting for [Alice]"):
            pass

        assert "✓ Waiting for [Alice]" in output.getvalue()

    def test_step_outside_stage_is_silent(self):
        progress = ProgressReporter()
        progress.step("nothing to show")
        progress.note("nothing to show")
        assert progress.completed == []


class TestDebugLogger:
    """Test JSON trace files."""

    def test_disabled_logger_writes_nothing(self, tmp_path: Path):
        logger = DebugLogger(str(tmp_path), enabled=False)
        assert logger.log_llm_response("TO DO [A]: x", "transcript") is None
        assert not (tmp_path / ".meeting_tickets").exists()

    def test_enabled_logger_writes_json(self, tmp_path: Path):
        logger = DebugLogger(str(tmp_path), enabled=True)
        path = logger.log_transcription("recording.wav", "hello", "client")

        assert path is not None and path.parent.parent == tmp_path.resolve() / ".meeting_tickets" / "debug"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["step"] == "transcription"
        assert data["text"] == "hello"
        assert data["method"] == "client"

    def test_global_logger_follows_debug_flag(self, monkeypatch: pytest.MonkeyPatch):
        assert get_debug_logger().is_enabled() is False
        monkeypatch.setenv("MT_DEBUG", "1")
        assert get_debug_logger().is_enabled() is True
