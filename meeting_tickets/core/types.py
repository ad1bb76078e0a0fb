"""
Type definitions for Meeting Tickets.

This module defines the data structures passed between the capture,
transcription, extraction and review steps.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class Transcript(BaseModel):
    """
    Result of automatic speech recognition.
    """

    text: str = Field(..., description="Transcribed text")
    lang_hint: str = Field(default="auto", description="Detected or hinted language code")


class TicketStatus(str, Enum):
    """Review status of a single ticket."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TicketResponse(BaseModel):
    """
    A ticket together with the decision the user made about it.

    Attributes:
        ticket: Ticket line, e.g. "TO DO [Alice]: Update the release notes"
        status: One of pending, accepted, declined
    """

    ticket: str = Field(..., description="Ticket text")
    status: TicketStatus = Field(default=TicketStatus.PENDING, description="Review status")

    model_config = {"validate_assignment": True}


class MeetingReport(BaseModel):
    """
    Outcome of one run: the transcript and the reviewed tickets.
    """

    transcript: str = Field(default="", description="Meeting transcript")
    responses: List[TicketResponse] = Field(default_factory=list, description="Reviewed tickets in original order")

    @property
    def accepted(self) -> List[str]:
        """Accepted tickets in original order."""
        return [r.ticket for r in self.responses if r.status == TicketStatus.ACCEPTED]
