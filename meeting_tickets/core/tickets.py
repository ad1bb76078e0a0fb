"""
Ticket extraction from meeting transcripts.

Turns the model's free-text answer into a list of ticket lines of the form
"TO DO [Name]: Task description".
"""

import logging
from typing import Any, List, Optional

from .llm_handler import LLMHandler, LLMHandlerError

logger = logging.getLogger(__name__)

TICKET_PREFIX = "TO DO"
NO_TICKETS_SENTINEL = "NO_TICKETS_NEEDED"


def parse_tickets(content: str) -> List[str]:
    """
    Keep only the ticket lines of a model response.

    Args:
        content: Raw message content returned by the model

    Returns:
        Ticket lines in the order they were returned, stripped of surrounding whitespace
    """
    if not content or content.strip() == NO_TICKETS_SENTINEL:
        return []

    return [line.strip() for line in content.splitlines() if line.strip().startswith(TICKET_PREFIX)]


def extract_tickets(transcript: Optional[str], client: Optional[Any]) -> List[str]:
    """
    Extract actionable tickets from a transcript.

    Every failure degrades to an empty list; the caller treats that as
    "no actionable items".
    """
    if not transcript or not transcript.strip():
        return []

    if client is None:
        logger.warning("OpenAI client not initialized, cannot generate tickets.")
        return []

    try:
        content = LLMHandler(client).make_ticket_request(transcript)
    except LLMHandlerError as e:
        logger.error(f"Error analyzing conversation: {e}")
        return []

    return parse_tickets(content)
