"""
Plain-text meeting report of accepted tickets.
"""

from typing import Iterable, List

from .types import TicketResponse, TicketStatus


def accepted_tickets(responses: Iterable[TicketResponse]) -> List[str]:
    """Return the accepted tickets in their original order."""
    return [r.ticket for r in responses if r.status == TicketStatus.ACCEPTED]


def format_report(responses: Iterable[TicketResponse]) -> str:
    """
    Render the summary printed after the review form closes.

    Examples:
        Accepted tickets:
           1. TO DO [Alice]: Update the release notes
    """
    accepted = accepted_tickets(responses)
    if not accepted:
        return "No tickets were accepted."

    lines = ["Accepted tickets:"]
    lines.extend(f"   {i}. {ticket}" for i, ticket in enumerate(accepted, 1))
    return "\n".join(lines)
