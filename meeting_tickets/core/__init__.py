"""
Core functionality for Meeting Tickets.

This package contains the main logic for:
- Audio capture from the default microphone
- Speech-to-text conversion
- Ticket extraction from meeting transcripts
- Interactive ticket review in the terminal
- Configuration management
"""
