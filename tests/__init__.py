"""
Test suite for Meeting Tickets.

This package contains tests for all core functionality including:
- Type definitions and data structures
- Configuration and .env loading
- Audio capture
- Speech-to-text processing
- Ticket extraction
- The review form state machine
- The command-line interface
"""
