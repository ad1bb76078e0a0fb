"""
Debug logging module for tracing transcription and ticket extraction.

When MT_DEBUG=1 (or the CLI --debug flag) is set, every LLM request and
response and every transcription are written as JSON files to a per-session
directory under .meeting_tickets/debug/.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


class DebugLogger:
    """
    Handles detailed debug logging for a single run.

    Logs are stored in {base_dir}/.meeting_tickets/debug/ directory with
    timestamps and session identifiers for easy tracking.
    """

    def __init__(self, base_dir: str = ".", enabled: Optional[bool] = None):
        """
        Initialize debug logger.

        Args:
            base_dir: Directory under which .meeting_tickets/debug is created
            enabled: Override debug enable flag, uses MT_DEBUG env var if None
        """
        self.base_dir = base_dir
        self.root = Path(base_dir).resolve()
        self.enabled = enabled if enabled is not None else is_debug_enabled()
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        if self.enabled:
            self._setup_log_directory()

    def _setup_log_directory(self) -> None:
        """Create debug log directory structure."""
        self.log_dir = self.root / ".meeting_tickets" / "debug"
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.session_dir = self.log_dir / f"session_{self.session_id}"
        self.session_dir.mkdir(exist_ok=True)

    def is_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.enabled

    def _write(self, step: str, payload: Dict[str, Any]) -> Optional[Path]:
        if not self.enabled:
            return None

        timestamp = datetime.now().isoformat()
        log_data = {"timestamp": timestamp, "session_id": self.session_id, "step": step}
        log_data.update(payload)

        filename = f"{step}_{timestamp.replace(':', '-').replace('.', '_')}.json"
        log_file = self.session_dir / filename

        with open(log_file, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False, default=str)
        return log_file

    def log_transcription(self, audio_path: str, text: Optional[str], method: str) -> Optional[Path]:
        """
        Log a transcription result.

        Args:
            audio_path: Path of the uploaded recording
            text: Transcribed text (None if transcription produced nothing)
            method: Which call style produced it ("direct" or "client")
        """
        return self._write(
            "transcription",
            {
                "type": "transcription",
                "audio_path": audio_path,
                "method": method,
                "text": text,
                "text_length": len(text) if text else 0,
            },
        )

    def log_llm_request(self, messages: List[Dict[str, str]], method: str) -> Optional[Path]:
        """
        Log LLM request details.

        Args:
            messages: Chat messages sent to the model
            method: Which call style is used ("direct" or "client")
        """
        return self._write("llm_request", {"type": "request", "method": method, "messages": messages})

    def log_llm_response(self, response_content: str, transcript: str) -> Optional[Path]:
        """
        Log LLM response details.

        Args:
            response_content: Raw response from LLM
            transcript: Transcript the response was generated for
        """
        return self._write(
            "llm_response",
            {
                "type": "response",
                "response_content": response_content,
                "transcript": transcript,
                "response_length": len(response_content),
            },
        )

    def log_error(self, error: Exception, context: str) -> Optional[Path]:
        """Log a failed call with its context."""
        return self._write(
            f"{context}_error",
            {"type": "error", "error": str(error), "error_type": type(error).__name__},
        )


# Global debug logger instance
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger(base_dir: str = ".") -> DebugLogger:
    """
    Get or create global debug logger instance.

    A new instance is created when the base directory or the MT_DEBUG flag changed.
    """
    global _debug_logger
    if _debug_logger is None or _debug_logger.root != Path(base_dir).resolve() or _debug_logger.enabled != is_debug_enabled():
        _debug_logger = DebugLogger(base_dir)
    return _debug_logger


def is_debug_enabled() -> bool:
    """
    Check if debug logging is enabled via environment variable.

    Returns:
        True if MT_DEBUG=1 is set
    """
    return os.getenv("MT_DEBUG", "0") == "1"
