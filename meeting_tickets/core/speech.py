"""
Speech-to-text functionality using OpenAI Whisper.

This module provides a wrapper around OpenAI's Whisper ASR API
for converting the meeting recording to a text transcript.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional

import requests

from .config import config, get_client
from .debug_log import get_debug_logger
from .types import Transcript

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm"}
MAX_UPLOAD_BYTES = 25 * 1024 * 1024  # Whisper upload limit


class SpeechError(Exception):
    """Raised when speech processing fails."""

    pass


class SpeechProcessor:
    """
    Handles speech-to-text conversion using OpenAI Whisper.

    Project-scoped keys try a direct HTTP upload first and fall back to the
    client library once. Standard keys use the client library only.
    """

    def __init__(self, client: Optional[Any] = None):
        self.client = client if client is not None else get_client()
        self.model = config.asr_model
        self.debug_logger = get_debug_logger()

    def transcribe_audio(self, path: str) -> Transcript:
        """
        Transcribe audio file to text using Whisper.

        Args:
            path: Path to the audio file

        Returns:
            Transcript object with the recognized text

        Raises:
            SpeechError: If transcription fails
            FileNotFoundError: If audio file doesn't exist
        """
        audio_path = Path(path)

        if not audio_path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if not audio_path.is_file():
            raise SpeechError(f"Path is not a file: {path}")

        if not self.validate_audio_format(path):
            raise SpeechError(f"Unsupported audio format: {audio_path.suffix}")

        file_size = audio_path.stat().st_size
        if file_size > MAX_UPLOAD_BYTES:
            raise SpeechError(f"Audio file too large: {file_size / 1024 / 1024:.1f}MB (max: 25MB)")

        if config.is_project_key:
            logger.info("Using project key for transcription, attempting direct API access")
            try:
                text = self._transcribe_direct(audio_path)
                method = "direct"
            except Exception as e:
                logger.warning(f"Direct API call for transcription failed: {e}")
                logger.info("Attempting with standard client as fallback")
                self.debug_logger.log_error(e, "transcription_direct")
                text = self._transcribe_with_client(audio_path)
                method = "client"
        else:
            text = self._transcribe_with_client(audio_path)
            method = "client"

        self.debug_logger.log_transcription(str(audio_path), text, method)
        return Transcript(text=text.strip())

    def _transcribe_direct(self, audio_path: Path) -> str:
        """Upload the recording with a plain multipart request."""
        url = f"{config.api_base}/audio/transcriptions"
        headers = {"Authorization": f"Bearer {config.openai_api_key}"}
        content_type = mimetypes.guess_type(audio_path.name)[0] or "application/octet-stream"

        with open(audio_path, "rb") as audio_file:
            files = {"file": (audio_path.name, audio_file, content_type)}
            resp = requests.post(url, headers=headers, files=files, data={"model": self.model}, timeout=config.openai_timeout)

        resp.raise_for_status()
        payload = resp.json()
        text = payload.get("text") if isinstance(payload, dict) else None
        if not text:
            raise SpeechError("Invalid response format from API")
        return text

    def _transcribe_with_client(self, audio_path: Path) -> str:
        """Upload the recording through the OpenAI client library."""
        try:
            with open(audio_path, "rb") as audio_file:
                response = self.client.audio.transcriptions.create(model=self.model, file=audio_file)
        except Exception as e:
            raise SpeechError(f"Failed to transcribe audio: {str(e)}") from e

        if hasattr(response, "text"):
            return response.text or ""
        return str(response)

    def validate_audio_format(self, path: str) -> bool:
        """
        Validate if the audio file format is supported.

        Args:
            path: Path to the audio file

        Returns:
            True if format is supported, False otherwise
        """
        return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def transcribe_recording(path: str, client: Optional[Any]) -> Optional[str]:
    """
    Transcribe the recording, degrading to None on any failure.

    Args:
        path: Path to the recording
        client: OpenAI client, or None when the client is disabled

    Returns:
        Transcript text, or None if nothing usable was recognized
    """
    if client is None:
        logger.warning("OpenAI client not initialized, cannot transcribe audio.")
        return None

    try:
        transcript = SpeechProcessor(client).transcribe_audio(path)
    except (SpeechError, FileNotFoundError) as e:
        logger.warning(f"Failed to transcribe audio: {e}")
        return None

    if not transcript.text.strip():
        logger.info("No speech detected in the audio.")
        return None

    return transcript.text
