"""
Tests for Whisper transcription with direct-call and client fallbacks.
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from meeting_tickets.core.speech import SpeechError, SpeechProcessor, transcribe_recording


class DummyTranscriptions:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class DummyClient:
    def __init__(self, text=None, error=None):
        self.audio = SimpleNamespace(transcriptions=DummyTranscriptions(text, error))

    @property
    def calls(self):
        return self.audio.transcriptions.calls


def fake_response(payload=None, status_error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


@pytest.fixture
def recording(tmp_path: Path) -> Path:
    path = tmp_path / "recording.wav"
    path.write_bytes(b"RIFF....WAVEfmt fake audio")
    return path


class TestSpeechProcessor:
    """Test validation and the call styles."""

    def test_standard_key_uses_client(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        client = DummyClient(text="  Alice will update the docs.  ")

        with patch("meeting_tickets.core.speech.requests.post") as mock_post:
            transcript = SpeechProcessor(client).transcribe_audio(str(recording))

        mock_post.assert_not_called()
        assert transcript.text == "Alice will update the docs."
        assert client.calls[0]["model"] == "whisper-1"

    def test_project_key_uses_direct_call(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-proj-abc")
        client = DummyClient(text="should not be used")

        with patch("meeting_tickets.core.speech.requests.post", return_value=fake_response({"text": "Bob owns the deploy."})) as mock_post:
            transcript = SpeechProcessor(client).transcribe_audio(str(recording))

        assert transcript.text == "Bob owns the deploy."
        assert client.calls == []
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.openai.com/v1/audio/transcriptions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-proj-abc"
        assert kwargs["data"] == {"model": "whisper-1"}
        assert kwargs["files"]["file"][0] == "recording.wav"

    def test_project_key_falls_back_to_client_on_http_error(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-proj-abc")
        client = DummyClient(text="fallback text")
        error = requests.HTTPError("403 Forbidden")

        with patch("meeting_tickets.core.speech.requests.post", return_value=fake_response(status_error=error)) as mock_post:
            transcript = SpeechProcessor(client).transcribe_audio(str(recording))

        assert mock_post.call_count == 1
        assert len(client.calls) == 1
        assert transcript.text == "fallback text"

    def test_project_key_falls_back_when_direct_response_has_no_text(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-proj-abc")
        client = DummyClient(text="fallback text")

        with patch("meeting_tickets.core.speech.requests.post", return_value=fake_response({"error": "nope"})):
            transcript = SpeechProcessor(client).transcribe_audio(str(recording))

        assert transcript.text == "fallback text"

    def test_fallback_failure_raises_speech_error(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-proj-abc")
        client = DummyClient(error=RuntimeError("service down"))

        with patch("meeting_tickets.core.speech.requests.post", side_effect=requests.ConnectionError("offline")):
            with pytest.raises(SpeechError, match="service down"):
                SpeechProcessor(client).transcribe_audio(str(recording))

    def test_missing_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        with pytest.raises(FileNotFoundError):
            SpeechProcessor(DummyClient(text="x")).transcribe_audio(str(tmp_path / "missing.wav"))

    def test_directory_is_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        folder = tmp_path / "clip.wav"
        folder.mkdir()
        with pytest.raises(SpeechError, match="not a file"):
            SpeechProcessor(DummyClient(text="x")).transcribe_audio(str(folder))

    def test_unsupported_format(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(SpeechError, match="Unsupported audio format"):
            SpeechProcessor(DummyClient(text="x")).transcribe_audio(str(path))

    def test_validate_audio_format(self):
        processor = SpeechProcessor(DummyClient(text="x"))
        assert processor.validate_audio_format("meeting.WAV")
        assert processor.validate_audio_format("meeting.m4a")
        assert not processor.validate_audio_format("meeting.flac")


class TestTranscribeRecording:
    """Test the degrade-to-None wrapper used by the pipeline."""

    def test_disabled_client(self, recording):
        assert transcribe_recording(str(recording), None) is None

    def test_whitespace_transcript_is_none(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        assert transcribe_recording(str(recording), DummyClient(text="   \n ")) is None

    def test_failure_is_none(self, monkeypatch, recording, caplog):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        with caplog.at_level("WARNING"):
            result = transcribe_recording(str(recording), DummyClient(error=RuntimeError("boom")))
        assert result is None
        assert "boom" in caplog.text

    def test_missing_recording_is_none(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        assert transcribe_recording(str(tmp_path / "nope.wav"), DummyClient(text="x")) is None

    def test_success(self, monkeypatch, recording):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-standard")
        assert transcribe_recording(str(recording), DummyClient(text="Carol books the room.")) == "Carol books the room."
