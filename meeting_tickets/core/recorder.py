"""
Audio capture from the default input device.

Records a fixed-duration clip with sounddevice, writes it to a WAV file with
soundfile and hands the file contents back for upload.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import soundfile as sf

from .config import config

logger = logging.getLogger(__name__)

_SD_MODULE = None


class RecordingError(Exception):
    """Raised when audio capture or writing the recording fails."""

    pass


def _ensure_sounddevice():
    """Import sounddevice on first use; it needs the PortAudio system library."""
    global _SD_MODULE
    if _SD_MODULE is None:
        try:
            import sounddevice as sd_module
        except (ImportError, OSError) as exc:
            raise RecordingError(f"sounddevice is unavailable: {exc}") from exc
        _SD_MODULE = sd_module
    return _SD_MODULE


class AudioRecorder:
    """
    Fixed-duration recorder writing 16-bit PCM WAV files.

    The call to record() blocks until the duration has elapsed.
    """

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        channels: Optional[int] = None,
        duration: Optional[float] = None,
    ):
        self.sample_rate = sample_rate or config.sample_rate
        self.channels = channels or config.channels
        self.duration = duration or config.recording_duration

        if self.duration <= 0:
            raise ValueError(f"Recording duration must be positive, got {self.duration}")

    @property
    def frame_count(self) -> int:
        return int(self.duration * self.sample_rate)

    def record(self, path: Union[str, Path]) -> bytes:
        """
        Record audio for the configured duration and store it at path.

        Args:
            path: Destination WAV file

        Returns:
            Raw bytes of the written WAV file

        Raises:
            RecordingError: If the device cannot be opened or the file cannot be written
        """
        output = Path(path)
        logger.info(f"Recording {self.duration:g}s at {self.sample_rate} Hz to {output}")

        sd = _ensure_sounddevice()
        try:
            data = sd.rec(self.frame_count, samplerate=self.sample_rate, channels=self.channels, dtype="int16")
            sd.wait()
        except Exception as e:
            raise RecordingError(f"Audio capture failed: {e}") from e

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            sf.write(str(output), data, self.sample_rate, subtype="PCM_16")
            audio = output.read_bytes()
        except Exception as e:
            raise RecordingError(f"Failed to write recording to {output}: {e}") from e

        if not audio:
            raise RecordingError(f"Recording at {output} is empty")

        logger.info(f"Recording stopped ({len(audio)} bytes)")
        return audio


def discard(path: Union[str, Path]) -> bool:
    """
    Remove the transient recording.

    Returns:
        True if a file was removed, False if there was nothing to remove
    """
    target = Path(path)
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not remove recording {target}: {e}")
        return False
    return True
