"""
Ports for the side effects the trainer needs: clipboard and audio output.
"""

import io
import logging
import time
from pathlib import Path
from typing import List, Optional, Protocol

import pygame

from .constants import TTS_CHANNELS, TTS_SAMPLE_RATE, TTS_SAMPLE_WIDTH
from .exceptions import AudioError

logger = logging.getLogger(__name__)


class ClipboardPort(Protocol):
    def copy(self, text: str) -> None: ...


class AudioPort(Protocol):
    def play(self, wav_bytes: bytes) -> None: ...


class MemoryClipboard:
    """Keeps copied text in memory; the CLI prints it instead of copying."""

    def __init__(self):
        self.history: List[str] = []

    @property
    def last(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    def copy(self, text: str) -> None:
        self.history.append(text)


class WavFileSink:
    """Writes each played clip to a timestamped WAV file in a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.last_path: Optional[Path] = None

    def play(self, wav_bytes: bytes) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / f"babushka_{int(time.time() * 1000)}.wav"
            path.write_bytes(wav_bytes)
        except OSError as e:
            raise AudioError(
                f"Could not write audio to {self.directory}: {e}",
                original_exception=e,
            ) from e
        self.last_path = path
        logger.info(f"Audio written to {path}")


class MixerPlayer:
    """
    Plays clips through pygame's mixer and blocks until they finish.

    The mixer is initialised on first use so that commands which never speak
    do not need an audio device.
    """

    def __init__(self, poll_interval: float = 0.05):
        self.poll_interval = poll_interval

    def _ensure_mixer(self) -> None:
        if not pygame.mixer.get_init():
            pygame.mixer.init(
                frequency=TTS_SAMPLE_RATE,
                size=-8 * TTS_SAMPLE_WIDTH,
                channels=TTS_CHANNELS,
            )
            logger.info("Audio mixer initialised.")

    def play(self, wav_bytes: bytes) -> None:
        try:
            self._ensure_mixer()
            pygame.mixer.music.load(io.BytesIO(wav_bytes))
            pygame.mixer.music.play()
            while pygame.mixer.music.get_busy():
                time.sleep(self.poll_interval)
            pygame.mixer.music.unload()
        except pygame.error as e:
            raise AudioError(
                f"Audio playback failed: {e}", original_exception=e
            ) from e
