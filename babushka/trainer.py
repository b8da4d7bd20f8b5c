"""
This module defines the Trainer class, the application controller. It owns
the current session snapshot and routes user actions to the deck store, the
AI gateway and the clipboard/audio ports, containing every recoverable error
so a failed action never leaves the session or the store half-updated.
"""

import logging
import random
import time
from typing import Callable, Optional, Sequence

from .audio import pcm_to_wav
from .config import Settings
from .constants import (
    DEFAULT_CONTEXT_WORD,
    DEFAULT_UNIT_ID,
    MSG_BUILTIN_DELETE,
    MSG_CREDENTIAL_MISSING,
    MSG_GENERATION_FAILED,
    MSG_SHARE_COPIED,
    MSG_SHARE_RECEIVED,
    SHARED_ID_PREFIX,
    SHARED_NAME_PREFIX,
)
from .deck_store import DeckStore
from .exceptions import (
    AudioError,
    CredentialMissingError,
    GenerationError,
    ShareDecodeError,
)
from .gateway import GeminiGateway
from .models import FlashCard, Session
from .ports import AudioPort, ClipboardPort, MemoryClipboard, WavFileSink
from .share import build_share_url, decode_payload, extract_share_payload

# Initialize logger
logger = logging.getLogger(__name__)


class Trainer:
    """
    Drives a study session over the units of a deck store.

    Collaborators are injected so the controller runs without a terminal,
    network or sound device:
    - ``gateway`` produces units, answers and speech;
    - ``clipboard`` receives share links;
    - ``audio`` plays synthesized WAV clips;
    - ``rng`` and ``sleep`` make shuffling and navigation deterministic.
    """

    def __init__(
        self,
        store: DeckStore,
        settings: Settings,
        gateway: Optional[GeminiGateway] = None,
        clipboard: Optional[ClipboardPort] = None,
        audio: Optional[AudioPort] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        start_unit_id: str = DEFAULT_UNIT_ID,
    ):
        self.store = store
        self.settings = settings
        self.gateway = gateway or GeminiGateway(settings)
        self.clipboard = clipboard or MemoryClipboard()
        self.audio = audio or WavFileSink(settings.audio_dir)
        self._rng = rng or random.Random()
        self._sleep = sleep

        self.is_generating = False
        self.is_playing_audio = False
        self.notice: Optional[str] = None
        self.session = Session.start(
            start_unit_id, store.get_cards(start_unit_id)
        )

    # --- Read-only views ---

    @property
    def current_card(self) -> Optional[FlashCard]:
        return self.session.current_card

    @property
    def current_label(self) -> str:
        return self.store.label(self.session.active_unit_id)

    @property
    def is_custom_active(self) -> bool:
        return self.store.is_custom(self.session.active_unit_id)

    def pop_notice(self) -> Optional[str]:
        """Return the pending user-facing message and clear it."""
        notice, self.notice = self.notice, None
        return notice

    # --- Navigation ---

    def select_unit(self, unit_id: str) -> None:
        cards = self.store.get_cards(unit_id)
        if self.store.get_unit(unit_id) is None:
            logger.warning(f"Selected unknown unit '{unit_id}'.")
        self.session = self.session.select_unit(unit_id, cards)
        logger.debug(f"Active unit is now '{unit_id}' ({len(cards)} cards).")

    def _pause(self) -> None:
        if self.settings.nav_delay_ms:
            self._sleep(self.settings.nav_delay_ms / 1000)

    def next_card(self) -> None:
        """Turn the card face down, pause briefly, then advance."""
        if self.session.size <= 1:
            return
        self.session = self.session.unflip()
        self._pause()
        self.session = self.session.next()

    def previous_card(self) -> None:
        if self.session.size <= 1:
            return
        self.session = self.session.unflip()
        self._pause()
        self.session = self.session.previous()

    def toggle_flip(self) -> None:
        self.session = self.session.toggle_flip()

    def shuffle(self) -> None:
        """Shuffle the working copy only; stored card order is untouched."""
        self.session = self.session.shuffle(self._rng)

    # --- Unit management ---

    def add_unit(
        self,
        name: str,
        cards: Sequence[FlashCard],
        icon: Optional[str] = None,
    ) -> str:
        unit_id = self.store.add_unit(name, cards, icon=icon)
        self.select_unit(unit_id)
        return unit_id

    def generate_unit(
        self, topic: str, icon: Optional[str] = None
    ) -> Optional[str]:
        """
        Generate a unit for ``topic`` and make it active.

        Returns:
            Optional[str]: The new unit id, or None if nothing was added
            (blank topic, a generation already running, or a failure that
            has been reported through ``notice``).
        """
        topic = (topic or "").strip()
        if not topic:
            return None
        if self.is_generating:
            logger.info("Generation already in progress; ignoring request.")
            return None

        self.is_generating = True
        try:
            cards = self.gateway.generate_deck(topic)
            return self.add_unit(topic, cards, icon=icon)
        except CredentialMissingError as e:
            logger.error(f"Cannot generate '{topic}': {e}")
            self.notice = MSG_CREDENTIAL_MISSING
        except GenerationError as e:
            logger.error(f"Generation for '{topic}' failed: {e}")
            self.notice = MSG_GENERATION_FAILED
        finally:
            self.is_generating = False
        return None

    def delete_unit(self, unit_id: str) -> bool:
        """
        Delete a custom unit, falling back to the default unit if it was
        active. Built-in and unknown ids are refused.
        """
        if self.store.is_builtin(unit_id):
            self.notice = MSG_BUILTIN_DELETE
            return False
        was_active = self.session.active_unit_id == unit_id
        if not self.store.delete_unit(unit_id):
            return False
        if was_active:
            self.select_unit(DEFAULT_UNIT_ID)
        return True

    # --- Sharing ---

    def share_unit(
        self, unit_id: str, base_url: Optional[str] = None
    ) -> Optional[str]:
        """Copy a share link for a custom unit to the clipboard."""
        if not self.store.is_custom(unit_id):
            logger.warning(f"Only custom units can be shared, not '{unit_id}'.")
            return None
        unit = self.store.get_unit(unit_id)
        url = build_share_url(base_url or self.settings.share_base_url, unit)
        self.clipboard.copy(url)
        self.notice = MSG_SHARE_COPIED
        logger.info(f"Share link for '{unit_id}' copied ({len(url)} chars).")
        return url

    def receive_shared_link(self, url: str) -> str:
        """
        Import the unit carried by a share link, if any.

        A malformed payload is logged and ignored. The share parameter is
        consumed either way.

        Returns:
            str: The URL with the share parameter removed.
        """
        token, cleaned_url = extract_share_payload(url)
        if token is None:
            return url
        try:
            shared = decode_payload(token)
        except ShareDecodeError as e:
            logger.error(f"Failed to parse shared deck: {e}")
            return cleaned_url

        unit_id = self.store.add_unit(
            f"{SHARED_NAME_PREFIX}{shared.name}",
            shared.cards,
            icon=shared.icon,
            prefix=SHARED_ID_PREFIX,
        )
        self.select_unit(unit_id)
        self.notice = MSG_SHARE_RECEIVED
        return cleaned_url

    # --- Assistant ---

    def ask(self, question: str) -> Optional[str]:
        """Ask Babushka about the current card. Blank questions are ignored."""
        question = (question or "").strip()
        if not question:
            return None
        card = self.current_card
        context_word = card.front if card else DEFAULT_CONTEXT_WORD
        return self.gateway.ask(question, context_word)

    def speak(self, text: str) -> bool:
        """
        Pronounce ``text`` through the audio port.

        Returns:
            bool: True if audio was played; False if playback was already
            running or failed.
        """
        if self.is_playing_audio:
            return False
        self.is_playing_audio = True
        try:
            pcm = self.gateway.synthesize_speech(text)
            self.audio.play(pcm_to_wav(pcm))
            return True
        except (AudioError, CredentialMissingError) as e:
            logger.warning(f"Audio playback failed: {e}")
            return False
        finally:
            self.is_playing_audio = False

    def speak_current(self) -> bool:
        card = self.current_card
        if card is None:
            return False
        return self.speak(card.front)
