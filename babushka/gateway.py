"""
Gateway to the Gemini API: generating units, answering learner questions and
synthesizing speech.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from google import genai
from google.genai import types
from pydantic import TypeAdapter, ValidationError

from .config import Settings
from .constants import (
    GENERATED_DECK_SIZE,
    MSG_ASK_ERROR,
    MSG_ASK_NO_KEY,
    MSG_ASK_TIRED,
)
from .exceptions import AudioError, CredentialMissingError, GenerationError
from .models import FlashCard

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(List[FlashCard])

CARD_LIST_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "f": types.Schema(
                type=types.Type.STRING, description="Russian word/phrase"
            ),
            "t": types.Schema(
                type=types.Type.STRING, description="English translation"
            ),
            "p": types.Schema(
                type=types.Type.STRING, description="Phonetic pronunciation"
            ),
            "c": types.Schema(
                type=types.Type.STRING,
                description="Example sentence or context",
            ),
        },
        required=["f", "t", "p", "c"],
    ),
)


def _default_client_factory(api_key: str) -> Any:
    return genai.Client(api_key=api_key)


def build_deck_prompt(topic: str) -> str:
    return (
        f"Create a set of {GENERATED_DECK_SIZE} Russian-English flashcards "
        f'for the topic: "{topic}". Each flashcard must include the Russian '
        "word (f), English translation (t), phonetic transcription (p), and "
        "a short usage context or interesting fact (c)."
    )


def build_ask_prompt(question: str, context_word: str) -> str:
    return (
        f'User is learning Russian. Current word/topic: "{context_word}". '
        f'User asks: "{question}". Respond as a friendly Russian grandmother '
        "(Babushka). Keep it encouraging and informative about language or "
        "culture. Use a mix of English and small Russian phrases. Keep "
        "response under 100 words."
    )


class GeminiGateway:
    """
    Thin wrapper over the Gemini client.

    The client is created on first use, so a missing API key only surfaces
    when an operation actually needs the service.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[str], Any] = _default_client_factory,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._client: Optional[Any] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.settings.gemini_api_key)

    def _get_client(self) -> Any:
        if not self.has_credentials:
            raise CredentialMissingError(
                "No Gemini API key configured (set GEMINI_API_KEY)."
            )
        if self._client is None:
            self._client = self._client_factory(self.settings.gemini_api_key)
            logger.info(f"Gemini client created for model '{self.settings.model}'.")
        return self._client

    def generate_deck(self, topic: str) -> List[FlashCard]:
        """
        Ask the model for a unit of cards on ``topic``.

        Raises:
            CredentialMissingError: If no API key is configured.
            GenerationError: If the call fails or returns malformed or empty
                card data.
        """
        client = self._get_client()
        logger.info(f"Generating deck for topic '{topic}'.")
        try:
            response = client.models.generate_content(
                model=self.settings.model,
                contents=build_deck_prompt(topic),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=CARD_LIST_SCHEMA,
                ),
            )
        except Exception as e:
            logger.error(f"Deck generation call failed: {e}")
            raise GenerationError(
                f"Deck generation failed: {e}", original_exception=e
            ) from e

        json_str = (response.text or "").strip() or "[]"
        try:
            cards = _CARD_LIST.validate_python(json.loads(json_str))
        except json.JSONDecodeError as e:
            raise GenerationError(
                f"Model returned invalid JSON: {e}", original_exception=e
            ) from e
        except ValidationError as e:
            raise GenerationError(
                f"Model returned malformed cards: {e.errors()[0]['msg']}",
                original_exception=e,
            ) from e

        if not cards:
            raise GenerationError(f"Model returned no cards for '{topic}'.")
        logger.info(f"Generated {len(cards)} cards for '{topic}'.")
        return cards

    def ask(self, question: str, context_word: str) -> str:
        """Answer a learner's question. Never raises."""
        try:
            client = self._get_client()
        except CredentialMissingError as e:
            logger.warning(f"Assistant unavailable: {e}")
            return MSG_ASK_NO_KEY

        try:
            response = client.models.generate_content(
                model=self.settings.model,
                contents=build_ask_prompt(question, context_word),
                config=types.GenerateContentConfig(
                    temperature=0.8,
                    top_p=0.9,
                ),
            )
        except Exception as e:
            logger.error(f"Assistant call failed: {e}")
            return MSG_ASK_ERROR
        return (response.text or "").strip() or MSG_ASK_TIRED

    def synthesize_speech(self, text: str) -> bytes:
        """
        Speak ``text`` with the configured voice.

        Returns:
            bytes: Raw signed 16-bit mono PCM at 24 kHz.

        Raises:
            CredentialMissingError: If no API key is configured.
            AudioError: If the call fails or carries no audio.
        """
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=self.settings.tts_model,
                contents=f"Say clearly in Russian: {text}",
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=self.settings.voice,
                            )
                        )
                    ),
                ),
            )
            data = response.candidates[0].content.parts[0].inline_data.data
        except Exception as e:
            logger.error(f"Speech synthesis failed: {e}")
            raise AudioError(
                f"Speech synthesis failed: {e}", original_exception=e
            ) from e
        if not data:
            raise AudioError("Speech synthesis returned no audio.")
        return data
