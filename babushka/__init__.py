"""Babushka - a Russian vocabulary flashcard trainer."""

from .models import FlashCard, Unit, Session
from .constants import DEFAULT_UNIT_ID, STORAGE_KEY_CUSTOM
from .db import DuckDBStorage, MemoryStorage
from .deck_store import DeckStore
from .share import decode_payload, encode_unit
from .trainer import Trainer

__all__ = [
    "FlashCard",
    "Unit",
    "Session",
    "DEFAULT_UNIT_ID",
    "STORAGE_KEY_CUSTOM",
    "DuckDBStorage",
    "MemoryStorage",
    "DeckStore",
    "decode_payload",
    "encode_unit",
    "Trainer",
]
